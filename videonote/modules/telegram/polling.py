"""Long-polling transport."""

import asyncio
import logging
from typing import Optional

from videonote.core.logging import log_error, log_info
from videonote.modules.telegram.client import TelegramAPIError, TelegramBotClient
from videonote.modules.telegram.dispatcher import UpdateDispatcher

logger = logging.getLogger(__name__)

# Pause after a failed getUpdates call before polling again
POLL_ERROR_DELAY_SECONDS = 3.0


class LongPoller:
    """Pulls updates with getUpdates and hands them to the dispatcher."""

    def __init__(
        self,
        client: TelegramBotClient,
        dispatcher: UpdateDispatcher,
        poll_timeout: int = 30,
        error_delay: float = POLL_ERROR_DELAY_SECONDS,
    ):
        self.client = client
        self.dispatcher = dispatcher
        self.poll_timeout = poll_timeout
        self.error_delay = error_delay
        self.offset: Optional[int] = None

    async def poll_once(self) -> int:
        """Fetch one batch of updates and dispatch it.

        Returns:
            Number of updates dispatched
        """
        updates = await self.client.get_updates(offset=self.offset, timeout=self.poll_timeout)
        for update in updates:
            self.offset = update.update_id + 1
            self.dispatcher.dispatch(update)
        return len(updates)

    async def run(self) -> None:
        """Poll until cancelled, then cancel in-flight updates."""
        log_info(logger, "Starting long polling", poll_timeout=self.poll_timeout)
        try:
            while True:
                try:
                    await self.poll_once()
                except TelegramAPIError as e:
                    log_error(logger, "Error polling updates", exception=e)
                    await asyncio.sleep(self.error_delay)
        finally:
            await self.dispatcher.shutdown()
            log_info(logger, "Long polling stopped")
