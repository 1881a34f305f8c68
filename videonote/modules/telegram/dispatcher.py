"""Routing of inbound updates to commands and conversions.

Each update is handled in its own asyncio task, so a slow or failing
conversion never holds up other chats.
"""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from videonote.core.logging import log_error, log_info, set_correlation_id
from videonote.modules.conversion.models import ChatContext, ConversionResult
from videonote.modules.conversion.schemas import ConversionRequest
from videonote.modules.conversion.service import ConversionService
from videonote.modules.telegram.messages import MessageKey, resolve_language
from videonote.modules.telegram.notifier import TelegramNotifier
from videonote.modules.telegram.schemas import TelegramMessage, TelegramUpdate

logger = logging.getLogger(__name__)

COMMANDS = {
    "/start": MessageKey.START,
    "/help": MessageKey.HELP,
}


def parse_command(text: str) -> str:
    """Extract the bare command from a message, dropping args and @botname."""
    command = text.strip().split(maxsplit=1)[0]
    return command.split("@", 1)[0].lower()


def chat_context(message: TelegramMessage) -> ChatContext:
    user = message.from_user
    return ChatContext(
        chat_id=message.chat.id,
        language=resolve_language(user.language_code if user else None),
        username=user.username if user else None,
    )


class UpdateDispatcher:
    """Dispatches updates from either transport."""

    def __init__(self, notifier: TelegramNotifier, conversions: ConversionService):
        self.notifier = notifier
        self.conversions = conversions
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, update: TelegramUpdate) -> asyncio.Task:
        """Schedule an update for background handling."""
        task = asyncio.create_task(self.handle(update), name=f"update-{update.update_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_error(logger, "Unhandled error while processing update", exception=exc, task=task.get_name())

    async def shutdown(self) -> None:
        """Cancel in-flight updates and wait for their cleanup."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            log_info(logger, "Cancelled in-flight updates", count=len(tasks))

    async def handle(self, update: TelegramUpdate) -> None:
        set_correlation_id(f"update-{update.update_id}")
        message = update.message
        if message is None:
            return

        if message.text and message.text.startswith("/"):
            await self.process_command(message)
        elif message.video is not None:
            await self.process_video(message)
        else:
            await self.process_unknown_message(message)

    async def process_command(self, message: TelegramMessage) -> None:
        command = parse_command(message.text or "")
        log_info(logger, "Command received", command=command, username=_username(message))
        key = COMMANDS.get(command, MessageKey.UNKNOWN)
        await self.notifier.send_text(chat_context(message), key)

    async def process_video(self, message: TelegramMessage) -> Optional[ConversionResult]:
        video = message.video
        log_info(logger, "Video received", username=_username(message), file_id=video.file_id)
        chat = chat_context(message)
        try:
            request = ConversionRequest(
                file_id=video.file_id,
                height=video.height,
                width=video.width,
                duration=video.duration,
                file_size=video.file_size or 0,
            )
        except ValidationError as e:
            log_error(logger, "Video has unusable metadata", exception=e, file_id=video.file_id)
            await self.notifier.notify_error(chat)
            return None
        return await self.conversions.convert(request, chat)

    async def process_unknown_message(self, message: TelegramMessage) -> None:
        await self.notifier.send_text(chat_context(message), MessageKey.UNKNOWN)


def _username(message: TelegramMessage) -> Optional[str]:
    return message.from_user.username if message.from_user else None
