"""Notifier delivering conversion notices through the Bot API."""

import logging
from typing import Optional

from videonote.core.logging import log_error
from videonote.modules.conversion.models import ChatContext
from videonote.modules.conversion.notifier import Notifier
from videonote.modules.telegram.client import TelegramAPIError, TelegramBotClient
from videonote.modules.telegram.messages import MessageKey, get_message

logger = logging.getLogger(__name__)


class TelegramNotifier(Notifier):
    """Sends notices and the finished note to a Telegram chat.

    Every Bot API failure is logged and swallowed.
    """

    def __init__(self, client: TelegramBotClient):
        self.client = client

    async def send_text(self, chat: ChatContext, key: MessageKey) -> Optional[int]:
        """Send a catalog message in the chat's language.

        Returns:
            Message ID, or None if sending failed
        """
        try:
            message = await self.client.send_message(chat.chat_id, get_message(key, chat.language))
        except TelegramAPIError as e:
            log_error(logger, "Error sending message", exception=e, chat_id=chat.chat_id, key=key.value)
            return None
        return message.message_id

    async def notify_processing(self, chat: ChatContext) -> Optional[int]:
        return await self.send_text(chat, MessageKey.WAIT)

    async def notify_too_large(self, chat: ChatContext) -> None:
        await self.send_text(chat, MessageKey.VIDEO_TOO_LARGE)

    async def notify_error(self, chat: ChatContext) -> None:
        await self.send_text(chat, MessageKey.ERROR)

    async def deliver_artifact(self, chat: ChatContext, data: bytes, length: int) -> bool:
        try:
            await self.client.send_video_note(chat.chat_id, data, length)
        except TelegramAPIError as e:
            log_error(logger, "Error sending video note", exception=e, chat_id=chat.chat_id)
            return False
        return True

    async def retract_notice(self, chat: ChatContext, notice_id: int) -> None:
        try:
            await self.client.delete_message(chat.chat_id, notice_id)
        except TelegramAPIError as e:
            log_error(logger, "Error deleting message", exception=e, chat_id=chat.chat_id)
