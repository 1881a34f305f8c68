"""Contract of the messaging side the conversion pipeline reports to."""

from abc import ABC, abstractmethod
from typing import Optional

from videonote.modules.conversion.models import ChatContext


class Notifier(ABC):
    """User-facing notices emitted during a conversion.

    Implementations log their own delivery failures and never raise, so a
    courtesy notice that could not be sent does not abort a conversion.
    """

    @abstractmethod
    async def notify_processing(self, chat: ChatContext) -> Optional[int]:
        """Tell the user the clip is being converted.

        Returns:
            Handle of the notice for later retraction, None if not sent
        """
        pass

    @abstractmethod
    async def notify_too_large(self, chat: ChatContext) -> None:
        pass

    @abstractmethod
    async def notify_error(self, chat: ChatContext) -> None:
        pass

    @abstractmethod
    async def deliver_artifact(self, chat: ChatContext, data: bytes, length: int) -> bool:
        """Send the finished video note.

        Returns:
            True if the note was delivered
        """
        pass

    @abstractmethod
    async def retract_notice(self, chat: ChatContext, notice_id: int) -> None:
        pass
