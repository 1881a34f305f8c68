"""Telegram Bot API client.

Thin async wrapper over the HTTP Bot API covering the methods the bot
needs. Also resolves file handles to download URLs for the fetcher.
"""

import logging
from typing import Any, Optional

import httpx

from videonote.core.config import Settings
from videonote.modules.conversion.fetcher import FileResolver
from videonote.modules.telegram.schemas import (
    TelegramFile,
    TelegramMessage,
    TelegramUpdate,
)

logger = logging.getLogger(__name__)


class TelegramAPIError(Exception):
    """Exception for Telegram Bot API errors."""

    def __init__(self, message: str, error_code: Optional[int] = None):
        self.error_code = error_code
        super().__init__(message)


class TelegramBotClient(FileResolver):
    """Client for the Telegram Bot API."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Bot API client.

        Args:
            token: Bot token issued by BotFather
            api_url: Bot API server base URL
            timeout: Default request timeout in seconds
            client: Optional shared HTTP client
        """
        if not token:
            raise TelegramAPIError("Telegram bot token not configured")
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelegramBotClient":
        return cls(
            token=settings.TELEGRAM_BOT_TOKEN,
            api_url=settings.TELEGRAM_API_URL,
            timeout=settings.TELEGRAM_REQUEST_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "TelegramBotClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self.token}/{method}"

    def file_url(self, file_path: str) -> str:
        return f"{self.api_url}/file/bot{self.token}/{file_path}"

    async def _call(
        self,
        method: str,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Call a Bot API method and return its ``result``.

        Raises:
            TelegramAPIError: On transport errors or ``ok: false`` replies
        """
        try:
            if files:
                response = await self._client.post(
                    self.method_url(method),
                    data=data,
                    files=files,
                    timeout=timeout or self.timeout,
                )
            else:
                response = await self._client.post(
                    self.method_url(method),
                    json=data or {},
                    timeout=timeout or self.timeout,
                )
        except httpx.TimeoutException as e:
            raise TelegramAPIError(f"{method}: Telegram API timeout") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TelegramAPIError(f"{method}: {type(e).__name__}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TelegramAPIError(
                f"{method}: invalid response ({response.status_code})",
                error_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise TelegramAPIError(
                f"{method}: unexpected response ({response.status_code})",
                error_code=response.status_code,
            )

        if not payload.get("ok"):
            raise TelegramAPIError(
                f"{method}: {payload.get('description', 'unknown error')}",
                error_code=payload.get("error_code", response.status_code),
            )

        return payload.get("result")

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 30) -> list[TelegramUpdate]:
        """Long-poll for new updates."""
        data: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            data["offset"] = offset
        result = await self._call("getUpdates", data, timeout=timeout + self.timeout)
        return [TelegramUpdate.model_validate(item) for item in result or []]

    async def get_file(self, file_id: str) -> TelegramFile:
        result = await self._call("getFile", {"file_id": file_id})
        return TelegramFile.model_validate(result)

    async def resolve_url(self, file_id: str) -> str:
        file = await self.get_file(file_id)
        if not file.file_path:
            raise TelegramAPIError(f"getFile: no file_path for {file_id}")
        return self.file_url(file.file_path)

    async def send_message(self, chat_id: int, text: str) -> TelegramMessage:
        result = await self._call("sendMessage", {"chat_id": chat_id, "text": text})
        return TelegramMessage.model_validate(result)

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        result = await self._call("deleteMessage", {"chat_id": chat_id, "message_id": message_id})
        return bool(result)

    async def send_video_note(
        self,
        chat_id: int,
        data: bytes,
        length: int,
        filename: str = "note.mp4",
    ) -> TelegramMessage:
        """Upload a video note.

        Args:
            chat_id: Target chat
            data: MP4 bytes of the note
            length: Display diameter of the note
            filename: Upload filename
        """
        result = await self._call(
            "sendVideoNote",
            data={"chat_id": str(chat_id), "length": str(length)},
            files={"video_note": (filename, data, "video/mp4")},
        )
        return TelegramMessage.model_validate(result)

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> bool:
        data: dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
        if secret_token:
            data["secret_token"] = secret_token
        return bool(await self._call("setWebhook", data))

    async def delete_webhook(self, drop_pending_updates: bool = True) -> bool:
        return bool(await self._call("deleteWebhook", {"drop_pending_updates": drop_pending_updates}))
