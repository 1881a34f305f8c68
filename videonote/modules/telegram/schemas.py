"""Pydantic schemas for the subset of Bot API objects the bot reads."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    username: Optional[str] = None
    language_code: Optional[str] = None


class TelegramChat(BaseModel):
    id: int
    type: str = "private"


class TelegramVideo(BaseModel):
    """Video attached to a message, with metadata as declared by the client."""
    file_id: str
    file_unique_id: str = ""
    width: int
    height: int
    duration: int
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")
    date: int = 0
    text: Optional[str] = None
    video: Optional[TelegramVideo] = None


class TelegramUpdate(BaseModel):
    update_id: int
    message: Optional[TelegramMessage] = None


class TelegramFile(BaseModel):
    """Result of getFile."""
    file_id: str
    file_unique_id: str = ""
    file_size: Optional[int] = None
    file_path: Optional[str] = None
