"""Application configuration settings.

All configuration values are loaded from environment variables (.env file).
The bot token is the only value without a usable default; it is checked
at startup rather than at import so tests can build their own Settings.
"""

import shutil
import tempfile
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    PROJECT_NAME: str = "Video Note Bot"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Telegram Bot API
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    TELEGRAM_REQUEST_TIMEOUT_SECONDS: float = 30.0
    POLL_TIMEOUT_SECONDS: int = 30

    # Webhook transport (used with --webhook)
    WEBHOOK_URL: Optional[str] = None
    WEBHOOK_SECRET: Optional[str] = None
    WEBHOOK_HOST: str = "0.0.0.0"
    WEBHOOK_PORT: int = 8080

    # Conversion limits
    MAX_VIDEO_DURATION: int = 60  # seconds
    MAX_VIDEO_SIZE: int = 10_000_000  # bytes

    # External tools
    FFMPEG_BINARY: str = shutil.which("ffmpeg") or "ffmpeg"
    TRANSCODE_TIMEOUT_SECONDS: float = 120.0
    FETCH_TIMEOUT_SECONDS: float = 60.0

    # Scratch directory for workspace files
    WORK_DIR: str = tempfile.gettempdir()

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
