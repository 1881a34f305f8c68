"""Localized user-facing texts.

The catalog is built once at import and is read-only afterwards.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

ENGLISH = "en"
RUSSIAN = "ru"
DEFAULT_LANGUAGE = ENGLISH
SUPPORTED_LANGUAGES = frozenset((ENGLISH, RUSSIAN))


class MessageKey(str, Enum):
    START = "start"
    HELP = "help"
    ERROR = "error"
    UNKNOWN = "unknown"
    VIDEO_TOO_LARGE = "video_too_large"
    WAIT = "wait"


_CATALOG: dict[MessageKey, dict[str, str]] = {
    MessageKey.START: {
        ENGLISH: "Hi! Send me a video, and I’ll convert it into a video message (circle format) for you.",
        RUSSIAN: "Привет! Отправь мне видео, и я сделаю из него видеосообщение (в кружочке) для тебя.",
    },
    MessageKey.HELP: {
        ENGLISH: (
            "Send me a video, and I’ll convert it into a video message (circle format) for you.\n"
            "This is my only function."
        ),
        RUSSIAN: (
            "Отправь мне видео, и я сделаю из него видеосообщение (в кружочке) для тебя.\n"
            "Это моя единственная функция."
        ),
    },
    MessageKey.ERROR: {
        ENGLISH: "⚠️ Something went wrong. Wrong file format or internal server error.",
        RUSSIAN: "⚠️ Что-то пошло не так. Неверный формат файла или ошибка сервера.",
    },
    MessageKey.UNKNOWN: {
        ENGLISH: "I can only process videos. Please send me a video file.",
        RUSSIAN: "Я могу обрабатывать только видео. Пожалуйста, отправьте мне видеофайл.",
    },
    MessageKey.VIDEO_TOO_LARGE: {
        ENGLISH: "The video you sent is too large. Please send a smaller file.",
        RUSSIAN: "Отправленное вами видео слишком большое. Пожалуйста, отправьте файл поменьше.",
    },
    MessageKey.WAIT: {
        ENGLISH: "Your video note is being generated, please wait…",
        RUSSIAN: "Ваш кружок генерируется, пожалуйста, подождите…",
    },
}

MESSAGES: Mapping[MessageKey, Mapping[str, str]] = MappingProxyType(
    {key: MappingProxyType(texts) for key, texts in _CATALOG.items()}
)


def resolve_language(language_code: Optional[str]) -> str:
    """Map a client language code onto a supported catalog language."""
    if not language_code:
        return DEFAULT_LANGUAGE
    code = language_code.split("-", 1)[0].lower()
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def get_message(key: MessageKey, language: str = DEFAULT_LANGUAGE) -> str:
    texts = MESSAGES[key]
    return texts.get(language, texts[DEFAULT_LANGUAGE])
