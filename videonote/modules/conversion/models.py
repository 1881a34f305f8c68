"""Value objects for the conversion pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from videonote.core.config import Settings


class ConversionState(str, Enum):
    """State of a single conversion."""
    VALIDATING = "validating"
    FETCHING = "fetching"
    TRANSCODING = "transcoding"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a conversion ended in the failed state."""
    TOO_LARGE = "too_large"
    FETCH_FAILED = "fetch_failed"
    TRANSCODE_FAILED = "transcode_failed"


@dataclass(frozen=True)
class Limits:
    """Upper bounds on the declared metadata of an accepted clip."""
    max_duration: int = 60  # seconds
    max_size: int = 10_000_000  # bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> "Limits":
        return cls(
            max_duration=settings.MAX_VIDEO_DURATION,
            max_size=settings.MAX_VIDEO_SIZE,
        )


@dataclass(frozen=True)
class CropGeometry:
    """Centered square region cut out of the source frame."""
    side: int
    x: int
    y: int

    @property
    def filter(self) -> str:
        return f"crop={self.side}:{self.side}:{self.x}:{self.y}"


@dataclass(frozen=True)
class VideoNoteProfile:
    """Encoding parameters of the video note container.

    Every accepted clip is converged onto this shape regardless of the
    source resolution or aspect ratio. Only the crop depends on the request.
    """
    resolution: int = 640
    video_codec: str = "libx264"
    video_profile: str = "main"
    preset: str = "veryfast"
    pixel_format: str = "yuv420p"
    color_primaries: str = "bt709"
    color_trc: str = "bt709"
    colorspace: str = "bt709"
    frame_rate: int = 30
    video_bitrate: str = "1000k"
    audio_codec: str = "aac"
    audio_profile: str = "aac_low"
    audio_channels: int = 1
    audio_sample_rate: int = 44100
    audio_bitrate: str = "64k"


DEFAULT_PROFILE = VideoNoteProfile()


@dataclass
class ConversionResult:
    """Outcome of one conversion.

    ``error`` carries the operator-facing cause and is never shown to users.
    """
    state: ConversionState
    artifact: Optional[bytes] = None
    failure: Optional[FailureKind] = None
    side: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == ConversionState.SUCCEEDED and bool(self.artifact)


@dataclass(frozen=True)
class ChatContext:
    """Where the notices and the artifact of a conversion go."""
    chat_id: int
    language: str = "en"
    username: Optional[str] = None
