"""FFmpeg transcoding utilities.

Crops the source to a centered square and re-encodes it with the fixed
video note profile.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from videonote.core.config import Settings
from videonote.core.logging import log_error
from videonote.modules.conversion.errors import TranscodeFailedError
from videonote.modules.conversion.models import (
    CropGeometry,
    DEFAULT_PROFILE,
    VideoNoteProfile,
)

logger = logging.getLogger(__name__)

# Keep only the tail of FFmpeg diagnostics in logs and errors
STDERR_TAIL_CHARS = 4000


def compute_crop(height: int, width: int) -> CropGeometry:
    """Compute the centered square crop for a frame.

    The square side is the shorter dimension; the offset is applied on the
    longer axis only, so at most one of x and y is non-zero.

    Args:
        height: Declared frame height
        width: Declared frame width

    Returns:
        CropGeometry for the frame
    """
    side = min(height, width)
    x = (width - side) // 2 if width > height else 0
    y = (height - side) // 2 if height > width else 0
    return CropGeometry(side=side, x=x, y=y)


class Transcoder(ABC):
    """Contract for the video note transcoding engine."""

    @abstractmethod
    async def transcode(
        self,
        input_path: Path,
        output_path: Path,
        height: int,
        width: int,
    ) -> bytes:
        """Convert the clip in input_path into a video note.

        The input slot must already contain the source bytes.

        Returns:
            Bytes of the produced note

        Raises:
            TranscodeFailedError: If the engine fails or produces nothing
        """
        pass


class FFmpegTranscoder(Transcoder):
    """FFmpeg-based video note transcoder."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        timeout: Optional[float] = 120.0,
        profile: VideoNoteProfile = DEFAULT_PROFILE,
    ):
        """Initialize transcoder.

        Args:
            ffmpeg_path: Path to ffmpeg binary
            timeout: Watchdog for a single run in seconds, None disables it
            profile: Output encoding profile
        """
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self.profile = profile

    @classmethod
    def from_settings(cls, settings: Settings) -> "FFmpegTranscoder":
        return cls(
            ffmpeg_path=settings.FFMPEG_BINARY,
            timeout=settings.TRANSCODE_TIMEOUT_SECONDS,
        )

    def build_command(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        crop: CropGeometry,
    ) -> list[str]:
        """Build FFmpeg command for a video note.

        Args:
            input_path: Source clip
            output_path: Destination of the note
            crop: Square region to keep

        Returns:
            FFmpeg command as list of arguments
        """
        p = self.profile
        video_filter = f"{crop.filter},scale={p.resolution}:{p.resolution},setsar=1"

        return [
            self.ffmpeg_path,
            "-y",  # Overwrite output
            "-hide_banner",
            "-nostdin",
            "-i", str(input_path),
            # Video settings
            "-vf", video_filter,
            "-c:v", p.video_codec,
            "-profile:v", p.video_profile,
            "-preset", p.preset,
            "-pix_fmt", p.pixel_format,
            "-color_primaries", p.color_primaries,
            "-color_trc", p.color_trc,
            "-colorspace", p.colorspace,
            "-r", str(p.frame_rate),
            "-b:v", p.video_bitrate,
            # Audio settings
            "-c:a", p.audio_codec,
            "-profile:a", p.audio_profile,
            "-ac", str(p.audio_channels),
            "-ar", str(p.audio_sample_rate),
            "-b:a", p.audio_bitrate,
            # Output format
            "-movflags", "+faststart",
            "-f", "mp4",
            str(output_path),
        ]

    async def transcode(
        self,
        input_path: Path,
        output_path: Path,
        height: int,
        width: int,
    ) -> bytes:
        crop = compute_crop(height, width)
        cmd = self.build_command(input_path, output_path, crop)

        logger.info(
            "Executing FFmpeg video note: crop=%dx%d at (%d,%d)",
            crop.side, crop.side, crop.x, crop.y,
        )

        returncode, stderr = await self._run(cmd)

        if returncode != 0:
            tail = stderr[-STDERR_TAIL_CHARS:]
            logger.debug("FFmpeg stderr: %s", tail)
            log_error(logger, "FFmpeg transcoding failed", returncode=returncode, stderr=tail)
            raise TranscodeFailedError(
                f"FFmpeg exited with code {returncode}",
                returncode=returncode,
                stderr=tail,
            )

        try:
            data = Path(output_path).read_bytes()
        except OSError as e:
            raise TranscodeFailedError(f"Could not read FFmpeg output: {e}") from e

        if not data:
            raise TranscodeFailedError("FFmpeg produced an empty file", returncode=returncode)

        return data

    async def _run(self, cmd: list[str]) -> tuple[int, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TranscodeFailedError(f"Could not start FFmpeg: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            raise TranscodeFailedError(f"FFmpeg timed out after {self.timeout}s")
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        return process.returncode, stderr.decode("utf-8", errors="replace")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """Kill and reap a running FFmpeg process."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()
