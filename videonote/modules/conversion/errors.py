"""Exceptions raised by the conversion pipeline."""

from typing import Optional


class ConversionError(Exception):
    """Base exception for conversion failures."""
    pass


class FetchFailedError(ConversionError):
    """Exception when the source bytes could not be downloaded.

    Covers handle resolution, transport errors, non-success status codes
    and interrupted bodies. The underlying error is chained as __cause__.
    """
    pass


class TranscodeFailedError(ConversionError):
    """Exception when the transcoding step fails.

    Raised for workspace write errors, non-zero FFmpeg exits, timeouts and
    unreadable output. ``stderr`` is kept for operator logs only.
    """

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
