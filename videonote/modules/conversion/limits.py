"""Limits validation for declared clip metadata."""

from videonote.modules.conversion.models import Limits


def validate_limits(duration: int, size: int, limits: Limits) -> bool:
    """Check declared duration and size against the limits.

    Values exactly at a threshold are accepted.

    Args:
        duration: Declared duration in seconds
        size: Declared size in bytes
        limits: Thresholds to check against

    Returns:
        True if the clip is acceptable, False if it is too large
    """
    return duration <= limits.max_duration and size <= limits.max_size
