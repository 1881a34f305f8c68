"""Property-based tests for declared-metadata limits.

Validates that clips are rejected iff duration or size exceeds its limit.
"""

from hypothesis import given, settings, strategies as st

from videonote.core.config import Settings
from videonote.modules.conversion.limits import validate_limits
from videonote.modules.conversion.models import Limits


DEFAULT_LIMITS = Limits()

limits_strategy = st.builds(
    Limits,
    max_duration=st.integers(min_value=0, max_value=3600),
    max_size=st.integers(min_value=0, max_value=2_000_000_000),
)


class TestLimitsValidation:
    """Property tests for validate_limits."""

    @given(
        limits=limits_strategy,
        duration=st.integers(min_value=0, max_value=7200),
        size=st.integers(min_value=0, max_value=4_000_000_000),
    )
    @settings(max_examples=200)
    def test_rejects_iff_any_limit_exceeded(self, limits: Limits, duration: int, size: int) -> None:
        """For any limits and declared values, the clip is rejected iff
        duration > max_duration or size > max_size.
        """
        too_large = duration > limits.max_duration or size > limits.max_size

        assert validate_limits(duration, size, limits) is (not too_large)

    @given(limits=limits_strategy)
    @settings(max_examples=100)
    def test_values_at_threshold_are_accepted(self, limits: Limits) -> None:
        """Exactly-at-threshold values SHALL be accepted."""
        assert validate_limits(limits.max_duration, limits.max_size, limits) is True

    @given(limits=limits_strategy, excess=st.integers(min_value=1, max_value=1000))
    @settings(max_examples=100)
    def test_one_over_threshold_is_rejected(self, limits: Limits, excess: int) -> None:
        assert validate_limits(limits.max_duration + excess, 0, limits) is False
        assert validate_limits(0, limits.max_size + excess, limits) is False

    def test_default_limits(self) -> None:
        """Defaults are 60 seconds and 10,000,000 bytes."""
        assert DEFAULT_LIMITS.max_duration == 60
        assert DEFAULT_LIMITS.max_size == 10_000_000
        assert validate_limits(60, 10_000_000, DEFAULT_LIMITS) is True
        assert validate_limits(90, 5_000_000, DEFAULT_LIMITS) is False
        assert validate_limits(30, 10_000_001, DEFAULT_LIMITS) is False

    def test_limits_from_settings(self) -> None:
        """Operators can override the thresholds through settings."""
        custom = Settings(MAX_VIDEO_DURATION=15, MAX_VIDEO_SIZE=1024)

        limits = Limits.from_settings(custom)

        assert limits == Limits(max_duration=15, max_size=1024)
        assert validate_limits(16, 10, limits) is False
