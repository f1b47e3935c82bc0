"""Time window computation for scheduled runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.exceptions import ConfigurationError

MINUTES_PER_DAY = 1440
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class TimeWindow:
    """
    Half-open interval [start, end) of business timestamps for one run.

    Both ends are aware UTC datetimes. Windows are recomputed every run.
    """

    start: datetime
    end: datetime

    def contains(self, timestamp: Optional[datetime]) -> bool:
        """True when start <= timestamp < end. Unknown timestamps are outside."""
        if timestamp is None:
            return False
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return self.start <= timestamp < self.end

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"


def validate_interval(interval_minutes: int) -> int:
    """
    Check that the interval splits a day into whole intervals.

    Raises:
        ConfigurationError: If the interval is not a positive divisor of 1440
    """
    if isinstance(interval_minutes, bool) or not isinstance(interval_minutes, int):
        raise ConfigurationError(
            f"Interval must be a whole number of minutes, got {interval_minutes!r}",
            setting="PRINT_INTERVAL_MINUTES",
        )
    if interval_minutes <= 0 or MINUTES_PER_DAY % interval_minutes != 0:
        raise ConfigurationError(
            f"Interval of {interval_minutes} minutes does not evenly divide a day",
            setting="PRINT_INTERVAL_MINUTES",
        )
    return interval_minutes


def compute_window(now: datetime, interval_minutes: int, lookback: int = 1) -> TimeWindow:
    """
    Compute the window for a run started at `now`.

    The end is `now` floored to the interval boundary; the start lies
    `lookback` intervals before it. With lookback >= 2 consecutive runs
    overlap, which catches records that showed up late at the cost of
    re-examining already delivered ones.

    Args:
        now: Current instant (naive values are taken as UTC)
        interval_minutes: Interval length, must evenly divide 1440
        lookback: Number of intervals to look back (>= 1)

    Returns:
        TimeWindow aligned to the interval

    Raises:
        ConfigurationError: For a bad interval or lookback
    """
    validate_interval(interval_minutes)
    if isinstance(lookback, bool) or not isinstance(lookback, int) or lookback < 1:
        raise ConfigurationError(
            f"Lookback must be at least 1 interval, got {lookback!r}",
            setting="LOOKBACK_INTERVALS",
        )

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    interval_ms = interval_minutes * 60 * 1000
    # Integer arithmetic on milliseconds keeps the floor exact
    now_ms = (now - _EPOCH) // timedelta(milliseconds=1)
    end_ms = (now_ms // interval_ms) * interval_ms
    start_ms = end_ms - lookback * interval_ms

    return TimeWindow(
        start=_EPOCH + timedelta(milliseconds=start_ms),
        end=_EPOCH + timedelta(milliseconds=end_ms),
    )
