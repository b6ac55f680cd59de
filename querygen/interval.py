"""Benchmark time interval and random window sampling."""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from querygen.errors import InvalidDuration, InvalidInterval

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_unix_nanos(value: datetime) -> int:
    """Convert a datetime to integer Unix nanoseconds."""
    return ((_as_utc(value) - EPOCH) // _MICROSECOND) * 1000


def format_rfc3339(value: datetime) -> str:
    """Format a datetime as an RFC3339 UTC timestamp."""
    value = _as_utc(value)
    if value.microsecond:
        return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class Window:
    """A sampled sub-interval of the benchmark interval."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def start_ns(self) -> int:
        return to_unix_nanos(self.start)

    @property
    def end_ns(self) -> int:
        return to_unix_nanos(self.end)

    def start_string(self) -> str:
        return format_rfc3339(self.start)

    def end_string(self) -> str:
        return format_rfc3339(self.end)


@dataclass(frozen=True)
class TimeInterval:
    """The global [start, end) benchmark interval.

    Shared read-only by every scenario invocation of a run. Sampling takes the
    random source as an argument so that each worker can own its own.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        start = _as_utc(self.start)
        end = _as_utc(self.end)
        if not start < end:
            raise InvalidInterval(
                f"Interval start {format_rfc3339(start)} must be before "
                f"end {format_rfc3339(end)}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def random_window(self, duration: timedelta, rng: random.Random) -> Window:
        """Sample a window of the given duration fully inside the interval.

        Args:
            duration: Window length.
            rng: Random source used for the offset draw.

        Returns:
            Window with ``end - start == duration``.

        Raises:
            InvalidDuration: If the window is negative or longer than the interval.
        """
        if duration < timedelta(0) or duration > self.duration:
            raise InvalidDuration(
                f"Window of {duration} does not fit in interval of {self.duration}"
            )

        # Integer microsecond offsets keep the draw unbiased.
        slack = (self.duration - duration) // _MICROSECOND
        offset = timedelta(microseconds=rng.randint(0, slack))
        start = self.start + offset
        return Window(start=start, end=start + duration)
