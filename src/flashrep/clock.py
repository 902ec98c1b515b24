"""Time sources. All instants are integer epoch milliseconds."""

import time
from datetime import date, datetime

DAY_MS = 24 * 60 * 60 * 1000


def system_now() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_ms(moment: datetime) -> int:
    """Convert a datetime (naive means local time) to epoch milliseconds."""
    return int(moment.timestamp() * 1000)


def local_date(ms: int) -> date:
    """Local calendar date of an epoch-millisecond instant."""
    return datetime.fromtimestamp(ms / 1000).date()


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now: int | datetime):
        self.now = to_ms(now) if isinstance(now, datetime) else int(now)

    def __call__(self) -> int:
        return self.now

    def advance(self, *, days: float = 0, hours: float = 0, minutes: float = 0) -> int:
        """Move the clock forward and return the new instant."""
        self.now += int(days * DAY_MS + hours * 3_600_000 + minutes * 60_000)
        return self.now
