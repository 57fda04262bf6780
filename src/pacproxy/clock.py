"""Wall-clock capability used by the time-window predicates.

A clock returns a timezone-aware ``datetime``. Its own offset is what
the predicates treat as "local time"; the UTC projection is derived from
it when a predicate is called with the ``"GMT"`` marker.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current moment as an aware datetime."""
        ...


class SystemClock:
    """Reads the host's clock in the host's local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


@dataclass(frozen=True)
class FixedClock:
    """Always returns the same moment.

    Naive datetimes are taken to be in the host's local timezone.
    """

    moment: datetime

    def now(self) -> datetime:
        if self.moment.tzinfo is None:
            return self.moment.astimezone()
        return self.moment
