import datetime
from typing import Protocol

from django.utils import timezone


class Clock(Protocol):
    def now(self) -> datetime.datetime: ...


class SystemClock:
    """Wall clock in the project's time zone setting (aware when USE_TZ)."""

    def now(self) -> datetime.datetime:
        return timezone.now()


class FixedClock:
    """
    Clock that only moves when told to.

    Used by tests and by maintenance code that evaluates deadlines against a
    single reference time.
    """

    def __init__(self, current: datetime.datetime) -> None:
        self.current = current

    def now(self) -> datetime.datetime:
        return self.current

    def advance(self, **delta) -> datetime.datetime:
        self.current = self.current + datetime.timedelta(**delta)
        return self.current
