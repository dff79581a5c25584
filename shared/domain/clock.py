"""Injectable time source."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from django.utils import timezone  # type: ignore


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock backed by ``django.utils.timezone.now``."""

    def now(self) -> datetime:
        return timezone.now()


class FixedClock:
    """Clock frozen at a given aware instant; ``advance`` moves it forward."""

    def __init__(self, moment: datetime):
        if timezone.is_naive(moment):
            raise ValueError("FixedClock requires an aware datetime")
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def advance(self, **kwargs) -> None:
        self._moment = self._moment + timedelta(**kwargs)


system_clock = SystemClock()
