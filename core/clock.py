"""
Mirathi - Clock

Every "now" the domain needs comes from a ``Clock`` so that age,
presumption-of-death and registration checks are reproducible.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current instant (always timezone-aware UTC)."""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """
    Clock pinned to a given instant. ``advance`` moves it forward so tests
    can walk through time deterministically.
    """

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()

    def advance(self, **delta: float) -> "FixedClock":
        self._instant = self._instant + timedelta(**delta)
        return self

    def __repr__(self) -> str:
        return f"FixedClock({self._instant.isoformat()})"


SYSTEM_CLOCK = SystemClock()
