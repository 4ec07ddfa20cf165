"""Providers for "today" so derivations never read the wall clock directly."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Protocol

from .dates import DayLike, parse_day

if TYPE_CHECKING:  # pragma: no cover
    from .config import BaseConfig


class Clock(Protocol):
    """Anything that can tell the current calendar day."""

    def today(self) -> date:
        ...


class SystemClock:
    """Real clock backed by the local date."""

    def today(self) -> date:
        return date.today()


@dataclass(frozen=True)
class FixedClock:
    """Clock pinned to a single day, for tests and reproducible demos."""

    day: date

    @classmethod
    def at(cls, value: DayLike) -> "FixedClock":
        return cls(parse_day(value))

    def today(self) -> date:
        return self.day


def clock_from_config(config: BaseConfig) -> Clock:
    """Return a fixed clock when the config pins today, else the system clock."""

    if config.TODAY:
        return FixedClock.at(config.TODAY)
    return SystemClock()


__all__ = ["Clock", "FixedClock", "SystemClock", "clock_from_config"]
