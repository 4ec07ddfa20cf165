"""Habit snapshots and calendar cells shared by the tracker, stores, and CLI."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ..dates import canonical
from ..errors import InvalidHabit
from ..logging_config import get_logger

logger = get_logger("domain")


class Frequency(str, Enum):
    """Cadence a habit's goal is measured against."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def default_goal(self) -> int:
        return _DEFAULT_GOALS[self]

    @property
    def goal_title(self) -> str:
        """Label used next to the goal on the detail screen."""

        return _GOAL_TITLES[self]

    @classmethod
    def coerce(cls, value: Any) -> "Frequency":
        """Parse a stored frequency, falling back to ``day`` for unknown values."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning("Unknown habit frequency, using 'day'", extra={"frequency": value})
            return cls.DAY


_ID_LOCK = threading.Lock()
_last_id = 0


def new_habit_id() -> str:
    """Return a unique, increasing millisecond-timestamp id."""

    global _last_id  # noqa: PLW0603
    with _ID_LOCK:
        candidate = time.time_ns() // 1_000_000
        _last_id = candidate if candidate > _last_id else _last_id + 1
        return str(_last_id)


_DEFAULT_GOALS = {Frequency.DAY: 1, Frequency.WEEK: 3, Frequency.MONTH: 8}
_GOAL_TITLES = {
    Frequency.DAY: "Daily Goal",
    Frequency.WEEK: "Weekly Goal",
    Frequency.MONTH: "Monthly Goal",
}


@dataclass(frozen=True)
class Habit:
    """Immutable snapshot of one habit and its completion history.

    ``streak``, ``longest_streak`` and ``completed_today`` are derived from
    ``completed_dates``; they are carried on the snapshot so a store can hand
    back exactly what it persisted, but only the tracker recomputes them.
    """

    id: str
    name: str
    frequency: Frequency = Frequency.DAY
    goal: int = 1
    description: str = ""
    unit: str = ""
    color: Optional[str] = None
    icon: Optional[str] = None
    completed_dates: frozenset[str] = field(default_factory=frozenset)
    streak: int = 0
    longest_streak: int = 0
    completed_today: bool = False

    def __post_init__(self) -> None:
        errors: dict[str, list[str]] = {}
        if not isinstance(self.name, str) or not self.name.strip():
            errors["name"] = ["Habit name must not be blank."]
        if isinstance(self.goal, bool) or not isinstance(self.goal, int) or self.goal < 1:
            errors["goal"] = [f"Goal must be a positive integer, got {self.goal!r}."]
        if errors:
            raise InvalidHabit(errors)

        # Normalise the date set once so membership tests compare canonical strings.
        dates = frozenset(canonical(day) for day in self.completed_dates)
        object.__setattr__(self, "completed_dates", dates)
        object.__setattr__(self, "frequency", Frequency.coerce(self.frequency))
        object.__setattr__(self, "id", str(self.id))

    def sorted_dates(self) -> list[str]:
        return sorted(self.completed_dates)

    def to_dict(self) -> dict[str, Any]:
        """Serialise in the mobile app's ``db.json`` shape."""

        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "streak": self.streak,
            "longestStreak": self.longest_streak,
            "completedToday": self.completed_today,
            "color": self.color,
            "icon": self.icon,
            "completedDates": self.sorted_dates(),
            "frequency": self.frequency.value,
            "goal": self.goal,
        }
        if self.unit:
            payload["unit"] = self.unit
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Habit":
        frequency = Frequency.coerce(data.get("frequency", Frequency.DAY))
        goal = data.get("goal")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description") or "",
            frequency=frequency,
            goal=frequency.default_goal if goal is None else int(goal),
            unit=data.get("unit") or "",
            color=data.get("color"),
            icon=data.get("icon"),
            completed_dates=frozenset(data.get("completedDates") or ()),
            streak=int(data.get("streak") or 0),
            longest_streak=int(data.get("longestStreak") or 0),
            completed_today=bool(data.get("completedToday", False)),
        )


class CellKind(str, Enum):
    EMPTY = "empty"
    DAY = "day"


@dataclass(frozen=True)
class DayCell:
    """One calendar grid cell: either leading padding or a day of the month."""

    kind: CellKind
    date: Optional[str] = None
    day: Optional[int] = None
    completed: bool = False
    is_today: bool = False
    is_future: bool = False

    @classmethod
    def empty(cls) -> "DayCell":
        return cls(kind=CellKind.EMPTY)

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY


def day_cells_only(cells: Iterable[DayCell]) -> list[DayCell]:
    """Drop padding cells from a month grid."""

    return [cell for cell in cells if not cell.is_empty]


__all__ = ["CellKind", "DayCell", "Frequency", "Habit", "day_cells_only", "new_habit_id"]
