"""Habit service: wires the tracker to a store and the real clock.

The service keeps a last-known-good snapshot per habit. Toggles are applied
optimistically to that snapshot, then saved; when the store reports
:class:`StoreUnavailable` the snapshot is restored and the error re-raised so
the caller can show a retryable message.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from ..clock import Clock, SystemClock
from ..dates import SUNDAY, DayLike, format_day, month_title, parse_day, weekday_headers
from ..domain.habit import DayCell, Habit
from ..domain.repositories.habit import HabitStore
from ..errors import NotFound, StoreUnavailable
from ..forms import HabitFormData, goal_label, validate_form
from ..logging_config import get_logger
from .tracker import HabitCompletionTracker

logger = get_logger("services.habits")


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle; ``changed`` is False for ignored future days."""

    habit: Habit
    changed: bool


@dataclass(frozen=True)
class HabitStats:
    """Figures shown on a habit's detail screen."""

    streak: int
    longest_streak: int
    completed_today: bool
    goal: int
    goal_title: str
    goal_label: str


@dataclass(frozen=True)
class MonthView:
    """A month grid ready for rendering."""

    year: int
    month: int
    title: str
    headers: list[str]
    cells: list[DayCell]


class HabitService:
    """Application-facing habit operations."""

    def __init__(
        self,
        store: HabitStore,
        clock: Optional[Clock] = None,
        *,
        week_start: int = SUNDAY,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.week_start = week_start
        self._snapshots: dict[str, Habit] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def tracker(self) -> HabitCompletionTracker:
        return HabitCompletionTracker(self.clock.today(), week_start=self.week_start)

    def _lock_for(self, habit_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(habit_id, threading.Lock())

    def _remember(self, habit: Habit) -> Habit:
        self._snapshots[habit.id] = habit
        return habit

    def _load(self, habit_id: str, tracker: HabitCompletionTracker) -> Habit:
        return self._remember(tracker.refresh(self.store.get(habit_id)))

    def snapshot(self, habit_id: str) -> Habit:
        """Return the in-memory copy of a habit, loading it on first use."""

        habit_id = str(habit_id)
        cached = self._snapshots.get(habit_id)
        if cached is not None:
            return cached
        return self._load(habit_id, self.tracker())

    def forget(self, habit_id: Optional[str] = None) -> None:
        """Drop cached snapshots so the next read goes to the store."""

        if habit_id is None:
            self._snapshots.clear()
        else:
            self._snapshots.pop(str(habit_id), None)

    def list_habits(self) -> list[Habit]:
        tracker = self.tracker()
        return [self._remember(tracker.refresh(habit)) for habit in self.store.list()]

    def get_habit(self, habit_id: str) -> Habit:
        return self._load(str(habit_id), self.tracker())

    def create_habit(self, payload: Mapping[str, Any] | HabitFormData) -> Habit:
        form = validate_form(payload)
        habit = self.tracker().refresh(self.store.create(form))
        logger.info(
            "Habit created",
            extra={"habit_id": habit.id, "frequency": habit.frequency.value, "goal": habit.goal},
        )
        return self._remember(habit)

    def edit_habit(self, habit_id: str, payload: Mapping[str, Any] | HabitFormData) -> Habit:
        """Update descriptive fields; completion history is left as is.

        A frequency change re-defaults the goal unless the form sets one.
        """

        form = validate_form(payload)
        habit_id = str(habit_id)
        with self._lock_for(habit_id):
            current = self.snapshot(habit_id)
            if form.goal is not None:
                goal = form.goal
            elif form.frequency is not current.frequency:
                goal = form.frequency.default_goal
            else:
                goal = current.goal
            updated = replace(
                current,
                name=form.name,
                description=form.description,
                frequency=form.frequency,
                goal=goal,
                unit=form.unit,
                color=form.color if form.color is not None else current.color,
                icon=form.icon if form.icon is not None else current.icon,
            )
            saved = self.store.save(updated)
            logger.info("Habit edited", extra={"habit_id": habit_id})
            return self._remember(saved)

    def toggle(self, habit_id: str, day: Optional[DayLike] = None) -> ToggleResult:
        """Toggle completion of ``day`` (default today) and persist the result."""

        tracker = self.tracker()
        target = parse_day(day) if day is not None else tracker.today
        habit_id = str(habit_id)

        with self._lock_for(habit_id):
            confirmed = self.snapshot(habit_id)
            if tracker.is_future(target):
                logger.debug(
                    "Ignoring toggle of a future day",
                    extra={"habit_id": habit_id, "day": format_day(target)},
                )
                return ToggleResult(confirmed, changed=False)

            optimistic = tracker.toggle(tracker.refresh(confirmed), target)
            self._snapshots[habit_id] = optimistic
            try:
                saved = self.store.save(optimistic)
            except StoreUnavailable:
                self._snapshots[habit_id] = confirmed
                logger.warning(
                    "Save failed, reverted toggle",
                    extra={"habit_id": habit_id, "day": format_day(target)},
                )
                raise
            except NotFound:
                self._snapshots.pop(habit_id, None)
                raise

        logger.info(
            "Habit toggled",
            extra={
                "habit_id": habit_id,
                "day": format_day(target),
                "completed": format_day(target) in saved.completed_dates,
                "streak": saved.streak,
            },
        )
        return ToggleResult(self._remember(saved), changed=True)

    def month_view(
        self, habit_id: str, year: Optional[int] = None, month: Optional[int] = None
    ) -> MonthView:
        tracker = self.tracker()
        year = tracker.today.year if year is None else year
        month = tracker.today.month if month is None else month
        habit = self.snapshot(habit_id)
        return MonthView(
            year=year,
            month=month,
            title=month_title(year, month),
            headers=weekday_headers(self.week_start),
            cells=tracker.visible_month_cells(habit, year, month),
        )

    def month_cells(
        self, habit_id: str, year: Optional[int] = None, month: Optional[int] = None
    ) -> list[DayCell]:
        return self.month_view(habit_id, year, month).cells

    def stats(self, habit_id: str) -> HabitStats:
        habit = self.tracker().refresh(self.snapshot(habit_id))
        return HabitStats(
            streak=habit.streak,
            longest_streak=habit.longest_streak,
            completed_today=habit.completed_today,
            goal=habit.goal,
            goal_title=habit.frequency.goal_title,
            goal_label=goal_label(habit.goal, habit.frequency, habit.unit),
        )

    def overall_progress(self) -> int:
        """Percentage of habits completed today, rounded to a whole number."""

        habits = self.list_habits()
        if not habits:
            return 0
        done = sum(1 for habit in habits if habit.completed_today)
        return round(100 * done / len(habits))


__all__ = ["HabitService", "HabitStats", "MonthView", "ToggleResult"]
