"""In-memory habit store."""

from __future__ import annotations

import threading
from typing import Iterable

from ...domain.habit import Habit, new_habit_id
from ...errors import NotFound
from ...forms import HabitFormData


def habit_from_form(habit_id: str, form: HabitFormData) -> Habit:
    """Build a brand-new habit (empty history, zero streak) from form data."""

    return Habit(
        id=habit_id,
        name=form.name,
        description=form.description,
        frequency=form.frequency,
        goal=form.resolved_goal,
        unit=form.unit,
        color=form.color,
        icon=form.icon,
    )


class InMemoryHabitStore:
    """Dictionary-backed store; snapshots are immutable so no copying is needed."""

    def __init__(self, habits: Iterable[Habit] = ()) -> None:
        self._lock = threading.Lock()
        self._habits: dict[str, Habit] = {}
        # Newest first, matching how created habits are prepended to the list.
        self._order: list[str] = []
        for habit in habits:
            self._habits[habit.id] = habit
            self._order.append(habit.id)

    def list(self) -> list[Habit]:
        with self._lock:
            return [self._habits[habit_id] for habit_id in self._order]

    def get(self, habit_id: str) -> Habit:
        with self._lock:
            try:
                return self._habits[str(habit_id)]
            except KeyError:
                raise NotFound(str(habit_id)) from None

    def create(self, form: HabitFormData) -> Habit:
        habit = habit_from_form(new_habit_id(), form)
        with self._lock:
            self._habits[habit.id] = habit
            self._order.insert(0, habit.id)
        return habit

    def save(self, habit: Habit) -> Habit:
        with self._lock:
            if habit.id not in self._habits:
                raise NotFound(habit.id)
            self._habits[habit.id] = habit
        return habit
