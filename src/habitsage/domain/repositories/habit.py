"""Habit store protocol."""

from __future__ import annotations

from typing import Protocol

from ...forms import HabitFormData
from ..habit import Habit


class HabitStore(Protocol):
    """Holds the canonical list of habits and persists snapshots.

    Implementations raise :class:`~habitsage.errors.NotFound` for unknown ids
    and :class:`~habitsage.errors.StoreUnavailable` when the backend fails.
    """

    def list(self) -> list[Habit]:
        """Return every habit, newest first."""
        ...

    def get(self, habit_id: str) -> Habit:
        """Retrieve a habit by ID."""
        ...

    def create(self, form: HabitFormData) -> Habit:
        """Create a habit with a fresh id and an empty completion history."""
        ...

    def save(self, habit: Habit) -> Habit:
        """Persist a full snapshot of an existing habit and return it."""
        ...
