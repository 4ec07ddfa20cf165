"""Exception types raised by the habit tracker, its stores, and services."""

from __future__ import annotations

from typing import Any


class HabitError(Exception):
    """Base class for all HabitSage errors."""


class InvalidDate(HabitError, ValueError):
    """A date argument is not a canonical ``YYYY-MM-DD`` calendar date."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        self.value = value
        message = f"Invalid date {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidHabit(HabitError, ValueError):
    """Habit form data was rejected before reaching the store."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        details = "; ".join(f"{field}: {', '.join(msgs)}" for field, msgs in errors.items())
        super().__init__(f"Invalid habit ({details})" if details else "Invalid habit")


class NotFound(HabitError, LookupError):
    """A habit id is not present in the store."""

    def __init__(self, habit_id: str) -> None:
        self.habit_id = habit_id
        super().__init__(f"Habit with ID {habit_id} not found")


class StoreUnavailable(HabitError, RuntimeError):
    """The backing store failed to read or persist a change."""

    def __init__(self, message: str, *, habit_id: str | None = None) -> None:
        self.habit_id = habit_id
        super().__init__(message)


__all__ = ["HabitError", "InvalidDate", "InvalidHabit", "NotFound", "StoreUnavailable"]
