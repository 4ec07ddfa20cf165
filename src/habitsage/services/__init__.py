"""Service layer exports."""

from .habits import HabitService, HabitStats, MonthView, ToggleResult
from .tracker import HabitCompletionTracker, longest_run, streak_from

__all__ = [
    "HabitCompletionTracker",
    "HabitService",
    "HabitStats",
    "MonthView",
    "ToggleResult",
    "longest_run",
    "streak_from",
]
