"""HabitSage habit tracking package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestingConfig
from .context import AppContext, create_app_context
from .domain.habit import DayCell, Frequency, Habit
from .services.tracker import HabitCompletionTracker, streak_from

__all__ = [
    "AppContext",
    "BaseConfig",
    "DayCell",
    "DevConfig",
    "Frequency",
    "Habit",
    "HabitCompletionTracker",
    "TestingConfig",
    "create_app_context",
    "streak_from",
]
