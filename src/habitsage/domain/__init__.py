"""Domain types and repository protocols."""

from .habit import CellKind, DayCell, Frequency, Habit

__all__ = ["CellKind", "DayCell", "Frequency", "Habit"]
