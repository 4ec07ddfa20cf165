"""Repository protocol definitions for domain layer."""

from .habit import HabitStore

__all__ = ["HabitStore"]
