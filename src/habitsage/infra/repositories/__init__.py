"""Concrete habit store implementations."""

from .habit import SQLModelHabitStore
from .json_file import JsonFileHabitStore
from .memory import InMemoryHabitStore

__all__ = ["InMemoryHabitStore", "JsonFileHabitStore", "SQLModelHabitStore"]
