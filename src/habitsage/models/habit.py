"""Habit persistence tables."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class HabitRecord(SQLModel, table=True):
    """A habit row; completion days live in :class:`HabitCompletion`."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    frequency: str = Field(default="day", max_length=8)
    goal: int = Field(default=1, nullable=False)
    unit: str = Field(default="", max_length=32)
    color: Optional[str] = Field(default=None, max_length=16)
    icon: Optional[str] = Field(default=None, max_length=16)
    streak: int = Field(default=0, nullable=False)
    longest_streak: int = Field(default=0, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class HabitCompletion(SQLModel, table=True):
    """One calendar day on which a habit was completed."""

    __tablename__: ClassVar[str] = "habit_completion"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    completed_on: date = Field(primary_key=True, index=True)
