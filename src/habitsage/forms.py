"""Habit creation/edit form definitions and goal helpers."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .domain.habit import Frequency
from .errors import InvalidHabit


class HabitFormData(BaseModel):
    """Payload for creating or editing a habit.

    ``goal`` stays ``None`` until the user picks one, in which case the
    frequency default applies (see :attr:`resolved_goal`).
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(default="", description="Short label for the habit", max_length=80)
    description: str = Field(default="", description="Optional details", max_length=255)
    frequency: Frequency = Field(default=Frequency.DAY, description="Goal cadence")
    goal: Optional[int] = Field(default=None, ge=1, description="Target count per period")
    unit: str = Field(default="", description="Unit the goal counts, e.g. glass", max_length=32)
    color: Optional[str] = Field(default=None, max_length=16)
    icon: Optional[str] = Field(default=None, max_length=16)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        """Reject names that are empty once trimmed."""

        if value is None or not str(value).strip():
            raise ValueError("Please provide a habit name.")
        return value

    @field_validator("description", "unit", mode="before")
    @classmethod
    def none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def resolved_goal(self) -> int:
        return self.goal if self.goal is not None else self.frequency.default_goal

    def with_frequency(self, frequency: Frequency | str) -> "HabitFormData":
        """Switch cadence and reset the goal to that cadence's default."""

        freq = Frequency(frequency)
        return self.model_copy(update={"frequency": freq, "goal": freq.default_goal})

    def with_goal_step(self, delta: int) -> "HabitFormData":
        return self.model_copy(update={"goal": adjust_goal(self.resolved_goal, delta)})


def form_errors(payload: Mapping[str, Any]) -> dict[str, list[str]]:
    """Return validation errors keyed by field name, empty when valid."""

    try:
        HabitFormData.model_validate(dict(payload))
    except ValidationError as exc:
        structured: dict[str, list[str]] = {}
        for error in exc.errors(include_url=False):
            loc = error.get("loc", ())
            key = str(loc[0]) if loc else "__root__"
            message = error.get("msg", "Invalid value")
            structured.setdefault(key, []).append(message.removeprefix("Value error, "))
        return structured
    return {}


def validate_form(payload: Mapping[str, Any] | HabitFormData) -> HabitFormData:
    """Build a form from raw input or raise :class:`InvalidHabit`."""

    if isinstance(payload, HabitFormData):
        return payload
    errors = form_errors(payload)
    if errors:
        raise InvalidHabit(errors)
    return HabitFormData.model_validate(dict(payload))


def adjust_goal(goal: int, delta: int) -> int:
    """Apply a stepper delta, never dropping below one."""

    return max(1, goal + delta)


def goal_label(goal: int, frequency: Frequency | str, unit: str = "") -> str:
    """Human label for a goal, e.g. ``"3 times per week"`` or ``"8 glasses per day"``."""

    freq = Frequency(frequency)
    unit = (unit or "").strip()
    if unit:
        noun = unit if goal == 1 else _plural(unit)
    else:
        noun = "time" if goal == 1 else "times"
    return f"{goal} {noun} per {freq.value}"


def _plural(word: str) -> str:
    if word.endswith(("ss", "sh", "ch", "x", "z")):
        return f"{word}es"
    if word.endswith("s"):
        # already plural ("miles", "glasses")
        return word
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return f"{word[:-1]}ies"
    return f"{word}s"


__all__ = [
    "HabitFormData",
    "adjust_goal",
    "form_errors",
    "goal_label",
    "validate_form",
]
