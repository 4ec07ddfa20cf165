"""Demo data seeding."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from datetime import timedelta

from ..dates import DayLike, format_day, parse_day
from ..domain.repositories.habit import HabitStore
from ..forms import HabitFormData
from ..logging_config import get_logger
from .tracker import HabitCompletionTracker

logger = get_logger("services.seed")

HISTORY_DAYS = 45

# (form fields, probability a given past day was completed)
DEMO_HABITS: list[tuple[dict, float]] = [
    (
        {
            "name": "Drink Water",
            "description": "Stay hydrated throughout the day",
            "frequency": "day",
            "goal": 8,
            "unit": "glass",
            "color": "#00D4AA",
            "icon": "💧",
        },
        0.9,
    ),
    (
        {
            "name": "Read",
            "description": "Books, articles, or anything long-form",
            "frequency": "day",
            "goal": 20,
            "unit": "page",
            "color": "#FF9F0A",
            "icon": "📚",
        },
        0.7,
    ),
    (
        {
            "name": "Meditate",
            "description": "10-15 minutes of mindfulness",
            "frequency": "day",
            "color": "#BF5AF2",
            "icon": "🧘",
        },
        0.6,
    ),
    (
        {
            "name": "Workout",
            "description": "Cardio or strength training",
            "frequency": "week",
            "color": "#FF375F",
            "icon": "🏋️",
        },
        0.45,
    ),
    (
        {
            "name": "Call Family",
            "description": "Stay connected with family members",
            "frequency": "month",
            "goal": 4,
            "color": "#0A84FF",
            "icon": "📞",
        },
        0.15,
    ),
]


@dataclass(frozen=True)
class SeedSummary:
    """Counts returned after demo seeding."""

    habits: int
    completions: int
    skipped: int


def run_demo_seed(store: HabitStore, today: DayLike, *, seed: int = 7) -> SeedSummary:
    """Create the demo habits with a plausible recent history.

    Idempotent by habit name: habits that already exist are left alone.
    """

    day = parse_day(today)
    tracker = HabitCompletionTracker(day)
    rng = random.Random(seed)
    existing = {habit.name for habit in store.list()}

    created = completions = skipped = 0
    for fields, probability in DEMO_HABITS:
        if fields["name"] in existing:
            skipped += 1
            continue
        habit = store.create(HabitFormData.model_validate(fields))
        dates = frozenset(
            format_day(day - timedelta(days=offset))
            for offset in range(HISTORY_DAYS)
            if rng.random() < probability
        )
        habit = tracker.refresh(replace(habit, completed_dates=dates))
        store.save(habit)
        created += 1
        completions += len(dates)

    logger.info(
        "Demo seed finished",
        extra={"habits_created": created, "completions": completions, "skipped": skipped},
    )
    return SeedSummary(habits=created, completions=completions, skipped=skipped)


__all__ = ["DEMO_HABITS", "SeedSummary", "run_demo_seed"]
