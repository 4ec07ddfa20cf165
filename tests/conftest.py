"""Pytest configuration and shared fixtures for HabitSage tests.

Fixtures here give each test an isolated store (SQL, JSON file, or memory),
a clock pinned to a known day, and small factories for habit snapshots, so
nothing touches the real data directory or the wall clock.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from habitsage.clock import FixedClock
from habitsage.domain.habit import Frequency, Habit
from habitsage.infra.database import create_session_factory
from habitsage.infra.repositories import (
    InMemoryHabitStore,
    JsonFileHabitStore,
    SQLModelHabitStore,
)
from habitsage.services.habits import HabitService

# Imported for table registration on SQLModel.metadata
from habitsage.models import HabitCompletion, HabitRecord  # noqa: F401

# Monday, 23 June 2025
TODAY = date(2025, 6, 23)


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep configuration reads away from the developer's environment."""

    for name in (
        "HABITSAGE_STORE",
        "HABITSAGE_DATABASE_URL",
        "HABITSAGE_JSON_PATH",
        "HABITSAGE_DEV_MODE",
        "HABITSAGE_WEEK_START",
        "HABITSAGE_TODAY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HABITSAGE_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture(autouse=True)
def reset_habitsage_logger():
    """Detach handlers added by setup_logging so later tests start clean."""
    yield
    logger = logging.getLogger("habitsage")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what the SQL store expects."""

    return create_session_factory(db_engine)


# =============================================================================
# Stores and Services
# =============================================================================


@pytest.fixture
def sql_store(session_factory) -> SQLModelHabitStore:
    return SQLModelHabitStore(session_factory)


@pytest.fixture
def json_store(tmp_path) -> JsonFileHabitStore:
    return JsonFileHabitStore(tmp_path / "db.json")


@pytest.fixture
def memory_store() -> InMemoryHabitStore:
    return InMemoryHabitStore()


@pytest.fixture(params=["sql", "json", "memory"])
def any_store(request):
    """Run a test once against every store backend."""

    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock(today) -> FixedClock:
    return FixedClock(today)


@pytest.fixture
def service(memory_store, clock) -> HabitService:
    return HabitService(memory_store, clock)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory():
    """Factory for habit snapshots that are not stored anywhere.

    Returns:
        Callable: Function that builds Habit instances
    """

    def _create_habit(
        habit_id: str = "1",
        name: str = "Drink Water",
        completed_dates=(),
        frequency: Frequency = Frequency.DAY,
        goal: int = 1,
        streak: int = 0,
        longest_streak: int = 0,
        completed_today: bool = False,
    ) -> Habit:
        return Habit(
            id=habit_id,
            name=name,
            frequency=frequency,
            goal=goal,
            completed_dates=frozenset(completed_dates),
            streak=streak,
            longest_streak=longest_streak,
            completed_today=completed_today,
        )

    return _create_habit
