"""Tests for environment-driven configuration and app context wiring."""

from __future__ import annotations

from datetime import date

import pytest

from habitsage import config as habitsage_config
from habitsage.clock import FixedClock, SystemClock, clock_from_config
from habitsage.config import BaseConfig
from habitsage.context import create_app_context
from habitsage.dates import MONDAY, SUNDAY
from habitsage.errors import InvalidDate
from habitsage.infra.repositories import InMemoryHabitStore, JsonFileHabitStore, SQLModelHabitStore


def test_defaults(tmp_path):
    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.exists()
    assert config.STORE_BACKEND == "sql"
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'habitsage.db'}"
    assert config.JSON_PATH == config.DATA_DIR / "db.json"
    assert config.WEEK_START == SUNDAY
    assert config.TODAY is None
    assert config.DEV_MODE is True


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("HABITSAGE_STORE", "JSON")
    monkeypatch.setenv("HABITSAGE_JSON_PATH", str(tmp_path / "elsewhere.json"))
    monkeypatch.setenv("HABITSAGE_WEEK_START", "monday")
    monkeypatch.setenv("HABITSAGE_TODAY", "2025-06-23")
    monkeypatch.setenv("HABITSAGE_DEV_MODE", "false")

    config = BaseConfig()

    assert config.STORE_BACKEND == "json"
    assert config.JSON_PATH == tmp_path / "elsewhere.json"
    assert config.WEEK_START == MONDAY
    assert config.TODAY == "2025-06-23"
    assert config.DEV_MODE is False


def test_invalid_store_backend(monkeypatch):
    monkeypatch.setenv("HABITSAGE_STORE", "redis")
    with pytest.raises(ValueError):
        BaseConfig()


def test_invalid_week_start(monkeypatch):
    monkeypatch.setenv("HABITSAGE_WEEK_START", "friday")
    with pytest.raises(ValueError):
        BaseConfig()


def test_invalid_today(monkeypatch):
    monkeypatch.setenv("HABITSAGE_TODAY", "23/06/2025")
    with pytest.raises(InvalidDate):
        BaseConfig()


def test_sqlite_engine_options():
    assert BaseConfig().sqlalchemy_engine_options() == {
        "connect_args": {"check_same_thread": False}
    }


def test_testing_config_uses_memory_store():
    config = habitsage_config.TestingConfig()

    assert config.STORE_BACKEND == "memory"
    assert config.TESTING is True
    assert config.DATA_DIR.exists()


def test_clock_from_config(monkeypatch):
    assert isinstance(clock_from_config(BaseConfig()), SystemClock)

    monkeypatch.setenv("HABITSAGE_TODAY", "2025-06-23")
    clock = clock_from_config(BaseConfig())

    assert isinstance(clock, FixedClock)
    assert clock.today() == date(2025, 6, 23)


@pytest.mark.parametrize(
    "backend, store_type",
    [("memory", InMemoryHabitStore), ("json", JsonFileHabitStore), ("sql", SQLModelHabitStore)],
)
def test_create_app_context_builds_configured_store(monkeypatch, backend, store_type):
    monkeypatch.setenv("HABITSAGE_STORE", backend)

    app = create_app_context(BaseConfig())
    try:
        assert isinstance(app.habit_store, store_type)
        assert app.habit_service.store is app.habit_store
        assert (app.engine is not None) == (backend == "sql")
        assert app.habit_service.list_habits() == []
    finally:
        app.dispose()
