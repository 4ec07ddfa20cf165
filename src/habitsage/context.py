"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .clock import Clock, clock_from_config
from .config import BaseConfig
from .domain.repositories.habit import HabitStore
from .infra.database import bootstrap_database
from .infra.repositories import InMemoryHabitStore, JsonFileHabitStore, SQLModelHabitStore
from .logging_config import get_logger
from .services.habits import HabitService

logger = get_logger("context")


@dataclass
class AppContext:
    """Centralized application context with the store, clock and services."""

    config: BaseConfig
    clock: Clock
    habit_store: HabitStore
    habit_service: HabitService
    engine: Optional[Engine] = None

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def build_store(config: BaseConfig) -> tuple[HabitStore, Optional[Engine]]:
    """Instantiate the configured habit store backend."""

    if config.STORE_BACKEND == "memory":
        return InMemoryHabitStore(), None
    if config.STORE_BACKEND == "json":
        return JsonFileHabitStore(config.JSON_PATH), None

    engine, session_factory = bootstrap_database(config)
    return SQLModelHabitStore(session_factory), engine


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    store, engine = build_store(config)
    clock = clock_from_config(config)
    service = HabitService(store, clock, week_start=config.WEEK_START)
    logger.debug("App context ready", extra={"store_backend": config.STORE_BACKEND})

    return AppContext(
        config=config,
        clock=clock,
        habit_store=store,
        habit_service=service,
        engine=engine,
    )
