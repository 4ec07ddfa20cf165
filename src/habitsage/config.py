"""Application configuration objects and helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .dates import MONDAY, SUNDAY, canonical

load_dotenv()

STORE_BACKENDS = ("sql", "json", "memory")
WEEK_STARTS = {"sunday": SUNDAY, "monday": MONDAY}


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitSage"
    DB_FILENAME = "habitsage.db"
    JSON_FILENAME = "db.json"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITSAGE_DEV_MODE", default=True)
        self.STORE_BACKEND = os.getenv("HABITSAGE_STORE", "sql").strip().lower()
        if self.STORE_BACKEND not in STORE_BACKENDS:
            raise ValueError(
                f"HABITSAGE_STORE must be one of {', '.join(STORE_BACKENDS)}, "
                f"got {self.STORE_BACKEND!r}"
            )
        self.DATABASE_URL = os.getenv("HABITSAGE_DATABASE_URL", self._build_sqlite_url())
        self.JSON_PATH = Path(
            os.getenv("HABITSAGE_JSON_PATH", str(self.DATA_DIR / self.JSON_FILENAME))
        ).expanduser()
        week_start = os.getenv("HABITSAGE_WEEK_START", "sunday").strip().lower()
        if week_start not in WEEK_STARTS:
            raise ValueError(f"HABITSAGE_WEEK_START must be sunday or monday, got {week_start!r}")
        self.WEEK_START = WEEK_STARTS[week_start]
        today = os.getenv("HABITSAGE_TODAY")
        self.TODAY = canonical(today.strip()) if today else None

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the database, JSON store and logs live."""

        data_root = os.getenv("HABITSAGE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Isolated configuration: in-memory store under a throwaway data dir."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.STORE_BACKEND = "memory"
        self.DEV_MODE = False

    def _resolve_data_dir(self) -> Path:
        return Path(tempfile.mkdtemp(prefix="habitsage-"))


__all__ = ["BaseConfig", "DevConfig", "TestingConfig", "STORE_BACKENDS"]
