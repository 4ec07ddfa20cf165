"""JSON file habit store compatible with the mobile app's ``db.json``.

The file holds ``{"habits": [...]}`` with camelCase habit objects. Other
top-level keys (for example ``stats``) are preserved on write.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from ...domain.habit import Habit, new_habit_id
from ...errors import NotFound, StoreUnavailable
from ...forms import HabitFormData
from ...logging_config import get_logger
from .memory import habit_from_form

logger = get_logger("infra.json_store")


class JsonFileHabitStore:
    """Store habits in a single JSON document, rewritten atomically on change."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    # Document I/O
    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"habits": []}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailable(f"Could not read habits from {self.path}: {exc}") from exc
        if not isinstance(document, dict) or not isinstance(document.get("habits", []), list):
            raise StoreUnavailable(f"{self.path} does not contain a habits list")
        document.setdefault("habits", [])
        return document

    def _write(self, document: dict[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(document, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise StoreUnavailable(f"Could not write habits to {self.path}: {exc}") from exc
        finally:
            # Only set when the swap did not happen
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def _decode(self, row: Any) -> Habit:
        try:
            return Habit.from_dict(row)
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailable(f"Malformed habit record in {self.path}: {exc}") from exc

    # HabitStore protocol
    def list(self) -> list[Habit]:
        with self._lock:
            return [self._decode(row) for row in self._read()["habits"]]

    def get(self, habit_id: str) -> Habit:
        with self._lock:
            for row in self._read()["habits"]:
                if isinstance(row, dict) and str(row.get("id")) == str(habit_id):
                    return self._decode(row)
        raise NotFound(str(habit_id))

    def create(self, form: HabitFormData) -> Habit:
        habit = habit_from_form(new_habit_id(), form)
        with self._lock:
            document = self._read()
            document["habits"].insert(0, habit.to_dict())
            self._write(document)
        logger.debug("Habit written", extra={"habit_id": habit.id, "path": str(self.path)})
        return habit

    def save(self, habit: Habit) -> Habit:
        with self._lock:
            document = self._read()
            rows = document["habits"]
            for index, row in enumerate(rows):
                if isinstance(row, dict) and str(row.get("id")) == habit.id:
                    rows[index] = habit.to_dict()
                    break
            else:
                raise NotFound(habit.id)
            self._write(document)
        return habit
