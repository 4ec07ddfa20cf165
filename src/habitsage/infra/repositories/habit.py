"""SQLModel implementation of the habit store."""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from datetime import date
from typing import Iterable, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ...dates import format_day, parse_day
from ...domain.habit import Frequency, Habit
from ...errors import InvalidHabit, NotFound, StoreUnavailable
from ...forms import HabitFormData
from ...infra.database import SessionFactory
from ...logging_config import get_logger
from ...models.habit import HabitCompletion, HabitRecord

logger = get_logger("infra.sql_store")


def _record_id(habit_id: str) -> int:
    try:
        return int(habit_id)
    except (TypeError, ValueError):
        raise NotFound(str(habit_id)) from None


def _to_habit(record: HabitRecord, days: Iterable[date]) -> Habit:
    return Habit(
        id=str(record.id),
        name=record.name,
        description=record.description,
        frequency=Frequency.coerce(record.frequency),
        goal=record.goal,
        unit=record.unit,
        color=record.color,
        icon=record.icon,
        completed_dates=frozenset(format_day(day) for day in days),
        streak=record.streak,
        longest_streak=record.longest_streak,
    )


class SQLModelHabitStore:
    """SQLModel-based habit store.

    ``completed_today`` is not persisted; it is derived again whenever the
    service refreshes a loaded snapshot.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @contextmanager
    def _translate_errors(self, action: str, habit_id: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.warning(
                "Habit store failure", extra={"action": action, "habit_id": habit_id}
            )
            raise StoreUnavailable(f"Could not {action}: {exc}", habit_id=habit_id) from exc
        except InvalidHabit as exc:
            raise StoreUnavailable(f"Malformed habit record: {exc}", habit_id=habit_id) from exc

    def _completion_days(self, session: Session, habit_id: int) -> list[date]:
        statement = select(HabitCompletion.completed_on).where(HabitCompletion.habit_id == habit_id)
        return list(session.exec(statement).all())

    def list(self) -> list[Habit]:
        """Return every habit, newest first."""
        with self._translate_errors("list habits"):
            with self.session_factory() as session:
                records = session.exec(
                    select(HabitRecord).order_by(HabitRecord.id.desc())  # type: ignore[union-attr]
                ).all()
                by_habit: dict[int, list[date]] = defaultdict(list)
                for completion in session.exec(select(HabitCompletion)).all():
                    by_habit[completion.habit_id].append(completion.completed_on)
                return [_to_habit(record, by_habit[record.id]) for record in records]

    def get(self, habit_id: str) -> Habit:
        """Retrieve a habit by ID."""
        pk = _record_id(habit_id)
        with self._translate_errors("load habit", str(habit_id)):
            with self.session_factory() as session:
                record = session.get(HabitRecord, pk)
                if record is None:
                    raise NotFound(str(habit_id))
                return _to_habit(record, self._completion_days(session, pk))

    def create(self, form: HabitFormData) -> Habit:
        """Create a new habit."""
        with self._translate_errors("create habit"):
            with self.session_factory() as session:
                record = HabitRecord(
                    name=form.name,
                    description=form.description,
                    frequency=form.frequency.value,
                    goal=form.resolved_goal,
                    unit=form.unit,
                    color=form.color,
                    icon=form.icon,
                )
                session.add(record)
                session.commit()
                session.refresh(record)
                return _to_habit(record, ())

    def save(self, habit: Habit) -> Habit:
        """Persist descriptive fields, derived counters and the completion set."""
        pk = _record_id(habit.id)
        with self._translate_errors("save habit", habit.id):
            with self.session_factory() as session:
                record = session.get(HabitRecord, pk)
                if record is None:
                    raise NotFound(habit.id)

                record.name = habit.name
                record.description = habit.description
                record.frequency = habit.frequency.value
                record.goal = habit.goal
                record.unit = habit.unit
                record.color = habit.color
                record.icon = habit.icon
                record.streak = habit.streak
                record.longest_streak = habit.longest_streak
                session.add(record)

                wanted = {parse_day(day) for day in habit.completed_dates}
                existing = session.exec(
                    select(HabitCompletion).where(HabitCompletion.habit_id == pk)
                ).all()
                stored = set()
                for completion in existing:
                    if completion.completed_on in wanted:
                        stored.add(completion.completed_on)
                    else:
                        session.delete(completion)
                for day in sorted(wanted - stored):
                    session.add(HabitCompletion(habit_id=pk, completed_on=day))

                session.commit()
        return habit
