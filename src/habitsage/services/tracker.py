"""Habit completion tracking: toggles, streaks, and month calendar cells."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable

from ..dates import (
    SUNDAY,
    DayLike,
    days_in_month,
    first_weekday_offset,
    format_day,
    parse_day,
    previous_day,
)
from ..domain.habit import CellKind, DayCell, Habit


def _as_days(completed_dates: Iterable[DayLike]) -> set[date]:
    return {parse_day(value) for value in completed_dates}


def streak_from(completed_dates: Iterable[DayLike], today: DayLike) -> int:
    """Return the run of consecutive completed days ending today or yesterday.

    An unfinished today does not break a streak that is still alive through
    yesterday; missing both today and yesterday yields zero.
    """

    days = _as_days(completed_dates)
    cursor = parse_day(today)
    if cursor not in days:
        cursor = previous_day(cursor)

    current = 0
    while cursor in days:
        current += 1
        cursor = previous_day(cursor)
    return current


def longest_run(completed_dates: Iterable[DayLike]) -> int:
    """Return the longest run of consecutive days anywhere in the history."""

    longest = 0
    run = 0
    last_day: date | None = None
    for day in sorted(_as_days(completed_dates)):
        if last_day is not None and day == last_day + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = day
    return longest


class HabitCompletionTracker:
    """Answers completion queries and applies toggles relative to one "today".

    Every method is pure: habits come in as immutable snapshots and toggles
    hand back new snapshots with the derived fields already recomputed.
    """

    streak_from = staticmethod(streak_from)
    longest_run = staticmethod(longest_run)

    def __init__(self, today: DayLike, *, week_start: int = SUNDAY) -> None:
        self.today = parse_day(today)
        self.week_start = week_start

    def is_completed(self, habit: Habit, day: DayLike) -> bool:
        return format_day(parse_day(day)) in habit.completed_dates

    def is_future(self, day: DayLike) -> bool:
        return parse_day(day) > self.today

    def toggle(self, habit: Habit, day: DayLike) -> Habit:
        """Flip completion of ``day``; future days leave the habit untouched."""

        target = parse_day(day)
        if target > self.today:
            return habit

        key = format_day(target)
        if key in habit.completed_dates:
            dates = habit.completed_dates - {key}
        else:
            dates = habit.completed_dates | {key}

        streak = streak_from(dates, self.today)
        return replace(
            habit,
            completed_dates=dates,
            completed_today=format_day(self.today) in dates,
            streak=streak,
            longest_streak=max(habit.longest_streak, streak),
        )

    def refresh(self, habit: Habit) -> Habit:
        """Recompute derived fields for this tracker's today.

        Used when a snapshot comes from a store or was derived on an earlier
        day. The high-water mark only ever grows.
        """

        streak = streak_from(habit.completed_dates, self.today)
        longest = max(habit.longest_streak, streak, longest_run(habit.completed_dates))
        completed_today = format_day(self.today) in habit.completed_dates
        if (
            streak == habit.streak
            and longest == habit.longest_streak
            and completed_today == habit.completed_today
        ):
            return habit
        return replace(
            habit,
            streak=streak,
            longest_streak=longest,
            completed_today=completed_today,
        )

    def visible_month_cells(self, habit: Habit, year: int, month: int) -> list[DayCell]:
        """Grid cells for one month: leading padding, then one cell per day."""

        cells = [DayCell.empty() for _ in range(first_weekday_offset(year, month, self.week_start))]
        for day_number in range(1, days_in_month(year, month) + 1):
            day = date(year, month, day_number)
            key = format_day(day)
            cells.append(
                DayCell(
                    kind=CellKind.DAY,
                    date=key,
                    day=day_number,
                    completed=key in habit.completed_dates,
                    is_today=day == self.today,
                    is_future=day > self.today,
                )
            )
        return cells


__all__ = ["HabitCompletionTracker", "longest_run", "streak_from"]
