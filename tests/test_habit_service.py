"""Tests for the habit service: optimistic toggles, edits, and views."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta

import pytest

from habitsage.clock import FixedClock
from habitsage.errors import InvalidDate, InvalidHabit, NotFound, StoreUnavailable
from habitsage.infra.repositories import InMemoryHabitStore
from habitsage.services.habits import HabitService


class FlakyStore(InMemoryHabitStore):
    """In-memory store whose saves can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_saves = False
        self.save_calls = 0

    def save(self, habit):
        self.save_calls += 1
        if self.fail_saves:
            raise StoreUnavailable("network unreachable", habit_id=habit.id)
        return super().save(habit)


@pytest.fixture
def flaky_store():
    return FlakyStore()


@pytest.fixture
def flaky_service(flaky_store, clock):
    return HabitService(flaky_store, clock)


class TestToggle:
    """Tests for toggling through the service."""

    def test_toggle_defaults_to_today(self, service, today):
        habit = service.create_habit({"name": "Read"})

        result = service.toggle(habit.id)

        assert result.changed is True
        assert result.habit.completed_today is True
        assert result.habit.streak == 1
        assert service.store.get(habit.id).completed_dates == {today.isoformat()}

    def test_toggle_specific_day(self, service):
        habit = service.create_habit({"name": "Read"})

        result = service.toggle(habit.id, "2025-06-22")

        assert result.habit.completed_dates == {"2025-06-22"}
        assert result.habit.streak == 1
        assert result.habit.completed_today is False

    def test_future_day_is_ignored(self, service, today):
        habit = service.create_habit({"name": "Read"})

        result = service.toggle(habit.id, today + timedelta(days=7))

        assert result.changed is False
        assert result.habit == habit
        assert service.store.get(habit.id).completed_dates == frozenset()

    def test_future_day_does_not_touch_the_store(self, flaky_service, flaky_store, today):
        habit = flaky_service.create_habit({"name": "Read"})

        flaky_service.toggle(habit.id, "2025-07-01")

        assert flaky_store.save_calls == 0

    def test_failed_save_reverts_to_last_known_good(self, flaky_service, flaky_store):
        """A store failure leaves the snapshot exactly as it was confirmed."""
        habit = flaky_service.create_habit({"name": "Read"})
        confirmed = flaky_service.toggle(habit.id, "2025-06-22").habit

        flaky_store.fail_saves = True
        with pytest.raises(StoreUnavailable):
            flaky_service.toggle(habit.id, "2025-06-23")

        assert flaky_service.snapshot(habit.id) == confirmed
        assert flaky_store.get(habit.id).completed_dates == {"2025-06-22"}

    def test_retry_after_failure_succeeds(self, flaky_service, flaky_store):
        habit = flaky_service.create_habit({"name": "Read"})
        flaky_store.fail_saves = True
        with pytest.raises(StoreUnavailable):
            flaky_service.toggle(habit.id)

        flaky_store.fail_saves = False
        result = flaky_service.toggle(habit.id)

        assert result.habit.completed_today is True
        assert flaky_store.get(habit.id).completed_today is True

    def test_failed_save_is_logged(self, flaky_service, flaky_store, caplog):
        habit = flaky_service.create_habit({"name": "Read"})
        flaky_store.fail_saves = True

        with caplog.at_level(logging.WARNING, logger="habitsage"):
            with pytest.raises(StoreUnavailable):
                flaky_service.toggle(habit.id)

        assert "Save failed, reverted toggle" in caplog.text

    def test_unknown_habit_raises_not_found(self, service):
        with pytest.raises(NotFound):
            service.toggle("404")

    def test_malformed_day_raises_before_lookup(self, service):
        with pytest.raises(InvalidDate):
            service.toggle("404", "June 23")

    def test_forget_rereads_the_store(self, service):
        habit = service.create_habit({"name": "Read"})
        service.store.save(replace(habit, completed_dates=frozenset({"2025-06-22"})))

        assert service.snapshot(habit.id).completed_dates == frozenset()

        service.forget(habit.id)

        assert service.snapshot(habit.id).completed_dates == {"2025-06-22"}
        assert service.snapshot(habit.id).streak == 1

    def test_snapshot_is_refreshed_when_the_day_rolls_over(self, memory_store, today):
        clock = FixedClock(today)
        service = HabitService(memory_store, clock)
        habit = service.create_habit({"name": "Read"})
        service.toggle(habit.id)

        later = HabitService(memory_store, FixedClock(today + timedelta(days=2)))

        assert later.get_habit(habit.id).streak == 0
        assert later.get_habit(habit.id).completed_today is False
        assert later.get_habit(habit.id).longest_streak == 1


class TestCreateAndEdit:
    """Tests for habit creation and editing."""

    def test_blank_name_rejected_before_store(self, service):
        with pytest.raises(InvalidHabit):
            service.create_habit({"name": "   "})
        assert service.store.list() == []

    def test_create_with_frequency_default_goal(self, service):
        habit = service.create_habit({"name": "Gym", "frequency": "week"})
        assert habit.goal == 3

    def test_edit_frequency_redefaults_goal(self, service):
        """Switching day to week re-defaults the goal, independent of history."""
        habit = service.create_habit({"name": "Gym"})
        service.toggle(habit.id, "2025-06-20")

        edited = service.edit_habit(habit.id, {"name": "Gym", "frequency": "week"})

        assert edited.goal == 3
        assert edited.completed_dates == {"2025-06-20"}

    def test_edit_keeps_goal_when_frequency_unchanged(self, service):
        habit = service.create_habit({"name": "Water", "goal": 8, "unit": "glass"})

        edited = service.edit_habit(habit.id, {"name": "Water", "unit": "glass"})

        assert edited.goal == 8

    def test_edit_explicit_goal_wins(self, service):
        habit = service.create_habit({"name": "Gym"})

        edited = service.edit_habit(habit.id, {"name": "Gym", "frequency": "week", "goal": 5})

        assert edited.goal == 5

    def test_edit_keeps_icon_and_color_when_not_given(self, service):
        habit = service.create_habit({"name": "Read", "icon": "📚", "color": "#FF9F0A"})

        edited = service.edit_habit(habit.id, {"name": "Read more"})

        assert edited.name == "Read more"
        assert edited.icon == "📚"
        assert edited.color == "#FF9F0A"


class TestViews:
    """Tests for stats, month views, and overall progress."""

    def test_stats(self, service):
        habit = service.create_habit({"name": "Water", "goal": 8, "unit": "glass"})
        service.toggle(habit.id, "2025-06-22")
        service.toggle(habit.id, "2025-06-23")

        stats = service.stats(habit.id)

        assert stats.streak == 2
        assert stats.longest_streak == 2
        assert stats.completed_today is True
        assert stats.goal_title == "Daily Goal"
        assert stats.goal_label == "8 glasses per day"

    def test_month_view_defaults_to_current_month(self, service):
        habit = service.create_habit({"name": "Read"})
        service.toggle(habit.id, "2025-06-10")

        view = service.month_view(habit.id)

        assert (view.year, view.month) == (2025, 6)
        assert view.title == "June 2025"
        assert view.headers[0] == "Sun"
        completed = [cell.date for cell in view.cells if cell.completed]
        assert completed == ["2025-06-10"]

    def test_month_cells_for_other_month(self, service):
        habit = service.create_habit({"name": "Read"})

        cells = service.month_cells(habit.id, 2024, 2)

        assert len([cell for cell in cells if not cell.is_empty]) == 29

    def test_overall_progress(self, service):
        assert service.overall_progress() == 0

        first = service.create_habit({"name": "Read"})
        service.create_habit({"name": "Walk"})
        service.create_habit({"name": "Water"})
        service.toggle(first.id)

        assert service.overall_progress() == 33
