"""Command line interface for HabitSage."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

import click

from .config import STORE_BACKENDS, BaseConfig
from .context import AppContext, create_app_context
from .dates import canonical, format_day, parse_month, shift_month
from .domain.habit import DayCell, Frequency, Habit
from .errors import HabitError, InvalidDate, InvalidHabit, StoreUnavailable
from .forms import goal_label
from .logging_config import setup_logging
from .services.habits import MonthView
from .services.seed import run_demo_seed

CELL_WIDTH = 5


def _handle_errors(func: Callable) -> Callable:
    """Turn domain errors into readable CLI failures."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreUnavailable as exc:
            raise click.ClickException(f"{exc}. Nothing was changed; please try again.") from exc
        except InvalidHabit as exc:
            lines = [f"{field}: {', '.join(msgs)}" for field, msgs in exc.errors.items()]
            raise click.ClickException("Invalid habit\n  " + "\n  ".join(lines)) from exc
        except HabitError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _habit_line(habit: Habit) -> str:
    check = "✓" if habit.completed_today else " "
    icon = f"{habit.icon} " if habit.icon else ""
    return f"[{check}] {habit.id}  {icon}{habit.name}  ({habit.streak} day streak)"


def _render_cell(cell: DayCell) -> str:
    if cell.is_empty:
        return " " * CELL_WIDTH
    mark = "✓" if cell.completed else ("•" if cell.is_today else " ")
    text = f"{cell.day:>3}{mark} "
    if cell.is_future:
        return click.style(text, dim=True)
    if cell.is_today:
        return click.style(text, bold=True)
    if cell.completed:
        return click.style(text, fg="green")
    return text


def render_month(view: MonthView) -> str:
    """Render a month grid as text, one week per line."""

    lines = [view.title.center(CELL_WIDTH * 7).rstrip()]
    lines.append("".join(f"{header:>4} " for header in view.headers).rstrip())
    week: list[str] = []
    for cell in view.cells:
        week.append(_render_cell(cell))
        if len(week) == 7:
            lines.append("".join(week).rstrip())
            week = []
    if week:
        lines.append("".join(week).rstrip())
    return "\n".join(lines)


@click.group()
@click.option(
    "--today",
    metavar="YYYY-MM-DD",
    default=None,
    help="Pretend today is this date.",
)
@click.option(
    "--store",
    type=click.Choice(STORE_BACKENDS),
    default=None,
    help="Override the configured habit store backend.",
)
@click.pass_context
def cli(ctx: click.Context, today: Optional[str], store: Optional[str]) -> None:
    """Track habits, streaks, and monthly completion calendars."""

    try:
        config = BaseConfig()
    except ValueError as exc:
        # InvalidDate from HABITSAGE_TODAY is a ValueError too
        raise click.UsageError(f"Invalid configuration: {exc}", ctx=ctx) from exc
    if store:
        config.STORE_BACKEND = store
    if today:
        try:
            config.TODAY = canonical(today)
        except InvalidDate as exc:
            raise click.BadParameter(str(exc), param_hint="--today") from exc
    setup_logging(config)
    app = create_app_context(config)
    ctx.call_on_close(app.dispose)
    ctx.obj = app


@cli.command("list")
@click.pass_obj
@_handle_errors
def list_habits(app: AppContext) -> None:
    """List habits with today's status and current streak."""

    habits = app.habit_service.list_habits()
    if not habits:
        click.echo("No habits yet. Add one with `habitsage add NAME`.")
        return
    for habit in habits:
        click.echo(_habit_line(habit))
    click.echo(f"Today: {app.habit_service.overall_progress()}% complete")


@cli.command("add")
@click.argument("name")
@click.option("--description", default="", help="Optional details.")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in Frequency]),
    default=Frequency.DAY.value,
    show_default=True,
)
@click.option("--goal", type=int, default=None, help="Target per period (defaults by frequency).")
@click.option("--unit", default="", help="Unit the goal counts, e.g. glass.")
@click.option("--color", default=None)
@click.option("--icon", default=None)
@click.pass_obj
@_handle_errors
def add_habit(
    app: AppContext,
    name: str,
    description: str,
    frequency: str,
    goal: Optional[int],
    unit: str,
    color: Optional[str],
    icon: Optional[str],
) -> None:
    """Create a habit."""

    payload = {
        "name": name,
        "description": description,
        "frequency": frequency,
        "unit": unit,
        "color": color,
        "icon": icon,
    }
    if goal is not None:
        payload["goal"] = goal
    habit = app.habit_service.create_habit(payload)
    click.echo(f"Created {habit.name} ({habit.id}): {goal_label(habit.goal, habit.frequency, habit.unit)}")


@cli.command("toggle")
@click.argument("habit_id")
@click.argument("day", required=False)
@click.pass_obj
@_handle_errors
def toggle_habit(app: AppContext, habit_id: str, day: Optional[str]) -> None:
    """Mark DAY (default today) done, or undo it if already done."""

    result = app.habit_service.toggle(habit_id, day)
    target = canonical(day) if day else format_day(app.clock.today())
    if not result.changed:
        click.echo(f"{target} is in the future; nothing changed.")
        return
    habit = result.habit
    state = "done" if target in habit.completed_dates else "not done"
    click.echo(
        f"{habit.name}: {target} marked {state}. "
        f"Streak {habit.streak} (best {habit.longest_streak})"
    )


@cli.command("show")
@click.argument("habit_id")
@click.pass_obj
@_handle_errors
def show_habit(app: AppContext, habit_id: str) -> None:
    """Show a habit's details and statistics."""

    habit = app.habit_service.get_habit(habit_id)
    stats = app.habit_service.stats(habit_id)
    icon = f"{habit.icon} " if habit.icon else ""
    click.echo(f"{icon}{habit.name}")
    if habit.description:
        click.echo(habit.description)
    click.echo(f"Current streak: {stats.streak}")
    click.echo(f"Best streak: {stats.longest_streak}")
    click.echo(f"{stats.goal_title}: {stats.goal_label}")
    click.echo(f"Done today: {'yes' if stats.completed_today else 'no'}")


@cli.command("calendar")
@click.argument("habit_id")
@click.option("--month", "month_value", metavar="YYYY-MM", default=None, help="Month to show.")
@click.option(
    "--shift",
    type=int,
    default=0,
    help="Months to move from the shown month; negative goes back.",
)
@click.pass_obj
@_handle_errors
def calendar_view(app: AppContext, habit_id: str, month_value: Optional[str], shift: int) -> None:
    """Show a month of completions for a habit."""

    if month_value:
        year, month = parse_month(month_value)
    else:
        today = app.clock.today()
        year, month = today.year, today.month
    year, month = shift_month(year, month, shift)
    view = app.habit_service.month_view(habit_id, year, month)
    click.echo(render_month(view))


@cli.command("edit")
@click.argument("habit_id")
@click.option("--name", default=None)
@click.option("--description", default=None)
@click.option("--frequency", type=click.Choice([f.value for f in Frequency]), default=None)
@click.option("--goal", type=int, default=None, help="New goal; re-defaulted on frequency change.")
@click.option("--unit", default=None)
@click.pass_obj
@_handle_errors
def edit_habit(
    app: AppContext,
    habit_id: str,
    name: Optional[str],
    description: Optional[str],
    frequency: Optional[str],
    goal: Optional[int],
    unit: Optional[str],
) -> None:
    """Edit a habit's descriptive fields."""

    current = app.habit_service.get_habit(habit_id)
    payload = {
        "name": current.name if name is None else name,
        "description": current.description if description is None else description,
        "frequency": current.frequency.value if frequency is None else frequency,
        "unit": current.unit if unit is None else unit,
    }
    if goal is not None:
        payload["goal"] = goal
    habit = app.habit_service.edit_habit(habit_id, payload)
    click.echo(f"Updated {habit.name}: {goal_label(habit.goal, habit.frequency, habit.unit)}")


@cli.command("seed")
@click.option("--demo", is_flag=True, default=False, help="Seed demo habits")
@click.pass_obj
@_handle_errors
def seed(app: AppContext, demo: bool) -> None:
    """Seed application data (demo)."""

    if not demo:
        click.echo("No action specified. Use --demo to seed demo data.")
        return
    summary = run_demo_seed(app.habit_store, app.clock.today())
    click.echo(
        f"Seeded {summary.habits} habits with {summary.completions} completions "
        f"({summary.skipped} already present)."
    )


def main() -> None:  # pragma: no cover - console entry point
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
