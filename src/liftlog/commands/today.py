"""Today's workout command."""

from datetime import datetime

import click

from ..services.schedule import ScheduleService
from .base import async_command, echo_info, echo_success, ensure_initialized, get_state


@click.command()
@click.option("--on", "on_date", default=None, help="Date to show instead of today (YYYY-MM-DD)")
@click.pass_context
@async_command
async def today(ctx: click.Context, on_date: str | None):
    """Show today's scheduled workout and this week's calendar."""
    ensure_initialized(ctx)
    state = get_state(ctx)

    day = None
    if on_date:
        try:
            day = datetime.strptime(on_date, "%Y-%m-%d").date()
        except ValueError:
            raise click.BadParameter("expected YYYY-MM-DD", param_hint="--on") from None

    overview = await ScheduleService(state.db_path).get_today(state.identity, day)

    click.echo()
    click.echo(click.style(overview.today.strftime("%A, %d %B %Y"), bold=True))

    if overview.program is None:
        echo_info("No program yet. Create one with 'liftlog programs create'")
        return

    click.echo(f"Program: {overview.program.name}")
    click.echo()

    if overview.completed_today:
        echo_success("Workout already completed today")

    if overview.is_rest_day:
        echo_info("Rest day")
    else:
        click.echo(click.style(f"Today: {overview.todays_day.name}", bold=True))
        for ex in overview.todays_day.exercises:
            label = ex.exercise_name or f"exercise #{ex.exercise_id}"
            click.echo(f"  - {label}: {ex.sets}x{ex.reps}")

    # Week strip
    click.echo()
    cells = []
    for slot in overview.calendar:
        label = f"{slot.label} {slot.day_date.day:2d}"
        if slot.has_workout:
            label += "*"
        if slot.is_today:
            label = click.style(f"[{label}]", bold=True)
        cells.append(label)
    click.echo("  ".join(cells))
    click.echo("(* = training day)")
