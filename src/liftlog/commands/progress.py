"""Progress commands."""

import click

from ..db import ExerciseRepository
from ..services.progress import ProgressService
from .base import (
    async_command,
    echo_error,
    echo_info,
    ensure_initialized,
    format_number,
    format_table,
    get_state,
)


@click.command()
@click.argument("exercise", required=False)
@click.pass_context
@async_command
async def progress(ctx: click.Context, exercise: str | None):
    """Show training progress.

    Without EXERCISE, shows the completed-workout count and recent
    history. With an exercise ID or name, shows its estimated one-rep
    max over time.
    """
    ensure_initialized(ctx)
    state = get_state(ctx)
    service = ProgressService(state.db_path)

    if exercise is None:
        stats = await service.stats(state.identity)
        click.echo(click.style(f"Completed workouts: {stats['total_workouts']}", bold=True))

        history = await service.recent_history(state.identity)
        if not history:
            return
        click.echo()
        rows = [
            [
                str(w.id),
                w.ended_at.strftime("%Y-%m-%d %H:%M") if w.ended_at else "",
                w.program_name or "freestyle",
            ]
            for w in history
        ]
        click.echo(format_table(["ID", "Finished", "Program"], rows))
        return

    if exercise.isdigit():
        exercise_id = int(exercise)
    else:
        found = await ExerciseRepository(state.db_path).get_by_name(
            state.identity.user_id, exercise
        )
        if found is None:
            echo_error(f"Unknown exercise '{exercise}'")
            ctx.exit(1)
        exercise_id = found.id

    result = await service.exercise_progress(state.identity, exercise_id)
    if result is None:
        echo_error(f"Exercise {exercise} not found")
        ctx.exit(1)

    click.echo(click.style(result.exercise.name, bold=True))
    if not result.points:
        echo_info("No sets recorded yet")
        return

    rows = [
        [
            p.recorded_at.strftime("%Y-%m-%d") if p.recorded_at else "",
            format_number(p.weight),
            format_number(p.reps),
            str(p.one_rep_max),
        ]
        for p in result.points
    ]
    click.echo(format_table(["Date", "Weight", "Reps", "Est. 1RM"], rows))
    click.echo()
    click.echo(f"Best estimated 1RM: {result.best.one_rep_max}")
