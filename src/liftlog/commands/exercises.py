"""Exercise library commands."""

import click

from ..models.exercises import ExerciseCategory
from ..services.programs import ExerciseLibrary
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_state,
)


@click.group()
@click.pass_context
def exercises(ctx):
    """Browse the exercise library and manage custom exercises."""
    ensure_initialized(ctx)


@exercises.command(name="list")
@click.option("--search", "-s", default=None, help="Filter by name or category")
@click.pass_context
@async_command
async def list_exercises(ctx, search: str | None):
    """List exercises."""
    state = get_state(ctx)
    found = await ExerciseLibrary(state.db_path).list_exercises(state.identity, search)

    if not found:
        echo_info("No exercises match")
        return

    rows = [
        [str(ex.id), ex.name, ex.category, "custom" if ex.is_custom else ""]
        for ex in found
    ]
    click.echo(format_table(["ID", "Name", "Category", ""], rows))


@exercises.command()
@click.argument("name")
@click.option(
    "--category",
    "-c",
    required=True,
    type=click.Choice([c.value for c in ExerciseCategory], case_sensitive=False),
)
@click.option("--description", "-d", default="", help="How to perform it")
@click.pass_context
@async_command
async def add(ctx, name: str, category: str, description: str):
    """Add a custom exercise."""
    state = get_state(ctx)
    exercise = await ExerciseLibrary(state.db_path).add_custom(
        state.identity, name, category, description
    )
    echo_success(f"Added '{exercise.name}' (ID: {exercise.id})")


@exercises.command()
@click.argument("exercise_id", type=int)
@click.pass_context
@async_command
async def delete(ctx, exercise_id: int):
    """Delete one of your custom exercises."""
    state = get_state(ctx)
    if not await ExerciseLibrary(state.db_path).delete_custom(state.identity, exercise_id):
        echo_error(f"No custom exercise with ID {exercise_id}")
        ctx.exit(1)
    echo_success(f"Exercise {exercise_id} deleted")
