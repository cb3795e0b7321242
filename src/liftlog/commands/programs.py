"""Program management commands."""

import click

from ..db import ExerciseRepository
from ..errors import ValidationError
from ..models.program import DEFAULT_REPS, DEFAULT_SETS, WEEKDAYS, PlannedExerciseDraft, ProgramDraft
from ..services.programs import ProgramService
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_state,
)


def parse_plan(value: str) -> tuple[str, list[tuple[str, int, str]]]:
    """Parse ``DAY=EXERCISE[:SETSxREPS], ...``.

    ``Monday=Bench Press:3x8-12, Squat`` plans two exercises on Monday,
    the second with the default sets and reps.
    """
    day, sep, rest = value.partition("=")
    if not sep or not rest.strip():
        raise ValidationError(f"Bad plan {value!r}; expected DAY=EXERCISE[:SETSxREPS],...")

    day = day.strip().capitalize()
    if day not in WEEKDAYS:
        raise ValidationError(f"Unknown weekday {day!r}")

    items = []
    for chunk in rest.split(","):
        name, _, scheme = chunk.partition(":")
        if not name.strip():
            continue
        sets, reps = DEFAULT_SETS, DEFAULT_REPS
        if scheme.strip():
            sets_text, x, reps_text = scheme.strip().lower().partition("x")
            if not x or not sets_text.isdigit() or not reps_text:
                raise ValidationError(f"Bad sets/reps {scheme.strip()!r}; expected e.g. 3x8-12")
            sets, reps = int(sets_text), reps_text
        items.append((name.strip(), sets, reps))
    return day, items


@click.group()
@click.pass_context
def programs(ctx):
    """Manage weekly programs.

    Commands for creating, listing, activating and deleting programs.
    """
    ensure_initialized(ctx)


@programs.command(name="list")
@click.pass_context
@async_command
async def list_programs(ctx):
    """List your programs, the active one first."""
    state = get_state(ctx)
    all_programs = await ProgramService(state.db_path).list_programs(state.identity)

    if not all_programs:
        echo_info("No programs found. Create one with 'liftlog programs create'")
        return

    headers = ["ID", "Name", "Active", "Created"]
    rows = []

    for prog in all_programs:
        created = prog.created_at.strftime("%Y-%m-%d") if prog.created_at else "N/A"
        rows.append([
            str(prog.id),
            prog.name[:30] + "..." if len(prog.name) > 30 else prog.name,
            "yes" if prog.is_active else "",
            created,
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_programs)} program(s)")


@programs.command()
@click.argument("program_id", type=int)
@click.pass_context
@async_command
async def show(ctx, program_id: int):
    """Show the weekly plan of a program."""
    state = get_state(ctx)
    program = await ProgramService(state.db_path).get_program(state.identity, program_id)
    if not program:
        echo_error(f"Program ID {program_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo("=" * 60)
    click.echo(f"{program.name} (ID: {program.id}){' [active]' if program.is_active else ''}")
    click.echo("=" * 60)
    click.echo(program.get_summary())


@programs.command()
@click.argument("name")
@click.option("--description", "-d", default="", help="Program description")
@click.option(
    "--plan",
    "plans",
    multiple=True,
    help='Planned exercises for a day, e.g. "Monday=Bench Press:3x8-12, Squat:5x5"',
)
@click.option("--activate", is_flag=True, help="Make the new program active")
@click.pass_context
@async_command
async def create(ctx, name: str, description: str, plans: tuple[str, ...], activate: bool):
    """Create a program with a Monday..Sunday week.

    Days without a --plan are rest days.
    """
    state = get_state(ctx)
    exercises = ExerciseRepository(state.db_path)

    draft = ProgramDraft.weekly(name, description)
    for plan in plans:
        day_name, items = parse_plan(plan)
        day = draft.day(day_name)
        for exercise_name, sets, reps in items:
            exercise = await exercises.get_by_name(state.identity.user_id, exercise_name)
            if exercise is None:
                raise ValidationError(f"Unknown exercise {exercise_name!r}")
            day.exercises.append(
                PlannedExerciseDraft(exercise_id=exercise.id, sets=sets, reps=reps)
            )

    service = ProgramService(state.db_path)
    program = await service.create_program(state.identity, draft)
    echo_success(f"Created program '{program.name}' (ID: {program.id})")

    if activate:
        await service.set_active(state.identity, program.id)
        echo_success("Program is now active")


@programs.command()
@click.argument("program_id", type=int)
@click.pass_context
@async_command
async def activate(ctx, program_id: int):
    """Make a program the active one."""
    state = get_state(ctx)
    if not await ProgramService(state.db_path).set_active(state.identity, program_id):
        echo_error(f"Program ID {program_id} not found")
        ctx.exit(1)
    echo_success(f"Program {program_id} is now active")


@programs.command()
@click.argument("program_id", type=int)
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, program_id: int, force: bool):
    """Delete a program."""
    state = get_state(ctx)
    service = ProgramService(state.db_path)

    program = await service.get_program(state.identity, program_id)
    if not program:
        echo_error(f"Program ID {program_id} not found")
        ctx.exit(1)

    if not force:
        click.echo(f"Program: {program.name}")
        if not click.confirm("Are you sure you want to delete this program?"):
            echo_info("Cancelled")
            return

    await service.delete_program(state.identity, program_id)
    echo_success(f"Program {program_id} deleted")
