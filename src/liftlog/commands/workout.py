"""Live workout commands."""

from datetime import date

import click
import questionary
from questionary import Style

from ..db import ProgramDayRepository
from ..errors import SessionCompletionError, ValidationError
from ..models.program import ProgramDay
from ..services.programs import ExerciseLibrary, ProgramService
from ..services.progress import ProgressService
from ..services.schedule import ScheduleService, monday_index, resolve_todays_day, weekday_name
from ..services.session import FREESTYLE, SessionService, WorkoutSession
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_number,
    format_table,
    get_state,
)

# Custom style for prompts
custom_style = Style(
    [
        ("qmark", "fg:#673ab7 bold"),
        ("question", "bold"),
        ("answer", "fg:#f44336 bold"),
        ("pointer", "fg:#673ab7 bold"),
        ("highlighted", "fg:#673ab7 bold"),
        ("instruction", ""),
        ("text", ""),
    ]
)


def match_day(days: list[ProgramDay], name: str) -> ProgramDay | None:
    """Find a program day by name, case-insensitively."""
    wanted = name.strip().casefold()
    for day in days:
        if day.name.casefold() == wanted:
            return day
    return None


def render_session(session: WorkoutSession, names: dict[int, str], hints: dict) -> str:
    """Session rows as a table, with the last weighted set as a hint."""
    rows = []
    for exercise_id in dict.fromkeys(session.exercise_ids):
        name = names.get(exercise_id, f"#{exercise_id}")
        hint = hints.get(exercise_id)
        last = f"{format_number(hint.weight)} x {format_number(hint.reps)}" if hint else ""
        for log in session.sets_for(exercise_id):
            rows.append([
                name,
                str(log.set_number),
                format_number(log.reps),
                format_number(log.weight),
                last,
            ])
            name, last = "", ""
    return format_table(["Exercise", "Set", "Reps", "Weight", "Last"], rows)


async def _choose_day(days: list[ProgramDay], day_name: str | None) -> int | str:
    """Program day to follow, asking when not given on the command line."""
    if day_name:
        if day_name.strip().lower() == FREESTYLE:
            return FREESTYLE
        day = match_day(days, day_name)
        if day is None:
            raise ValidationError(f"Program has no day named '{day_name}'")
        return day.id

    today = date.today()
    todays = resolve_todays_day(days, weekday_name(today), monday_index(today))
    training = [d for d in days if d.has_workout]
    if todays in training:
        training.remove(todays)
        training.insert(0, todays)

    choices = [
        questionary.Choice(f"{d.name} ({len(d.exercises)} exercises)", d.id) for d in training
    ]
    choices.append(questionary.Choice("Freestyle (no plan)", FREESTYLE))
    choice = await questionary.select(
        "Which day are you training?", choices=choices, style=custom_style
    ).ask_async()
    return FREESTYLE if choice is None else choice


async def _log_set(session: WorkoutSession, names: dict[int, str]) -> None:
    exercise_id = await questionary.select(
        "Exercise:",
        choices=[
            questionary.Choice(names.get(ex_id, f"#{ex_id}"), ex_id)
            for ex_id in dict.fromkeys(session.exercise_ids)
        ],
        style=custom_style,
    ).ask_async()
    if exercise_id is None:
        return

    sets = session.sets_for(exercise_id)
    set_number = await questionary.select(
        "Set:",
        choices=[questionary.Choice(str(log.set_number), log.set_number) for log in sets],
        style=custom_style,
    ).ask_async()
    if set_number is None:
        return

    for field_name in ("reps", "weight"):
        value = await questionary.text(
            f"{field_name.capitalize()} (blank to clear):", style=custom_style
        ).ask_async()
        if value is None:
            return
        try:
            session.update_log(exercise_id, set_number, field_name, value)
        except ValidationError as e:
            echo_error(str(e))


async def _add_exercise(session: WorkoutSession, library: list) -> None:
    exercise_id = await questionary.select(
        "Add which exercise?",
        choices=[questionary.Choice(f"{ex.name} ({ex.category})", ex.id) for ex in library],
        style=custom_style,
    ).ask_async()
    if exercise_id is not None:
        session.add_exercise(exercise_id)


@click.group()
@click.pass_context
def workout(ctx):
    """Run and review workouts."""
    ensure_initialized(ctx)


@workout.command()
@click.option("--program", "program_id", type=int, help="Program to follow (default: current)")
@click.option("--day", "day_name", help="Program day to follow, or 'freestyle'")
@click.option("--freestyle", is_flag=True, help="Train without a program")
@click.pass_context
@async_command
async def start(ctx: click.Context, program_id: int | None, day_name: str | None, freestyle: bool):
    """Start an interactive workout session.

    Sets are kept in memory while you log them and saved together when
    you finish. Quitting without finishing discards them.
    """
    state = get_state(ctx)
    identity = state.identity
    service = SessionService(state.db_path)

    program = None
    if not freestyle:
        if program_id is not None:
            program = await ProgramService(state.db_path).get_program(identity, program_id)
            if program is None:
                echo_error(f"Program ID {program_id} not found")
                ctx.exit(1)
        else:
            program = await ScheduleService(state.db_path).current_program(identity)

    workout_row = await service.start_workout(identity, program.id if program else None)
    session = await service.open_session(identity, workout_row.id)

    if program is not None:
        days = await ProgramDayRepository(state.db_path).list_for_program(identity.user_id, program.id)
        choice = await _choose_day(days, day_name)
        await service.select_day(identity, session, choice)
        echo_info(f"{program.name}: {session.day.name if session.day else 'freestyle'}")
    else:
        echo_info("Freestyle workout")

    library = await ExerciseLibrary(state.db_path).list_exercises(identity)
    names = {ex.id: ex.name for ex in library}

    while True:
        hints = await service.last_performance(identity, session.exercise_ids)
        click.echo()
        if session.exercise_ids:
            click.echo(render_session(session, names, hints))
        else:
            echo_info("No exercises yet")
        click.echo()

        choices = [
            questionary.Choice("Log a set", "log"),
            questionary.Choice("Add a set", "add_set"),
            questionary.Choice("Add an exercise", "add_exercise"),
            questionary.Choice("Finish workout", "finish"),
            questionary.Choice("Quit without saving", "quit"),
        ]
        if session.logs_saved:
            choices = [c for c in choices if c.value in ("finish", "quit")]
        elif not session.exercise_ids:
            choices = [c for c in choices if c.value not in ("log", "add_set")]
        action = await questionary.select(
            "What next?", choices=choices, style=custom_style
        ).ask_async()

        if action in (None, "quit"):
            if session.has_unsaved_changes and not click.confirm(
                "Logged sets will be lost. Quit anyway?"
            ):
                continue
            if session.logs_saved:
                echo_warning(f"Workout {workout_row.id} left in progress; its sets are saved")
            else:
                echo_warning(f"Workout {workout_row.id} left in progress; nothing was saved")
            return

        if action == "log":
            await _log_set(session, names)
        elif action == "add_set":
            exercise_id = await questionary.select(
                "Add a set to:",
                choices=[
                    questionary.Choice(names.get(ex_id, f"#{ex_id}"), ex_id)
                    for ex_id in dict.fromkeys(session.exercise_ids)
                ],
                style=custom_style,
            ).ask_async()
            if exercise_id is not None:
                session.add_set(exercise_id)
        elif action == "add_exercise":
            await _add_exercise(session, library)
        elif action == "finish":
            try:
                await service.complete(identity, session)
            except SessionCompletionError as e:
                echo_error(str(e))
                if e.logs_saved:
                    echo_warning("Your sets are saved; finishing again only updates the status")
                continue
            echo_success(f"Workout complete: {len(session.logs)} sets saved")
            return


@workout.command()
@click.option("--limit", "-n", default=10, type=int, help="Number of workouts to show")
@click.pass_context
@async_command
async def history(ctx: click.Context, limit: int):
    """List recently completed workouts."""
    state = get_state(ctx)
    workouts = await ProgressService(state.db_path).recent_history(state.identity, limit=limit)

    if not workouts:
        echo_info("No completed workouts yet")
        return

    rows = [
        [
            str(w.id),
            w.started_at.strftime("%Y-%m-%d %H:%M") if w.started_at else "",
            w.ended_at.strftime("%H:%M") if w.ended_at else "",
            w.program_name or "freestyle",
        ]
        for w in workouts
    ]
    click.echo(format_table(["ID", "Started", "Finished", "Program"], rows))
