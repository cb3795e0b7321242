"""Shared CLI utilities."""

import asyncio
from dataclasses import dataclass
from functools import wraps
from pathlib import Path

import click

from ..errors import LiftLogError
from ..models.user_profile import Identity


@dataclass
class CliState:
    """Objects resolved once by the root command."""

    identity: Identity
    db_path: Path
    verbose: bool = False


def async_command(f):
    """Decorator to run async Click commands.

    liftlog errors are reported as ``[ERROR]`` lines with exit code 1.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except LiftLogError as e:
            echo_error(str(e))
            raise click.exceptions.Exit(1) from e

    return wrapper


def get_state(ctx: click.Context) -> CliState:
    """State set up by the ``liftlog`` group."""
    return ctx.find_object(CliState)


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_state(ctx).db_path
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Database not initialized. Run 'liftlog init' first."
        )
        ctx.exit(1)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_number(value: float | None) -> str:
    """Render reps/weight without a trailing ``.0``."""
    if value is None:
        return "-"
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = [
        "".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers)),
        "".join("-" * w + " " * padding for w in widths),
    ]
    for row in rows:
        lines.append("".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)))

    return "\n".join(lines)
