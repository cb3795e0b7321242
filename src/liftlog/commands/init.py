"""Initialize database command."""

import click

from ..db import init_db, seed_exercises
from .base import async_command, echo_info, echo_success, get_state


@click.command()
@click.pass_context
@async_command
async def init(ctx: click.Context):
    """Initialize the liftlog database.

    Creates the SQLite schema (upgrading older databases in place) and
    seeds the built-in exercise library. Safe to run more than once.
    """
    db_path = get_state(ctx).db_path

    echo_info(f"Initializing liftlog in {db_path.parent}")

    await init_db(db_path)
    echo_success("Database initialized")

    count = await seed_exercises(db_path)
    if count:
        echo_success(f"Exercise library populated ({count} exercises)")
    else:
        echo_info("Exercise library already up to date")

    click.echo()
    click.echo("Next steps:")
    click.echo('  liftlog programs create "Push Pull Legs" --plan "Monday=Bench Press:3x8-12"')
    click.echo("  liftlog today")
    click.echo("  liftlog workout start")
