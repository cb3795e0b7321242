"""CLI entry point for liftlog."""

import click

from . import __version__
from .commands import exercises, init, programs, progress, serve, settings, today, workout
from .commands.base import CliState
from .config import configure_logging, load_settings
from .db import get_db_path
from .models.user_profile import Identity


@click.group()
@click.version_option(version=__version__, prog_name="liftlog")
@click.option("--user", "-u", default=None, help="User ID to act as (default: $LIFTLOG_USER)")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def main(ctx: click.Context, user: str | None, verbose: bool):
    """liftlog: weekly workout programs, live sessions and strength progress.

    Example usage:

        # Initialize the database
        liftlog init

        # Plan a week and make it active
        liftlog programs create "Full Body" --plan "Monday=Squat:5x5" --activate

        # See what is on today, then train
        liftlog today
        liftlog workout start
    """
    settings_ = load_settings()
    configure_logging("DEBUG" if verbose else settings_.log_level)
    ctx.obj = CliState(
        identity=Identity(user_id=user or settings_.default_user),
        db_path=get_db_path(),
        verbose=verbose,
    )


# Register commands
main.add_command(init)
main.add_command(today)
main.add_command(programs)
main.add_command(exercises)
main.add_command(workout)
main.add_command(progress)
main.add_command(settings)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
