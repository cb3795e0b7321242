"""User settings commands."""

import click

from ..db.repositories import ProfileRepository
from ..models.user_profile import Profile, Units, WeekStart
from .base import async_command, echo_info, echo_success, ensure_initialized, get_state


@click.group()
@click.pass_context
def settings(ctx):
    """View or change display settings."""
    ensure_initialized(ctx)


@settings.command()
@click.pass_context
@async_command
async def show(ctx: click.Context):
    """Show current settings."""
    state = get_state(ctx)
    profile = await ProfileRepository(state.db_path).get(state.identity.user_id)
    if profile is None:
        echo_info("No saved settings, using defaults")
        profile = Profile.default(state.identity)

    click.echo(f"User:       {profile.id}")
    click.echo(f"Units:      {profile.units.value}")
    click.echo(f"Week start: {profile.week_start.value}")


@settings.command(name="set")
@click.option("--units", type=click.Choice([u.value for u in Units]), help="Weight units")
@click.option(
    "--week-start",
    type=click.Choice([w.value for w in WeekStart]),
    help="First day of the displayed week",
)
@click.pass_context
@async_command
async def set_settings(ctx: click.Context, units: str | None, week_start: str | None):
    """Change units and/or week start."""
    if units is None and week_start is None:
        echo_info("Nothing to change. Pass --units and/or --week-start")
        return

    state = get_state(ctx)
    repo = ProfileRepository(state.db_path)
    profile = await repo.get(state.identity.user_id) or Profile.default(state.identity)
    if units:
        profile.units = Units(units)
    if week_start:
        profile.week_start = WeekStart(week_start)

    await repo.upsert(profile)
    echo_success(f"Saved: units={profile.units.value}, week start={profile.week_start.value}")
