"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from liftlog.db import init_db, seed_exercises
from liftlog.models.user_profile import Identity


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def db_path(temp_db_path):
    """An initialized database with the exercise library seeded."""

    async def setup():
        await init_db(temp_db_path)
        await seed_exercises(temp_db_path)

    asyncio.run(setup())
    return temp_db_path


@pytest.fixture
def identity():
    return Identity(user_id="alice", email="alice@example.com")


@pytest.fixture
def other_identity():
    return Identity(user_id="bob")
