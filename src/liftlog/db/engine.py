"""Database engine setup and initialization."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from ..config import load_settings
from ..errors import GatewayError

logger = logging.getLogger(__name__)


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    settings = load_settings()
    if data_dir is None:
        data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / settings.db_name


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a gateway connection.

    Rows come back as ``aiosqlite.Row`` and foreign keys are enforced.
    Any sqlite failure surfaces as GatewayError; uncommitted writes are
    discarded when the connection closes.
    """
    try:
        async with aiosqlite.connect(db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys = ON")
            yield db
    except aiosqlite.Error as e:
        logger.error("Gateway request failed: %s", e)
        raise GatewayError(str(e)) from e


async def _column_names(db: aiosqlite.Connection, table: str) -> set[str]:
    cursor = await db.execute(f"PRAGMA table_info({table})")
    columns = await cursor.fetchall()
    return {col[1] for col in columns}


async def _run_migrations(db: aiosqlite.Connection) -> None:
    """Run database migrations for schema updates."""
    # Programs gained an active flag after the first release
    if "is_active" not in await _column_names(db, "programs"):
        await db.execute("ALTER TABLE programs ADD COLUMN is_active INTEGER DEFAULT 0")

    # Workouts remember which program day was chosen
    if "program_day_id" not in await _column_names(db, "workouts"):
        await db.execute(
            "ALTER TABLE workouts ADD COLUMN program_day_id INTEGER "
            "REFERENCES program_days(id) ON DELETE SET NULL"
        )

    # Display preferences on profiles
    profile_columns = await _column_names(db, "profiles")
    if "units" not in profile_columns:
        await db.execute("ALTER TABLE profiles ADD COLUMN units TEXT DEFAULT 'kg'")
    if "week_start_day" not in profile_columns:
        await db.execute("ALTER TABLE profiles ADD COLUMN week_start_day TEXT DEFAULT 'monday'")

    await db.commit()


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                email TEXT,
                units TEXT DEFAULT 'kg',
                week_start_day TEXT DEFAULT 'monday',
                updated_at TEXT
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                category TEXT NOT NULL,
                description TEXT,
                is_custom INTEGER DEFAULT 0,
                owner_id TEXT
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS programs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id TEXT NOT NULL,
                name TEXT NOT NULL,
                description TEXT,
                is_active INTEGER DEFAULT 0,
                created_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS program_days (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                program_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                "order" INTEGER NOT NULL,
                FOREIGN KEY (program_id) REFERENCES programs(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS program_exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                day_id INTEGER NOT NULL,
                exercise_id INTEGER NOT NULL,
                sets INTEGER,
                reps TEXT,
                "order" INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (day_id) REFERENCES program_days(id) ON DELETE CASCADE,
                FOREIGN KEY (exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id TEXT NOT NULL,
                program_id INTEGER,
                program_day_id INTEGER,
                status TEXT NOT NULL DEFAULT 'in_progress',
                started_at TEXT NOT NULL,
                ended_at TEXT,
                FOREIGN KEY (program_id) REFERENCES programs(id) ON DELETE SET NULL,
                FOREIGN KEY (program_day_id) REFERENCES program_days(id) ON DELETE SET NULL
            )
        """)

        # No uniqueness on (workout_id, exercise_id, set_number)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                workout_id INTEGER NOT NULL,
                exercise_id INTEGER NOT NULL,
                set_number INTEGER NOT NULL,
                reps REAL NOT NULL DEFAULT 0,
                weight REAL NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                FOREIGN KEY (workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
                FOREIGN KEY (exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_programs_owner
            ON programs(owner_id, created_at)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_program_days_program
            ON program_days(program_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_program_exercises_day
            ON program_exercises(day_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_owner
            ON workouts(owner_id, status)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_logs_exercise
            ON workout_logs(exercise_id, created_at)
        """)

        await db.commit()

        # Run migrations for existing databases
        await _run_migrations(db)

    logger.info("Database ready at %s", db_path)


async def seed_exercises(db_path: Path | None = None) -> int:
    """Seed the global exercise library.

    Entries already present (same name, not custom) are skipped.

    Returns:
        Number of exercises added
    """
    from ..models.exercises import DEFAULT_EXERCISES

    if db_path is None:
        db_path = get_db_path()

    added = 0
    async with connect(db_path) as db:
        for exercise in DEFAULT_EXERCISES:
            cursor = await db.execute(
                "SELECT id FROM exercises WHERE name = ? AND is_custom = 0",
                (exercise.name,),
            )
            if await cursor.fetchone() is not None:
                continue
            await db.execute(
                """
                INSERT INTO exercises (name, category, description, is_custom, owner_id)
                VALUES (?, ?, ?, 0, NULL)
                """,
                (exercise.name, exercise.category, exercise.description),
            )
            added += 1

        await db.commit()

    logger.info("Seeded %d exercises", added)
    return added
