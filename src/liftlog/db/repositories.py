"""Data access layer for liftlog.

Every owner-scoped query carries an ``owner_id`` predicate. Child rows
(program days, planned exercises, set logs) are scoped through a join to
the row that owns them.
"""

import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..errors import GatewayError
from ..models.exercises import Exercise
from ..models.program import Program, ProgramDay, ProgramExercise
from ..models.user_profile import Profile, Units, WeekStart
from ..models.workout import Workout, WorkoutLog, WorkoutStatus
from .engine import connect, get_db_path

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().isoformat()


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class ProfileRepository:
    """Repository for user preferences."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, owner_id: str) -> Profile | None:
        """Get a profile by owner ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM profiles WHERE id = ?", (owner_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_profile(row)

    async def upsert(self, profile: Profile) -> None:
        """Create or update a profile."""
        profile.updated_at = datetime.now()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO profiles (id, email, units, week_start_day, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email = COALESCE(excluded.email, profiles.email),
                    units = excluded.units,
                    week_start_day = excluded.week_start_day,
                    updated_at = excluded.updated_at
                """,
                (
                    profile.id,
                    profile.email,
                    profile.units.value,
                    profile.week_start.value,
                    profile.updated_at.isoformat(),
                ),
            )
            await db.commit()

    def _row_to_profile(self, row: aiosqlite.Row) -> Profile:
        """Convert a database row to a Profile."""
        return Profile(
            id=row["id"],
            email=row["email"],
            units=Units(row["units"] or "kg"),
            week_start=WeekStart(row["week_start_day"] or "monday"),
            updated_at=_parse_ts(row["updated_at"]),
        )


class ProgramRepository:
    """Repository for programs and their weekly structure."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, program: Program, days: list[ProgramDay] | None = None) -> int:
        """Create a program together with its days and planned exercises.

        Everything is written in one transaction.
        """
        created_at = program.created_at or datetime.now()
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO programs (owner_id, name, description, is_active, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    program.owner_id,
                    program.name,
                    program.description,
                    int(program.is_active),
                    created_at.isoformat(),
                ),
            )
            program_id = cursor.lastrowid
            await self._insert_days(db, program_id, days or [])
            await db.commit()

        program.id = program_id
        program.created_at = created_at
        logger.info("Created program %s for %s", program_id, program.owner_id)
        return program_id

    async def get(self, owner_id: str, program_id: int) -> Program | None:
        """Get a program by ID (without days)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM programs WHERE id = ? AND owner_id = ?",
                (program_id, owner_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_program(row)

    async def list_for_owner(self, owner_id: str) -> list[Program]:
        """List programs, active first, then newest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM programs WHERE owner_id = ?
                ORDER BY is_active DESC, created_at DESC
                """,
                (owner_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_program(row) for row in rows]

    async def get_active(self, owner_id: str) -> Program | None:
        """Get the program flagged active, if any."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM programs WHERE owner_id = ? AND is_active = 1 LIMIT 1",
                (owner_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_program(row) if row else None

    async def most_recent(self, owner_id: str) -> Program | None:
        """Get the most recently created program.

        Programs created at the same instant come back in whatever order
        sqlite returns them.
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM programs WHERE owner_id = ? ORDER BY created_at DESC LIMIT 1",
                (owner_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_program(row) if row else None

    async def update(self, program: Program) -> bool:
        """Update name and description of an existing program."""
        if program.id is None:
            raise ValueError("Program must have an ID to update")

        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE programs SET name = ?, description = ? WHERE id = ? AND owner_id = ?",
                (program.name, program.description, program.id, program.owner_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def replace_days(self, owner_id: str, program_id: int, days: list[ProgramDay]) -> None:
        """Delete all days of a program and insert new ones."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT id FROM programs WHERE id = ? AND owner_id = ?",
                (program_id, owner_id),
            )
            if await cursor.fetchone() is None:
                raise GatewayError(f"Program {program_id} is not accessible")
            await db.execute("DELETE FROM program_days WHERE program_id = ?", (program_id,))
            await self._insert_days(db, program_id, days)
            await db.commit()

    async def set_active(self, owner_id: str, program_id: int) -> bool:
        """Make one program active and clear the flag on all others.

        A single conditional UPDATE, so there is never a moment with zero
        or two active programs. Nothing changes when the target is not
        one of the owner's programs.
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE programs
                SET is_active = CASE WHEN id = ? THEN 1 ELSE 0 END
                WHERE owner_id = ?
                  AND EXISTS (SELECT 1 FROM programs WHERE id = ? AND owner_id = ?)
                """,
                (program_id, owner_id, program_id, owner_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def delete(self, owner_id: str, program_id: int) -> bool:
        """Delete a program (days and planned exercises cascade)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM programs WHERE id = ? AND owner_id = ?",
                (program_id, owner_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def _insert_days(
        self, db: aiosqlite.Connection, program_id: int, days: list[ProgramDay]
    ) -> None:
        for day in days:
            cursor = await db.execute(
                'INSERT INTO program_days (program_id, name, "order") VALUES (?, ?, ?)',
                (program_id, day.name, day.order),
            )
            day.id = cursor.lastrowid
            day.program_id = program_id
            if day.exercises:
                await db.executemany(
                    """
                    INSERT INTO program_exercises (day_id, exercise_id, sets, reps, "order")
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [
                        (day.id, ex.exercise_id, ex.sets, ex.reps, ex.order)
                        for ex in day.exercises
                    ],
                )
                for ex in day.exercises:
                    ex.day_id = day.id

    def _row_to_program(self, row: aiosqlite.Row) -> Program:
        """Convert a database row to a Program."""
        return Program(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_at=_parse_ts(row["created_at"]),
        )


class ProgramDayRepository:
    """Repository for program days and their planned exercises."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_for_program(self, owner_id: str, program_id: int) -> list[ProgramDay]:
        """List a program's days ordered by stored order, with exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT d.* FROM program_days d
                JOIN programs p ON p.id = d.program_id
                WHERE d.program_id = ? AND p.owner_id = ?
                ORDER BY d."order", d.id
                """,
                (program_id, owner_id),
            )
            rows = await cursor.fetchall()
            days = [self._row_to_day(row) for row in rows]
            await self._attach_exercises(db, days)
            return days

    async def get(self, owner_id: str, day_id: int) -> ProgramDay | None:
        """Get a single day with its exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT d.* FROM program_days d
                JOIN programs p ON p.id = d.program_id
                WHERE d.id = ? AND p.owner_id = ?
                """,
                (day_id, owner_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            day = self._row_to_day(row)
            await self._attach_exercises(db, [day])
            return day

    async def _attach_exercises(self, db: aiosqlite.Connection, days: list[ProgramDay]) -> None:
        if not days:
            return
        by_id = {day.id: day for day in days}
        placeholders = ", ".join("?" for _ in by_id)
        cursor = await db.execute(
            f"""
            SELECT pe.*, e.name AS exercise_name FROM program_exercises pe
            JOIN exercises e ON e.id = pe.exercise_id
            WHERE pe.day_id IN ({placeholders})
            ORDER BY pe."order", pe.id
            """,
            tuple(by_id),
        )
        for row in await cursor.fetchall():
            by_id[row["day_id"]].exercises.append(
                ProgramExercise(
                    id=row["id"],
                    day_id=row["day_id"],
                    exercise_id=row["exercise_id"],
                    exercise_name=row["exercise_name"],
                    sets=row["sets"],
                    reps=row["reps"] or "",
                    order=row["order"],
                )
            )

    def _row_to_day(self, row: aiosqlite.Row) -> ProgramDay:
        """Convert a database row to a ProgramDay."""
        return ProgramDay(
            id=row["id"],
            program_id=row["program_id"],
            name=row["name"],
            order=row["order"],
        )


class ExerciseRepository:
    """Repository for the exercise library."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_visible(self, owner_id: str) -> list[Exercise]:
        """List global exercises plus the owner's custom ones."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM exercises
                WHERE owner_id IS NULL OR owner_id = ?
                ORDER BY name COLLATE NOCASE
                """,
                (owner_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def search(self, owner_id: str, query: str) -> list[Exercise]:
        """Search visible exercises by name or category."""
        pattern = f"%{query.strip().lower()}%"
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM exercises
                WHERE (owner_id IS NULL OR owner_id = ?)
                  AND (lower(name) LIKE ? OR lower(category) LIKE ?)
                ORDER BY name COLLATE NOCASE
                """,
                (owner_id, pattern, pattern),
            )
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def get(self, owner_id: str, exercise_id: int) -> Exercise | None:
        """Get a visible exercise by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE id = ? AND (owner_id IS NULL OR owner_id = ?)",
                (exercise_id, owner_id),
            )
            row = await cursor.fetchone()
            return self._row_to_exercise(row) if row else None

    async def get_by_name(self, owner_id: str, name: str) -> Exercise | None:
        """Get a visible exercise by name (case-insensitive)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM exercises
                WHERE lower(name) = lower(?) AND (owner_id IS NULL OR owner_id = ?)
                ORDER BY is_custom DESC LIMIT 1
                """,
                (name.strip(), owner_id),
            )
            row = await cursor.fetchone()
            return self._row_to_exercise(row) if row else None

    async def add_custom(self, exercise: Exercise) -> int:
        """Add a custom exercise owned by ``exercise.owner_id``."""
        if exercise.owner_id is None:
            raise ValueError("Custom exercises need an owner")

        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO exercises (name, category, description, is_custom, owner_id)
                VALUES (?, ?, ?, 1, ?)
                """,
                (exercise.name, exercise.category, exercise.description, exercise.owner_id),
            )
            await db.commit()
            exercise.id = cursor.lastrowid
            exercise.is_custom = True
            return exercise.id

    async def update_custom(self, exercise: Exercise) -> bool:
        """Update one of the owner's custom exercises."""
        if exercise.id is None:
            raise ValueError("Exercise must have an ID to update")

        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE exercises SET name = ?, category = ?, description = ?
                WHERE id = ? AND owner_id = ? AND is_custom = 1
                """,
                (
                    exercise.name,
                    exercise.category,
                    exercise.description,
                    exercise.id,
                    exercise.owner_id,
                ),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def delete_custom(self, owner_id: str, exercise_id: int) -> bool:
        """Delete one of the owner's custom exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM exercises WHERE id = ? AND owner_id = ? AND is_custom = 1",
                (exercise_id, owner_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    def _row_to_exercise(self, row: aiosqlite.Row) -> Exercise:
        """Convert a database row to an Exercise."""
        return Exercise(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            description=row["description"],
            is_custom=bool(row["is_custom"]),
            owner_id=row["owner_id"],
        )


class WorkoutRepository:
    """Repository for workouts."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, workout: Workout) -> int:
        """Create a new workout."""
        started_at = workout.started_at or datetime.now()
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO workouts (owner_id, program_id, program_day_id, status, started_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    workout.owner_id,
                    workout.program_id,
                    workout.program_day_id,
                    workout.status.value,
                    started_at.isoformat(),
                ),
            )
            await db.commit()
            workout.id = cursor.lastrowid
            workout.started_at = started_at
            return workout.id

    async def get(self, owner_id: str, workout_id: int) -> Workout | None:
        """Get a workout by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT w.*, p.name AS program_name FROM workouts w
                LEFT JOIN programs p ON p.id = w.program_id
                WHERE w.id = ? AND w.owner_id = ?
                """,
                (workout_id, owner_id),
            )
            row = await cursor.fetchone()
            return self._row_to_workout(row) if row else None

    async def set_program_day(self, owner_id: str, workout_id: int, day_id: int | None) -> bool:
        """Record which program day a workout follows."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE workouts SET program_day_id = ? WHERE id = ? AND owner_id = ?",
                (day_id, workout_id, owner_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def mark_completed(self, owner_id: str, workout_id: int, ended_at: datetime) -> bool:
        """Move an in-progress workout to completed.

        Returns False if the workout is missing or already completed.
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE workouts SET status = ?, ended_at = ?
                WHERE id = ? AND owner_id = ? AND status = ?
                """,
                (
                    WorkoutStatus.COMPLETED.value,
                    ended_at.isoformat(),
                    workout_id,
                    owner_id,
                    WorkoutStatus.IN_PROGRESS.value,
                ),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def count_completed(
        self,
        owner_id: str,
        ended_after: datetime | None = None,
        ended_before: datetime | None = None,
    ) -> int:
        """Count completed workouts, optionally within an ``ended_at`` window."""
        query = "SELECT COUNT(*) FROM workouts WHERE owner_id = ? AND status = ?"
        params: list = [owner_id, WorkoutStatus.COMPLETED.value]
        if ended_after is not None:
            query += " AND ended_at >= ?"
            params.append(ended_after.isoformat())
        if ended_before is not None:
            query += " AND ended_at <= ?"
            params.append(ended_before.isoformat())

        async with connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            row = await cursor.fetchone()
            return row[0]

    async def list_completed(self, owner_id: str, limit: int = 10) -> list[Workout]:
        """List completed workouts, most recently finished first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT w.*, p.name AS program_name FROM workouts w
                LEFT JOIN programs p ON p.id = w.program_id
                WHERE w.owner_id = ? AND w.status = ?
                ORDER BY w.ended_at DESC
                LIMIT ?
                """,
                (owner_id, WorkoutStatus.COMPLETED.value, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_workout(row) for row in rows]

    def _row_to_workout(self, row: aiosqlite.Row) -> Workout:
        """Convert a database row to a Workout."""
        return Workout(
            id=row["id"],
            owner_id=row["owner_id"],
            program_id=row["program_id"],
            program_day_id=row["program_day_id"],
            program_name=row["program_name"] if "program_name" in row.keys() else None,
            status=WorkoutStatus(row["status"]),
            started_at=_parse_ts(row["started_at"]),
            ended_at=_parse_ts(row["ended_at"]),
        )


class WorkoutLogRepository:
    """Repository for recorded sets."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def insert_many(self, owner_id: str, workout_id: int, logs: list[WorkoutLog]) -> int:
        """Insert all logs of a workout in one batch write.

        Raises:
            GatewayError: If the workout does not belong to the owner or
                the write fails. Nothing is stored in that case.
        """
        created_at = _now()
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT id FROM workouts WHERE id = ? AND owner_id = ?",
                (workout_id, owner_id),
            )
            if await cursor.fetchone() is None:
                raise GatewayError(f"Workout {workout_id} is not accessible")

            await db.executemany(
                """
                INSERT INTO workout_logs
                (workout_id, exercise_id, set_number, reps, weight, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (workout_id, log.exercise_id, log.set_number, log.reps, log.weight, created_at)
                    for log in logs
                ],
            )
            await db.commit()

        logger.debug("Stored %d logs for workout %s", len(logs), workout_id)
        return len(logs)

    async def list_for_workout(self, owner_id: str, workout_id: int) -> list[WorkoutLog]:
        """List stored logs of one workout."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT l.* FROM workout_logs l
                JOIN workouts w ON w.id = l.workout_id
                WHERE l.workout_id = ? AND w.owner_id = ?
                ORDER BY l.id
                """,
                (workout_id, owner_id),
            )
            rows = await cursor.fetchall()
            return [self._row_to_log(row) for row in rows]

    async def list_for_exercise(self, owner_id: str, exercise_id: int) -> list[WorkoutLog]:
        """List all of the owner's logs for an exercise, oldest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT l.* FROM workout_logs l
                JOIN workouts w ON w.id = l.workout_id
                WHERE l.exercise_id = ? AND w.owner_id = ?
                ORDER BY l.created_at ASC, l.id ASC
                """,
                (exercise_id, owner_id),
            )
            rows = await cursor.fetchall()
            return [self._row_to_log(row) for row in rows]

    async def latest_with_weight(
        self, owner_id: str, exercise_ids: list[int], limit: int = 500
    ) -> dict[int, WorkoutLog]:
        """Most recent log with a positive weight for each exercise."""
        if not exercise_ids:
            return {}

        placeholders = ", ".join("?" for _ in exercise_ids)
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT l.* FROM workout_logs l
                JOIN workouts w ON w.id = l.workout_id
                WHERE w.owner_id = ? AND l.exercise_id IN ({placeholders})
                ORDER BY l.created_at DESC, l.id DESC
                LIMIT ?
                """,
                (owner_id, *exercise_ids, limit),
            )
            rows = await cursor.fetchall()

        latest: dict[int, WorkoutLog] = {}
        for row in rows:
            if row["weight"] and row["weight"] > 0 and row["exercise_id"] not in latest:
                latest[row["exercise_id"]] = self._row_to_log(row)
        return latest

    def _row_to_log(self, row: aiosqlite.Row) -> WorkoutLog:
        """Convert a database row to a WorkoutLog."""
        return WorkoutLog(
            id=row["id"],
            workout_id=row["workout_id"],
            exercise_id=row["exercise_id"],
            set_number=row["set_number"],
            reps=row["reps"],
            weight=row["weight"],
            created_at=_parse_ts(row["created_at"]),
        )
