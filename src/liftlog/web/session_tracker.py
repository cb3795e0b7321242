"""Tracking of open workout sessions between requests."""

import asyncio
import itertools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..services.session import SessionState, WorkoutSession


@dataclass
class TrackedSession:
    """A workout session held in memory for its owner."""

    owner_id: str
    session: WorkoutSession
    opened_at: datetime = field(default_factory=datetime.now)
    last_used: int = 0
    finished_at: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.session.state == SessionState.COMPLETED


class SessionTracker:
    """Keeps unsaved workout sessions until they are finished.

    Set data lives only here until the workout is finished, so a server
    restart drops whatever was not finished yet. Both finished and
    unfinished sessions are bounded; the least recently used ones are
    dropped first and can be reopened from storage.
    """

    def __init__(self, max_finished_sessions: int = 20, max_open_sessions: int = 200):
        self._sessions: dict[tuple[str, int], TrackedSession] = {}
        self._max_finished = max_finished_sessions
        self._max_open = max_open_sessions
        self._lock = asyncio.Lock()
        self._uses = itertools.count(1)

    async def put(self, owner_id: str, session: WorkoutSession) -> TrackedSession:
        """Track a session, replacing any earlier one for the same workout."""
        async with self._lock:
            return self._put(owner_id, session)

    async def get_or_open(
        self,
        owner_id: str,
        workout_id: int,
        opener: Callable[[], Awaitable[WorkoutSession | None]],
    ) -> WorkoutSession | None:
        """Get the tracked session, opening and tracking it if needed.

        Runs under the tracker lock so concurrent first requests for a
        workout share one session object.
        """
        async with self._lock:
            tracked = self._touch(owner_id, workout_id)
            if tracked:
                return tracked.session
            session = await opener()
            if session is None:
                return None
            return self._put(owner_id, session).session

    async def mark_finished(self, owner_id: str, workout_id: int):
        """Record when a session was finished."""
        async with self._lock:
            tracked = self._sessions.get((owner_id, workout_id))
            if tracked:
                tracked.finished_at = datetime.now()
            self._cleanup()

    def _touch(self, owner_id: str, workout_id: int) -> TrackedSession | None:
        tracked = self._sessions.get((owner_id, workout_id))
        if tracked:
            tracked.last_used = next(self._uses)
        return tracked

    def _put(self, owner_id: str, session: WorkoutSession) -> TrackedSession:
        key = (owner_id, session.workout.id)
        self._sessions.pop(key, None)
        tracked = TrackedSession(owner_id=owner_id, session=session, last_used=next(self._uses))
        self._sessions[key] = tracked
        self._cleanup()
        return tracked

    def _cleanup(self):
        """Drop the oldest sessions when over either limit."""
        finished = [(key, t) for key, t in self._sessions.items() if t.is_finished]
        finished.sort(key=lambda item: item[1].finished_at or datetime.min)
        self._evict(finished, self._max_finished)

        # a finish in flight is never dropped
        unfinished = [
            (key, t)
            for key, t in self._sessions.items()
            if not t.is_finished and t.session.state != SessionState.COMPLETING
        ]
        unfinished.sort(key=lambda item: item[1].last_used)
        self._evict(unfinished, self._max_open)

    def _evict(self, entries: list, limit: int):
        for key, _ in entries[: max(len(entries) - limit, 0)]:
            del self._sessions[key]
