"""
In-process ``AssessmentStore``.

Used by tests and single-process tools. Each session record has its own
lock, so status checks and writes on one session are atomic while
different sessions never contend.
"""

from __future__ import annotations

import itertools
import threading
from datetime import datetime

from ..domain.catalog import CATALOG_VERSION
from ..domain.models import AssessmentSession, SectionResult, SessionStatus
from ..domain.ports import Synthesizer
from .exceptions import ConsistencyError, SessionNotFoundError, StateError
from .logging import get_logger

logger = get_logger(__name__)


class InMemoryAssessmentStore:
    def __init__(self):
        self._sessions: dict[int, AssessmentSession] = {}
        self._locks: dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._ids = itertools.count(1)

    def _lock_for(self, session_id: int) -> threading.Lock:
        with self._registry_lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(session_id)
            return self._locks[session_id]

    def _current(self, session_id: int) -> AssessmentSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def create(self, owner_id: str, started_at: datetime) -> AssessmentSession:
        with self._registry_lock:
            session = AssessmentSession(
                id=next(self._ids),
                owner_id=owner_id,
                status=SessionStatus.IN_PROGRESS,
                started_at=started_at,
                catalog_version=CATALOG_VERSION,
            )
            self._sessions[session.id] = session
            self._locks[session.id] = threading.Lock()
        logger.debug("Created assessment %s in memory", session.id)
        return session

    def get(self, session_id: int) -> AssessmentSession | None:
        return self._sessions.get(session_id)

    def _owned_by(self, owner_id: str) -> list[AssessmentSession]:
        with self._registry_lock:
            return [s for s in self._sessions.values() if s.owner_id == owner_id]

    def find_active(self, owner_id: str) -> AssessmentSession | None:
        active = [s for s in self._owned_by(owner_id) if s.status is SessionStatus.IN_PROGRESS]
        return max(active, key=lambda s: s.id, default=None)

    def latest(self, owner_id: str) -> AssessmentSession | None:
        return max(self._owned_by(owner_id), key=lambda s: s.id, default=None)

    def list_completed(self, owner_id: str, limit: int) -> list[AssessmentSession]:
        completed = [s for s in self._owned_by(owner_id) if s.status is SessionStatus.COMPLETED]
        completed.sort(key=lambda s: (s.completed_at, s.id), reverse=True)
        return completed[:limit]

    def list_sessions(self, status: SessionStatus | None = None) -> list[AssessmentSession]:
        with self._registry_lock:
            sessions = list(self._sessions.values())
        return [s for s in sessions if status is None or s.status is status]

    def save_section(self, session_id: int, result: SectionResult) -> AssessmentSession:
        with self._lock_for(session_id):
            session = self._current(session_id)
            if session.status is not SessionStatus.IN_PROGRESS:
                raise StateError(
                    f"Assessment {session_id} is {session.status.value}",
                    session_id=session_id,
                    status=session.status.value,
                    operation="save_section",
                )
            updated = session.with_section(result)
            self._sessions[session_id] = updated
            return updated

    def complete(
        self, session_id: int, synthesize: Synthesizer, completed_at: datetime
    ) -> AssessmentSession:
        with self._lock_for(session_id):
            session = self._current(session_id)
            if session.status is SessionStatus.COMPLETED:
                raise ConsistencyError(session_id)
            if session.status is not SessionStatus.IN_PROGRESS:
                raise StateError(
                    f"Assessment {session_id} is {session.status.value}",
                    session_id=session_id,
                    status=session.status.value,
                    operation="complete",
                )
            updated = session.completed_with(synthesize(session), completed_at)
            self._sessions[session_id] = updated
            return updated

    def mark_abandoned(self, session_id: int) -> AssessmentSession:
        with self._lock_for(session_id):
            session = self._current(session_id)
            if session.status is not SessionStatus.IN_PROGRESS:
                raise StateError(
                    f"Assessment {session_id} is {session.status.value}",
                    session_id=session_id,
                    status=session.status.value,
                    operation="abandon",
                )
            updated = AssessmentSession(
                id=session.id,
                owner_id=session.owner_id,
                status=SessionStatus.ABANDONED,
                started_at=session.started_at,
                results=session.results,
            )
            self._sessions[session_id] = updated
            return updated

    def delete_in_progress(self, session_id: int) -> bool:
        try:
            lock = self._lock_for(session_id)
        except SessionNotFoundError:
            return False
        with lock:
            session = self._sessions.get(session_id)
            if session is None or session.status is not SessionStatus.IN_PROGRESS:
                return False
            with self._registry_lock:
                del self._sessions[session_id]
                del self._locks[session_id]
        logger.debug("Deleted assessment %s from memory", session_id)
        return True
