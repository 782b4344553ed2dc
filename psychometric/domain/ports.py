from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from .models import AssessmentSession, CompositeResult, SectionResult, SessionStatus

Synthesizer = Callable[[AssessmentSession], CompositeResult]


class AssessmentStore(Protocol):
    """
    Persistence port for assessment sessions.

    Every method returns fresh snapshots. Writes that depend on the session
    status re-check it inside the same atomic unit as the write.
    """

    def create(self, owner_id: str, started_at: datetime) -> AssessmentSession: ...

    def get(self, session_id: int) -> AssessmentSession | None: ...

    def find_active(self, owner_id: str) -> AssessmentSession | None: ...

    def latest(self, owner_id: str) -> AssessmentSession | None: ...

    def list_completed(self, owner_id: str, limit: int) -> list[AssessmentSession]:
        """Completed sessions of one owner, newest completion first."""
        ...

    def list_sessions(self, status: SessionStatus | None = None) -> list[AssessmentSession]: ...

    def save_section(self, session_id: int, result: SectionResult) -> AssessmentSession:
        """
        Store (or replace) one section result while the session is in progress.

        Raises:
            SessionNotFoundError: If the session does not exist
            StateError: If the session is no longer in progress
        """
        ...

    def complete(
        self, session_id: int, synthesize: Synthesizer, completed_at: datetime
    ) -> AssessmentSession:
        """
        Atomically move an in-progress session to completed.

        ``synthesize`` runs only for the caller that wins the transition.

        Raises:
            SessionNotFoundError: If the session does not exist
            ConsistencyError: If another caller already completed it
            StateError: If the session was abandoned
        """
        ...

    def mark_abandoned(self, session_id: int) -> AssessmentSession: ...

    def delete_in_progress(self, session_id: int) -> bool:
        """Delete the session only while it is in progress; False otherwise."""
        ...
