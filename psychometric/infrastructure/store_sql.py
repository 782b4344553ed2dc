"""
SQLAlchemy-backed ``AssessmentStore``.

Status-dependent writes open their transaction with a conditional
``UPDATE ... WHERE status = 'in_progress'``. The row count of that statement
decides whether the write may proceed, and the statement holds the row (or,
on SQLite, the database) write lock until the transaction commits.
"""

from __future__ import annotations

from datetime import datetime

from ..domain.catalog import CATALOG_VERSION
from ..domain.models import (
    AssessmentSession,
    CompositeResult,
    SectionResult,
    SectionType,
    SessionStatus,
    score_vector_from_dict,
    thaw,
    utcnow,
)
from ..domain.ports import Synthesizer
from .exceptions import ConsistencyError, SessionNotFoundError, StateError
from .logging import get_logger
from .models import AssessmentSessionORM, SectionResultORM
from .repositories_session import SectionResultRepo, SessionRepo
from .uow import UnitOfWork

logger = get_logger(__name__)

IN_PROGRESS = SessionStatus.IN_PROGRESS.value


def _section_to_domain(row: SectionResultORM) -> SectionResult:
    section = SectionType(row.section)
    return SectionResult(
        section=section,
        raw_responses=row.raw_responses,
        scores=score_vector_from_dict(section, row.scores),
        time_spent_minutes=row.time_spent_minutes,
        completed_at=row.completed_at,
        interpretation=row.interpretation,
        recommendations=tuple(row.recommendations or ()),
    )


def to_domain(row: AssessmentSessionORM) -> AssessmentSession:
    results = {SectionType(r.section): _section_to_domain(r) for r in row.sections}
    return AssessmentSession(
        id=row.id,
        owner_id=row.owner_id,
        status=SessionStatus(row.status),
        started_at=row.started_at,
        results=results,
        completed_at=row.completed_at,
        composite=CompositeResult.from_dict(row.composite_result)
        if row.composite_result
        else None,
        catalog_version=row.catalog_version,
    )


class SqlAssessmentStore:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # ---------- Read ----------

    def get(self, session_id: int) -> AssessmentSession | None:
        with self.uow.begin("get_session") as s:
            row = SessionRepo(s).get(session_id)
            return to_domain(row) if row else None

    def find_active(self, owner_id: str) -> AssessmentSession | None:
        with self.uow.begin("find_active_session") as s:
            row = SessionRepo(s).active_for_owner(owner_id)
            return to_domain(row) if row else None

    def latest(self, owner_id: str) -> AssessmentSession | None:
        with self.uow.begin("latest_session") as s:
            row = SessionRepo(s).latest_for_owner(owner_id)
            return to_domain(row) if row else None

    def list_completed(self, owner_id: str, limit: int) -> list[AssessmentSession]:
        with self.uow.begin("list_completed_sessions") as s:
            return [to_domain(r) for r in SessionRepo(s).completed_for_owner(owner_id, limit)]

    def list_sessions(self, status: SessionStatus | None = None) -> list[AssessmentSession]:
        with self.uow.begin("list_sessions") as s:
            rows = SessionRepo(s).list_by_status(status.value if status else None)
            return [to_domain(r) for r in rows]

    # ---------- Write ----------

    def create(self, owner_id: str, started_at: datetime) -> AssessmentSession:
        with self.uow.begin("create_session") as s:
            row = SessionRepo(s).create(
                owner_id=owner_id,
                status=IN_PROGRESS,
                started_at=started_at,
                catalog_version=CATALOG_VERSION,
            )
            logger.debug("Created assessment %s for owner %s", row.id, owner_id)
            return to_domain(row)

    @staticmethod
    def _refuse(repo: SessionRepo, session_id: int, operation: str) -> None:
        """Raise the error explaining why a conditional write matched no row."""
        row = repo.get(session_id)
        if row is None:
            raise SessionNotFoundError(session_id)
        if operation == "complete" and row.status == SessionStatus.COMPLETED.value:
            raise ConsistencyError(session_id)
        raise StateError(
            f"Assessment {session_id} is {row.status}",
            session_id=session_id,
            status=row.status,
            operation=operation,
        )

    def save_section(self, session_id: int, result: SectionResult) -> AssessmentSession:
        with self.uow.begin("save_section") as s:
            repo = SessionRepo(s)
            if not repo.transition(session_id, IN_PROGRESS, updated_at=utcnow()):
                self._refuse(repo, session_id, "save_section")

            SectionResultRepo(s).upsert(
                session_id,
                result.section.value,
                raw_responses=thaw(result.raw_responses),
                scores=result.scores.as_dict(),
                time_spent_minutes=result.time_spent_minutes,
                completed_at=result.completed_at,
                interpretation=result.interpretation,
                recommendations=list(result.recommendations),
            )
            row = repo.get(session_id)
            s.refresh(row)
            return to_domain(row)

    def complete(
        self, session_id: int, synthesize: Synthesizer, completed_at: datetime
    ) -> AssessmentSession:
        with self.uow.begin("complete_session") as s:
            repo = SessionRepo(s)
            claimed = repo.transition(
                session_id,
                IN_PROGRESS,
                status=SessionStatus.COMPLETED.value,
                completed_at=completed_at,
            )
            if not claimed:
                self._refuse(repo, session_id, "complete")

            row = repo.get(session_id)
            s.refresh(row)
            # Rolled back together with the status change if synthesis fails
            composite = synthesize(to_domain(row))
            repo.update(row, composite_result=composite.as_dict())
            return to_domain(row)

    def mark_abandoned(self, session_id: int) -> AssessmentSession:
        with self.uow.begin("abandon_session") as s:
            repo = SessionRepo(s)
            if not repo.transition(
                session_id, IN_PROGRESS, status=SessionStatus.ABANDONED.value
            ):
                self._refuse(repo, session_id, "abandon")
            row = repo.get(session_id)
            s.refresh(row)
            return to_domain(row)

    def delete_in_progress(self, session_id: int) -> bool:
        with self.uow.begin("delete_session") as s:
            repo = SessionRepo(s)
            row = repo.get(session_id)
            if row is None or row.status != IN_PROGRESS:
                return False
            repo.delete(row)
            return True
