# psychometric/infrastructure/repositories_session.py
from __future__ import annotations

import builtins
from typing import Any

from sqlalchemy.orm import Session

from .logging import log_database_operation as log_op
from .models import AssessmentSessionORM, SectionResultORM
from .repositories_base import BaseRepository as GenericBaseRepository


class SessionRepo(GenericBaseRepository[AssessmentSessionORM]):
    model = AssessmentSessionORM

    def __init__(self, session: Session):
        super().__init__(session)

    # -------- Read --------

    @log_op("session.get")
    def get(self, id_: Any) -> AssessmentSessionORM | None:
        return super().get(id_)

    @log_op("session.active_for_owner")
    def active_for_owner(self, owner_id: str) -> AssessmentSessionORM | None:
        return self.first(
            self.model.owner_id == owner_id,
            self.model.status == "in_progress",
            order_by=[self.model.id.desc()],
        )

    @log_op("session.latest_for_owner")
    def latest_for_owner(self, owner_id: str) -> AssessmentSessionORM | None:
        return self.first(self.model.owner_id == owner_id, order_by=[self.model.id.desc()])

    @log_op("session.completed_for_owner")
    def completed_for_owner(
        self, owner_id: str, limit: int
    ) -> builtins.list[AssessmentSessionORM]:
        return self.list(
            self.model.owner_id == owner_id,
            self.model.status == "completed",
            order_by=[self.model.completed_at.desc(), self.model.id.desc()],
            limit=limit,
        )

    @log_op("session.list_by_status")
    def list_by_status(self, status: str | None = None) -> builtins.list[AssessmentSessionORM]:
        filters = [self.model.status == status] if status else []
        return self.list(*filters, order_by=[self.model.id])

    # -------- Write --------

    @log_op("session.create")
    def create(self, **fields: Any) -> AssessmentSessionORM:
        return super().create(**fields)

    @log_op("session.transition")
    def transition(self, id_: int, from_status: str, **fields: Any) -> bool:
        """Move a session out of ``from_status``; False if another writer got there first."""
        changed = self.update_where(
            self.model.id == id_, self.model.status == from_status, **fields
        )
        return changed == 1

    @log_op("session.delete")
    def delete(self, obj: AssessmentSessionORM) -> None:
        super().delete(obj)


class SectionResultRepo(GenericBaseRepository[SectionResultORM]):
    model = SectionResultORM

    @log_op("section.for_session")
    def for_session(self, session_id: int, section: str) -> SectionResultORM | None:
        return self.first(self.model.session_id == session_id, self.model.section == section)

    @log_op("section.upsert")
    def upsert(self, session_id: int, section: str, **fields: Any) -> SectionResultORM:
        """Insert the section result, or replace the fields of the stored one."""
        existing = self.for_session(session_id, section)
        if existing is None:
            return self.create(session_id=session_id, section=section, **fields)
        return self.update(existing, **fields)
