"""
Assessment session state machine.

The engine owns the rules of a session's lifecycle (in progress, completed,
abandoned) and coordinates validation, scoring and synthesis. It never
touches storage directly: every read and write goes through the
``AssessmentStore`` port, which provides the atomic conditional writes the
lifecycle relies on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Any

from ..infrastructure.config import AssessmentConfig
from ..infrastructure.exceptions import (
    ConsistencyError,
    SessionNotFoundError,
    StateError,
    ValidationError,
)
from ..infrastructure.logging import LogContext, get_logger
from .models import (
    AssessmentSession,
    CompositeResult,
    SectionResult,
    SectionType,
    SessionStatus,
    freeze,
    thaw,
    utcnow,
)
from .ports import AssessmentStore, Synthesizer
from .scoring import interpret, score
from .synthesis import synthesize_session
from .validation import require_valid, validate_time_spent


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    session: AssessmentSession
    section: SectionType
    completed_now: bool = False  # this submission performed the completion
    replayed: bool = False  # identical retry against an already completed session

    def projection(self) -> dict[str, Any]:
        return {
            **self.session.projection(),
            "section": self.section.value,
            "completed_now": self.completed_now,
            "replayed": self.replayed,
        }


class AssessmentEngine:
    def __init__(
        self,
        store: AssessmentStore,
        config: AssessmentConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        logger: logging.Logger | None = None,
        synthesizer: Synthesizer | None = None,
    ):
        self.store = store
        self.config = config or AssessmentConfig()
        self.clock = clock or utcnow
        self.logger = logger or get_logger("engine")
        self.synthesizer = synthesizer or partial(
            synthesize_session,
            career_limit=self.config.career_recommendation_limit,
            skill_threshold=self.config.skill_development_threshold,
        )

    # ---------- Lookup ----------

    def _owned(self, owner_id: str, session_id: int) -> AssessmentSession:
        session = self.store.get(session_id)
        if session is None or session.owner_id != owner_id:
            raise SessionNotFoundError(session_id, owner_id)
        return session

    def start_session(self, owner_id: str) -> AssessmentSession:
        """Return the owner's in-progress session, creating one if needed."""
        active = self.store.find_active(owner_id)
        if active is not None:
            return active
        session = self.store.create(owner_id, self.clock())
        self.logger.info("Started assessment %s for owner %s", session.id, owner_id)
        return session

    def get_session(self, owner_id: str, session_id: int | None = None) -> AssessmentSession:
        if session_id is not None:
            return self._owned(owner_id, session_id)
        latest = self.store.latest(owner_id)
        if latest is None:
            raise SessionNotFoundError(None, owner_id)
        return latest

    def history(self, owner_id: str, limit: int | None = None) -> list[AssessmentSession]:
        return self.store.list_completed(owner_id, limit or self.config.history_limit)

    # ---------- Submission ----------

    @staticmethod
    def _is_replay(session: AssessmentSession, section: SectionType, raw: Any) -> bool:
        stored = session.result(section)
        return stored is not None and thaw(stored.raw_responses) == thaw(freeze(raw))

    def _resolve_completed(
        self, session: AssessmentSession, section: SectionType, raw: Any
    ) -> SubmissionOutcome:
        if session.status is SessionStatus.COMPLETED and self._is_replay(session, section, raw):
            self.logger.info(
                "Replayed %s submission for completed assessment %s", section.value, session.id
            )
            return SubmissionOutcome(session, section, replayed=True)
        raise StateError(
            f"Assessment {session.id} is {session.status.value}; "
            f"section {section.value} can no longer change",
            session_id=session.id,
            status=session.status.value,
            operation="submit_section",
        )

    def submit_section(
        self,
        owner_id: str,
        section: SectionType | str,
        raw_responses: Any,
        time_spent_minutes: Any = 0,
        session_id: int | None = None,
    ) -> SubmissionOutcome:
        """
        Validate, score and record one section of an assessment.

        A rejected payload leaves the session untouched. The fourth distinct
        section completes the session and stores its composite exactly once.

        Raises:
            SectionValidationError: With every violated rule of the payload
            ValidationError: For an unknown section or bad time spent
            SessionNotFoundError: If ``session_id`` is not the owner's
            StateError: If the session is abandoned, or completed and the
                payload differs from what was recorded
        """
        try:
            section = SectionType.parse(section)
        except ValueError as e:
            raise ValidationError("section", str(e), section) from e
        minutes = validate_time_spent(time_spent_minutes, self.config.max_time_spent_minutes)
        # Reject bad payloads before get-or-create can open a session for them
        normalized = require_valid(section, raw_responses)

        if session_id is None:
            session = self.start_session(owner_id)
        else:
            session = self._owned(owner_id, session_id)

        with LogContext(owner_id=owner_id, assessment_id=session.id, section=section.value):
            if session.status is SessionStatus.ABANDONED:
                raise StateError(
                    f"Assessment {session.id} was abandoned",
                    session_id=session.id,
                    status=session.status.value,
                    operation="submit_section",
                )

            if session.status is SessionStatus.COMPLETED:
                return self._resolve_completed(session, section, raw_responses)

            scores = score(section, normalized)
            interpretation, recommendations = interpret(
                section,
                scores,
                field_limit=self.config.field_recommendation_limit,
                skill_threshold=self.config.skill_development_threshold,
            )
            result = SectionResult(
                section=section,
                raw_responses=raw_responses,
                scores=scores,
                time_spent_minutes=minutes,
                completed_at=self.clock(),
                interpretation=interpretation,
                recommendations=tuple(recommendations),
            )

            try:
                session = self.store.save_section(session.id, result)
            except StateError:
                # Status changed after we loaded the session
                current = self._owned(owner_id, session.id)
                return self._resolve_completed(current, section, raw_responses)

            self.logger.info(
                "Recorded %s for assessment %s (%d%% complete)",
                section.value,
                session.id,
                session.completion_percentage,
            )

            if not session.all_sections_completed:
                return SubmissionOutcome(session, section)

            try:
                session = self.store.complete(session.id, self.synthesizer, self.clock())
            except ConsistencyError as e:
                self.logger.warning("%s; returning the stored composite", e.message)
                return SubmissionOutcome(self._owned(owner_id, session.id), section)

            self.logger.info(
                "Completed assessment %s with Holland Code %s",
                session.id,
                session.composite.holland_code if session.composite else None,
            )
            return SubmissionOutcome(session, section, completed_now=True)

    def compute_composite(self, session: AssessmentSession) -> CompositeResult:
        """Pure synthesis from a snapshot; raises StateError if a section is missing."""
        return self.synthesizer(session)

    # ---------- Housekeeping ----------

    def abandon_session(self, owner_id: str, session_id: int) -> AssessmentSession:
        session = self._owned(owner_id, session_id)
        if session.status is not SessionStatus.IN_PROGRESS:
            raise StateError(
                f"Only in-progress assessments can be abandoned (assessment {session_id} "
                f"is {session.status.value})",
                session_id=session_id,
                status=session.status.value,
                operation="abandon_session",
            )
        abandoned = self.store.mark_abandoned(session_id)
        self.logger.info("Abandoned assessment %s", session_id)
        return abandoned

    def delete_session(self, owner_id: str, session_id: int) -> bool:
        session = self.store.get(session_id)
        if session is None or session.owner_id != owner_id:
            return False
        deleted = self.store.delete_in_progress(session_id)
        if deleted:
            self.logger.info("Deleted in-progress assessment %s", session_id)
        return deleted

    def restart(self, owner_id: str) -> AssessmentSession:
        """Discard the owner's in-progress session and start a fresh one."""
        active = self.store.find_active(owner_id)
        if active is not None:
            self.store.delete_in_progress(active.id)
            self.logger.info("Discarded assessment %s for restart", active.id)
        return self.start_session(owner_id)
