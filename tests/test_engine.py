"""Tests for the assessment session state machine on the in-memory store."""

import threading
from datetime import datetime, timedelta

import pytest

from psychometric.domain.engine import AssessmentEngine
from psychometric.domain.models import SECTION_ORDER, SectionType, SessionStatus
from psychometric.domain.synthesis import synthesize_session
from psychometric.infrastructure.config import AssessmentConfig
from psychometric.infrastructure.exceptions import (
    SectionValidationError,
    SessionNotFoundError,
    StateError,
    ValidationError,
)
from psychometric.infrastructure.store_memory import InMemoryAssessmentStore

OWNER = "student-1"


def submit_all(engine, payloads, owner=OWNER, order=SECTION_ORDER):
    outcome = None
    for section in order:
        outcome = engine.submit_section(owner, section, payloads[section], 5)
    return outcome


class TestLifecycle:
    def test_start_session_is_get_or_create(self, memory_engine):
        first = memory_engine.start_session(OWNER)
        second = memory_engine.start_session(OWNER)

        assert first.id == second.id
        assert first.status is SessionStatus.IN_PROGRESS
        assert first.completion_percentage == 0
        assert first.next_section is SectionType.RIASEC

    def test_completion_is_monotone(self, memory_engine, section_payloads):
        seen = []
        for section in SECTION_ORDER:
            outcome = memory_engine.submit_section(OWNER, section, section_payloads[section], 3)
            seen.append(outcome.session.completion_percentage)

        assert seen == [25, 50, 75, 100]

    def test_fourth_section_completes_with_composite(self, memory_engine, section_payloads):
        outcome = submit_all(memory_engine, section_payloads)

        assert outcome.completed_now
        session = outcome.session
        assert session.status is SessionStatus.COMPLETED
        assert session.completed_at is not None
        assert session.composite.holland_code == "ISR"
        assert session.composite.employability_quotient == 7.2
        assert session.total_time_spent_minutes == 20

    def test_sections_may_arrive_in_any_order(self, memory_engine, section_payloads):
        order = list(reversed(SECTION_ORDER))
        outcome = submit_all(memory_engine, section_payloads, order=order)

        assert outcome.session.status is SessionStatus.COMPLETED
        assert outcome.session.composite.holland_code == "ISR"

    def test_resubmission_before_completion_overwrites(self, memory_engine, builders):
        memory_engine.submit_section(OWNER, "riasec", builders.riasec({"R": 9}), 2)
        outcome = memory_engine.submit_section(OWNER, "riasec", builders.riasec({"C": 9}), 4)

        result = outcome.session.result(SectionType.RIASEC)
        assert result.scores.C == 9 and result.scores.R == 0
        assert outcome.session.completion_percentage == 25
        assert outcome.session.total_time_spent_minutes == 4

    def test_section_result_keeps_audit_copy(self, memory_engine, builders):
        raw = builders.steps()
        outcome = memory_engine.submit_section(OWNER, SectionType.EMPLOYABILITY, raw, 1)
        raw["1"] = 1

        stored = outcome.session.result(SectionType.EMPLOYABILITY)
        assert stored.raw_responses["1"] == 4
        with pytest.raises(TypeError):
            stored.raw_responses["1"] = 2  # type: ignore[index]


class TestRejections:
    def test_invalid_payload_leaves_session_unchanged(self, memory_engine, builders):
        memory_engine.submit_section(OWNER, "brain_profile", builders.brain(), 2)
        before = memory_engine.get_session(OWNER)
        raw = builders.riasec({"I": 4})
        del raw["54"]

        with pytest.raises(SectionValidationError) as exc_info:
            memory_engine.submit_section(OWNER, "riasec", raw, 2)

        assert "expected exactly 54 responses, got 53" in exc_info.value.messages
        assert memory_engine.get_session(OWNER) == before

    def test_invalid_first_payload_opens_no_session(self, memory_engine, builders):
        raw = builders.steps()
        raw["3"] = 9

        with pytest.raises(SectionValidationError):
            memory_engine.submit_section(OWNER, "employability", raw, 2)

        assert memory_engine.store.find_active(OWNER) is None
        assert memory_engine.store.list_sessions() == []

    def test_unknown_section(self, memory_engine):
        with pytest.raises(ValidationError):
            memory_engine.submit_section(OWNER, "aptitude", {}, 0)

    def test_negative_time_is_rejected(self, memory_engine, builders):
        with pytest.raises(ValidationError):
            memory_engine.submit_section(OWNER, "riasec", builders.riasec({}), -3)

    def test_foreign_session_id_is_not_found(self, memory_engine, builders):
        other = memory_engine.start_session("someone-else")

        with pytest.raises(SessionNotFoundError):
            memory_engine.submit_section(OWNER, "riasec", builders.riasec({}), 1, session_id=other.id)

    def test_abandoned_session_rejects_submissions(self, memory_engine, builders):
        session = memory_engine.start_session(OWNER)
        memory_engine.abandon_session(OWNER, session.id)

        with pytest.raises(StateError):
            memory_engine.submit_section(
                OWNER, "riasec", builders.riasec({}), 1, session_id=session.id
            )

    def test_changed_payload_after_completion_is_rejected(
        self, memory_engine, section_payloads, builders
    ):
        session = submit_all(memory_engine, section_payloads).session

        with pytest.raises(StateError):
            memory_engine.submit_section(
                OWNER, "riasec", builders.riasec({"A": 9}), 1, session_id=session.id
            )

    def test_identical_replay_after_completion_returns_existing_result(
        self, memory_engine, section_payloads
    ):
        completed = submit_all(memory_engine, section_payloads).session

        replay = memory_engine.submit_section(
            OWNER,
            SectionType.PERSONAL_INSIGHTS,
            section_payloads[SectionType.PERSONAL_INSIGHTS],
            5,
            session_id=completed.id,
        )

        assert replay.replayed and not replay.completed_now
        assert replay.session == completed


class TestHousekeeping:
    def test_abandon_only_from_in_progress(self, memory_engine, section_payloads):
        completed = submit_all(memory_engine, section_payloads).session

        with pytest.raises(StateError):
            memory_engine.abandon_session(OWNER, completed.id)

    def test_abandoned_session_is_not_reused(self, memory_engine):
        first = memory_engine.start_session(OWNER)
        memory_engine.abandon_session(OWNER, first.id)

        assert memory_engine.start_session(OWNER).id != first.id

    def test_delete_only_in_progress(self, memory_engine, section_payloads):
        completed = submit_all(memory_engine, section_payloads).session
        active = memory_engine.start_session(OWNER)

        assert memory_engine.delete_session(OWNER, completed.id) is False
        assert memory_engine.delete_session("intruder", active.id) is False
        assert memory_engine.delete_session(OWNER, active.id) is True
        assert memory_engine.get_session(OWNER, completed.id).status is SessionStatus.COMPLETED

    def test_restart_replaces_in_progress_session(self, memory_engine, builders):
        memory_engine.submit_section(OWNER, "riasec", builders.riasec({}), 1)
        old = memory_engine.start_session(OWNER)

        fresh = memory_engine.restart(OWNER)

        assert fresh.id != old.id
        assert fresh.completion_percentage == 0
        assert memory_engine.store.get(old.id) is None

    def test_retake_after_completion_creates_new_session(self, memory_engine, section_payloads):
        completed = submit_all(memory_engine, section_payloads).session
        retake = memory_engine.start_session(OWNER)

        assert retake.id != completed.id
        assert memory_engine.get_session(OWNER).id == retake.id

    def test_history_newest_first_and_limited(self, section_payloads):
        ticks = iter(datetime(2026, 1, 1) + timedelta(minutes=i) for i in range(100))
        engine = AssessmentEngine(
            InMemoryAssessmentStore(), AssessmentConfig(history_limit=2), clock=lambda: next(ticks)
        )
        ids = [submit_all(engine, section_payloads).session.id for _ in range(3)]

        history = engine.history(OWNER)

        assert [s.id for s in history] == [ids[2], ids[1]]

    def test_get_session_without_any_raises(self, memory_engine):
        with pytest.raises(SessionNotFoundError):
            memory_engine.get_session(OWNER)


def test_compute_composite_matches_stored_composite(memory_engine, section_payloads):
    session = submit_all(memory_engine, section_payloads).session
    assert memory_engine.compute_composite(session) == session.composite


def test_concurrent_final_submissions_synthesize_once(section_payloads):
    calls = []
    lock = threading.Lock()

    def counting_synthesizer(session):
        with lock:
            calls.append(session.id)
        return synthesize_session(session)

    engine = AssessmentEngine(InMemoryAssessmentStore(), synthesizer=counting_synthesizer)
    for section in SECTION_ORDER[:3]:
        engine.submit_section(OWNER, section, section_payloads[section], 2)
    session_id = engine.start_session(OWNER).id

    barrier = threading.Barrier(2)
    outcomes, errors = [], []

    def final_submission():
        barrier.wait()
        try:
            outcomes.append(
                engine.submit_section(
                    OWNER,
                    SectionType.PERSONAL_INSIGHTS,
                    section_payloads[SectionType.PERSONAL_INSIGHTS],
                    2,
                    session_id=session_id,
                )
            )
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=final_submission) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(outcomes) == 2
    assert calls == [session_id]
    assert all(o.session.status is SessionStatus.COMPLETED for o in outcomes)
    assert outcomes[0].session.composite == outcomes[1].session.composite
    assert sum(o.completed_now for o in outcomes) == 1
