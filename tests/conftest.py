from __future__ import annotations

import os
from types import SimpleNamespace

os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from psychometric.domain.catalog import STEPS_CATEGORIES, get_instrument  # noqa: E402
from psychometric.domain.engine import AssessmentEngine  # noqa: E402
from psychometric.domain.models import SectionType  # noqa: E402
from psychometric.infrastructure.db import initialise_database  # noqa: E402
from psychometric.infrastructure.store_memory import InMemoryAssessmentStore  # noqa: E402
from psychometric.infrastructure.store_sql import SqlAssessmentStore  # noqa: E402
from psychometric.infrastructure.uow import UnitOfWork  # noqa: E402

# Five answers per category whose means are 4.0, 3.2, 2.8, 4.4 and 3.6
REFERENCE_STEPS = {
    "S": [4, 4, 4, 4, 4],
    "T": [3, 3, 3, 3, 4],
    "E": [3, 3, 3, 3, 2],
    "P": [4, 4, 5, 5, 4],
    "Speaking": [4, 4, 4, 3, 3],
}


def build_riasec(counts: dict[str, int]) -> dict[str, bool]:
    """Answer True to the first ``counts[tag]`` questions of each tag."""
    instrument = get_instrument(SectionType.RIASEC)
    answers = {qid: False for qid in instrument.question_ids}
    for tag, count in counts.items():
        for qid in instrument.ids_for_category(tag)[:count]:
            answers[qid] = True
    return answers


def build_brain(ratings: list[int] | None = None) -> dict[str, list[int]]:
    instrument = get_instrument(SectionType.BRAIN_PROFILE)
    return {qid: list(ratings or [4, 3, 2, 1]) for qid in instrument.question_ids}


def build_steps(values: dict[str, list[int]] | None = None) -> dict[str, int]:
    instrument = get_instrument(SectionType.EMPLOYABILITY)
    values = values or REFERENCE_STEPS
    answers: dict[str, int] = {}
    for category in STEPS_CATEGORIES:
        for qid, value in zip(instrument.ids_for_category(category), values[category]):
            answers[qid] = value
    return answers


def build_insights(**overrides) -> dict[str, object]:
    payload: dict[str, object] = {
        "whatYouLike": "Building small robots and tinkering with code",
        "whatYouAreGoodAt": "Explaining hard ideas to my classmates",
        "recentProjects": "A weather station that logs data to a spreadsheet",
        "characterStrengths": ["Curiosity", "Persistence", "Kindness"],
        "valuesInLife": ["Honesty", "Learning", "Family"],
    }
    payload.update(overrides)
    return payload


REFERENCE_RIASEC = {"R": 5, "I": 9, "A": 3, "S": 7, "E": 2, "C": 4}


@pytest.fixture
def section_payloads() -> dict[SectionType, object]:
    """A valid payload for every section, with the documented reference scores."""
    return {
        SectionType.RIASEC: build_riasec(REFERENCE_RIASEC),
        SectionType.BRAIN_PROFILE: build_brain(),
        SectionType.EMPLOYABILITY: build_steps(),
        SectionType.PERSONAL_INSIGHTS: build_insights(),
    }


@pytest.fixture
def memory_engine() -> AssessmentEngine:
    return AssessmentEngine(InMemoryAssessmentStore())


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialise_database(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield SessionLocal
    engine.dispose()


@pytest.fixture
def sql_store(session_factory) -> SqlAssessmentStore:
    return SqlAssessmentStore(UnitOfWork(session_factory))


@pytest.fixture
def sql_engine(sql_store) -> AssessmentEngine:
    return AssessmentEngine(sql_store)


@pytest.fixture
def builders() -> SimpleNamespace:
    return SimpleNamespace(
        riasec=build_riasec, brain=build_brain, steps=build_steps, insights=build_insights
    )
