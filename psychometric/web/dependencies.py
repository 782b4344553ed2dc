from __future__ import annotations

from fastapi import Header, HTTPException, Request, status
from sqlalchemy.engine import Engine

from psychometric.domain.engine import AssessmentEngine
from psychometric.infrastructure.config import AssessmentConfig, DatabaseConfig
from psychometric.infrastructure.db import (
    create_database_engine,
    create_session_factory,
    initialise_database,
)
from psychometric.infrastructure.store_sql import SqlAssessmentStore
from psychometric.infrastructure.uow import UnitOfWork

OWNER_HEADER = "X-Owner-Id"


def build_assessment_engine(
    db_config: DatabaseConfig, assessment_config: AssessmentConfig
) -> tuple[AssessmentEngine, Engine]:
    """
    Create the database engine and the assessment engine over it.

    Called once per application at startup; every request shares the result.
    """
    db_engine = create_database_engine(db_config)
    initialise_database(db_engine)
    store = SqlAssessmentStore(UnitOfWork(create_session_factory(db_engine)))
    return AssessmentEngine(store, assessment_config), db_engine


def get_engine(request: Request) -> AssessmentEngine:
    engine = getattr(request.app.state, "assessment_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="The assessment service is starting up. Please try again in a moment.",
        )
    return engine


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """Identity of the participant, supplied by the authenticating proxy."""
    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {OWNER_HEADER} header",
        )
    return owner_id
