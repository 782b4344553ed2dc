from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from psychometric.application import api as app_api
from psychometric.domain.engine import AssessmentEngine
from psychometric.infrastructure.config import get_settings
from psychometric.infrastructure.exceptions import (
    AssessmentEngineError,
    DatabaseError,
    SectionValidationError,
    SessionNotFoundError,
    StateError,
    ValidationError,
)
from psychometric.infrastructure.logging import get_logger
from psychometric.web.dependencies import get_engine, get_owner_id
from psychometric.web.schemas import (
    AssessmentResults,
    CareerLookupResponse,
    HealthResponse,
    PlatformStatistics,
    SectionSubmissionRequest,
    SessionSummary,
    SubmissionResponse,
    ValidationRequest,
    ValidationResult,
)

router = APIRouter(prefix="/api")
logger = get_logger(__name__)


def _json_safe(value: Any) -> Any:
    # Infinity and NaN are accepted in request bodies but cannot be echoed as JSON
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(v) for v in value]
    return value


def _raise_http(exc: AssessmentEngineError) -> NoReturn:
    if isinstance(exc, SectionValidationError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": exc.user_message,
                "errors": [
                    {**e, "value": _json_safe(e["value"])} for e in exc.details["errors"]
                ],
            },
        ) from exc
    if isinstance(exc, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": exc.user_message,
                "errors": [
                    {"field": exc.field, "message": exc.message, "value": _json_safe(exc.value)}
                ],
            },
        ) from exc
    if isinstance(exc, SessionNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.user_message) from exc
    if isinstance(exc, StateError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.user_message) from exc
    if isinstance(exc, DatabaseError):
        logger.error("Database failure surfaced to client: %s", exc.message)
        headers = {"Retry-After": "1"} if exc.retryable else None
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=exc.user_message,
            headers=headers,
        ) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.user_message) from exc


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok", environment=settings.app.environment, version=settings.app.version
    )


@router.get("/assessments/current", response_model=SessionSummary)
def current_assessment(
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> SessionSummary:
    try:
        return SessionSummary(**app_api.get_or_create_assessment(engine, owner_id))
    except AssessmentEngineError as exc:
        _raise_http(exc)


@router.post("/assessments/current/sections/{section}", response_model=SubmissionResponse)
def submit_section(
    section: str,
    payload: SectionSubmissionRequest,
    assessment_id: int | None = Query(default=None),
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> SubmissionResponse:
    try:
        outcome = app_api.submit_section_responses(
            engine,
            owner_id,
            section,
            payload.responses,
            payload.time_spent_minutes,
            session_id=assessment_id,
        )
    except AssessmentEngineError as exc:
        _raise_http(exc)
    return SubmissionResponse(**outcome)


@router.post("/assessments/validate", response_model=ValidationResult)
def validate_section(payload: ValidationRequest) -> ValidationResult:
    result = app_api.validate_section_responses(payload.section, payload.responses)
    return ValidationResult(**result.model_dump(exclude={"data"}))


@router.get("/assessments/results", response_model=AssessmentResults)
def latest_results(
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> AssessmentResults:
    try:
        return AssessmentResults(**app_api.get_assessment_results(engine, owner_id))
    except AssessmentEngineError as exc:
        _raise_http(exc)


@router.get("/assessments/history", response_model=list[SessionSummary])
def history(
    limit: int | None = Query(default=None, ge=1, le=100),
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> list[SessionSummary]:
    try:
        items = app_api.list_assessment_history(engine, owner_id, limit)
    except AssessmentEngineError as exc:
        _raise_http(exc)
    return [SessionSummary(**item) for item in items]


@router.post("/assessments/restart", response_model=SessionSummary)
def restart(
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> SessionSummary:
    try:
        return SessionSummary(**app_api.restart_assessment(engine, owner_id))
    except AssessmentEngineError as exc:
        _raise_http(exc)


@router.get("/assessments/{assessment_id}", response_model=AssessmentResults)
def assessment_results(
    assessment_id: int,
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> AssessmentResults:
    try:
        return AssessmentResults(**app_api.get_assessment_results(engine, owner_id, assessment_id))
    except AssessmentEngineError as exc:
        _raise_http(exc)


@router.delete("/assessments/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assessment(
    assessment_id: int,
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> Response:
    try:
        deleted = app_api.delete_assessment(engine, owner_id, assessment_id)
    except AssessmentEngineError as exc:
        _raise_http(exc)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No in-progress assessment with that id.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/assessments/{assessment_id}/abandon", response_model=SessionSummary)
def abandon(
    assessment_id: int,
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> SessionSummary:
    try:
        return SessionSummary(**app_api.abandon_assessment(engine, owner_id, assessment_id))
    except AssessmentEngineError as exc:
        _raise_http(exc)


@router.get("/assessments/{assessment_id}/export")
def export_assessment(
    assessment_id: int,
    owner_id: str = Depends(get_owner_id),
    engine: AssessmentEngine = Depends(get_engine),
) -> Response:
    try:
        payload = app_api.export_assessment_json(engine, owner_id, assessment_id)
    except AssessmentEngineError as exc:
        _raise_http(exc)
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="assessment_{assessment_id}.json"'},
    )


@router.get("/careers/{holland_code}", response_model=CareerLookupResponse)
def careers(holland_code: str) -> CareerLookupResponse:
    try:
        return CareerLookupResponse(**app_api.get_career_recommendations(holland_code))
    except AssessmentEngineError as exc:
        _raise_http(exc)


@router.get("/stats", response_model=PlatformStatistics)
def platform_statistics(engine: AssessmentEngine = Depends(get_engine)) -> PlatformStatistics:
    try:
        return PlatformStatistics(**app_api.compute_platform_statistics(engine))
    except AssessmentEngineError as exc:
        _raise_http(exc)
