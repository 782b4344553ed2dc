"""
Application API layer with comprehensive error handling and validation.

This module provides the high-level operations used by the web layer and
scripts. Each function takes an ``AssessmentEngine``, adds logging context,
and converts unexpected failures into ``AssessmentEngineError`` with a
user-friendly message.
"""

from __future__ import annotations

from typing import Any, NoReturn

import pandas as pd

from ..domain.engine import AssessmentEngine
from ..domain.models import AssessmentSession, SectionType, SessionStatus
from ..domain.schemas import ValidationErrorDetail, ValidationResponse
from ..domain.synthesis import career_lookup
from ..domain.validation import validate
from ..infrastructure.config import get_settings
from ..infrastructure.exceptions import (
    AssessmentEngineError,
    ValidationError,
    create_user_friendly_error_message,
    log_error_details,
)
from ..infrastructure.logging import get_logger, log_operation, set_context
from ..utils.exports import history_frame, make_json_export_payload

logger = get_logger(__name__)


def _reraise(e: Exception, message: str, context: dict[str, Any]) -> NoReturn:
    """Log a failure and re-raise it as an ``AssessmentEngineError``."""
    error_details = log_error_details(e, context)
    if isinstance(e, AssessmentEngineError):
        logger.warning(message, extra=error_details)
        raise e
    logger.error(message, extra=error_details)
    raise AssessmentEngineError(
        f"{message}: {e}",
        details=error_details,
        user_message=create_user_friendly_error_message(e),
    ) from e


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def session_summary(session: AssessmentSession) -> dict[str, Any]:
    """Projection plus timing fields, safe to return to the participant."""
    return {
        **session.projection(),
        "started_at": _iso(session.started_at),
        "completed_at": _iso(session.completed_at),
        "total_time_spent_minutes": session.total_time_spent_minutes,
    }


def _parse_section(section: str | SectionType) -> SectionType:
    try:
        return SectionType.parse(section)
    except ValueError as e:
        raise ValidationError("section", str(e), section) from e


@log_operation("get_or_create_assessment")
def get_or_create_assessment(engine: AssessmentEngine, owner_id: str) -> dict[str, Any]:
    """
    Return the owner's in-progress assessment, starting one if needed.

    Example:
        >>> get_or_create_assessment(engine, "user-1")["completion_percentage"]
        0
    """
    try:
        set_context(owner_id=owner_id)
        return session_summary(engine.start_session(owner_id))
    except Exception as e:
        _reraise(e, "Failed to load current assessment", {"owner_id": owner_id})


@log_operation("submit_section_responses")
def submit_section_responses(
    engine: AssessmentEngine,
    owner_id: str,
    section: str | SectionType,
    responses: Any,
    time_spent_minutes: Any = 0,
    session_id: int | None = None,
) -> dict[str, Any]:
    """
    Validate, score and store one section.

    Returns:
        Session projection plus the section's interpretation and recommendations

    Raises:
        SectionValidationError: With every violated rule
        SessionNotFoundError: If ``session_id`` is not the owner's
        StateError: If the assessment can no longer change
    """
    parsed = _parse_section(section)
    try:
        set_context(owner_id=owner_id, section=parsed.value)
        outcome = engine.submit_section(
            owner_id, parsed, responses, time_spent_minutes, session_id=session_id
        )
        result = outcome.session.result(parsed)
        set_context(assessment_id=outcome.session.id)
        return {
            **session_summary(outcome.session),
            "section": parsed.value,
            "completed_now": outcome.completed_now,
            "replayed": outcome.replayed,
            "section_result": {
                "scores": result.scores.as_dict(),
                "interpretation": result.interpretation,
                "recommendations": list(result.recommendations),
            }
            if result
            else None,
        }
    except Exception as e:
        _reraise(
            e,
            "Failed to submit section",
            {"owner_id": owner_id, "section": parsed.value, "session_id": session_id},
        )


def validate_section_responses(section: str | SectionType, responses: Any) -> ValidationResponse:
    """Dry-run validation; never touches storage."""
    try:
        parsed = SectionType.parse(section)
    except ValueError as e:
        return ValidationResponse(
            success=False,
            errors=[ValidationErrorDetail(field="section", message=str(e), value=section)],
        )
    result = validate(parsed, responses)
    return ValidationResponse(success=result.is_valid, errors=list(result.errors))


def _results_view(session: AssessmentSession) -> dict[str, Any]:
    return {
        **session_summary(session),
        "sections": {
            section.value: {
                "scores": result.scores.as_dict(),
                "interpretation": result.interpretation,
                "recommendations": list(result.recommendations),
                "time_spent_minutes": result.time_spent_minutes,
                "completed_at": _iso(result.completed_at),
            }
            for section, result in session.results.items()
        },
    }


@log_operation("get_assessment_results")
def get_assessment_results(
    engine: AssessmentEngine, owner_id: str, session_id: int | None = None
) -> dict[str, Any]:
    """Results of a specific assessment, or of the owner's latest one."""
    try:
        set_context(owner_id=owner_id, assessment_id=session_id)
        return _results_view(engine.get_session(owner_id, session_id))
    except Exception as e:
        _reraise(
            e, "Failed to load assessment results", {"owner_id": owner_id, "session_id": session_id}
        )


def _history_limit(limit: int | None) -> int:
    if limit is None:
        return get_settings().assessment.history_limit
    if not 1 <= limit <= 100:
        raise ValidationError("limit", "must be between 1 and 100", limit)
    return limit


@log_operation("list_assessment_history")
def list_assessment_history(
    engine: AssessmentEngine, owner_id: str, limit: int | None = None
) -> list[dict[str, Any]]:
    """Completed assessments, newest completion first."""
    size = _history_limit(limit)
    try:
        set_context(owner_id=owner_id)
        return [session_summary(s) for s in engine.history(owner_id, size)]
    except Exception as e:
        _reraise(e, "Failed to load assessment history", {"owner_id": owner_id})


@log_operation("assessment_history_frame")
def assessment_history_frame(
    engine: AssessmentEngine, owner_id: str, limit: int | None = None
) -> pd.DataFrame:
    """
    History as a DataFrame for trend displays.

    Columns: AssessmentID, StartedAt, CompletedAt, HollandCode,
    DominantQuadrants, EmployabilityQuotient, TotalTimeSpent
    """
    size = _history_limit(limit)
    try:
        df = history_frame(engine.history(owner_id, size))
        logger.info("Built history frame with %d rows for owner %s", len(df), owner_id)
        return df
    except Exception as e:
        _reraise(e, "Failed to build history frame", {"owner_id": owner_id})


@log_operation("delete_assessment")
def delete_assessment(engine: AssessmentEngine, owner_id: str, session_id: int) -> bool:
    """Delete an in-progress assessment; completed ones are kept as history."""
    try:
        set_context(owner_id=owner_id, assessment_id=session_id)
        return engine.delete_session(owner_id, session_id)
    except Exception as e:
        _reraise(e, "Failed to delete assessment", {"owner_id": owner_id, "session_id": session_id})


@log_operation("restart_assessment")
def restart_assessment(engine: AssessmentEngine, owner_id: str) -> dict[str, Any]:
    try:
        set_context(owner_id=owner_id)
        return session_summary(engine.restart(owner_id))
    except Exception as e:
        _reraise(e, "Failed to restart assessment", {"owner_id": owner_id})


@log_operation("abandon_assessment")
def abandon_assessment(engine: AssessmentEngine, owner_id: str, session_id: int) -> dict[str, Any]:
    try:
        set_context(owner_id=owner_id, assessment_id=session_id)
        return session_summary(engine.abandon_session(owner_id, session_id))
    except Exception as e:
        _reraise(
            e, "Failed to abandon assessment", {"owner_id": owner_id, "session_id": session_id}
        )


@log_operation("get_career_recommendations")
def get_career_recommendations(holland_code: str, limit: int | None = None) -> dict[str, Any]:
    """
    Extended careers and industries for a Holland Code.

    Example:
        >>> get_career_recommendations("ISR")["careers"][0]
        'Researcher'
    """
    cap = limit or get_settings().assessment.career_lookup_limit
    return career_lookup(holland_code, cap).as_dict()


@log_operation("compute_platform_statistics")
def compute_platform_statistics(engine: AssessmentEngine) -> dict[str, Any]:
    """
    Aggregate statistics across every owner.

    Returns:
        total_assessments, completed_assessments, completion_rate (percent),
        average_completion_time (minutes), top_holland_codes (up to 10)
    """
    try:
        sessions = engine.store.list_sessions()
        df = pd.DataFrame(
            [
                {
                    "status": s.status.value,
                    "holland_code": s.composite.holland_code if s.composite else None,
                    "total_time": s.total_time_spent_minutes,
                }
                for s in sessions
            ],
            columns=["status", "holland_code", "total_time"],
        )

        total = len(df)
        completed = df[df["status"] == SessionStatus.COMPLETED.value]
        top = (
            completed.dropna(subset=["holland_code"])
            .groupby("holland_code")
            .size()
            .reset_index(name="assessments")
            .sort_values(["assessments", "holland_code"], ascending=[False, True])
            .head(10)
        )

        stats = {
            "total_assessments": total,
            "completed_assessments": len(completed),
            "completion_rate": round(len(completed) / total * 100, 2) if total else 0.0,
            "average_completion_time": round(float(completed["total_time"].mean()), 2)
            if not completed.empty
            else 0.0,
            "top_holland_codes": [
                {"code": row.holland_code, "count": int(row.assessments)}
                for row in top.itertuples(index=False)
            ],
        }
        logger.info(
            "Computed platform statistics over %d assessments (%d completed)",
            total,
            len(completed),
        )
        return stats
    except Exception as e:
        _reraise(e, "Failed to compute platform statistics", {})


@log_operation("export_assessment_json")
def export_assessment_json(
    engine: AssessmentEngine, owner_id: str, session_id: int | None = None
) -> str:
    """Full audit trail (raw answers, scores, composite) as a JSON document."""
    try:
        set_context(owner_id=owner_id, assessment_id=session_id)
        return make_json_export_payload(engine.get_session(owner_id, session_id))
    except Exception as e:
        _reraise(e, "Failed to export assessment", {"owner_id": owner_id, "session_id": session_id})
