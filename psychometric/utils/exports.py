from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import pandas as pd

from ..domain.models import AssessmentSession, thaw

HISTORY_COLUMNS = [
    "AssessmentID",
    "StartedAt",
    "CompletedAt",
    "HollandCode",
    "DominantQuadrants",
    "EmployabilityQuotient",
    "TotalTimeSpent",
]


def _to_iso(val):
    if hasattr(val, "isoformat"):
        return val.isoformat()
    return val


def session_to_payload(session: AssessmentSession) -> dict[str, Any]:
    """Full audit view of a session: raw answers, scores and composite."""
    return {
        "assessment_id": session.id,
        "owner_id": session.owner_id,
        "status": session.status.value,
        "catalog_version": session.catalog_version,
        "started_at": _to_iso(session.started_at),
        "completed_at": _to_iso(session.completed_at),
        "completion_percentage": session.completion_percentage,
        "total_time_spent_minutes": session.total_time_spent_minutes,
        "sections": {
            section.value: {
                "raw_responses": thaw(result.raw_responses),
                "scores": result.scores.as_dict(),
                "time_spent_minutes": result.time_spent_minutes,
                "completed_at": _to_iso(result.completed_at),
                "interpretation": result.interpretation,
                "recommendations": list(result.recommendations),
            }
            for section, result in session.results.items()
        },
        "composite": session.composite.as_dict() if session.composite else None,
    }


def make_json_export_payload(session: AssessmentSession) -> str:
    return json.dumps(session_to_payload(session), indent=2)


def history_frame(sessions: Iterable[AssessmentSession]) -> pd.DataFrame:
    """One row per completed session, newest first as given."""
    rows = [
        {
            "AssessmentID": s.id,
            "StartedAt": s.started_at,
            "CompletedAt": s.completed_at,
            "HollandCode": s.composite.holland_code if s.composite else None,
            "DominantQuadrants": "/".join(s.composite.dominant_quadrants) if s.composite else None,
            "EmployabilityQuotient": s.composite.employability_quotient if s.composite else None,
            "TotalTimeSpent": s.total_time_spent_minutes,
        }
        for s in sessions
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)

