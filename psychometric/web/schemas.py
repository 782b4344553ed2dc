from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class CompositeResult(BaseModel):
    holland_code: str
    dominant_quadrants: list[str]
    employability_quotient: float
    interpretation: str
    career_recommendations: list[str]
    learning_style_recommendations: list[str]
    skill_development_areas: list[str]


class SessionSummary(BaseModel):
    assessment_id: int
    status: str
    sections_completed: dict[str, bool]
    completion_percentage: int
    next_section: Optional[str] = None
    composite: Optional[CompositeResult] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    total_time_spent_minutes: float = 0.0


class SectionSubmissionRequest(BaseModel):
    # Left untyped so the engine reports every rule violation in one response
    responses: Any
    time_spent_minutes: Any = 0


class SectionOutcome(BaseModel):
    scores: dict[str, Any]
    interpretation: str
    recommendations: list[str] = []


class SubmissionResponse(SessionSummary):
    section: str
    completed_now: bool = False
    replayed: bool = False
    section_result: Optional[SectionOutcome] = None


class SectionResultDetail(SectionOutcome):
    time_spent_minutes: float
    completed_at: Optional[str] = None


class AssessmentResults(SessionSummary):
    sections: dict[str, SectionResultDetail] = {}


class ValidationRequest(BaseModel):
    section: str
    responses: Any


class ValidationErrorItem(BaseModel):
    field: str
    message: str
    value: Any = None


class ValidationResult(BaseModel):
    success: bool
    errors: list[ValidationErrorItem] = []


class CareerLookupResponse(BaseModel):
    holland_code: str
    careers: list[str]
    industries: list[str]


class HollandCodeCount(BaseModel):
    code: str
    count: int


class PlatformStatistics(BaseModel):
    total_assessments: int
    completed_assessments: int
    completion_rate: float = Field(..., ge=0, le=100)
    average_completion_time: float
    top_holland_codes: list[HollandCodeCount] = []


class HealthResponse(BaseModel):
    status: str
    environment: str
    version: str
