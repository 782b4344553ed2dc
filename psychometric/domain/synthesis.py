"""
Composite result synthesis.

Combines the three quantitative score vectors into the overall profile:
Holland Code, dominant brain quadrants, employability quotient, narrative
and the three recommendation lists. Everything here is a pure function of
its inputs, so two callers holding the same scores always agree.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..infrastructure.exceptions import StateError, ValidationError
from .catalog import (
    BRAIN_QUADRANTS,
    BRAIN_TRAITS,
    CAREERS_BY_TYPE,
    EXTENDED_CAREERS_BY_TYPE,
    INDUSTRIES_BY_TYPE,
    LEARNING_TIPS,
    RIASEC_TRAITS,
    RIASEC_TYPES,
    SKILL_AREAS,
)
from .models import (
    AssessmentSession,
    BrainScores,
    CompositeResult,
    RiasecScores,
    SectionType,
    StepsScores,
)
from .schemas import HollandCodeInput, validate_input
from .scoring import employability_quotient, rank

MAINTAIN_ALL_SKILLS = "Continue developing all skill areas"


def holland_code(riasec: RiasecScores) -> str:
    """Top three interest letters, ties broken R > I > A > S > E > C."""
    return "".join(rank(riasec.as_dict(), RIASEC_TYPES)[:3])


def dominant_quadrants(brain: BrainScores) -> tuple[str, ...]:
    """Top two quadrants, ties broken L1 > L2 > R1 > R2."""
    return tuple(rank(brain.as_dict(), BRAIN_QUADRANTS)[:2])


def employability_band(quotient: float) -> str:
    if quotient >= 8:
        return "excellent"
    if quotient >= 6:
        return "good"
    if quotient >= 4:
        return "moderate"
    return "developing"


def narrative(code: str, quadrants: tuple[str, ...], quotient: float) -> str:
    outlook = "strong job readiness" if quotient >= 7 else "areas for professional development"
    return (
        f"Based on your assessment, you have a {RIASEC_TRAITS[code[0]]} personality "
        f"with {BRAIN_TRAITS[quadrants[0]]} thinking preferences. "
        f"Your Holland Code {code} suggests you thrive in environments that match "
        f"these characteristics. Your employability skills are at a "
        f"{employability_band(quotient)} level ({quotient}/10), indicating {outlook}."
    )


def _dedupe(items) -> list[str]:
    seen: list[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def career_recommendations(code: str, limit: int = 10) -> list[str]:
    return _dedupe(c for letter in code for c in CAREERS_BY_TYPE[letter])[:limit]


def learning_style_recommendations(quadrants: tuple[str, ...]) -> list[str]:
    return [tip for q in quadrants for tip in LEARNING_TIPS[q]]


def skill_development_areas(steps: StepsScores, threshold: float = 3.5) -> list[str]:
    weak = [SKILL_AREAS[c] for c, avg in steps.as_dict().items() if avg < threshold]
    return weak or [MAINTAIN_ALL_SKILLS]


def synthesize(
    riasec: RiasecScores,
    brain: BrainScores,
    steps: StepsScores,
    *,
    career_limit: int = 10,
    skill_threshold: float = 3.5,
) -> CompositeResult:
    """
    Build the composite profile from the three quantitative sections.

    Example:
        >>> synthesize(
        ...     RiasecScores(R=5, I=9, A=3, S=7, E=2, C=4),
        ...     BrainScores(L1=30, L2=20, R1=25, R2=25),
        ...     StepsScores(S=4.0, T=3.2, E=2.8, P=4.4, Speaking=3.6),
        ... ).holland_code
        'ISR'
    """
    code = holland_code(riasec)
    quadrants = dominant_quadrants(brain)
    quotient = employability_quotient(steps)
    return CompositeResult(
        holland_code=code,
        dominant_quadrants=quadrants,
        employability_quotient=quotient,
        interpretation=narrative(code, quadrants, quotient),
        career_recommendations=tuple(career_recommendations(code, career_limit)),
        learning_style_recommendations=tuple(learning_style_recommendations(quadrants)),
        skill_development_areas=tuple(skill_development_areas(steps, skill_threshold)),
    )


def synthesize_session(
    session: AssessmentSession, *, career_limit: int = 10, skill_threshold: float = 3.5
) -> CompositeResult:
    """Synthesize from a session snapshot; all quantitative sections must be present."""
    missing = [
        s.value
        for s in (SectionType.RIASEC, SectionType.BRAIN_PROFILE, SectionType.EMPLOYABILITY)
        if session.result(s) is None
    ]
    if missing:
        raise StateError(
            f"Cannot build composite for assessment {session.id}: "
            f"missing sections {', '.join(missing)}",
            session_id=session.id,
            status=session.status.value,
            operation="compute_composite",
        )

    riasec = session.results[SectionType.RIASEC].scores
    brain = session.results[SectionType.BRAIN_PROFILE].scores
    steps = session.results[SectionType.EMPLOYABILITY].scores
    assert isinstance(riasec, RiasecScores)
    assert isinstance(brain, BrainScores)
    assert isinstance(steps, StepsScores)
    return synthesize(
        riasec, brain, steps, career_limit=career_limit, skill_threshold=skill_threshold
    )


@dataclass(frozen=True, slots=True)
class CareerLookup:
    holland_code: str
    careers: tuple[str, ...]
    industries: tuple[str, ...]

    def as_dict(self) -> dict[str, object]:
        return {
            "holland_code": self.holland_code,
            "careers": list(self.careers),
            "industries": list(self.industries),
        }


def career_lookup(code: str, limit: int = 15) -> CareerLookup:
    """
    Extended careers and industries for any 1-6 letter Holland Code.

    Raises:
        ValidationError: If the code contains unknown or repeated letters
    """
    response = validate_input(HollandCodeInput, {"holland_code": code})
    if not response.success:
        raise ValidationError("holland_code", response.errors[0].message, code)
    normalized = (response.data or {})["holland_code"]

    careers = _dedupe(c for letter in normalized for c in EXTENDED_CAREERS_BY_TYPE[letter])
    industries = _dedupe(i for letter in normalized for i in INDUSTRIES_BY_TYPE[letter])
    return CareerLookup(normalized, tuple(careers[:limit]), tuple(industries))
