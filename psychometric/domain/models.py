from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Union, assert_never


class SectionType(str, Enum):
    RIASEC = "riasec"
    BRAIN_PROFILE = "brain_profile"
    EMPLOYABILITY = "employability"
    PERSONAL_INSIGHTS = "personal_insights"

    @classmethod
    def parse(cls, value: str | SectionType) -> SectionType:
        """Accept snake_case, kebab-case or camelCase section names."""
        if isinstance(value, SectionType):
            return value
        text = str(value).strip()
        if text.lower() in cls._value2member_map_:
            return cls(text.lower())
        normalized = re.sub(r"(?<!^)(?=[A-Z])", "_", text).replace("-", "_").lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown assessment section: {value!r}") from None


# Order in which sections are offered to the participant
SECTION_ORDER: tuple[SectionType, ...] = (
    SectionType.RIASEC,
    SectionType.BRAIN_PROFILE,
    SectionType.EMPLOYABILITY,
    SectionType.PERSONAL_INSIGHTS,
)


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def freeze(value: Any) -> Any:
    """Return a deep read-only copy of a JSON-like value."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): freeze(v) for k, v in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze``: plain dicts and lists, ready for JSON."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True, slots=True)
class RiasecScores:
    R: int = 0
    I: int = 0  # noqa: E741
    A: int = 0
    S: int = 0
    E: int = 0
    C: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"R": self.R, "I": self.I, "A": self.A, "S": self.S, "E": self.E, "C": self.C}

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())


@dataclass(frozen=True, slots=True)
class BrainScores:
    L1: float = 0
    L2: float = 0
    R1: float = 0
    R2: float = 0

    def as_dict(self) -> dict[str, float]:
        return {"L1": self.L1, "L2": self.L2, "R1": self.R1, "R2": self.R2}

    @property
    def total(self) -> float:
        return sum(self.as_dict().values())


@dataclass(frozen=True, slots=True)
class StepsScores:
    S: float = 0.0
    T: float = 0.0
    E: float = 0.0
    P: float = 0.0
    Speaking: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {"S": self.S, "T": self.T, "E": self.E, "P": self.P, "Speaking": self.Speaking}


@dataclass(frozen=True, slots=True)
class PersonalInsights:
    what_you_like: str
    what_you_are_good_at: str
    recent_projects: str
    character_strengths: tuple[str, ...]
    values_in_life: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "whatYouLike": self.what_you_like,
            "whatYouAreGoodAt": self.what_you_are_good_at,
            "recentProjects": self.recent_projects,
            "characterStrengths": list(self.character_strengths),
            "valuesInLife": list(self.values_in_life),
        }


ScoreVector = Union[RiasecScores, BrainScores, StepsScores, PersonalInsights]


def score_vector_from_dict(section: SectionType, data: Mapping[str, Any]) -> ScoreVector:
    """Rebuild a section's score vector from its stored dictionary form."""
    match section:
        case SectionType.RIASEC:
            return RiasecScores(**{k: int(v) for k, v in data.items()})
        case SectionType.BRAIN_PROFILE:
            return BrainScores(**dict(data))
        case SectionType.EMPLOYABILITY:
            return StepsScores(**{k: float(v) for k, v in data.items()})
        case SectionType.PERSONAL_INSIGHTS:
            return PersonalInsights(
                what_you_like=data["whatYouLike"],
                what_you_are_good_at=data["whatYouAreGoodAt"],
                recent_projects=data["recentProjects"],
                character_strengths=tuple(data["characterStrengths"]),
                values_in_life=tuple(data["valuesInLife"]),
            )
        case _:
            assert_never(section)


@dataclass(frozen=True, slots=True)
class SectionResult:
    section: SectionType
    raw_responses: Mapping[str, Any]  # read-only audit copy
    scores: ScoreVector
    time_spent_minutes: float
    completed_at: datetime
    interpretation: str
    recommendations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.raw_responses, MappingProxyType):
            object.__setattr__(self, "raw_responses", freeze(self.raw_responses))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))


@dataclass(frozen=True, slots=True)
class CompositeResult:
    holland_code: str
    dominant_quadrants: tuple[str, ...]
    employability_quotient: float
    interpretation: str
    career_recommendations: tuple[str, ...]
    learning_style_recommendations: tuple[str, ...]
    skill_development_areas: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "holland_code": self.holland_code,
            "dominant_quadrants": list(self.dominant_quadrants),
            "employability_quotient": self.employability_quotient,
            "interpretation": self.interpretation,
            "career_recommendations": list(self.career_recommendations),
            "learning_style_recommendations": list(self.learning_style_recommendations),
            "skill_development_areas": list(self.skill_development_areas),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompositeResult:
        return cls(
            holland_code=data["holland_code"],
            dominant_quadrants=tuple(data["dominant_quadrants"]),
            employability_quotient=float(data["employability_quotient"]),
            interpretation=data["interpretation"],
            career_recommendations=tuple(data["career_recommendations"]),
            learning_style_recommendations=tuple(data["learning_style_recommendations"]),
            skill_development_areas=tuple(data["skill_development_areas"]),
        )


@dataclass(frozen=True, slots=True)
class AssessmentSession:
    """
    Snapshot of one assessment attempt.

    Pure data: the engine never mutates a snapshot, it derives a new one.
    Completion flags are derived from the stored section results, so a flag
    can never disagree with the presence of that section's data.
    """

    id: int
    owner_id: str
    status: SessionStatus
    started_at: datetime
    results: Mapping[SectionType, SectionResult] = field(default_factory=dict)
    completed_at: datetime | None = None
    composite: CompositeResult | None = None
    # Instrument catalog the answers were given against
    catalog_version: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.results, MappingProxyType):
            object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    @property
    def sections_completed(self) -> dict[SectionType, bool]:
        return {section: section in self.results for section in SECTION_ORDER}

    @property
    def all_sections_completed(self) -> bool:
        return all(self.sections_completed.values())

    @property
    def completion_percentage(self) -> int:
        done = sum(self.sections_completed.values())
        return round(done / len(SECTION_ORDER) * 100)

    @property
    def next_section(self) -> SectionType | None:
        for section in SECTION_ORDER:
            if section not in self.results:
                return section
        return None

    @property
    def total_time_spent_minutes(self) -> float:
        return round(sum(r.time_spent_minutes for r in self.results.values()), 2)

    def result(self, section: SectionType) -> SectionResult | None:
        return self.results.get(section)

    def with_section(self, result: SectionResult) -> AssessmentSession:
        return replace(self, results={**self.results, result.section: result})

    def completed_with(self, composite: CompositeResult, at: datetime) -> AssessmentSession:
        return replace(
            self, status=SessionStatus.COMPLETED, composite=composite, completed_at=at
        )

    def projection(self) -> dict[str, Any]:
        """Compact view returned after every section submission."""
        return {
            "assessment_id": self.id,
            "status": self.status.value,
            "sections_completed": {s.value: done for s, done in self.sections_completed.items()},
            "completion_percentage": self.completion_percentage,
            "next_section": self.next_section.value if self.next_section else None,
            "composite": self.composite.as_dict() if self.composite else None,
        }
