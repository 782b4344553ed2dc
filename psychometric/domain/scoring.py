from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, assert_never

from .catalog import (
    BRAIN_INTERPRETATIONS,
    BRAIN_QUADRANTS,
    LEARNING_TIPS,
    RIASEC_FIELDS,
    RIASEC_INTERPRETATIONS,
    RIASEC_TYPES,
    STEPS_CATEGORIES,
    STEPS_IMPROVEMENT_TIPS,
    get_instrument,
)
from .models import (
    BrainScores,
    PersonalInsights,
    RiasecScores,
    ScoreVector,
    SectionType,
    StepsScores,
)

MAINTAIN_ALL_AREAS = "Continue developing all areas to maintain high employability"


def round_half_up(value: float, places: int = 1) -> float:
    """Decimal rounding with ties away from zero (2.25 -> 2.3)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def rank(scores: Mapping[str, float], priority: Sequence[str]) -> list[str]:
    """
    Order categories by score descending; equal scores keep ``priority`` order.

    Example:
        >>> rank({"R": 2, "I": 2, "A": 5}, ("R", "I", "A"))
        ['A', 'R', 'I']
    """
    return sorted(priority, key=lambda key: -scores[key])


def score_riasec(answers: Mapping[str, bool]) -> RiasecScores:
    instrument = get_instrument(SectionType.RIASEC)
    counts = dict.fromkeys(RIASEC_TYPES, 0)
    for question in instrument.questions:
        if answers.get(question.id) is True:
            counts[question.tag] += 1
    return RiasecScores(**counts)


def score_brain(answers: Mapping[str, Sequence[float]]) -> BrainScores:
    instrument = get_instrument(SectionType.BRAIN_PROFILE)
    totals: list[float] = [0] * len(BRAIN_QUADRANTS)
    for question in instrument.questions:
        for position, rating in enumerate(answers[question.id]):
            totals[position] += rating
    # Fractional ratings would otherwise carry binary float noise into storage
    tidy = [t if isinstance(t, int) else round(t, 2) for t in totals]
    return BrainScores(**dict(zip(BRAIN_QUADRANTS, tidy)))


def score_steps(answers: Mapping[str, int]) -> StepsScores:
    instrument = get_instrument(SectionType.EMPLOYABILITY)
    averages = {}
    for category in STEPS_CATEGORIES:
        values = [answers[qid] for qid in instrument.ids_for_category(category)]
        averages[category] = round_half_up(sum(values) / len(values), 2)
    return StepsScores(**averages)


def score(section: SectionType, normalized: Any) -> ScoreVector:
    """
    Compute the score vector of an already validated payload.

    Deterministic: the same answers always give the same vector.
    """
    match section:
        case SectionType.RIASEC:
            return score_riasec(normalized)
        case SectionType.BRAIN_PROFILE:
            return score_brain(normalized)
        case SectionType.EMPLOYABILITY:
            return score_steps(normalized)
        case SectionType.PERSONAL_INSIGHTS:
            assert isinstance(normalized, PersonalInsights)
            return normalized
        case _:
            assert_never(section)


def employability_quotient(steps: StepsScores) -> float:
    """Mean of the five STEPS averages scaled to 0-10, one decimal."""
    averages = list(steps.as_dict().values())
    mean = sum(averages) / len(averages)
    return round_half_up((mean / 5) * 10, 1)


def readiness_sentence(quotient: float) -> str:
    if quotient >= 8:
        return "Excellent job readiness!"
    if quotient >= 6:
        return "Good potential with room for improvement."
    if quotient >= 4:
        return "Moderate job readiness - focus on skill development."
    return "Significant improvement needed in key employability skills."


# ---------- Per-section interpretation ----------


def interpret_riasec(scores: RiasecScores, field_limit: int = 8) -> tuple[str, list[str]]:
    values = scores.as_dict()
    top = rank(values, RIASEC_TYPES)[:3]
    descriptions = [f"{RIASEC_INTERPRETATIONS[t]} ({values[t]} points)" for t in top]
    text = f"Your Holland Code is {''.join(top)}. Your top interests are: {', '.join(descriptions)}"

    fields: list[str] = []
    for letter in top:
        for name in RIASEC_FIELDS[letter]:
            if name not in fields:
                fields.append(name)
    return text, fields[:field_limit]


def interpret_brain(scores: BrainScores) -> tuple[str, list[str]]:
    values = scores.as_dict()
    ordered = rank(values, BRAIN_QUADRANTS)
    total = scores.total

    def share(quadrant: str) -> int:
        if not total:
            return 0
        return int(round_half_up(values[quadrant] / total * 100, 0))

    descriptions = [f"{BRAIN_INTERPRETATIONS[q]} ({share(q)}%)" for q in ordered[:2]]
    text = f"Your dominant brain quadrants are {' and '.join(descriptions)}"
    return text, list(LEARNING_TIPS[ordered[0]])


def interpret_steps(scores: StepsScores, threshold: float = 3.5) -> tuple[str, list[str]]:
    quotient = employability_quotient(scores)
    text = f"Your Employability Quotient is {quotient:.1f}/10. {readiness_sentence(quotient)}"
    weak = [c for c, avg in scores.as_dict().items() if avg < threshold]
    if weak:
        return text, [STEPS_IMPROVEMENT_TIPS[c] for c in weak]
    return text, [MAINTAIN_ALL_AREAS]


def interpret_insights(insights: PersonalInsights) -> tuple[str, list[str]]:
    strengths = len(insights.character_strengths)
    values = len(insights.values_in_life)
    text = (
        f"You identified {strengths} character strengths and {values} personal values "
        "that will shape your career recommendations."
    )
    return text, []


def interpret(
    section: SectionType,
    scores: ScoreVector,
    *,
    field_limit: int = 8,
    skill_threshold: float = 3.5,
) -> tuple[str, list[str]]:
    """Human-readable interpretation and recommendations for one section."""
    match section:
        case SectionType.RIASEC:
            assert isinstance(scores, RiasecScores)
            return interpret_riasec(scores, field_limit)
        case SectionType.BRAIN_PROFILE:
            assert isinstance(scores, BrainScores)
            return interpret_brain(scores)
        case SectionType.EMPLOYABILITY:
            assert isinstance(scores, StepsScores)
            return interpret_steps(scores, skill_threshold)
        case SectionType.PERSONAL_INSIGHTS:
            assert isinstance(scores, PersonalInsights)
            return interpret_insights(scores)
        case _:
            assert_never(section)
