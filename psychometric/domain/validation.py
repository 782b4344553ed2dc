"""
Section response validation.

``validate`` is pure: it inspects a raw payload against the instrument
catalog and reports every violated rule. A payload is either accepted as a
whole (with a normalized copy for scoring) or rejected as a whole.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, assert_never

from ..infrastructure.exceptions import SectionValidationError, ValidationError
from .catalog import (
    BRAIN_QUADRANTS,
    BRAIN_RATING_MAX,
    BRAIN_RATING_MIN,
    LIKERT_MAX,
    LIKERT_MIN,
    InstrumentDefinition,
    get_instrument,
)
from .models import PersonalInsights, SectionType
from .schemas import (
    PersonalInsightsInput,
    TimeSpentInput,
    ValidationErrorDetail,
    validate_input,
)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[ValidationErrorDetail, ...] = ()
    normalized: Any = None  # str-keyed answers or a PersonalInsights record

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]


def _error(field: str, message: str, value: Any = None) -> ValidationErrorDetail:
    return ValidationErrorDetail(field=field, message=message, value=value)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _check_answer_map(
    instrument: InstrumentDefinition, raw: Any, errors: list[ValidationErrorDetail]
) -> dict[str, Any] | None:
    """Structural checks shared by the keyed instruments."""
    if not isinstance(raw, Mapping):
        errors.append(
            _error(
                "responses",
                f"{instrument.name} responses must be an object keyed by question id",
                type(raw).__name__,
            )
        )
        return None

    answers: dict[str, Any] = {}
    for key, value in raw.items():
        qid = str(key).strip()
        if qid in answers:
            errors.append(_error(f"responses.{qid}", "question answered more than once", value))
        answers[qid] = value

    expected = instrument.question_count
    if len(raw) != expected:
        errors.append(
            _error(
                "responses",
                f"expected exactly {expected} responses, got {len(raw)}",
                len(raw),
            )
        )

    known = set(instrument.question_ids)
    for qid in answers:
        if qid not in known:
            errors.append(_error(f"responses.{qid}", "unknown question id", qid))

    missing = [qid for qid in instrument.question_ids if qid not in answers]
    if missing:
        errors.append(
            _error("responses", f"missing answers for questions: {', '.join(missing)}", missing)
        )
    return answers


def _validate_interest(raw: Any) -> ValidationResult:
    instrument = get_instrument(SectionType.RIASEC)
    errors: list[ValidationErrorDetail] = []
    answers = _check_answer_map(instrument, raw, errors)
    if answers is None:
        return ValidationResult(False, tuple(errors))

    for qid in instrument.question_ids:
        if qid in answers and type(answers[qid]) is not bool:
            errors.append(_error(f"responses.{qid}", "answer must be true or false", answers[qid]))

    if errors:
        return ValidationResult(False, tuple(errors))
    return ValidationResult(True, normalized={qid: answers[qid] for qid in instrument.question_ids})


def _validate_brain(raw: Any) -> ValidationResult:
    instrument = get_instrument(SectionType.BRAIN_PROFILE)
    errors: list[ValidationErrorDetail] = []
    answers = _check_answer_map(instrument, raw, errors)
    if answers is None:
        return ValidationResult(False, tuple(errors))

    slots = len(BRAIN_QUADRANTS)
    for qid in instrument.question_ids:
        if qid not in answers:
            continue
        ratings = answers[qid]
        field = f"responses.{qid}"
        if not isinstance(ratings, list | tuple) or len(ratings) != slots:
            errors.append(_error(field, f"expected a list of exactly {slots} ratings", ratings))
            continue
        for position, rating in enumerate(ratings):
            if not _is_number(rating) or not math.isfinite(rating):
                errors.append(_error(f"{field}.{position}", "rating must be a number", rating))
            elif not BRAIN_RATING_MIN <= rating <= BRAIN_RATING_MAX:
                errors.append(
                    _error(
                        f"{field}.{position}",
                        f"rating must be between {BRAIN_RATING_MIN} and {BRAIN_RATING_MAX}",
                        rating,
                    )
                )

    if errors:
        return ValidationResult(False, tuple(errors))
    return ValidationResult(
        True, normalized={qid: list(answers[qid]) for qid in instrument.question_ids}
    )


def _validate_employability(raw: Any) -> ValidationResult:
    instrument = get_instrument(SectionType.EMPLOYABILITY)
    errors: list[ValidationErrorDetail] = []
    answers = _check_answer_map(instrument, raw, errors)
    if answers is None:
        return ValidationResult(False, tuple(errors))

    normalized: dict[str, int] = {}
    for qid in instrument.question_ids:
        if qid not in answers:
            continue
        value = answers[qid]
        field = f"responses.{qid}"
        if type(value) is not int:
            errors.append(_error(field, "answer must be an integer", value))
        elif not LIKERT_MIN <= value <= LIKERT_MAX:
            errors.append(
                _error(field, f"answer must be between {LIKERT_MIN} and {LIKERT_MAX}", value)
            )
        else:
            normalized[qid] = value

    if errors:
        return ValidationResult(False, tuple(errors))
    return ValidationResult(True, normalized=normalized)


def _validate_insights(raw: Any) -> ValidationResult:
    if not isinstance(raw, Mapping):
        return ValidationResult(
            False,
            (_error("responses", "personal insights must be an object", type(raw).__name__),),
        )

    response = validate_input(PersonalInsightsInput, dict(raw))
    if not response.success:
        errors = tuple(
            e.model_copy(update={"field": f"responses.{e.field}"}) for e in response.errors
        )
        return ValidationResult(False, errors)

    data = response.data or {}
    return ValidationResult(
        True,
        normalized=PersonalInsights(
            what_you_like=data["whatYouLike"],
            what_you_are_good_at=data["whatYouAreGoodAt"],
            recent_projects=data["recentProjects"],
            character_strengths=tuple(data["characterStrengths"]),
            values_in_life=tuple(data["valuesInLife"]),
        ),
    )


def validate(section: SectionType, raw_responses: Any) -> ValidationResult:
    """
    Check a raw section payload against its instrument.

    Example:
        >>> validate(SectionType.RIASEC, {"1": True}).is_valid
        False
    """
    match section:
        case SectionType.RIASEC:
            return _validate_interest(raw_responses)
        case SectionType.BRAIN_PROFILE:
            return _validate_brain(raw_responses)
        case SectionType.EMPLOYABILITY:
            return _validate_employability(raw_responses)
        case SectionType.PERSONAL_INSIGHTS:
            return _validate_insights(raw_responses)
        case _:
            assert_never(section)


def require_valid(section: SectionType, raw_responses: Any) -> Any:
    """Return the normalized payload or raise with the full list of violations."""
    result = validate(section, raw_responses)
    if not result.is_valid:
        raise SectionValidationError(section.value, list(result.errors))
    return result.normalized


def validate_time_spent(value: Any, maximum: float) -> float:
    """Minutes spent on a section: a finite number in ``[0, maximum]``."""
    if isinstance(value, bool):
        raise ValidationError("time_spent_minutes", "must be a number of minutes", value)
    response = validate_input(TimeSpentInput, {"time_spent_minutes": value})
    if not response.success:
        raise ValidationError("time_spent_minutes", response.errors[0].message, value)
    minutes = float((response.data or {})["time_spent_minutes"])
    if minutes > maximum:
        raise ValidationError(
            "time_spent_minutes", f"must not exceed {maximum:g} minutes", value
        )
    return minutes
