"""
Pydantic schemas for input validation across the assessment engine.

These schemas validate the structured parts of a submission (personal
insights, time spent, Holland Code lookups) and provide the common
``validate_input`` helper that turns pydantic errors into a flat list.
"""

from __future__ import annotations

import re
from html import unescape
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .catalog import (
    INSIGHT_ITEM_MAX,
    INSIGHT_LIST_MIN,
    INSIGHT_TEXT_MAX,
    INSIGHT_TEXT_MIN,
    RIASEC_TYPES,
)


def _sanitize(value: str) -> str:
    cleaned = unescape(value.strip())
    cleaned = re.sub(
        r"<\s*script[^>]*>.*?<\s*/\s*script\s*>", "", cleaned, flags=re.IGNORECASE | re.DOTALL
    )
    cleaned = re.sub(r"<[^>]+>", "", cleaned)
    cleaned = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", cleaned)
    return cleaned


class BaseValidationSchema(BaseModel):
    """Base schema with common validation utilities."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        populate_by_name=True,
        extra="forbid",
    )

    @field_validator("*", mode="before")
    @classmethod
    def sanitize_strings(cls, v):
        """Strip markup and control characters from free text."""
        if isinstance(v, str):
            return _sanitize(v)
        return v


class PersonalInsightsInput(BaseValidationSchema):
    """Open-ended personal insights section."""

    what_you_like: str = Field(
        ..., alias="whatYouLike", min_length=INSIGHT_TEXT_MIN, max_length=INSIGHT_TEXT_MAX
    )
    what_you_are_good_at: str = Field(
        ..., alias="whatYouAreGoodAt", min_length=INSIGHT_TEXT_MIN, max_length=INSIGHT_TEXT_MAX
    )
    recent_projects: str = Field(
        ..., alias="recentProjects", min_length=INSIGHT_TEXT_MIN, max_length=INSIGHT_TEXT_MAX
    )
    character_strengths: list[str] = Field(
        ..., alias="characterStrengths", min_length=INSIGHT_LIST_MIN
    )
    values_in_life: list[str] = Field(..., alias="valuesInLife", min_length=INSIGHT_LIST_MIN)

    @field_validator("character_strengths", "values_in_life", mode="after")
    @classmethod
    def validate_choices(cls, value: list[str]) -> list[str]:
        cleaned = [_sanitize(item) for item in value]
        if any(not item for item in cleaned):
            raise ValueError("entries must not be empty")
        if any(len(item) > INSIGHT_ITEM_MAX for item in cleaned):
            raise ValueError(f"entries must be at most {INSIGHT_ITEM_MAX} characters")
        return cleaned


class TimeSpentInput(BaseValidationSchema):
    """Minutes a participant reports for one section."""

    model_config = ConfigDict(allow_inf_nan=False)

    time_spent_minutes: float = Field(0, ge=0)


class HollandCodeInput(BaseValidationSchema):
    """A Holland Code used for career lookups (1-6 distinct RIASEC letters)."""

    holland_code: str = Field(..., min_length=1, max_length=6)

    @field_validator("holland_code")
    @classmethod
    def validate_letters(cls, v: str) -> str:
        code = v.upper()
        invalid = sorted({letter for letter in code if letter not in RIASEC_TYPES})
        if invalid:
            raise ValueError(f"unknown interest letters: {', '.join(invalid)}")
        if len(set(code)) != len(code):
            raise ValueError("letters must not repeat")
        return code


class ValidationErrorDetail(BaseModel):
    """Schema for validation error details."""

    field: str
    message: str
    value: Any = None


class ValidationResponse(BaseModel):
    """Schema for validation responses."""

    success: bool
    errors: list[ValidationErrorDetail] = []
    data: dict[str, Any] | None = None


def validate_input(schema_class: type[BaseModel], data: dict[str, Any]) -> ValidationResponse:
    """
    Centralized validation function that returns structured validation results.

    Args:
        schema_class: Pydantic model class to use for validation
        data: Input data to validate

    Returns:
        ValidationResponse with success status and any errors

    Example:
        >>> result = validate_input(HollandCodeInput, {"holland_code": "isr"})
        >>> result.data["holland_code"]
        'ISR'
    """
    try:
        validated = schema_class.model_validate(data)
        return ValidationResponse(success=True, data=validated.model_dump(by_alias=True))
    except Exception as e:
        errors = []
        if hasattr(e, "errors"):  # Pydantic validation errors
            for error in e.errors():
                errors.append(
                    ValidationErrorDetail(
                        field=".".join(str(x) for x in error["loc"]) or "general",
                        message=error["msg"],
                        value=error.get("input"),
                    )
                )
        else:
            errors.append(ValidationErrorDetail(field="general", message=str(e)))

        return ValidationResponse(success=False, errors=errors)
