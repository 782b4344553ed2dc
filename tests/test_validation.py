"""Tests for section response validation and submission input schemas."""

import math

import pytest

from psychometric.domain.models import PersonalInsights, SectionType
from psychometric.domain.schemas import HollandCodeInput, PersonalInsightsInput, validate_input
from psychometric.domain.validation import require_valid, validate, validate_time_spent
from psychometric.infrastructure.exceptions import SectionValidationError, ValidationError


class TestInterestInventory:
    def test_accepts_complete_boolean_answers(self, builders):
        result = validate(SectionType.RIASEC, builders.riasec({"I": 3}))

        assert result.is_valid
        assert result.errors == ()
        assert len(result.normalized) == 54

    def test_integer_keys_are_normalized_to_strings(self, builders):
        raw = {int(k): v for k, v in builders.riasec({"R": 2}).items()}

        result = validate(SectionType.RIASEC, raw)

        assert result.is_valid
        assert set(result.normalized) == {str(i) for i in range(1, 55)}

    def test_53_entries_reports_count_and_missing_question(self, builders):
        raw = builders.riasec({"R": 1})
        del raw["54"]

        result = validate(SectionType.RIASEC, raw)

        assert not result.is_valid
        assert "expected exactly 54 responses, got 53" in result.messages
        assert any("54" in m and "missing" in m for m in result.messages)

    def test_rejects_truthy_integers(self, builders):
        raw = builders.riasec({})
        raw["7"] = 1

        result = validate(SectionType.RIASEC, raw)

        assert not result.is_valid
        assert [e.field for e in result.errors] == ["responses.7"]

    def test_unknown_question_id_is_reported(self, builders):
        raw = builders.riasec({})
        del raw["3"]
        raw["99"] = True

        result = validate(SectionType.RIASEC, raw)

        fields = {e.field for e in result.errors}
        assert "responses.99" in fields
        assert any("missing answers for questions: 3" == m for m in result.messages)

    def test_rejects_non_mapping_payload(self):
        result = validate(SectionType.RIASEC, [True] * 54)

        assert not result.is_valid
        assert result.errors[0].field == "responses"


class TestBrainProfile:
    def test_accepts_ten_rating_sets(self, builders):
        result = validate(SectionType.BRAIN_PROFILE, builders.brain())

        assert result.is_valid
        assert result.normalized["1"] == [4, 3, 2, 1]

    def test_ratings_need_not_be_a_permutation(self, builders):
        assert validate(SectionType.BRAIN_PROFILE, builders.brain([2, 2, 2, 2])).is_valid

    @pytest.mark.parametrize(
        "ratings",
        [[4, 3, 2], [4, 3, 2, 1, 1], [5, 3, 2, 1], [0, 3, 2, 1], [True, 3, 2, 1], [math.nan, 1, 1, 1]],
    )
    def test_rejects_malformed_rating_sets(self, builders, ratings):
        raw = builders.brain()
        raw["4"] = ratings

        result = validate(SectionType.BRAIN_PROFILE, raw)

        assert not result.is_valid
        assert all(e.field.startswith("responses.4") for e in result.errors)

    def test_reports_every_bad_set(self, builders):
        raw = builders.brain()
        raw["2"] = "4,3,2,1"
        raw["9"] = [4, 3, 2, 9]

        result = validate(SectionType.BRAIN_PROFILE, raw)

        assert {e.field for e in result.errors} == {"responses.2", "responses.9.3"}


class TestEmployability:
    def test_accepts_likert_answers(self, builders):
        assert validate(SectionType.EMPLOYABILITY, builders.steps()).is_valid

    def test_floats_are_rejected_even_when_whole(self, builders):
        raw = builders.steps()
        raw["1"] = 4.0

        result = validate(SectionType.EMPLOYABILITY, raw)

        assert not result.is_valid
        assert [(e.field, e.message) for e in result.errors] == [
            ("responses.1", "answer must be an integer")
        ]

    def test_reports_all_out_of_range_answers(self, builders):
        raw = builders.steps()
        raw["1"] = 0
        raw["25"] = 6
        raw["13"] = True
        raw["14"] = 2.5

        result = validate(SectionType.EMPLOYABILITY, raw)

        assert not result.is_valid
        assert {e.field for e in result.errors} == {
            "responses.1",
            "responses.25",
            "responses.13",
            "responses.14",
        }


class TestPersonalInsights:
    def test_valid_insights_become_a_record(self, builders):
        result = validate(SectionType.PERSONAL_INSIGHTS, builders.insights())

        assert result.is_valid
        assert isinstance(result.normalized, PersonalInsights)
        assert result.normalized.character_strengths == ("Curiosity", "Persistence", "Kindness")

    def test_short_text_and_small_lists_are_rejected_together(self, builders):
        raw = builders.insights(whatYouLike="   short  ", valuesInLife=["Honesty", "Family"])

        result = validate(SectionType.PERSONAL_INSIGHTS, raw)

        fields = {e.field for e in result.errors}
        assert fields == {"responses.whatYouLike", "responses.valuesInLife"}

    def test_rejects_blank_and_overlong_choices(self, builders):
        blank = validate(
            SectionType.PERSONAL_INSIGHTS,
            builders.insights(characterStrengths=["Curiosity", "  ", "Kindness"]),
        )
        overlong = validate(
            SectionType.PERSONAL_INSIGHTS,
            builders.insights(characterStrengths=["Curiosity", "x" * 101, "Kindness"]),
        )

        assert not blank.is_valid
        assert not overlong.is_valid

    def test_markup_is_stripped_before_length_checks(self, builders):
        raw = builders.insights(recentProjects="<b>tiny</b>")

        result = validate(SectionType.PERSONAL_INSIGHTS, raw)

        assert not result.is_valid
        assert result.errors[0].field == "responses.recentProjects"

    def test_unknown_fields_are_rejected(self, builders):
        raw = builders.insights(favouriteColour="green")

        assert not validate(SectionType.PERSONAL_INSIGHTS, raw).is_valid


class TestRequireValid:
    def test_raises_with_full_error_list(self, builders):
        raw = builders.steps()
        raw["2"] = 9
        raw["3"] = -1

        with pytest.raises(SectionValidationError) as exc_info:
            require_valid(SectionType.EMPLOYABILITY, raw)

        assert exc_info.value.section == "employability"
        assert len(exc_info.value.validation_errors) == 2
        assert exc_info.value.details["errors"][0]["field"] == "responses.2"


class TestTimeSpent:
    @pytest.mark.parametrize("value, expected", [(0, 0.0), (12.5, 12.5), ("7", 7.0)])
    def test_accepts_finite_non_negative_minutes(self, value, expected):
        assert validate_time_spent(value, 600) == expected

    @pytest.mark.parametrize("value", [-1, math.inf, math.nan, 601, True, "soon"])
    def test_rejects_invalid_minutes(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_time_spent(value, 600)
        assert exc_info.value.field == "time_spent_minutes"


class TestSchemas:
    def test_insights_schema_accepts_snake_case_names(self):
        result = validate_input(
            PersonalInsightsInput,
            {
                "what_you_like": "Reading science fiction",
                "what_you_are_good_at": "Organising school events",
                "recent_projects": "Ran a charity bake sale",
                "character_strengths": ["Grit", "Humour", "Fairness"],
                "values_in_life": ["Freedom", "Health", "Learning"],
            },
        )

        assert result.success is True
        assert result.data["whatYouLike"] == "Reading science fiction"

    @pytest.mark.parametrize("code, ok", [("isr", True), ("R", True), ("RIASEC", True), ("ISX", False), ("IIS", False), ("", False)])
    def test_holland_code_input(self, code, ok):
        result = validate_input(HollandCodeInput, {"holland_code": code})
        assert result.success is ok
        if ok:
            assert result.data["holland_code"] == code.upper()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("riasec", SectionType.RIASEC),
        ("RIASEC", SectionType.RIASEC),
        ("brainProfile", SectionType.BRAIN_PROFILE),
        ("brain-profile", SectionType.BRAIN_PROFILE),
        ("employability", SectionType.EMPLOYABILITY),
        ("personalInsights", SectionType.PERSONAL_INSIGHTS),
    ],
)
def test_section_names_are_parsed_leniently(name, expected):
    assert SectionType.parse(name) is expected


def test_unknown_section_name_raises():
    with pytest.raises(ValueError):
        SectionType.parse("aptitude")
