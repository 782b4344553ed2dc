import random

import pytest

from psychometric.domain.catalog import RIASEC_TYPES, get_instrument
from psychometric.domain.models import BrainScores, RiasecScores, SectionType, StepsScores
from psychometric.domain.scoring import (
    MAINTAIN_ALL_AREAS,
    employability_quotient,
    interpret,
    rank,
    round_half_up,
    score,
)
from psychometric.domain.validation import require_valid


def scored(section, raw):
    return score(section, require_valid(section, raw))


def test_riasec_counts_true_answers_per_type(builders):
    scores = scored(SectionType.RIASEC, builders.riasec({"R": 5, "I": 9, "A": 3, "S": 7, "E": 2, "C": 4}))

    assert scores == RiasecScores(R=5, I=9, A=3, S=7, E=2, C=4)
    assert scores.total == 30


def random_riasec(seed: int) -> dict[str, bool]:
    rng = random.Random(seed)
    return {qid: rng.random() < 0.5 for qid in get_instrument(SectionType.RIASEC).question_ids}


def random_steps(seed: int) -> dict[str, int]:
    rng = random.Random(seed)
    return {
        qid: rng.randint(1, 5) for qid in get_instrument(SectionType.EMPLOYABILITY).question_ids
    }


@pytest.mark.parametrize("seed", range(8))
def test_riasec_counts_sum_to_true_answers(seed):
    raw = random_riasec(seed)
    instrument = get_instrument(SectionType.RIASEC)

    scores = scored(SectionType.RIASEC, raw)

    assert scores.total == sum(raw.values())
    for tag in RIASEC_TYPES:
        assert scores.as_dict()[tag] == sum(raw[q] for q in instrument.ids_for_category(tag))


@pytest.mark.parametrize("seed", range(8))
def test_steps_averages_and_quotient_stay_in_range(seed):
    scores = scored(SectionType.EMPLOYABILITY, random_steps(seed))

    assert all(1 <= v <= 5 for v in scores.as_dict().values())
    assert 0 <= employability_quotient(scores) <= 10


@pytest.mark.parametrize("section", [SectionType.RIASEC, SectionType.EMPLOYABILITY])
def test_every_question_belongs_to_one_category(section):
    instrument = get_instrument(section)
    grouped = [q for c in instrument.categories for q in instrument.ids_for_category(c)]

    assert sorted(grouped) == sorted(instrument.question_ids)


def test_riasec_all_false_scores_zero(builders):
    assert scored(SectionType.RIASEC, builders.riasec({})).total == 0


def test_brain_sums_every_slot_including_first(builders):
    scores = scored(SectionType.BRAIN_PROFILE, builders.brain([4, 3, 2, 1]))

    assert scores == BrainScores(L1=40, L2=30, R1=20, R2=10)


def test_steps_category_means(builders):
    scores = scored(SectionType.EMPLOYABILITY, builders.steps())

    assert scores == StepsScores(S=4.0, T=3.2, E=2.8, P=4.4, Speaking=3.6)
    assert all(1 <= v <= 5 for v in scores.as_dict().values())


def test_insights_are_returned_unchanged(builders):
    insights = require_valid(SectionType.PERSONAL_INSIGHTS, builders.insights())
    assert score(SectionType.PERSONAL_INSIGHTS, insights) is insights


def test_rescoring_the_same_answers_is_identical(builders):
    raw = builders.steps()
    assert scored(SectionType.EMPLOYABILITY, raw) == scored(SectionType.EMPLOYABILITY, raw)


@pytest.mark.parametrize(
    "value, places, expected",
    [(7.25, 1, 7.3), (7.200000000000001, 1, 7.2), (3.125, 2, 3.13), (49.5, 0, 50.0)],
)
def test_round_half_up(value, places, expected):
    assert round_half_up(value, places) == expected


def test_rank_breaks_ties_by_priority():
    assert rank({"R": 3, "I": 3, "A": 3, "S": 3, "E": 3, "C": 3}, "RIASEC") == list("RIASEC")
    assert rank({"L1": 1, "L2": 5, "R1": 5, "R2": 0}, ("L1", "L2", "R1", "R2")) == [
        "L2",
        "R1",
        "L1",
        "R2",
    ]


@pytest.mark.parametrize(
    "steps, expected",
    [
        (StepsScores(S=4.0, T=3.2, E=2.8, P=4.4, Speaking=3.6), 7.2),
        (StepsScores(S=5, T=5, E=5, P=5, Speaking=5), 10.0),
        (StepsScores(S=1, T=1, E=1, P=1, Speaking=1), 2.0),
    ],
)
def test_employability_quotient(steps, expected):
    assert employability_quotient(steps) == expected


class TestInterpretation:
    def test_riasec_text_and_capped_fields(self):
        text, fields = interpret(SectionType.RIASEC, RiasecScores(R=5, I=9, A=3, S=7, E=2, C=4))

        assert text.startswith("Your Holland Code is ISR. Your top interests are: Investigative")
        assert "(9 points)" in text
        assert len(fields) == 8
        assert fields[:5] == ["Research", "Science", "Medicine", "Technology", "Analysis"]

    def test_brain_percentages_and_tips(self):
        text, tips = interpret(SectionType.BRAIN_PROFILE, BrainScores(L1=40, L2=30, R1=20, R2=10))

        assert "(40%)" in text and "(30%)" in text
        assert text.startswith("Your dominant brain quadrants are Analyst and Realist")
        assert tips == [
            "Use logical frameworks and step-by-step approaches",
            "Focus on facts and data-driven learning",
        ]

    def test_brain_zero_total_reports_zero_percent(self):
        text, _ = interpret(SectionType.BRAIN_PROFILE, BrainScores())
        assert text.count("(0%)") == 2

    def test_steps_band_sentence_and_weak_areas(self):
        text, tips = interpret(
            SectionType.EMPLOYABILITY, StepsScores(S=4.0, T=3.2, E=2.8, P=4.4, Speaking=3.6)
        )

        assert text == (
            "Your Employability Quotient is 7.2/10. Good potential with room for improvement."
        )
        assert len(tips) == 2
        assert tips[0].startswith("Develop teamwork skills")

    def test_steps_without_weak_areas(self):
        _, tips = interpret(SectionType.EMPLOYABILITY, StepsScores(S=4, T=4, E=4, P=4, Speaking=5))
        assert tips == [MAINTAIN_ALL_AREAS]

    def test_field_limit_is_configurable(self):
        _, fields = interpret(
            SectionType.RIASEC, RiasecScores(R=1, I=1, A=1), field_limit=3
        )
        assert fields == ["Engineering", "Agriculture", "Construction"]
