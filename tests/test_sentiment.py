"""Lexicon scoring rules."""

from __future__ import annotations

import pytest

from conftest import FixedRandom
from services.errors import ValidationError
from services.sentiment import SentimentService, classify


def _scorer(fraction: float = 0.5) -> SentimentService:
    return SentimentService(rng=FixedRandom(fraction))


def test_single_positive_marker_with_exclamation() -> None:
    score = _scorer().score("The service was excellent and very helpful!")

    assert score.positive_matches == 1
    assert score.negative_matches == 0
    assert score.polarity == 0.35
    assert score.sentiment == "positive"
    assert score.subjectivity == 0.314


def test_two_negative_markers() -> None:
    score = _scorer().score("This was terrible and a waste of time")

    assert score.negative_matches == 2
    assert score.polarity == -0.4
    assert score.sentiment == "negative"
    assert score.subjectivity == 0.4


@pytest.mark.parametrize(
    "text",
    [
        "Great support",
        "I love this product",
        "Best purchase of the year",
        "Staff were pleased to help and I was impressed",
    ],
)
def test_positive_only_text_is_positive(text: str) -> None:
    score = _scorer().score(text)

    assert score.negative_matches == 0
    assert score.polarity >= 0.25
    assert score.sentiment != "negative"


def test_one_positive_marker_sits_on_the_threshold() -> None:
    # 0.1 + 0.15 is exactly the positive threshold, which is exclusive.
    score = _scorer().score("good")

    assert score.polarity == 0.25
    assert score.sentiment == "neutral"


def test_two_positive_markers_are_positive() -> None:
    score = _scorer().score("Great people and a good result")

    assert score.polarity == 0.4
    assert score.sentiment == "positive"


def test_markers_match_inside_longer_words() -> None:
    score = _scorer().score("I was unimpressed by the goodness of it")

    assert score.positive_matches == 2


def test_repeated_marker_counts_once() -> None:
    score = _scorer().score("good good good good")

    assert score.positive_matches == 1
    assert score.polarity == 0.25


def test_matching_is_case_insensitive() -> None:
    assert _scorer().score("TERRIBLE").negative_matches == 1


@pytest.mark.parametrize("fraction, expected", [(0.0, -0.2), (0.5, 0.0), (1.0, 0.2)])
def test_tie_draws_from_bounded_range(fraction: float, expected: float) -> None:
    rng = FixedRandom(fraction)
    score = SentimentService(rng=rng).score("The meeting is on Tuesday")

    assert rng.calls == 1
    assert score.polarity == expected
    assert score.sentiment == "neutral"


def test_mixed_markers_are_a_tie() -> None:
    rng = FixedRandom(0.75)
    score = SentimentService(rng=rng).score("good food but bad parking")

    assert rng.calls == 1
    assert score.polarity == 0.1
    assert -0.2 <= score.polarity <= 0.2


def test_tie_with_real_randomness_stays_in_range() -> None:
    scorer = SentimentService()
    for _ in range(200):
        assert -0.2 <= scorer.score("nothing to report").polarity <= 0.2


def test_zero_polarity_is_pushed_negative_by_exclamation() -> None:
    score = _scorer(0.5).score("The meeting is on Tuesday!")

    assert score.polarity == -0.1


def test_exclamation_bonus_caps_at_three_marks() -> None:
    three = _scorer().score("terrible!!!")
    five = _scorer().score("terrible!!!!!")

    assert three.polarity == -0.55
    assert five.polarity == three.polarity


def test_exclamation_adjustment_is_not_clamped() -> None:
    text = "excellent great good amazing wonderful perfect outstanding!!!!"
    score = _scorer().score(text)

    assert score.positive_matches == 7
    assert score.polarity == 1.2
    assert score.subjectivity == 0.9


def test_subjectivity_caps_at_point_nine() -> None:
    assert _scorer().score("awful horrible").subjectivity == 0.9


def test_scores_are_rounded_to_three_places() -> None:
    scorer = SentimentService()
    for text in [
        "The service was excellent and very helpful!",
        "meh",
        "broken and useless, I hate it!!",
        "a b c d e f g good",
    ]:
        score = scorer.score(text)
        assert score.polarity == round(score.polarity, 3)
        assert score.subjectivity == round(score.subjectivity, 3)


@pytest.mark.parametrize("bad", ["", "   \n\t", None, 42, ["good"]])
def test_invalid_text_is_rejected(bad) -> None:
    with pytest.raises(ValidationError):
        _scorer().score(bad)


@pytest.mark.parametrize(
    "polarity, label",
    [(0.26, "positive"), (0.25, "neutral"), (0.0, "neutral"), (-0.25, "neutral"), (-0.251, "negative")],
)
def test_classify_thresholds(polarity: float, label: str) -> None:
    assert classify(polarity) == label
