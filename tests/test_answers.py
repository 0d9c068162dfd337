from __future__ import annotations

import random

import pytest

from spaced_study.study.answers import (
    build_multiple_choice_options,
    evaluate_answer,
    shuffled_options,
    split_blank,
)
from spaced_study.study.errors import InvalidTransitionError
from spaced_study.study.models import (
    Card,
    Classic,
    FillInBlank,
    MultipleChoice,
    SchedulingState,
    TypeAnswer,
    card_kind_from_name,
)


CAPITAL_OPTIONS = ("Lyon", "Paris", "Nice", "Lille")


def _mc_card() -> Card:
    return Card(
        id=1,
        front="Capital of France?",
        back="Paris",
        kind=MultipleChoice(CAPITAL_OPTIONS),
    )


def test_multiple_choice_requires_exact_match() -> None:
    card = _mc_card()

    assert evaluate_answer(card, "Paris") is True
    assert evaluate_answer(card, "paris") is False
    assert evaluate_answer(card, "Lyon") is False
    assert evaluate_answer(card, None) is False


def test_fill_in_blank_ignores_case_and_surrounding_space() -> None:
    card = Card(id=2, front="The sky is {{blank}}.", back=" Blue", kind=FillInBlank())

    assert evaluate_answer(card, "  BLUE ") is True
    assert evaluate_answer(card, "green") is False
    assert evaluate_answer(card, "") is False


def test_type_answer_ignores_case() -> None:
    card = Card(id=3, front="2 + 2", back="Four", kind=TypeAnswer())

    assert evaluate_answer(card, "four") is True
    assert evaluate_answer(card, "fourteen") is False


def test_classic_cards_cannot_be_checked() -> None:
    card = Card(id=4, front="Q", back="A", kind=Classic())

    with pytest.raises(InvalidTransitionError):
        evaluate_answer(card, "A")


def test_shuffled_options_are_a_seeded_permutation() -> None:
    card = _mc_card()

    first = shuffled_options(card, random.Random(11))
    second = shuffled_options(card, random.Random(11))

    assert first == second
    assert sorted(first) == sorted(CAPITAL_OPTIONS)
    assert card.options == CAPITAL_OPTIONS


def test_shuffled_options_empty_for_other_kinds() -> None:
    card = Card(id=5, front="Q", back="A")

    assert shuffled_options(card, random.Random(1)) == []


def test_build_multiple_choice_options_includes_answer_once() -> None:
    options = build_multiple_choice_options(
        " Paris ", ["Lyon", "", "  ", "Paris", "Nice "], random.Random(3)
    )

    assert sorted(options) == ["Lyon", "Nice", "Paris"]


def test_split_blank() -> None:
    assert split_blank("I {{blank}} coffee.") == ("I ", " coffee.")
    with pytest.raises(ValueError):
        split_blank("No placeholder here")


def test_card_validates_content() -> None:
    with pytest.raises(ValueError):
        Card(id=1, front="Q", back="A", difficulty=0)
    with pytest.raises(ValueError):
        Card(id=1, front="Q", back="A", difficulty=6)
    with pytest.raises(ValueError):
        Card(id=1, front="Q", back="Rome", kind=MultipleChoice(CAPITAL_OPTIONS))
    with pytest.raises(ValueError):
        MultipleChoice(())
    with pytest.raises(ValueError):
        Card(id=1, front="No blank", back="A", kind=FillInBlank())
    with pytest.raises(ValueError):
        Card(id=1, front="{{blank}} and {{blank}}", back="A", kind=FillInBlank())


def test_card_kind_from_name() -> None:
    assert card_kind_from_name(None) == Classic()
    assert card_kind_from_name("") == Classic()
    assert card_kind_from_name("multiple_choice", ["a", "b"]) == MultipleChoice(("a", "b"))
    assert card_kind_from_name("fill_in_the_blank") == FillInBlank()
    assert card_kind_from_name("type_the_answer") == TypeAnswer()
    assert card_kind_from_name("flip") == Classic()


def test_card_exposes_type_and_replaces_scheduling() -> None:
    card = _mc_card()
    state = SchedulingState(review_count=1, correct_count=1, interval=1)

    updated = card.with_scheduling(state)

    assert card.card_type == "multiple_choice"
    assert updated.scheduling == state
    assert card.scheduling == SchedulingState()
    assert updated.front == card.front
