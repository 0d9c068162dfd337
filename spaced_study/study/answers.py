"""Answer checking and option shuffling for the objective card types."""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Tuple

from spaced_study.study.errors import InvalidTransitionError
from spaced_study.study.models import (
    BLANK_TOKEN,
    Card,
    Classic,
    FillInBlank,
    MultipleChoice,
    TypeAnswer,
)


def _normalize(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def evaluate_answer(card: Card, response: Optional[str]) -> bool:
    """Return whether ``response`` answers ``card`` correctly.

    Classic cards have no objective answer; the learner grades them directly.
    """
    match card.kind:
        case MultipleChoice():
            return response == card.back
        case FillInBlank() | TypeAnswer():
            return _normalize(response) == _normalize(card.back)
        case Classic():
            raise InvalidTransitionError("Classic cards are graded by the learner, not checked.")
        case _:
            raise TypeError(f"Unsupported card kind: {card.kind!r}")


def shuffled_options(card: Card, rng: random.Random) -> List[str]:
    """The card's options in presentation order; empty for non-MC cards."""
    options = list(card.options)
    rng.shuffle(options)
    return options


def build_multiple_choice_options(
    back: str,
    distractors: Iterable[str],
    rng: Optional[random.Random] = None,
) -> Tuple[str, ...]:
    """Assemble the stored option list for a new multiple choice card."""
    options = [back.strip()]
    for distractor in distractors:
        cleaned = distractor.strip()
        if cleaned and cleaned not in options:
            options.append(cleaned)
    (rng or random.Random()).shuffle(options)
    return tuple(options)


def split_blank(front: str) -> Tuple[str, str]:
    """Text before and after the ``{{blank}}`` placeholder."""
    before, found, after = front.partition(BLANK_TOKEN)
    if not found:
        raise ValueError(f"Card front has no {BLANK_TOKEN} placeholder.")
    return before, after
