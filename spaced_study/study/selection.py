"""Selecting and ordering the cards that make up a study session."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from spaced_study.study.models import Card, StudyMode


def is_due(card: Card, now: datetime) -> bool:
    """A card is due when it was never scheduled or its date has arrived."""
    next_review = card.scheduling.next_review_date
    return next_review is None or next_review <= now


def _urgency(card: Card, now: datetime) -> float:
    next_review = card.scheduling.next_review_date
    if next_review is None:
        return float("-inf")
    return (next_review - now).total_seconds() * 1000


def _difficulty_filter(filter_param: object) -> int:
    try:
        return int(filter_param)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Difficulty filter must be a number, got {filter_param!r}.") from exc


def select_cards(
    cards: Iterable[Card],
    mode: StudyMode,
    filter_param: Optional[object] = None,
    *,
    now: datetime,
) -> List[Card]:
    """Return the cards eligible for ``mode``, most urgent first.

    Ties keep their collection order, so identical input always yields the
    same queue.
    """
    mode = StudyMode(mode)
    needs_filter = mode in {StudyMode.BY_DECK, StudyMode.BY_TOPIC, StudyMode.BY_DIFFICULTY}
    if needs_filter and filter_param is None:
        raise ValueError(f"Study mode {mode.value!r} requires a filter value.")

    selected = list(cards)
    if mode is StudyMode.DUE:
        selected = [card for card in selected if is_due(card, now)]
    elif mode is StudyMode.BY_DECK:
        selected = [
            card for card in selected if card.deck_id is not None and card.deck_id == filter_param
        ]
    elif mode is StudyMode.BY_TOPIC:
        selected = [card for card in selected if card.topic and card.topic == filter_param]
    elif mode is StudyMode.BY_DIFFICULTY:
        difficulty = _difficulty_filter(filter_param)
        selected = [card for card in selected if card.difficulty == difficulty]

    return sorted(selected, key=lambda card: _urgency(card, now))


def available_topics(cards: Iterable[Card]) -> List[str]:
    """Distinct non-empty topics in the order they first appear."""
    topics: List[str] = []
    for card in cards:
        if card.topic and card.topic not in topics:
            topics.append(card.topic)
    return topics
