"""Read-only statistics over a card collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Sequence

from spaced_study.study.models import Card
from spaced_study.study.selection import is_due
from spaced_study.study.srs import round_half_up


MATURE_INTERVAL_DAYS = 21
OVERDUE_AFTER = timedelta(hours=24)


@dataclass(frozen=True, slots=True)
class CollectionStats:
    """Dashboard and study-page counters for a set of cards."""

    total: int
    studied: int
    accuracy: int
    due: int
    overdue: int
    new: int
    learning: int
    mature: int
    study_streak: int
    total_decks: int = 0

    @property
    def ready(self) -> int:
        """Due cards that are not yet overdue."""
        return self.due - self.overdue


@dataclass(frozen=True, slots=True)
class DeckStats:
    total: int
    studied: int
    average_accuracy: int
    average_difficulty: float


def is_overdue(card: Card, now: datetime) -> bool:
    next_review = card.scheduling.next_review_date
    return next_review is not None and next_review < now - OVERDUE_AFTER


def card_accuracy(card: Card) -> int:
    """Percentage of a card's reviews that were successful."""
    state = card.scheduling
    if state.review_count == 0:
        return 0
    return round_half_up(100 * state.correct_count / state.review_count)


def study_days(cards: Sequence[Card], tz: tzinfo = timezone.utc) -> int:
    """Number of distinct calendar days on which any card was last reviewed.

    This counts days, it does not require them to be consecutive.
    """
    days = {
        card.scheduling.last_reviewed.astimezone(tz).date()
        for card in cards
        if card.scheduling.last_reviewed is not None
    }
    return len(days)


def collection_stats(
    cards: Sequence[Card],
    now: datetime,
    tz: tzinfo = timezone.utc,
    *,
    total_decks: int = 0,
) -> CollectionStats:
    total_reviews = sum(card.scheduling.review_count for card in cards)
    correct_reviews = sum(card.scheduling.correct_count for card in cards)
    accuracy = round_half_up(100 * correct_reviews / total_reviews) if total_reviews else 0

    return CollectionStats(
        total=len(cards),
        studied=sum(1 for card in cards if card.scheduling.review_count > 0),
        accuracy=accuracy,
        due=sum(1 for card in cards if is_due(card, now)),
        overdue=sum(1 for card in cards if is_overdue(card, now)),
        new=sum(1 for card in cards if card.scheduling.review_count == 0),
        learning=sum(
            1
            for card in cards
            if card.scheduling.review_count > 0 and card.scheduling.interval < MATURE_INTERVAL_DAYS
        ),
        mature=sum(1 for card in cards if card.scheduling.interval >= MATURE_INTERVAL_DAYS),
        study_streak=study_days(cards, tz),
        total_decks=total_decks,
    )


def deck_stats(cards: Sequence[Card]) -> DeckStats:
    """Summary shown on a deck's detail page."""
    studied = [card for card in cards if card.scheduling.review_count > 0]
    if studied:
        accuracy_sum = sum(
            100 * card.scheduling.correct_count / card.scheduling.review_count for card in studied
        )
        average_accuracy = round_half_up(accuracy_sum / len(studied))
    else:
        average_accuracy = 0

    if cards:
        average_difficulty = round_half_up(sum(card.difficulty for card in cards) / len(cards) * 10) / 10
    else:
        average_difficulty = 0.0

    return DeckStats(
        total=len(cards),
        studied=len(studied),
        average_accuracy=average_accuracy,
        average_difficulty=average_difficulty,
    )
