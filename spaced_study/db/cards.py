"""Helpers for working with card persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from spaced_study.study.models import (
    CARD_TYPE_NAMES,
    Card,
    Classic,
    SchedulingState,
    card_kind_from_name,
)

from . import CardRecord, CardReview, Deck


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CardPayload:
    """Definition of a card to be persisted."""

    front: str
    back: str
    card_type: str = "classic"
    options: Sequence[str] = field(default_factory=tuple)
    difficulty: int = 1
    deck_id: Optional[int] = None
    topic: Optional[str] = None

    def normalized(self) -> "CardPayload":
        """Return a payload with leading/trailing whitespace stripped."""
        topic = self.topic.strip() if isinstance(self.topic, str) else self.topic
        return CardPayload(
            front=self.front.strip(),
            back=self.back.strip(),
            card_type=self.card_type,
            options=tuple(option.strip() for option in self.options if option.strip()),
            difficulty=self.difficulty,
            deck_id=self.deck_id,
            topic=topic or None,
        )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def scheduling_state_of(record: CardRecord) -> SchedulingState:
    return SchedulingState(
        review_count=record.review_count,
        correct_count=record.correct_count,
        interval=record.interval,
        ease_factor=record.ease_factor,
        next_review_date=_as_utc(record.next_review_at),
        last_reviewed=_as_utc(record.last_reviewed_at),
    )


def to_card(record: CardRecord) -> Card:
    """Build the engine's snapshot of a stored card.

    Rows whose type is unknown or whose content does not fit their type are
    studied as classic cards.
    """
    if record.card_type and record.card_type not in CARD_TYPE_NAMES:
        LOGGER.warning("Card %s has unknown type %r; treating it as classic.", record.id, record.card_type)

    fields = dict(
        id=record.id,
        front=record.front,
        back=record.back,
        difficulty=record.difficulty,
        deck_id=record.deck_id,
        topic=record.topic,
        scheduling=scheduling_state_of(record),
    )
    try:
        return Card(kind=card_kind_from_name(record.card_type, record.options), **fields)
    except ValueError as exc:
        LOGGER.warning("Card %s is malformed (%s); treating it as classic.", record.id, exc)
        return Card(kind=Classic(), **fields)


async def create_deck(session: AsyncSession, title: str, color: Optional[str] = None) -> Deck:
    deck = Deck(title=title.strip(), color=color)
    session.add(deck)
    await session.flush()
    return deck


async def create_card(session: AsyncSession, payload: CardPayload) -> CardRecord:
    """Validate and store a new, never-reviewed card."""
    normalized = payload.normalized()
    if normalized.card_type not in CARD_TYPE_NAMES:
        raise ValueError(f"Unknown card type: {normalized.card_type!r}.")
    kind = card_kind_from_name(normalized.card_type, normalized.options)
    # Raises ValueError for malformed content before anything is written.
    card = Card(
        id=None,
        front=normalized.front,
        back=normalized.back,
        kind=kind,
        difficulty=normalized.difficulty,
    )

    record = CardRecord(
        deck_id=normalized.deck_id,
        front=normalized.front,
        back=normalized.back,
        card_type=kind.name,
        options=list(card.options) or None,
        difficulty=normalized.difficulty,
        topic=normalized.topic,
        review_count=0,
        correct_count=0,
        interval=0,
        ease_factor=SchedulingState().ease_factor,
        next_review_at=None,
        last_reviewed_at=None,
    )
    session.add(record)
    await session.flush()
    return record


async def count_decks(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Deck))
    return int(result.scalar_one())


async def get_card(session: AsyncSession, card_id: int) -> Optional[CardRecord]:
    return await session.get(CardRecord, card_id)


async def list_cards(session: AsyncSession, deck_id: Optional[int] = None) -> List[Card]:
    """Return card snapshots in collection (creation) order."""
    stmt = select(CardRecord).order_by(CardRecord.created_at, CardRecord.id)
    if deck_id is not None:
        stmt = stmt.where(CardRecord.deck_id == deck_id)
    result = await session.execute(stmt)
    return [to_card(record) for record in result.scalars().all()]


def _apply_state(record: CardRecord, state: SchedulingState, now: datetime) -> None:
    record.review_count = state.review_count
    record.correct_count = state.correct_count
    record.interval = state.interval
    record.ease_factor = state.ease_factor
    record.next_review_at = state.next_review_date
    record.last_reviewed_at = state.last_reviewed
    record.updated_at = now


async def record_card_review(
    session: AsyncSession,
    card_id: int,
    grade: int,
    state: SchedulingState,
    now: Optional[datetime] = None,
) -> CardRecord:
    """Persist a scheduling outcome for a card along with a history entry."""
    if now is None:
        now = datetime.now(timezone.utc)

    record = await session.get(CardRecord, card_id)
    if record is None:
        raise LookupError(f"Card {card_id} does not exist.")

    _apply_state(record, state, now)
    session.add(
        CardReview(
            card_id=record.id,
            grade=grade,
            interval=state.interval,
            ease_factor=state.ease_factor,
            reviewed_at=state.last_reviewed or now,
        )
    )
    await session.flush()
    return record


async def reset_card_progress(
    session: AsyncSession,
    card_id: int,
    state: SchedulingState,
    now: Optional[datetime] = None,
) -> CardRecord:
    """Overwrite a card's scheduling fields, keeping its review history."""
    if now is None:
        now = datetime.now(timezone.utc)

    record = await session.get(CardRecord, card_id)
    if record is None:
        raise LookupError(f"Card {card_id} does not exist.")

    _apply_state(record, state, now)
    await session.flush()
    return record
