"""Workflow connecting the card store with the study engine."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone, tzinfo
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from spaced_study.db.cards import (
    count_decks,
    get_card,
    list_cards,
    record_card_review,
    reset_card_progress,
    scheduling_state_of,
)
from spaced_study.study.models import StudyMode
from spaced_study.study.selection import select_cards
from spaced_study.study.session import GradeOutcome, StudySession
from spaced_study.study.srs import reset_progress
from spaced_study.study.statistics import CollectionStats, DeckStats, collection_stats, deck_stats


LOGGER = logging.getLogger(__name__)


class StudyWorkflow:
    """Loads cards, runs sessions over them and writes grading results back."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rng: Optional[random.Random] = None,
        timezone_info: tzinfo = timezone.utc,
    ) -> None:
        self._session_factory = session_factory
        self._rng = rng
        self._tz = timezone_info

    async def start_session(
        self,
        mode: StudyMode,
        filter_param: Optional[object] = None,
        now: Optional[datetime] = None,
    ) -> StudySession:
        """Select cards for ``mode`` and start a session over them."""
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as db_session:
            cards = await list_cards(db_session)

        queue = select_cards(cards, mode, filter_param, now=now)
        study_session = StudySession(rng=self._rng)
        study_session.start(queue)
        LOGGER.info(
            "Started %s study session with %d of %d cards.",
            StudyMode(mode).value,
            len(queue),
            len(cards),
        )
        return study_session

    async def grade(
        self,
        study_session: StudySession,
        grade: int,
        now: Optional[datetime] = None,
        *,
        position: Optional[int] = None,
    ) -> GradeOutcome:
        """Grade the current card and persist its new schedule.

        The session advances only after the new schedule is stored.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        outcome = study_session.prepare_grade(grade, now, position=position)
        await self._persist(outcome, now)
        study_session.commit_grade(outcome)
        return outcome

    async def grade_answer(
        self,
        study_session: StudySession,
        now: Optional[datetime] = None,
        *,
        position: Optional[int] = None,
    ) -> GradeOutcome:
        """Grade an objective card from the learner's submitted answer."""
        if now is None:
            now = datetime.now(timezone.utc)
        outcome = study_session.prepare_answer_grade(now, position=position)
        await self._persist(outcome, now)
        study_session.commit_grade(outcome)
        return outcome

    async def _persist(self, outcome: GradeOutcome, now: datetime) -> None:
        try:
            async with self._session_factory() as db_session:
                async with db_session.begin():
                    await record_card_review(
                        db_session, outcome.card_id, int(outcome.grade), outcome.updated, now=now
                    )
        except Exception:
            LOGGER.exception("Failed to store review of card %s.", outcome.card_id)
            raise
        LOGGER.debug(
            "Card %s graded %d; next review in %d days.",
            outcome.card_id,
            outcome.grade,
            outcome.updated.interval,
        )

    async def reset_progress(self, card_id: int, now: Optional[datetime] = None) -> None:
        """Return a card to the never-reviewed state."""
        async with self._session_factory() as db_session:
            async with db_session.begin():
                record = await get_card(db_session, card_id)
                if record is None:
                    raise LookupError(f"Card {card_id} does not exist.")
                state = reset_progress(scheduling_state_of(record))
                await reset_card_progress(db_session, card_id, state, now=now)
        LOGGER.info("Reset study progress for card %s.", card_id)

    async def dashboard(self, now: Optional[datetime] = None) -> CollectionStats:
        if now is None:
            now = datetime.now(timezone.utc)
        async with self._session_factory() as db_session:
            cards = await list_cards(db_session)
            total_decks = await count_decks(db_session)
        return collection_stats(cards, now, self._tz, total_decks=total_decks)

    async def deck_overview(self, deck_id: int) -> DeckStats:
        async with self._session_factory() as db_session:
            cards = await list_cards(db_session, deck_id=deck_id)
        return deck_stats(cards)
