"""State machine driving a single pass through an ordered card queue."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from spaced_study.study.answers import evaluate_answer, shuffled_options
from spaced_study.study.errors import (
    AlreadyGradedError,
    InvalidTransitionError,
    NoCardsAvailableError,
)
from spaced_study.study.models import Card, Classic, Grade, MultipleChoice, SchedulingState
from spaced_study.study.srs import grade_for_correctness, preview_intervals, schedule


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Aggregate(str, Enum):
    """Read models a caller may need to refresh after grading."""

    CARDS = "cards"
    CARD_DETAILS = "card_details"
    DECK_CARDS = "deck_cards"
    DASHBOARD_STATS = "dashboard_stats"


_GRADE_AGGREGATES = frozenset(
    {Aggregate.CARDS, Aggregate.CARD_DETAILS, Aggregate.DECK_CARDS, Aggregate.DASHBOARD_STATS}
)


@dataclass(slots=True)
class SessionInput:
    """Answer data the learner has entered for the card on screen."""

    selected_option: Optional[str] = None
    typed_text: str = ""


@dataclass(frozen=True, slots=True)
class GradeOutcome:
    """Result of grading one queue position."""

    card_id: object
    position: int
    grade: Grade
    previous: SchedulingState
    updated: SchedulingState
    affected: FrozenSet[Aggregate] = _GRADE_AGGREGATES

    @property
    def correct(self) -> bool:
        return self.grade >= Grade.HARD


@dataclass(frozen=True, slots=True)
class SessionSummary:
    total: int
    reviewed: int
    correct: int
    cancelled: bool
    outcomes: Tuple[GradeOutcome, ...] = ()
    affected: FrozenSet[Aggregate] = field(default_factory=frozenset)


class StudySession:
    """Tracks queue position, answer visibility and grading for one session.

    Instances are not safe to share between concurrent callers.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._status = SessionStatus.NOT_STARTED
        self._queue: Tuple[Card, ...] = ()
        self._position = 0
        self._revealed = False
        self._input = SessionInput()
        self._options: List[str] = []
        self._graded: Set[int] = set()
        self._last_graded: Optional[int] = None
        self._outcomes: List[GradeOutcome] = []
        self._cancelled = False

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def queue(self) -> Tuple[Card, ...]:
        return self._queue

    @property
    def position(self) -> int:
        return self._position

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def input(self) -> SessionInput:
        return self._input

    @property
    def outcomes(self) -> Tuple[GradeOutcome, ...]:
        return tuple(self._outcomes)

    @property
    def progress(self) -> float:
        """Fraction of the queue completed; a revealed card counts as half."""
        if not self._queue:
            return 0.0
        if self._status is SessionStatus.FINISHED:
            return 1.0
        return (self._position + (0.5 if self._revealed else 0.0)) / len(self._queue)

    def start(self, cards: Sequence[Card]) -> None:
        if self._status is not SessionStatus.NOT_STARTED:
            raise InvalidTransitionError("Session has already been started.")
        if not cards:
            raise NoCardsAvailableError("No cards are available for this session.")
        self._queue = tuple(cards)
        self._status = SessionStatus.IN_PROGRESS
        self._enter_position(0)

    def current(self) -> Optional[Card]:
        if self._status is not SessionStatus.IN_PROGRESS:
            return None
        return self._queue[self._position]

    def is_finished(self) -> bool:
        return self._status is SessionStatus.FINISHED

    def current_options(self) -> List[str]:
        """Options of the current multiple choice card in display order."""
        self._require_in_progress()
        return list(self._options)

    def reveal(self) -> None:
        """Show the answer; on classic cards a second call hides it again."""
        card = self._require_in_progress()
        self._last_graded = None
        if self._revealed:
            if isinstance(card.kind, Classic):
                self._revealed = False
                return
            raise InvalidTransitionError("Answer is already revealed.")
        self._revealed = True

    def select_option(self, option: str) -> None:
        card = self._require_in_progress()
        if not isinstance(card.kind, MultipleChoice):
            raise InvalidTransitionError("Only multiple choice cards have options.")
        if self._revealed:
            raise InvalidTransitionError("An option was already chosen for this card.")
        if option not in card.kind.options:
            raise ValueError(f"{option!r} is not one of the card's options.")
        self._input.selected_option = option
        self._last_graded = None
        self._revealed = True

    def submit_answer(self, text: str) -> None:
        card = self._require_in_progress()
        if isinstance(card.kind, (Classic, MultipleChoice)):
            raise InvalidTransitionError(f"{card.card_type} cards do not take typed answers.")
        if self._revealed:
            raise InvalidTransitionError("An answer was already submitted for this card.")
        self._input.typed_text = text
        self._last_graded = None
        self._revealed = True

    def is_answer_correct(self) -> bool:
        """Check the learner's input against the current card."""
        card = self._require_in_progress()
        if not self._revealed:
            raise InvalidTransitionError("Answer has not been submitted yet.")
        if isinstance(card.kind, MultipleChoice):
            return evaluate_answer(card, self._input.selected_option)
        return evaluate_answer(card, self._input.typed_text)

    def preview_intervals(self, now: datetime) -> Dict[Grade, int]:
        card = self._require_in_progress()
        return preview_intervals(card.scheduling, now)

    def prepare_grade(self, grade: int, now: datetime, *, position: Optional[int] = None) -> GradeOutcome:
        """Compute the outcome of grading the current card without applying it.

        ``position`` names the queue slot the grade was issued for; a repeat
        for a slot that was already graded is rejected. Without ``position``
        a second grade before any new answer interaction counts as a repeat.
        """
        self._reject_regrade(position)
        card = self._require_in_progress()
        if position is not None and position != self._position:
            raise InvalidTransitionError(
                f"Grade was issued for position {position}, current position is {self._position}."
            )
        if not self._revealed:
            raise InvalidTransitionError("Reveal the answer before grading.")

        return GradeOutcome(
            card_id=card.id,
            position=self._position,
            grade=Grade(grade),
            previous=card.scheduling,
            updated=schedule(card.scheduling, grade, now),
        )

    def commit_grade(self, outcome: GradeOutcome) -> None:
        """Record a prepared outcome and move to the next card."""
        if outcome.position in self._graded:
            raise AlreadyGradedError(f"Position {outcome.position} has already been graded.")
        self._require_in_progress()
        if outcome.position != self._position:
            raise InvalidTransitionError(
                f"Outcome is for position {outcome.position}, current position is {self._position}."
            )
        self._graded.add(outcome.position)
        self._last_graded = outcome.position
        self._outcomes.append(outcome)
        self._advance()

    def grade(self, grade: int, now: datetime, *, position: Optional[int] = None) -> GradeOutcome:
        """Schedule the current card with ``grade`` and move to the next one."""
        outcome = self.prepare_grade(grade, now, position=position)
        self.commit_grade(outcome)
        return outcome

    def prepare_answer_grade(self, now: datetime, *, position: Optional[int] = None) -> GradeOutcome:
        """Compute the outcome for an objective card from the learner's input."""
        self._reject_regrade(position)
        correct = self.is_answer_correct()
        return self.prepare_grade(grade_for_correctness(correct), now, position=position)

    def grade_answer(self, now: datetime, *, position: Optional[int] = None) -> GradeOutcome:
        """Grade an objective card from the learner's submitted input."""
        outcome = self.prepare_answer_grade(now, position=position)
        self.commit_grade(outcome)
        return outcome

    def cancel(self) -> None:
        """End the session early; ungraded cards keep their schedule."""
        self._require_in_progress()
        self._cancelled = True
        self._finish()

    def summary(self) -> SessionSummary:
        affected: FrozenSet[Aggregate] = frozenset()
        for outcome in self._outcomes:
            affected |= outcome.affected
        return SessionSummary(
            total=len(self._queue),
            reviewed=len(self._outcomes),
            correct=sum(1 for outcome in self._outcomes if outcome.correct),
            cancelled=self._cancelled,
            outcomes=tuple(self._outcomes),
            affected=affected,
        )

    def _reject_regrade(self, position: Optional[int]) -> None:
        if position is not None:
            if position in self._graded:
                raise AlreadyGradedError(f"Position {position} has already been graded.")
        elif self._last_graded is not None:
            raise AlreadyGradedError(f"Position {self._last_graded} has already been graded.")

    def _require_in_progress(self) -> Card:
        if self._status is not SessionStatus.IN_PROGRESS:
            raise InvalidTransitionError(f"Session is {self._status.value}.")
        return self._queue[self._position]

    def _enter_position(self, position: int) -> None:
        self._position = position
        self._revealed = False
        self._input = SessionInput()
        self._options = shuffled_options(self._queue[position], self._rng)

    def _advance(self) -> None:
        if self._position + 1 < len(self._queue):
            self._enter_position(self._position + 1)
        else:
            self._finish()

    def _finish(self) -> None:
        self._status = SessionStatus.FINISHED
        self._revealed = False
        self._input = SessionInput()
        self._options = []
