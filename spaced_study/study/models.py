"""Value types shared by the scheduler, the selector and study sessions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional, Sequence, Union


DEFAULT_EASE_FACTOR = 2.5
BLANK_TOKEN = "{{blank}}"


class Grade(IntEnum):
    """Recall quality reported for a single review."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class StudyMode(str, Enum):
    DUE = "due"
    ALL = "all"
    BY_DECK = "deck"
    BY_TOPIC = "topic"
    BY_DIFFICULTY = "difficulty"


@dataclass(frozen=True, slots=True)
class Classic:
    """Front/back card graded by the learner on the 1-4 scale."""

    name = "classic"


@dataclass(frozen=True, slots=True)
class MultipleChoice:
    """Card answered by picking one of ``options``."""

    options: tuple[str, ...]
    name = "multiple_choice"

    def __post_init__(self) -> None:
        if not self.options:
            raise ValueError("Multiple choice cards need at least one option.")


@dataclass(frozen=True, slots=True)
class FillInBlank:
    """Card whose front holds a single ``{{blank}}`` to type into."""

    name = "fill_in_the_blank"


@dataclass(frozen=True, slots=True)
class TypeAnswer:
    """Card answered by typing the back side."""

    name = "type_the_answer"


CardKind = Union[Classic, MultipleChoice, FillInBlank, TypeAnswer]

CARD_TYPE_NAMES = (Classic.name, MultipleChoice.name, FillInBlank.name, TypeAnswer.name)


def card_kind_from_name(name: Optional[str], options: Optional[Sequence[str]] = None) -> CardKind:
    """Build a card kind from its stored string form.

    Records created before card types existed carry no type and are classic,
    as is any name this version does not know.
    """
    if name == MultipleChoice.name:
        return MultipleChoice(tuple(options or ()))
    if name == FillInBlank.name:
        return FillInBlank()
    if name == TypeAnswer.name:
        return TypeAnswer()
    return Classic()


@dataclass(frozen=True, slots=True)
class SchedulingState:
    """The six fields the scheduler owns for every card."""

    review_count: int = 0
    correct_count: int = 0
    interval: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    next_review_date: Optional[datetime] = None
    last_reviewed: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Card:
    """Snapshot of a card as supplied by the card store."""

    id: object
    front: str
    back: str
    kind: CardKind = field(default_factory=Classic)
    difficulty: int = 1
    deck_id: Optional[object] = None
    topic: Optional[str] = None
    scheduling: SchedulingState = field(default_factory=SchedulingState)

    def __post_init__(self) -> None:
        if not 1 <= self.difficulty <= 5:
            raise ValueError(f"Card difficulty must be between 1 and 5, got {self.difficulty}.")
        if isinstance(self.kind, MultipleChoice) and self.back not in self.kind.options:
            raise ValueError("Multiple choice options must include the correct answer.")
        if isinstance(self.kind, FillInBlank) and self.front.count(BLANK_TOKEN) != 1:
            raise ValueError(f"Fill-in-the-blank cards need exactly one {BLANK_TOKEN} placeholder.")

    @property
    def card_type(self) -> str:
        return self.kind.name

    @property
    def options(self) -> tuple[str, ...]:
        if isinstance(self.kind, MultipleChoice):
            return self.kind.options
        return ()

    def with_scheduling(self, scheduling: SchedulingState) -> "Card":
        """Return a copy carrying the given scheduling state."""
        return replace(self, scheduling=scheduling)
