"""Spaced-repetition engine: scheduling, card selection and study sessions."""

from .errors import (
    AlreadyGradedError,
    ErrorKind,
    InvalidGradeError,
    InvalidStateError,
    InvalidTransitionError,
    NoCardsAvailableError,
    StudyError,
)
from .models import Card, Grade, SchedulingState, StudyMode
from .selection import select_cards
from .session import Aggregate, GradeOutcome, StudySession
from .srs import schedule
from .statistics import collection_stats, deck_stats

__all__ = [
    "AlreadyGradedError",
    "Aggregate",
    "Card",
    "ErrorKind",
    "Grade",
    "GradeOutcome",
    "InvalidGradeError",
    "InvalidStateError",
    "InvalidTransitionError",
    "NoCardsAvailableError",
    "SchedulingState",
    "StudyError",
    "StudyMode",
    "StudySession",
    "collection_stats",
    "deck_stats",
    "schedule",
    "select_cards",
]
