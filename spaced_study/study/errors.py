"""Typed errors raised by the study engine."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_GRADE = "invalid_grade"
    INVALID_STATE = "invalid_state"
    NO_CARDS_AVAILABLE = "no_cards_available"
    ALREADY_GRADED = "already_graded"
    INVALID_TRANSITION = "invalid_transition"


class StudyError(Exception):
    """Base exception for the study engine."""

    kind: ErrorKind


class InvalidGradeError(StudyError):
    """Raised when a grade is not one of 1-4."""

    kind = ErrorKind.INVALID_GRADE


class InvalidStateError(StudyError):
    """Raised when scheduling fields are missing or out of range."""

    kind = ErrorKind.INVALID_STATE


class NoCardsAvailableError(StudyError):
    """Raised when a session is started with an empty queue."""

    kind = ErrorKind.NO_CARDS_AVAILABLE


class AlreadyGradedError(StudyError):
    """Raised when the same session position is graded twice."""

    kind = ErrorKind.ALREADY_GRADED


class InvalidTransitionError(StudyError):
    """Raised when a session action is not valid in the current state."""

    kind = ErrorKind.INVALID_TRANSITION
