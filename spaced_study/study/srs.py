"""Spaced-repetition scheduling for card reviews."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from spaced_study.study.errors import InvalidGradeError, InvalidStateError
from spaced_study.study.models import Grade, SchedulingState


MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365
FAILED_EASE_PENALTY = 0.2
EASY_BONUS = 1.3
HARD_PENALTY = 0.8


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _validate_grade(grade: object) -> Grade:
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise InvalidGradeError(f"Grade must be an integer between 1 and 4, got {grade!r}.")
    try:
        return Grade(grade)
    except ValueError as exc:
        raise InvalidGradeError(f"Grade must be between 1 and 4, got {grade}.") from exc


def _validate_state(state: Optional[SchedulingState]) -> SchedulingState:
    if state is None:
        raise InvalidStateError("Scheduling state is required.")
    if state.review_count < 0 or state.correct_count < 0:
        raise InvalidStateError("Review counters cannot be negative.")
    if state.correct_count > state.review_count:
        raise InvalidStateError("correct_count cannot exceed review_count.")
    if not 0 <= state.interval <= MAX_INTERVAL_DAYS:
        raise InvalidStateError(f"Interval {state.interval} is outside 0..{MAX_INTERVAL_DAYS} days.")
    ease = state.ease_factor
    if not math.isfinite(ease) or not MIN_EASE_FACTOR <= ease <= MAX_EASE_FACTOR:
        raise InvalidStateError(
            f"Ease factor {ease} is outside {MIN_EASE_FACTOR}..{MAX_EASE_FACTOR}."
        )
    return state


def schedule(state: SchedulingState, grade: int, now: datetime) -> SchedulingState:
    """Return the scheduling state that results from grading a card at ``now``.

    The input state is never modified, so the call can be repeated to preview
    the outcome of each grade.
    """
    grade = _validate_grade(grade)
    state = _validate_state(state)

    review_count = state.review_count + 1
    correct_count = state.correct_count
    interval = state.interval
    ease_factor = state.ease_factor

    if grade < Grade.HARD:
        interval = 1
        ease_factor = max(MIN_EASE_FACTOR, ease_factor - FAILED_EASE_PENALTY)
    else:
        correct_count += 1
        if correct_count == 1:
            interval = 1
        elif correct_count == 2:
            interval = 6
        else:
            interval = round_half_up(interval * ease_factor)

        ease_factor += 0.1 - (5 - grade) * (0.08 + (5 - grade) * 0.02)

        if grade == Grade.EASY:
            interval = round_half_up(interval * EASY_BONUS)
        elif grade == Grade.HARD:
            interval = round_half_up(interval * HARD_PENALTY)

    ease_factor = max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, ease_factor))
    interval = max(MIN_INTERVAL_DAYS, min(MAX_INTERVAL_DAYS, interval))

    return SchedulingState(
        review_count=review_count,
        correct_count=correct_count,
        interval=interval,
        ease_factor=round_half_up(ease_factor * 100) / 100,
        next_review_date=now + timedelta(days=interval),
        last_reviewed=now,
    )


def preview_intervals(state: SchedulingState, now: datetime) -> dict[Grade, int]:
    """Interval in days that each grade would produce for ``state``."""
    return {grade: schedule(state, grade, now).interval for grade in Grade}


def reset_progress(state: SchedulingState) -> SchedulingState:
    """Return the state of a never-reviewed card in place of ``state``."""
    _validate_state(state)
    return SchedulingState()


def grade_for_correctness(correct: bool) -> Grade:
    """Collapse a right/wrong answer onto the grade scale."""
    return Grade.GOOD if correct else Grade.AGAIN
