from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from spaced_study.study.errors import ErrorKind, InvalidGradeError, InvalidStateError
from spaced_study.study.models import Grade, SchedulingState
from spaced_study.study.srs import (
    grade_for_correctness,
    preview_intervals,
    reset_progress,
    schedule,
)


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_first_good_review_schedules_next_day() -> None:
    state = SchedulingState(review_count=0, correct_count=0, interval=0, ease_factor=2.5)

    result = schedule(state, Grade.GOOD, NOW)

    assert result.interval == 1
    assert result.correct_count == 1
    assert result.review_count == 1
    assert result.ease_factor == pytest.approx(2.36)
    assert result.next_review_date == NOW + timedelta(days=1)
    assert result.last_reviewed == NOW


def test_second_good_review_schedules_six_days() -> None:
    first = schedule(SchedulingState(), Grade.GOOD, NOW)

    second = schedule(first, Grade.GOOD, NOW)

    assert second.correct_count == 2
    assert second.review_count == 2
    assert second.interval == 6
    assert second.ease_factor == pytest.approx(2.22)


def test_easy_review_applies_bonus_and_keeps_ease_capped() -> None:
    state = SchedulingState(review_count=2, correct_count=2, interval=6, ease_factor=2.5)

    result = schedule(state, Grade.EASY, NOW)

    # round(6 * 2.5) = 15, then round(15 * 1.3) = round(19.5) = 20
    assert result.interval == 20
    assert result.ease_factor == 2.5
    assert result.next_review_date == NOW + timedelta(days=20)


def test_again_resets_interval_and_lowers_ease_to_floor() -> None:
    state = SchedulingState(review_count=5, correct_count=4, interval=20, ease_factor=1.3)

    result = schedule(state, Grade.AGAIN, NOW)

    assert result.interval == 1
    assert result.ease_factor == 1.3
    assert result.correct_count == 4
    assert result.review_count == 6


def test_again_lowers_ease_by_a_fifth() -> None:
    state = SchedulingState(review_count=3, correct_count=3, interval=15, ease_factor=2.5)

    result = schedule(state, Grade.AGAIN, NOW)

    assert result.ease_factor == pytest.approx(2.3)
    assert result.interval == 1


def test_hard_review_shrinks_interval() -> None:
    state = SchedulingState(review_count=2, correct_count=2, interval=6, ease_factor=2.5)

    result = schedule(state, Grade.HARD, NOW)

    assert result.interval == 12
    assert result.ease_factor == pytest.approx(2.18)


def test_hard_review_respects_ease_floor() -> None:
    state = SchedulingState(review_count=3, correct_count=3, interval=10, ease_factor=1.3)

    result = schedule(state, Grade.HARD, NOW)

    # round(10 * 1.3) = 13, then round(13 * 0.8) = round(10.4) = 10
    assert result.interval == 10
    assert result.ease_factor == 1.3


def test_intervals_round_half_up() -> None:
    state = SchedulingState(review_count=2, correct_count=2, interval=5, ease_factor=2.5)

    result = schedule(state, Grade.GOOD, NOW)

    assert result.interval == 13


def test_interval_is_capped_at_one_year() -> None:
    state = SchedulingState(review_count=10, correct_count=10, interval=300, ease_factor=2.5)

    result = schedule(state, Grade.GOOD, NOW)

    assert result.interval == 365
    assert result.next_review_date == NOW + timedelta(days=365)


@pytest.mark.parametrize("grade", list(Grade))
@pytest.mark.parametrize("interval", [0, 1, 6, 21, 100, 365])
@pytest.mark.parametrize("ease_factor", [1.3, 1.75, 2.05, 2.5])
def test_results_stay_within_bounds(grade: Grade, interval: int, ease_factor: float) -> None:
    state = SchedulingState(review_count=8, correct_count=5, interval=interval, ease_factor=ease_factor)

    result = schedule(state, grade, NOW)

    assert 1.3 <= result.ease_factor <= 2.5
    assert 1 <= result.interval <= 365
    assert result.review_count == state.review_count + 1
    if grade == Grade.AGAIN:
        assert result.interval == 1
        assert result.correct_count == state.correct_count
    else:
        assert result.correct_count == state.correct_count + 1


def test_schedule_is_repeatable_and_leaves_input_untouched() -> None:
    state = SchedulingState(review_count=3, correct_count=2, interval=6, ease_factor=2.2)

    first = schedule(state, Grade.GOOD, NOW)
    second = schedule(state, Grade.GOOD, NOW)

    assert first == second
    assert state == SchedulingState(review_count=3, correct_count=2, interval=6, ease_factor=2.2)


@pytest.mark.parametrize("grade", [0, 5, -1, True, "3", 2.5, None])
def test_rejects_grades_outside_the_scale(grade: object) -> None:
    with pytest.raises(InvalidGradeError) as excinfo:
        schedule(SchedulingState(), grade, NOW)  # type: ignore[arg-type]

    assert excinfo.value.kind is ErrorKind.INVALID_GRADE


@pytest.mark.parametrize(
    "state",
    [
        None,
        SchedulingState(review_count=-1),
        SchedulingState(review_count=1, correct_count=2),
        SchedulingState(interval=-1),
        SchedulingState(interval=400),
        SchedulingState(ease_factor=1.0),
        SchedulingState(ease_factor=3.1),
        SchedulingState(ease_factor=float("nan")),
    ],
)
def test_rejects_corrupt_state(state: SchedulingState | None) -> None:
    with pytest.raises(InvalidStateError) as excinfo:
        schedule(state, Grade.GOOD, NOW)  # type: ignore[arg-type]

    assert excinfo.value.kind is ErrorKind.INVALID_STATE


def test_preview_intervals_lists_every_grade() -> None:
    state = SchedulingState(review_count=2, correct_count=2, interval=6, ease_factor=2.5)

    preview = preview_intervals(state, NOW)

    assert preview == {Grade.AGAIN: 1, Grade.HARD: 12, Grade.GOOD: 15, Grade.EASY: 20}


def test_reset_progress_returns_new_card_state() -> None:
    state = schedule(SchedulingState(), Grade.GOOD, NOW)

    reset = reset_progress(state)

    assert reset == SchedulingState()
    assert reset.next_review_date is None
    assert reset.ease_factor == 2.5


def test_grade_for_correctness() -> None:
    assert grade_for_correctness(True) is Grade.GOOD
    assert grade_for_correctness(False) is Grade.AGAIN
