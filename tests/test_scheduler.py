import datetime
import math
import pytest

from llm_jp_knowledge.errors import InvalidInput
from llm_jp_knowledge.scheduler import sm2_schedule, MIN_EASE_FACTOR

NOW = datetime.datetime(2026, 1, 1, 12, 0, tzinfo=datetime.UTC)


def test_first_review_schedules_one_day() -> None:
    duration, ease, reps, next_review = sm2_schedule(0, 2.5, 0, 4.0, now=NOW)
    assert (reps, duration, ease) == (1, 1, 2.5)
    assert next_review == NOW + datetime.timedelta(days=1)


def test_second_review_schedules_six_days() -> None:
    duration, ease, reps, _ = sm2_schedule(6, 2.5, 1, 4.0, now=NOW)
    assert (reps, duration, ease) == (2, 6, 2.5)


def test_third_review_grows_by_updated_ease() -> None:
    duration, ease, reps, next_review = sm2_schedule(6, 2.5, 2, 5.0, now=NOW)
    assert reps == 3
    assert ease > 2.5
    assert ease == pytest.approx(2.6)
    assert duration == math.ceil(6 * ease)
    assert next_review == NOW + datetime.timedelta(days=duration)


@pytest.mark.parametrize("repetition", [0, 1, 2, 7])
def test_lapse_restarts_without_touching_ease(repetition: int) -> None:
    duration, ease, reps, _ = sm2_schedule(30, 2.2, repetition, 2.0, now=NOW)
    assert (reps, duration, ease) == (1, 1, 2.2)


def test_ease_never_drops_below_floor() -> None:
    duration, ease, reps = 6, 2.5, 2
    for _ in range(15):
        duration, ease, reps, _ = sm2_schedule(duration, ease, reps, 3.0, now=NOW)
        assert ease >= MIN_EASE_FACTOR
    assert ease == MIN_EASE_FACTOR

    for _ in range(10):
        duration, ease, reps, _ = sm2_schedule(duration, ease, reps, 0.0, now=NOW)
        assert ease >= MIN_EASE_FACTOR


def test_duration_grows_after_second_repetition() -> None:
    duration, ease, reps = 6, 2.5, 2
    previous = duration
    for quality in (3.0, 4.0, 5.0, 3.5, 4.0):
        duration, ease, reps, _ = sm2_schedule(duration, ease, reps, quality, now=NOW)
        assert duration > previous
        previous = duration


@pytest.mark.parametrize("quality", [-0.5, 5.1, 10])
def test_quality_out_of_range_rejected(quality: float) -> None:
    with pytest.raises(InvalidInput):
        sm2_schedule(1, 2.5, 0, quality, now=NOW)
    with pytest.raises(ValueError):
        sm2_schedule(1, 2.5, 0, quality, now=NOW)


def test_defaults_to_current_time() -> None:
    before = datetime.datetime.now(datetime.UTC)
    _, _, _, next_review = sm2_schedule(0, 2.5, 0, 5.0)
    assert next_review >= before + datetime.timedelta(days=1)
