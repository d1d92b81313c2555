import datetime
import math
from typing import Optional, Tuple

from .errors import InvalidInput

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
PASSING_QUALITY = 3.0


def sm2_schedule(
    review_duration: int,
    ease_factor: float,
    repetition: int,
    quality: float,
    now: Optional[datetime.datetime] = None,
) -> Tuple[int, float, int, datetime.datetime]:
    """
    SM-2 style scheduling for a single word.

    State kept per word:
      - review_duration – current interval in days
      - ease_factor     – growth multiplier (floor 1.3, seeded at 2.5)
      - repetition      – consecutive successful reviews

    Quality grades run from 0.0 (blackout) to 5.0 (instant recall).

    Transitions, keyed on the repetition count before the update:
      quality < 3  → lapse, treated as repetition 0 (ease untouched)
      0            → repetition 1, 1 day
      1            → repetition 2, 6 days
      >= 2         → ease updated, duration = ceil(duration × new ease)

    Returns:
        (new_duration, new_ease_factor, new_repetition, next_review_at)
    """
    if not 0.0 <= quality <= 5.0:
        raise InvalidInput(f"Quality must be between 0 and 5, got {quality}")

    if quality < PASSING_QUALITY:
        repetition = 0

    if repetition == 0:
        new_duration = 1
        new_ef = ease_factor
    elif repetition == 1:
        new_duration = 6
        new_ef = ease_factor
    else:
        new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
        if new_ef < MIN_EASE_FACTOR:
            new_ef = MIN_EASE_FACTOR
        new_duration = math.ceil(review_duration * new_ef)
    new_reps = repetition + 1

    if now is None:
        now = datetime.datetime.now(datetime.UTC)
    next_review = now + datetime.timedelta(days=new_duration)

    return new_duration, new_ef, new_reps, next_review
