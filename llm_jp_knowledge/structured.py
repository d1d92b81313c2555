import datetime
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WordRow:
    text: str
    count: int
    frequency_rank: int
    reviewed: bool
    next_review_at: Optional[datetime.datetime]
    review_duration: int
    ease_factor: float
    repetition: int
    id: Optional[int] = None


@dataclass(frozen=True)
class ReviewResult:
    """Scheduling state written back after a graded review."""
    word: str
    repetition: int
    review_duration: int
    ease_factor: float
    next_review_at: datetime.datetime


@dataclass(frozen=True)
class KnowledgeStats:
    words: int
    sentences: int
    memberships: int
    reviewed: int
    due: int
