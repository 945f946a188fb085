"""Spaced-repetition scheduling.

Every change to a word's review statistics goes through :func:`apply_review`.
The functions here are pure: they take the current statistics, the review
outcome and the current time, and return new statistics without touching the
database. :class:`vocabkit.services.review_service.ReviewService` persists the
result.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

from vocabkit.models.enums import MasteryTier

# (tier, minimum accuracy as a fraction, minimum reviews, interval in days),
# checked top to bottom
SCHEDULE: Tuple[Tuple[MasteryTier, Tuple[int, int], int, int], ...] = (
    (MasteryTier.MASTERED, (9, 10), 5, 30),
    (MasteryTier.FAMILIAR, (7, 10), 0, 7),
    (MasteryTier.LEARNING, (5, 10), 0, 3),
    (MasteryTier.NEW, (0, 1), 0, 1),
)


@dataclass(frozen=True)
class ReviewStats:
    """Review history summary of a single word."""
    review_count: int = 0
    correct_count: int = 0
    next_review_date: Optional[datetime] = None

    def __post_init__(self):
        if not 0 <= self.correct_count <= self.review_count:
            raise ValueError(
                f"Invalid review stats: correct_count={self.correct_count}, "
                f"review_count={self.review_count}"
            )

    @property
    def accuracy(self) -> float:
        return accuracy(self.review_count, self.correct_count)

    @property
    def mastery_tier(self) -> MasteryTier:
        return classify(self.review_count, self.correct_count)[0]


def accuracy(review_count: int, correct_count: int) -> float:
    """Share of correct reviews, 0 when the word was never reviewed."""
    if review_count <= 0:
        return 0.0
    return correct_count / review_count


def classify(review_count: int, correct_count: int) -> Tuple[MasteryTier, int]:
    """Return the mastery tier and review interval (days) for the given counts.

    Thresholds are compared as integer ratios so boundaries such as 9/10 are
    exact.
    """
    if review_count > 0:
        for tier, (numerator, denominator), min_reviews, interval_days in SCHEDULE:
            if review_count >= min_reviews and correct_count * denominator >= numerator * review_count:
                return tier, interval_days
    return SCHEDULE[-1][0], SCHEDULE[-1][3]


def apply_review(stats: ReviewStats, correct: bool, now: datetime) -> ReviewStats:
    """Record one review outcome and schedule the next review."""
    review_count = stats.review_count + 1
    correct_count = stats.correct_count + (1 if correct else 0)
    _, interval_days = classify(review_count, correct_count)
    return replace(
        stats,
        review_count=review_count,
        correct_count=correct_count,
        next_review_date=now + timedelta(days=interval_days),
    )


def replay(outcomes: Iterable[bool], now: datetime, stats: Optional[ReviewStats] = None) -> ReviewStats:
    """Apply a sequence of outcomes, all reviewed at ``now``."""
    stats = stats or ReviewStats()
    for correct in outcomes:
        stats = apply_review(stats, correct, now)
    return stats


def is_due(next_review_date: Optional[datetime], now: datetime) -> bool:
    """A word is due once its next review date is not in the future."""
    if next_review_date is None:
        return True
    return next_review_date <= now
