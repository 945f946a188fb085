"""Service for recording review outcomes and selecting words to review."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabkit import monitoring
from vocabkit.exceptions import StorageFailureError
from vocabkit.models.base import utcnow
from vocabkit.models.models import Word
from vocabkit.services.srs import apply_review

logger = logging.getLogger(__name__)


class ReviewService:
    """The only writer of a word's SRS fields."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def record_review(self, word_id: int, correct: bool, now: Optional[datetime] = None) -> Word:
        """Record one review outcome and reschedule the word.

        The word row is locked for the update where the backend supports it,
        so concurrent reviews of the same word are applied one after another.
        """
        now = now or utcnow()
        word = (
            self.db.query(Word)
            .filter(Word.id == word_id)
            .with_for_update()
            .first()
        )
        if not word:
            raise ValueError(f"Word {word_id} not found")

        stats = apply_review(word.review_stats, correct, now)
        word.review_count = stats.review_count
        word.correct_count = stats.correct_count
        word.next_review_date = stats.next_review_date

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save review for word {word_id}: {e}")
            raise StorageFailureError(f"Failed to save review: {e}") from e

        monitoring.reviews_recorded.labels(outcome="correct" if correct else "incorrect").inc()
        logger.debug(
            f"Reviewed {word.text!r}: {stats.correct_count}/{stats.review_count}, "
            f"tier {word.mastery_tier.value}, next review {stats.next_review_date.isoformat()}"
        )
        return word

    def get_due_words(self, now: Optional[datetime] = None, limit: Optional[int] = None) -> List[Word]:
        """Get words whose next review date has passed, oldest first."""
        now = now or utcnow()
        query = (
            self.db.query(Word)
            .filter(Word.next_review_date <= now)
            .order_by(Word.next_review_date, Word.text)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_due_count(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        return self.db.query(Word).filter(Word.next_review_date <= now).count()
