"""Definition quizzes and flashcards built from stored words.

Outcomes are recorded through :class:`ReviewService`, so quizzes and
flashcards share the same scheduling as every other review.
"""
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from vocabkit.models.models import Word
from vocabkit.services.review_service import ReviewService

logger = logging.getLogger(__name__)

DISTRACTOR_COUNT = 3


@dataclass
class QuizQuestion:
    """A multiple choice question asking for a word's primary definition."""
    word_id: int
    word_text: str
    options: List[str]
    answer: str

    def is_correct(self, selected: int) -> bool:
        return 0 <= selected < len(self.options) and self.options[selected] == self.answer


class QuizService:
    """Builds quiz questions and records their outcomes."""

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()
        self.review_service = ReviewService(db)

    def build_question(self, word: Word, pool: Sequence[Word]) -> Optional[QuizQuestion]:
        """Build a question for ``word`` with distractors from other words in ``pool``.

        Returns None when the word has no definition.
        """
        primary = word.primary_definition
        if primary is None:
            return None

        distractors = list(dict.fromkeys(
            other.primary_definition.text
            for other in pool
            if other.text != word.text
            and other.primary_definition is not None
            and other.primary_definition.text != primary.text
        ))
        self.rng.shuffle(distractors)
        options = [primary.text] + distractors[:DISTRACTOR_COUNT]
        self.rng.shuffle(options)
        return QuizQuestion(word_id=word.id, word_text=word.text, options=options, answer=primary.text)

    def build_quiz(self, words: Sequence[Word], pool: Optional[Sequence[Word]] = None) -> List[QuizQuestion]:
        """Build one question per word, in random order."""
        pool = pool if pool is not None else words
        questions = [q for q in (self.build_question(word, pool) for word in words) if q is not None]
        self.rng.shuffle(questions)
        return questions

    def answer_question(self, question: QuizQuestion, selected: int, now: Optional[datetime] = None) -> bool:
        """Check the selected option and record the review."""
        correct = question.is_correct(selected)
        self.review_service.record_review(question.word_id, correct, now=now)
        return correct

    def mark_flashcard(self, word_id: int, known: bool, now: Optional[datetime] = None) -> Word:
        """Record a flashcard swipe (known / not known) as a review."""
        return self.review_service.record_review(word_id, known, now=now)
