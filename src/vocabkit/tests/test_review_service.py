"""Tests for review service."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from vocabkit.exceptions import StorageFailureError
from vocabkit.models.enums import MasteryTier
from vocabkit.models.models import Word
from vocabkit.services.review_service import ReviewService
from vocabkit.services.srs import replay


@pytest.fixture
def review_service(db: Session) -> ReviewService:
    """Create a review service instance."""
    return ReviewService(db)


@pytest.fixture
def word(db: Session, now) -> Word:
    """Create a test word."""
    word = Word(text="persistent", date_added=now - timedelta(days=2))
    db.add(word)
    db.commit()
    db.refresh(word)
    return word


def test_first_review_incorrect(review_service: ReviewService, word: Word, now) -> None:
    updated = review_service.record_review(word.id, correct=False, now=now)

    assert updated.review_count == 1
    assert updated.correct_count == 0
    assert updated.mastery_tier == MasteryTier.NEW
    assert updated.next_review_date == now + timedelta(days=1)


def test_reviews_reach_mastery(review_service: ReviewService, word: Word, now) -> None:
    for _ in range(5):
        updated = review_service.record_review(word.id, correct=True, now=now)

    assert updated.review_count == 5
    assert updated.mastery_tier == MasteryTier.MASTERED
    assert updated.next_review_date == now + timedelta(days=30)


def test_stored_state_matches_pure_replay(review_service: ReviewService, word: Word, now) -> None:
    outcomes = [True, False, True, True, True, False, True]
    for correct in outcomes:
        updated = review_service.record_review(word.id, correct, now=now)

    expected = replay(outcomes, now)
    assert updated.review_stats == expected
    assert updated.correct_count <= updated.review_count


def test_record_review_unknown_word(review_service: ReviewService) -> None:
    with pytest.raises(ValueError):
        review_service.record_review(12345, correct=True)


def test_record_review_storage_failure(review_service: ReviewService, word: Word, db: Session, mocker, now) -> None:
    mocker.patch.object(db, "commit", side_effect=OperationalError("UPDATE", {}, Exception("locked")))
    with pytest.raises(StorageFailureError):
        review_service.record_review(word.id, correct=True, now=now)
    mocker.stopall()

    db.expire_all()
    assert db.get(Word, word.id).review_count == 0


def test_due_words(review_service: ReviewService, db: Session, now) -> None:
    overdue = Word(text="overdue", date_added=now - timedelta(days=3))
    due_now = Word(text="due_now", date_added=now)
    later = Word(text="later", date_added=now + timedelta(hours=1))
    db.add_all([later, due_now, overdue])
    db.commit()

    due = review_service.get_due_words(now=now)
    assert [word.text for word in due] == ["overdue", "due_now"]
    assert review_service.get_due_count(now=now) == 2
    assert [word.text for word in review_service.get_due_words(now=now, limit=1)] == ["overdue"]


def test_reviewed_word_is_no_longer_due(review_service: ReviewService, word: Word, now) -> None:
    assert [w.text for w in review_service.get_due_words(now=now)] == ["persistent"]
    review_service.record_review(word.id, correct=False, now=now)
    assert review_service.get_due_words(now=now) == []
    assert [w.text for w in review_service.get_due_words(now=now + timedelta(days=1))] == ["persistent"]
