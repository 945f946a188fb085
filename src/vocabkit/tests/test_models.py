"""Tests for database models."""
from datetime import UTC, timedelta

from faker import Faker
from sqlalchemy.orm import Session

from vocabkit.models.enums import CEFRLevel, ExerciseType, MasteryTier, WordType
from vocabkit.models.models import Definition, Exercise, ExerciseGroup, Lesson, Word

fake = Faker()


def test_word_creation(db: Session, now) -> None:
    """A new word starts unreviewed and due at its creation time."""
    word = Word(text="hello", date_added=now)
    db.add(word)
    db.commit()
    db.refresh(word)

    assert word.id is not None
    assert word.review_count == 0
    assert word.correct_count == 0
    assert word.mastery_tier == MasteryTier.NEW
    assert word.accuracy == 0
    assert word.next_review_date == now
    assert word.date_added.tzinfo is not None
    assert word.primary_definition is None


def test_definitions_keep_order(db: Session) -> None:
    word = Word(text=fake.unique.word())
    word.definitions.append(Definition(text="first", word_type=WordType.NOUN, level=CEFRLevel.A1))
    word.definitions.append(Definition(text="second", word_type=WordType.VERB, level=CEFRLevel.C1, synonyms=["x"]))
    db.add(word)
    db.commit()
    db.expire_all()

    loaded = db.query(Word).filter(Word.id == word.id).one()
    assert [d.text for d in loaded.definitions] == ["first", "second"]
    assert [d.position for d in loaded.definitions] == [0, 1]
    assert loaded.primary_definition.word_type == WordType.NOUN
    assert loaded.definitions[1].level == CEFRLevel.C1
    assert loaded.definitions[1].synonyms == ["x"]


def test_deleting_word_deletes_definitions(db: Session) -> None:
    word = Word(text="gone")
    word.definitions.append(Definition(text="soon removed"))
    db.add(word)
    db.commit()

    db.delete(word)
    db.commit()

    assert db.query(Definition).count() == 0


def test_deleting_group_deletes_exercises(db: Session, now) -> None:
    group = ExerciseGroup(source_id="g1", name="Verbs", word_texts=["run"], generated_at=now)
    group.exercises.append(
        Exercise(source_id="e1", exercise_type=ExerciseType.FILL_BLANK, instruction="Fill",
                 sentence="I ___ fast", answer="run")
    )
    db.add(group)
    db.commit()
    assert db.query(Exercise).count() == 1

    db.delete(group)
    db.commit()
    assert db.query(Exercise).count() == 0


def test_exercise_defaults(db: Session, now) -> None:
    group = ExerciseGroup(source_id="g1", name="Nouns", word_texts=[], generated_at=now)
    exercise = Exercise(source_id="e1", instruction="Fill", sentence="A ___", answer="cat")
    group.exercises.append(exercise)
    db.add(group)
    db.commit()
    db.refresh(exercise)

    assert exercise.exercise_type == ExerciseType.FILL_BLANK
    assert exercise.difficulty == "B2"
    assert exercise.times_shown == 0
    assert exercise.times_correct == 0
    assert exercise.last_shown_at is None
    assert exercise.options is None
    assert exercise.accuracy == 0


def test_lesson_progress(db: Session, now) -> None:
    lesson = Lesson(name="Week 1")
    mastered = Word(text="alpha", review_count=5, correct_count=5, next_review_date=now + timedelta(days=30))
    fresh = Word(text="beta")
    lesson.words.extend([mastered, fresh])
    db.add(lesson)
    db.commit()

    assert lesson.word_count == 2
    assert lesson.mastered_count == 1
    assert lesson.progress == 0.5
    assert Lesson(name="empty").progress == 0.0


def test_datetimes_load_as_utc(db: Session, now) -> None:
    word = Word(text="tz", date_added=now.astimezone(UTC))
    db.add(word)
    db.commit()
    db.expire_all()

    loaded = db.query(Word).filter(Word.text == "tz").one()
    assert loaded.date_added == now
    assert loaded.date_added.utcoffset() == timedelta(0)
