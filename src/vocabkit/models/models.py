"""Database models for vocabkit."""
from sqlalchemy import (
    JSON,
    Column,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list

from vocabkit.models.base import Base, TimestampMixin, UTCDateTime, utcnow
from vocabkit.models.enums import CEFRLevel, ExerciseType, MasteryTier, WordType
from vocabkit.services.srs import ReviewStats, accuracy, classify


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Lesson(Base, TimestampMixin):
    """Named grouping of words."""

    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    # Relationships
    words = relationship("Word", back_populates="lesson", passive_deletes=True)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def mastered_count(self) -> int:
        return sum(1 for word in self.words if word.mastery_tier == MasteryTier.MASTERED)

    @property
    def progress(self) -> float:
        if not self.words:
            return 0.0
        return self.mastered_count / self.word_count


class Word(Base, TimestampMixin):
    """Word model."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    text = Column(String, unique=True, nullable=False, index=True)
    date_added = Column(UTCDateTime, default=utcnow, nullable=False)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="SET NULL"), nullable=True)

    # SRS state, written only by ReviewService
    next_review_date = Column(UTCDateTime, nullable=False, index=True)
    review_count = Column(Integer, default=0, nullable=False)
    correct_count = Column(Integer, default=0, nullable=False)

    # Relationships
    definitions = relationship(
        "Definition",
        back_populates="word",
        order_by="Definition.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    lesson = relationship("Lesson", back_populates="words")

    def __init__(self, **kwargs):
        if kwargs.get("date_added") is None:
            kwargs["date_added"] = utcnow()
        # New words are due immediately
        kwargs.setdefault("next_review_date", kwargs["date_added"])
        kwargs.setdefault("review_count", 0)
        kwargs.setdefault("correct_count", 0)
        super().__init__(**kwargs)

    @property
    def primary_definition(self):
        return self.definitions[0] if self.definitions else None

    @property
    def accuracy(self) -> float:
        return accuracy(self.review_count, self.correct_count)

    @property
    def mastery_tier(self) -> MasteryTier:
        return classify(self.review_count, self.correct_count)[0]

    @property
    def review_stats(self) -> ReviewStats:
        return ReviewStats(
            review_count=self.review_count,
            correct_count=self.correct_count,
            next_review_date=self.next_review_date,
        )

    def __repr__(self) -> str:
        return f"<Word {self.text!r}>"


class Definition(Base, TimestampMixin):
    """One sense of a word."""

    __tablename__ = "definitions"

    id = Column(Integer, primary_key=True)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)
    word_type = Column(
        Enum(WordType, values_callable=_enum_values, native_enum=False),
        default=WordType.OTHER,
        nullable=False,
    )
    level = Column(
        Enum(CEFRLevel, values_callable=_enum_values, native_enum=False),
        default=CEFRLevel.B2,
        nullable=False,
    )
    translation = Column(String, nullable=True)
    synonyms = Column(JSON, default=list, nullable=False)

    # Relationships
    word = relationship("Word", back_populates="definitions")


class ExerciseGroup(Base, TimestampMixin):
    """A batch of exercises produced by one generation call."""

    __tablename__ = "exercise_groups"

    id = Column(Integer, primary_key=True)
    source_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    word_texts = Column(JSON, default=list, nullable=False)
    generated_at = Column(UTCDateTime, default=utcnow, nullable=False)

    # Relationships
    exercises = relationship(
        "Exercise",
        back_populates="group",
        order_by="Exercise.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Exercise(Base, TimestampMixin):
    """A single generated practice item."""

    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("exercise_groups.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    source_id = Column(String, nullable=False)
    exercise_type = Column(
        Enum(ExerciseType, values_callable=_enum_values, native_enum=False),
        default=ExerciseType.FILL_BLANK,
        nullable=False,
    )
    instruction = Column(Text, nullable=False)
    sentence = Column(Text, nullable=False)
    answer = Column(String, nullable=False)
    hint = Column(String, nullable=True)
    options = Column(JSON, nullable=True)  # multiple choice only
    difficulty = Column(String, default="B2", nullable=False)

    # Tracking
    times_shown = Column(Integer, default=0, nullable=False)
    times_correct = Column(Integer, default=0, nullable=False)
    last_shown_at = Column(UTCDateTime, nullable=True)

    # Relationships
    group = relationship("ExerciseGroup", back_populates="exercises")

    @property
    def accuracy(self) -> float:
        if not self.times_shown:
            return 0.0
        return self.times_correct / self.times_shown
