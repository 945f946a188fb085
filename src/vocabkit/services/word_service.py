"""Service for managing words, definitions and lessons."""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabkit import monitoring
from vocabkit.exceptions import NoValidRecordsError, StorageFailureError
from vocabkit.models.enums import CEFRLevel, WordType
from vocabkit.models.models import Definition, ExerciseGroup, Lesson, Word
from vocabkit.services.csv_importer import ParsedWord

logger = logging.getLogger(__name__)


class WordService:
    """Service for managing words in the system."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_word(self, word_id: int) -> Optional[Word]:
        """Get a word by its ID."""
        return self.db.query(Word).filter(Word.id == word_id).first()

    def get_word_by_text(self, text: str) -> Optional[Word]:
        """Get a word by its exact text."""
        return self.db.query(Word).filter(Word.text == text).first()

    def get_words_by_texts(self, texts: Iterable[str]) -> List[Word]:
        """Get the words matching the given texts, in the given order."""
        texts = list(dict.fromkeys(texts))
        if not texts:
            return []
        found = {word.text: word for word in self.db.query(Word).filter(Word.text.in_(texts)).all()}
        return [found[text] for text in texts if text in found]

    def list_words(self, limit: Optional[int] = None) -> List[Word]:
        """Get all words sorted by text."""
        query = self.db.query(Word).order_by(Word.text)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_word_count(self) -> int:
        """Get the count of words in the database."""
        return self.db.query(Word).count()

    @staticmethod
    def _make_definition(record: ParsedWord) -> Definition:
        return Definition(
            text=record.definition.strip(),
            word_type=record.word_type,
            level=record.level,
            translation=record.translation,
            synonyms=list(record.synonyms),
        )

    def _apply_record(self, record: ParsedWord, pending: Dict[str, Word]) -> Word:
        """Append the record's definition to its word, creating the word if needed."""
        word = pending.get(record.text) or self.get_word_by_text(record.text)
        if word is None:
            word = Word(text=record.text, date_added=record.date_added)
            self.db.add(word)
        word.definitions.append(self._make_definition(record))
        pending[record.text] = word
        return word

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save changes: {e}")
            raise StorageFailureError(f"Failed to save: {e}") from e

    def import_records(self, records: Sequence[ParsedWord]) -> int:
        """Merge parsed records into the store as one transaction.

        Records with an empty definition are dropped. Existing words (exact
        text match) get an extra definition, other records create new words.

        Returns:
            Number of records applied.

        Raises:
            NoValidRecordsError: no record has a definition.
            StorageFailureError: the commit failed; nothing was saved.
        """
        valid = [record for record in records if record.definition.strip()]
        if not valid:
            monitoring.import_failures.labels(error_type="no_valid_records").inc()
            raise NoValidRecordsError()

        pending: Dict[str, Word] = {}
        saved_count = 0
        try:
            for record in valid:
                self._apply_record(record, pending)
                saved_count += 1
        except SQLAlchemyError as e:
            self.db.rollback()
            monitoring.import_failures.labels(error_type="storage").inc()
            raise StorageFailureError(f"Failed to save: {e}") from e

        try:
            self._commit()
        except StorageFailureError:
            monitoring.import_failures.labels(error_type="storage").inc()
            raise

        monitoring.records_imported.inc(saved_count)
        logger.info(
            f"Imported {saved_count} records ({len(records) - len(valid)} without definition skipped)"
        )
        return saved_count

    def add_word(
        self,
        text: str,
        definition: str,
        word_type: WordType = WordType.OTHER,
        level: CEFRLevel = CEFRLevel.B2,
        translation: Optional[str] = None,
        synonyms: Iterable[str] = (),
    ) -> Word:
        """Add a word by hand, merging into an existing word with the same text."""
        text = text.strip()
        if not text or not definition.strip():
            raise ValueError("Word and definition must not be empty")
        record = ParsedWord(
            text=text,
            word_type=word_type,
            definition=definition,
            level=level,
            translation=translation,
            synonyms=tuple(s.strip() for s in synonyms if s.strip()),
        )
        word = self._apply_record(record, {})
        self._commit()
        self.db.refresh(word)
        return word

    def delete_word(self, word_id: int) -> bool:
        """Delete a word together with its definitions."""
        word = self.get_word(word_id)
        if not word:
            return False
        self.db.delete(word)
        self._commit()
        return True

    # Lessons

    def create_lesson(self, name: str, sort_order: int = 0) -> Lesson:
        lesson = Lesson(name=name, sort_order=sort_order)
        self.db.add(lesson)
        self._commit()
        self.db.refresh(lesson)
        return lesson

    def get_lesson(self, lesson_id: int) -> Optional[Lesson]:
        return self.db.query(Lesson).filter(Lesson.id == lesson_id).first()

    def list_lessons(self) -> List[Lesson]:
        return self.db.query(Lesson).order_by(Lesson.sort_order, Lesson.id).all()

    def assign_to_lesson(self, word_ids: Iterable[int], lesson_id: Optional[int]) -> int:
        """Move words into a lesson (or out of any lesson when ``lesson_id`` is None)."""
        if lesson_id is not None and self.get_lesson(lesson_id) is None:
            raise ValueError(f"Lesson {lesson_id} not found")
        words = self.db.query(Word).filter(Word.id.in_(list(word_ids))).all()
        for word in words:
            word.lesson_id = lesson_id
        self._commit()
        return len(words)

    def delete_lesson(self, lesson_id: int) -> bool:
        """Delete a lesson; its words stay and lose their lesson."""
        lesson = self.get_lesson(lesson_id)
        if not lesson:
            return False
        for word in lesson.words:
            word.lesson_id = None
        self.db.delete(lesson)
        self._commit()
        return True

    def lesson_progress(self, lesson_id: int) -> float:
        """Share of mastered words in the lesson."""
        lesson = self.get_lesson(lesson_id)
        if not lesson:
            raise ValueError(f"Lesson {lesson_id} not found")
        return lesson.progress

    # Exercise groups

    def list_exercise_groups(self) -> List[ExerciseGroup]:
        return self.db.query(ExerciseGroup).order_by(ExerciseGroup.generated_at.desc(), ExerciseGroup.id).all()

    def delete_exercise_group(self, group_id: int) -> bool:
        """Delete an exercise group together with its exercises."""
        group = self.db.query(ExerciseGroup).filter(ExerciseGroup.id == group_id).first()
        if not group:
            return False
        self.db.delete(group)
        self._commit()
        return True
