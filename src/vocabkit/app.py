"""Application facade wiring settings, database and services together."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from vocabkit import monitoring
from vocabkit.config import Settings, settings as default_settings
from vocabkit.exceptions import CSVImportError
from vocabkit.models.base import SessionLocal, init_db
from vocabkit.models.enums import CEFRLevel
from vocabkit.models.models import ExerciseGroup, Word
from vocabkit.services import csv_importer
from vocabkit.services.exercise_service import ExerciseGenerator
from vocabkit.services.generation_client import GenerationClient
from vocabkit.services.retry import retry_async
from vocabkit.services.review_service import ReviewService
from vocabkit.services.word_service import WordService


class VocabApp:
    """Main application class."""

    def __init__(self, settings: Optional[Settings] = None, db: Optional[Session] = None):
        """Initialize the application."""
        self.settings = settings or default_settings
        self.db: Optional[Session] = db
        self._owns_db = db is None
        self.client: Optional[GenerationClient] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Open the database session and the generation client."""
        if self.running:
            return

        if self.db is None:
            init_db()
            self.db = SessionLocal()
            self.logger.info("Database initialized")

        self.client = GenerationClient(self.settings.generation)

        if self.settings.monitoring.enabled:
            monitoring.start_monitoring(self.settings.monitoring.port)
            self.logger.info(f"Metrics exposed on port {self.settings.monitoring.port}")

        self.running = True

    async def stop(self) -> None:
        """Release the generation client and the database session."""
        if not self.running:
            return

        try:
            if self.client:
                await self.client.aclose()
                self.client = None
            if self.db and self._owns_db:
                self.db.close()
                self.db = None
                self.logger.info("Database session closed")
        finally:
            self.running = False

    async def __aenter__(self) -> "VocabApp":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def words(self) -> WordService:
        return WordService(self.db)

    @property
    def reviews(self) -> ReviewService:
        return ReviewService(self.db)

    @property
    def generator(self) -> ExerciseGenerator:
        retry = None
        if self.settings.generation.max_attempts > 1:
            retry = retry_async(
                attempts=self.settings.generation.max_attempts,
                delay=self.settings.generation.retry_delay,
            )
        return ExerciseGenerator(self.db, self.client, retry=retry)

    def import_csv(self, path: Union[str, Path]) -> int:
        """Parse a CSV file and merge its records into the store."""
        default_level = CEFRLevel.from_string(self.settings.importing.default_level)
        try:
            records = csv_importer.parse_file(path, default_level=default_level)
        except CSVImportError as e:
            monitoring.import_failures.labels(error_type=type(e).__name__).inc()
            self.logger.error(f"Import of {path} failed: {e}")
            raise
        return self.words.import_records(records)

    def record_review(self, text: str, correct: bool) -> Word:
        word = self.words.get_word_by_text(text)
        if word is None:
            raise ValueError(f"Word {text!r} not found")
        return self.reviews.record_review(word.id, correct)

    def due_words(self, limit: Optional[int] = None) -> List[Word]:
        return self.reviews.get_due_words(limit=limit)

    async def generate_exercises(self, texts: Optional[Sequence[str]] = None, limit: int = 20) -> List[ExerciseGroup]:
        """Generate exercises for the given words, or for the words due for review."""
        if texts:
            words = self.words.get_words_by_texts(texts)
            missing = set(texts) - {word.text for word in words}
            if missing:
                self.logger.warning(f"Unknown words ignored: {', '.join(sorted(missing))}")
        else:
            words = self.due_words(limit=limit)
        return await self.generator.generate(words)
