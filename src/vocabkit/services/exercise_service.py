"""Exercise generation pipeline and exercise answer tracking."""
import json
import logging
import re
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabkit import monitoring
from vocabkit.exceptions import (
    DecodingError,
    GenerationError,
    InvalidResponseError,
    StorageFailureError,
)
from vocabkit.models.base import utcnow
from vocabkit.models.enums import CEFRLevel, ExerciseType, WordType
from vocabkit.models.models import Exercise, ExerciseGroup, Word
from vocabkit.models.schemas import ExerciseData, GenerationResponse, WordGroupData
from vocabkit.services.generation_client import GenerationClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a vocabulary exercise generator for a language learning app.

## Your Tasks:
1. Analyze the provided vocabulary list
2. Group words intelligently by:
   - Word type (verbs, nouns, adjectives, adverbs)
   - Semantic themes (business, science, emotions, academic...)
   - CEFR level
3. Generate exercises for each group

## Exercise Types:
1. fill_blank: Sentence with ___ for target word
2. multiple_choice: Word with 4 definition options
3. word_group_paragraph: Paragraph using multiple words from group
4. confusion_pair: Compare similar words

## Output format:
{"word_groups": [{"group_id": "g1", "group_name": "...", "words": ["..."],
  "exercises": [{"id": "e1", "type": "fill_blank", "instruction": "...",
  "sentence": "...", "answer": "...", "hint": "...", "options": ["..."],
  "difficulty": "B2"}]}]}
"options" only for multiple_choice; "hint" and "difficulty" are optional.

## Output: Return ONLY valid JSON, no markdown."""

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)

Send = Callable[..., Awaitable[str]]


def build_payload(words: Sequence[Word]) -> Dict[str, Any]:
    """Describe the words for the generator, using each word's primary sense."""
    vocabulary = []
    for word in words:
        primary = word.primary_definition
        vocabulary.append({
            "word": word.text,
            "type": (primary.word_type if primary else WordType.OTHER).value,
            "level": (primary.level if primary else CEFRLevel.B2).value,
            "definitions": [definition.text for definition in word.definitions],
        })
    return {"vocabulary": vocabulary}


def decode_response(content: str) -> List[WordGroupData]:
    """Decode the generator's reply into word groups.

    Raises:
        DecodingError: the text is not JSON.
        InvalidResponseError: the JSON does not match the expected shape.
    """
    match = _CODE_FENCE.match(content)
    if match:
        content = match.group(1)
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        raise DecodingError(f"Could not decode the generation response: {e}") from e
    try:
        return GenerationResponse.model_validate(raw).word_groups
    except ValidationError as e:
        raise InvalidResponseError(
            f"Generation response does not match the expected format: {e.error_count()} error(s)"
        ) from e


def decode_exercise(raw: Any) -> Optional[ExerciseData]:
    """Validate a single exercise, returning None when it is unusable."""
    try:
        return ExerciseData.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Skipping malformed exercise: {e.error_count()} error(s)")
        return None


def build_exercise(data: ExerciseData) -> Exercise:
    exercise_type = data.exercise_type
    options = [option for option in (data.options or []) if option.strip()]
    if exercise_type == ExerciseType.MULTIPLE_CHOICE and len(options) < 2:
        logger.warning(f"Multiple choice exercise {data.id!r} has no usable options, using fill_blank")
        exercise_type = ExerciseType.FILL_BLANK
    return Exercise(
        source_id=data.id,
        exercise_type=exercise_type,
        instruction=data.instruction,
        sentence=data.sentence,
        answer=data.answer,
        hint=data.hint or None,
        options=options if exercise_type == ExerciseType.MULTIPLE_CHOICE else None,
        difficulty=data.difficulty_label,
        times_shown=0,
        times_correct=0,
    )


def build_group(data: WordGroupData, generated_at: datetime) -> ExerciseGroup:
    """Build a group and all of its exercises as one unsaved aggregate."""
    group = ExerciseGroup(
        source_id=data.group_id,
        name=data.group_name,
        word_texts=list(data.words),
        generated_at=generated_at,
    )
    for raw in data.exercises:
        exercise_data = decode_exercise(raw)
        if exercise_data is not None:
            group.exercises.append(build_exercise(exercise_data))
    if not group.exercises:
        logger.warning(f"Group {data.group_id!r} has no usable exercises")
    return group


def answers_match(given: str, expected: str) -> bool:
    return given.strip().lower() == expected.strip().lower()


class ExerciseGenerator:
    """Generates exercise groups for a set of words and persists them.

    Callers must not run two ``generate`` calls for the same word set at the
    same time; no locking is done here.

    Groups are saved with ``db.commit()``, so any other pending changes on
    the session are committed along with them. Pass a session that holds
    nothing else, or commit or roll back your own work first.
    """

    def __init__(
        self,
        db: Session,
        client: GenerationClient,
        retry: Optional[Callable[[Send], Send]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.client = client
        self._send: Send = retry(client.send) if retry else client.send
        self._clock = clock or utcnow

    async def generate(self, words: Sequence[Word]) -> List[ExerciseGroup]:
        """Generate, validate and store exercise groups for ``words``.

        Nothing is stored unless the whole response decodes. Each group is
        committed together with its exercises.

        Raises:
            GenerationError: the request failed or the response is unusable.
            StorageFailureError: a group could not be saved.
        """
        if not words:
            logger.info("No words given, nothing to generate")
            return []

        payload = json.dumps(build_payload(words), ensure_ascii=False)
        logger.info(f"Generating exercises for {len(words)} words")

        started = time.monotonic()
        try:
            content = await self._send(SYSTEM_PROMPT, payload, structured_output=True)
            group_data = decode_response(content)
        except GenerationError as e:
            monitoring.generation_requests.labels(status=type(e).__name__).inc()
            logger.error(f"Exercise generation failed: {e}")
            raise
        finally:
            monitoring.generation_duration.observe(time.monotonic() - started)
        monitoring.generation_requests.labels(status="success").inc()

        generated_at = self._clock()
        groups = [build_group(data, generated_at) for data in group_data]
        for group in groups:
            self._save_group(group)

        logger.info(
            f"Stored {len(groups)} exercise groups with "
            f"{sum(len(group.exercises) for group in groups)} exercises"
        )
        return groups

    def _save_group(self, group: ExerciseGroup) -> None:
        self.db.add(group)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save exercise group {group.source_id!r}: {e}")
            raise StorageFailureError(f"Failed to save exercise group: {e}") from e
        self.db.refresh(group)
        monitoring.exercise_groups_created.inc()

    def get_group(self, group_id: int) -> Optional[ExerciseGroup]:
        return self.db.query(ExerciseGroup).filter(ExerciseGroup.id == group_id).first()

    def record_attempt(self, exercise_id: int, answer: str, now: Optional[datetime] = None) -> bool:
        """Check an answer and update the exercise's usage counters.

        Answers are compared ignoring case and surrounding whitespace.
        """
        exercise = self.db.query(Exercise).filter(Exercise.id == exercise_id).first()
        if not exercise:
            raise ValueError(f"Exercise {exercise_id} not found")

        correct = answers_match(answer, exercise.answer)
        exercise.times_shown += 1
        if correct:
            exercise.times_correct += 1
        exercise.last_shown_at = now or self._clock()

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFailureError(f"Failed to save exercise result: {e}") from e

        monitoring.exercise_answers.labels(result="correct" if correct else "incorrect").inc()
        return correct
