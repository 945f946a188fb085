"""
Pydantic models for the exercise generation response.

The generator is asked for JSON shaped like::

    {"word_groups": [{"group_id": ..., "group_name": ..., "words": [...],
                      "exercises": [{"id", "type", "instruction", "sentence",
                                     "answer", "hint"?, "options"?,
                                     "difficulty"?}]}]}

Groups are validated strictly. Exercises are kept raw here and validated one
by one with :class:`ExerciseData`, so a single bad exercise does not sink the
whole response.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from vocabkit.models.enums import ExerciseType

DEFAULT_DIFFICULTY = "B2"


def _coerce_id(value: Any) -> Any:
    # models sometimes number their ids
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ExerciseData(BaseModel):
    """One generated exercise."""
    id: str
    type: Any = None  # unknown or malformed tags become fill_blank
    instruction: str
    sentence: str
    answer: str
    hint: Optional[str] = None
    options: Optional[list[str]] = None
    difficulty: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def exercise_type(self) -> ExerciseType:
        return ExerciseType.from_string(self.type)

    @property
    def difficulty_label(self) -> str:
        if self.difficulty and self.difficulty.strip():
            return self.difficulty.strip()
        return DEFAULT_DIFFICULTY


class WordGroupData(BaseModel):
    """A themed group of words with its exercises."""
    group_id: str
    group_name: str
    words: list[str]
    exercises: list[Any] = Field(..., description="Raw exercise objects")

    @field_validator("group_id", mode="before")
    @classmethod
    def coerce_group_id(cls, value: Any) -> Any:
        return _coerce_id(value)


class GenerationResponse(BaseModel):
    """Top-level generation response."""
    word_groups: list[WordGroupData]
