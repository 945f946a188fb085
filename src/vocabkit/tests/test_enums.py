"""Tests for the enum normalizers."""
import pytest

from vocabkit.models.enums import CEFRLevel, ExerciseType, MasteryTier, WordType


@pytest.mark.parametrize(
    "value, expected",
    [
        ("noun", WordType.NOUN),
        (" Verb ", WordType.VERB),
        ("ADJ", WordType.ADJECTIVE),
        ("adjective", WordType.ADJECTIVE),
        ("adv", WordType.ADVERB),
        ("preposition", WordType.OTHER),
        ("", WordType.OTHER),
        (None, WordType.OTHER),
    ],
)
def test_word_type_from_string(value, expected) -> None:
    assert WordType.from_string(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("a1", CEFRLevel.A1),
        (" C2 ", CEFRLevel.C2),
        ("B3", CEFRLevel.B2),
        ("", CEFRLevel.B2),
        (None, CEFRLevel.B2),
    ],
)
def test_cefr_level_from_string(value, expected) -> None:
    assert CEFRLevel.from_string(value) == expected


def test_cefr_level_default_override() -> None:
    assert CEFRLevel.from_string("?", default=CEFRLevel.A2) == CEFRLevel.A2


def test_cefr_levels_are_ordered() -> None:
    assert CEFRLevel.A1 < CEFRLevel.A2 < CEFRLevel.B1 < CEFRLevel.B2 < CEFRLevel.C1 < CEFRLevel.C2
    assert CEFRLevel.C1 >= CEFRLevel.B2
    assert sorted([CEFRLevel.C2, CEFRLevel.A1, CEFRLevel.B2]) == [CEFRLevel.A1, CEFRLevel.B2, CEFRLevel.C2]
    assert max(CEFRLevel) == CEFRLevel.C2


@pytest.mark.parametrize(
    "value, expected",
    [
        ("fill_blank", ExerciseType.FILL_BLANK),
        ("multiple_choice", ExerciseType.MULTIPLE_CHOICE),
        ("word_group_paragraph", ExerciseType.PARAGRAPH_CLOZE),
        ("Confusion_Pair", ExerciseType.CONFUSION_PAIR),
        ("crossword", ExerciseType.FILL_BLANK),
        (42, ExerciseType.FILL_BLANK),
        (None, ExerciseType.FILL_BLANK),
    ],
)
def test_exercise_type_from_string(value, expected) -> None:
    assert ExerciseType.from_string(value) == expected


def test_mastery_tier_from_string() -> None:
    assert MasteryTier.from_string("mastered") == MasteryTier.MASTERED
    assert MasteryTier.from_string("expert") == MasteryTier.NEW
