"""Closed vocabularies used by the models, each with a lenient parser."""
from enum import Enum
from typing import Optional


class WordType(str, Enum):
    """Word class of a definition."""
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: Optional[str], default: "WordType" = None) -> "WordType":
        """Parse a loose word-class string, e.g. ``"Adj"`` -> ADJECTIVE."""
        default = default or cls.OTHER
        if not value:
            return default
        key = value.strip().lower()
        key = _WORD_TYPE_ABBREVIATIONS.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return default


_WORD_TYPE_ABBREVIATIONS = {
    "adj": "adjective",
    "adv": "adverb",
}


class CEFRLevel(str, Enum):
    """Common European Framework of Reference levels, A1 lowest."""
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @property
    def rank(self) -> int:
        return _CEFR_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def from_string(cls, value: Optional[str], default: "CEFRLevel" = None) -> "CEFRLevel":
        """Parse a loose level string such as ``" b1 "``; unknown values give the default."""
        default = default or cls.B2
        if not value:
            return default
        try:
            return cls(value.strip().upper())
        except ValueError:
            return default


_CEFR_ORDER = list(CEFRLevel)


class ExerciseType(str, Enum):
    """Kinds of generated exercises, valued by their wire tags."""
    FILL_BLANK = "fill_blank"
    MULTIPLE_CHOICE = "multiple_choice"
    PARAGRAPH_CLOZE = "word_group_paragraph"
    CONFUSION_PAIR = "confusion_pair"

    @classmethod
    def from_string(cls, value: Optional[str], default: "ExerciseType" = None) -> "ExerciseType":
        """Parse a type tag; anything unrecognised becomes a fill-in-the-blank."""
        default = default or cls.FILL_BLANK
        if not isinstance(value, str):
            return default
        try:
            return cls(value.strip().lower())
        except ValueError:
            return default


class MasteryTier(str, Enum):
    """Mastery classification derived from review accuracy."""
    NEW = "New"
    LEARNING = "Learning"
    FAMILIAR = "Familiar"
    MASTERED = "Mastered"

    @classmethod
    def from_string(cls, value: Optional[str], default: "MasteryTier" = None) -> "MasteryTier":
        default = default or cls.NEW
        if not value:
            return default
        for tier in cls:
            if tier.value.lower() == value.strip().lower():
                return tier
        return default
