"""CSV vocabulary importer.

Turns loosely formatted word lists into :class:`ParsedWord` records. The
header row decides which column holds what; required columns are ``word``,
``type`` and ``definition`` and the optional ones are ``level``,
``vietnamese``, ``synonym`` and ``date added``.

Malformed rows, unknown word classes or levels and unparseable dates are
recovered with defaults or skipped; only an empty file or a header without the
required columns aborts the import.

Known limitation: quoted fields may contain commas, but escaped quotes
(``""``) are not supported. Each ``"`` simply toggles quoting, so a doubled
quote disappears from the field.
"""
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from vocabkit.exceptions import EmptyFileError, MissingColumnsError
from vocabkit.models.base import utcnow
from vocabkit.models.enums import CEFRLevel, WordType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("word", "type", "definition")
LEVEL_COLUMN = "level"
TRANSLATION_COLUMN = "vietnamese"
SYNONYM_COLUMN = "synonym"
DATE_COLUMN = "date added"

# Tried in order, first match wins. %m and %d also accept unpadded values, so
# the first entry covers both M/d/yyyy and MM/dd/yyyy.
DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%d/%m/%Y",
)


@dataclass(frozen=True)
class ParsedWord:
    """A single vocabulary row read from CSV."""
    text: str
    word_type: WordType
    definition: str
    level: CEFRLevel = CEFRLevel.B2
    translation: Optional[str] = None
    synonyms: Tuple[str, ...] = field(default_factory=tuple)
    date_added: Optional[datetime] = None


def split_line(line: str) -> List[str]:
    """Split one CSV line on commas that are not inside double quotes."""
    fields = []
    current = []
    inside_quotes = False
    for char in line:
        if char == '"':
            inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def parse_date(value: str) -> Optional[datetime]:
    """Parse a date cell, returning None when no known format matches."""
    cleaned = value.strip()
    if not cleaned:
        return None
    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, date_format).replace(tzinfo=UTC)
        except ValueError:
            continue
    return None


def _split_synonyms(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _cell(columns: List[str], index: Optional[int]) -> Optional[str]:
    """Return the trimmed cell at ``index`` or None if the row is too short."""
    if index is None or index >= len(columns):
        return None
    return columns[index].strip()


def _header_index(header: List[str]) -> Dict[str, int]:
    index = {}
    for position, name in enumerate(header):
        # first occurrence wins on duplicate headers
        index.setdefault(name, position)
    return index


def parse(
    content: str,
    clock: Optional[Callable[[], datetime]] = None,
    default_level: CEFRLevel = CEFRLevel.B2,
) -> List[ParsedWord]:
    """Parse CSV text into vocabulary records.

    Args:
        content: The whole CSV document.
        clock: Source of the current time, used for rows without a usable
            date. Called once per parse. Defaults to UTC now.
        default_level: Level used when the level column is absent or holds
            an unknown value.

    Raises:
        EmptyFileError: fewer than two non-blank lines.
        MissingColumnsError: a required header is absent.
    """
    now = (clock or utcnow)()

    lines = [line for line in content.splitlines() if line.strip()]
    if len(lines) < 2:
        raise EmptyFileError()

    header = [name.strip().lower() for name in split_line(lines[0].lstrip("\ufeff"))]
    columns_by_name = _header_index(header)

    missing = [name for name in REQUIRED_COLUMNS if name not in columns_by_name]
    if missing:
        raise MissingColumnsError(missing)

    word_index, type_index, definition_index = (columns_by_name[name] for name in REQUIRED_COLUMNS)
    min_columns = max(word_index, type_index, definition_index) + 1
    level_index = columns_by_name.get(LEVEL_COLUMN)
    translation_index = columns_by_name.get(TRANSLATION_COLUMN)
    synonym_index = columns_by_name.get(SYNONYM_COLUMN)
    date_index = columns_by_name.get(DATE_COLUMN)

    records = []
    for line_number, line in enumerate(lines[1:], start=2):
        columns = split_line(line)
        if len(columns) < min_columns:
            logger.debug(f"Skipping line {line_number}: expected {min_columns} columns, got {len(columns)}")
            continue

        text = columns[word_index].strip()
        if not text:
            logger.debug(f"Skipping line {line_number}: empty word")
            continue

        level_value = _cell(columns, level_index)
        translation = _cell(columns, translation_index)
        synonyms = _cell(columns, synonym_index)
        date_value = _cell(columns, date_index)

        date_added = parse_date(date_value) if date_value else None
        if date_added is None:
            date_added = now

        records.append(
            ParsedWord(
                text=text,
                word_type=WordType.from_string(columns[type_index]),
                definition=columns[definition_index].strip(),
                level=CEFRLevel.from_string(level_value, default=default_level),
                translation=translation or None,
                synonyms=_split_synonyms(synonyms) if synonyms else (),
                date_added=date_added,
            )
        )

    logger.info(f"Parsed {len(records)} records from {len(lines) - 1} data lines")
    return records


def parse_file(
    path: Union[str, Path],
    clock: Optional[Callable[[], datetime]] = None,
    default_level: CEFRLevel = CEFRLevel.B2,
) -> List[ParsedWord]:
    """Read a UTF-8 CSV file and parse it."""
    content = Path(path).read_text(encoding="utf-8-sig")
    return parse(content, clock=clock, default_level=default_level)
