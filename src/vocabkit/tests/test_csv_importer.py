"""Tests for the CSV importer."""
from datetime import UTC, datetime

import pytest

from vocabkit.exceptions import CSVImportError, EmptyFileError, MissingColumnsError
from vocabkit.models.enums import CEFRLevel, WordType
from vocabkit.services.csv_importer import ParsedWord, parse, parse_date, parse_file, split_line


def clock_at(moment: datetime):
    return lambda: moment


def test_quoted_definition_with_comma(now) -> None:
    """A quoted field keeps its comma and optional columns get defaults."""
    content = 'Word,Type,Definition\npersistent,adjective,"continuing, despite difficulty"'
    records = parse(content, clock=clock_at(now))

    assert records == [
        ParsedWord(
            text="persistent",
            word_type=WordType.ADJECTIVE,
            definition="continuing, despite difficulty",
            level=CEFRLevel.B2,
            translation=None,
            synonyms=(),
            date_added=now,
        )
    ]


def test_columns_in_any_order_and_optional_columns(now) -> None:
    content = (
        "Definition,Level,Word,Synonym,Vietnamese,Type,Date Added\n"
        'to make worse,c1,exacerbate,"worsen, aggravate",làm trầm trọng,verb,2024-01-05\n'
    )
    [record] = parse(content, clock=clock_at(now))

    assert record.text == "exacerbate"
    assert record.word_type == WordType.VERB
    assert record.definition == "to make worse"
    assert record.level == CEFRLevel.C1
    assert record.translation == "làm trầm trọng"
    assert record.synonyms == ("worsen", "aggravate")
    assert record.date_added == datetime(2024, 1, 5, tzinfo=UTC)


def test_header_is_case_insensitive_and_trimmed(now) -> None:
    content = "\ufeffWORD , Type,  definition\nrun,Verb,move fast\n"
    [record] = parse(content, clock=clock_at(now))
    assert record.text == "run"
    assert record.word_type == WordType.VERB


@pytest.mark.parametrize("content", ["", "\n\n   \n", "word,type,definition\n\n"])
def test_empty_file(content: str) -> None:
    with pytest.raises(EmptyFileError):
        parse(content)


def test_missing_columns() -> None:
    with pytest.raises(MissingColumnsError) as excinfo:
        parse("word,meaning\nrun,move fast\n")
    assert excinfo.value.missing == ("type", "definition")
    assert "type" in excinfo.value.message
    assert isinstance(excinfo.value, CSVImportError)


def test_blank_lines_short_rows_and_empty_words_are_skipped(now) -> None:
    content = (
        "word,type,definition,level\n"
        "\n"
        "alpha,noun,first letter\n"
        "short,noun\n"
        "   ,noun,no word here\n"
        "beta,noun,second letter,A2\n"
        "\r\n"
    )
    records = parse(content, clock=clock_at(now))
    assert [record.text for record in records] == ["alpha", "beta"]
    assert records[1].level == CEFRLevel.A2


def test_row_without_optional_cells_uses_defaults(now) -> None:
    content = "word,type,definition,level,vietnamese,synonym,date added\ncalm,adj,not excited\n"
    [record] = parse(content, clock=clock_at(now))
    assert record.word_type == WordType.ADJECTIVE
    assert record.level == CEFRLevel.B2
    assert record.translation is None
    assert record.synonyms == ()
    assert record.date_added == now


def test_unknown_enums_fall_back(now) -> None:
    content = "word,type,definition,level\nhm,interjection,a sound,Z9\nquickly,ADV,fast,b1\n"
    first, second = parse(content, clock=clock_at(now))
    assert first.word_type == WordType.OTHER
    assert first.level == CEFRLevel.B2
    assert second.word_type == WordType.ADVERB
    assert second.level == CEFRLevel.B1


def test_default_level_can_be_overridden(now) -> None:
    [record] = parse("word,type,definition\ncat,noun,an animal\n", clock=clock_at(now), default_level=CEFRLevel.A1)
    assert record.level == CEFRLevel.A1


def test_unparseable_date_uses_now(now) -> None:
    content = "word,type,definition,date added\ncat,noun,an animal,yesterday\n"
    [record] = parse(content, clock=clock_at(now))
    assert record.date_added == now


def test_output_order_and_count_match_input(now) -> None:
    rows = [f"word{i},noun,definition {i}" for i in range(25)]
    records = parse("word,type,definition\n" + "\n".join(rows), clock=clock_at(now))
    assert [record.text for record in records] == [f"word{i}" for i in range(25)]


def test_parse_is_deterministic_with_fixed_clock(now) -> None:
    content = "word,type,definition,date added\ncat,noun,an animal,\ndog,noun,another animal,3/4/2023\n"
    assert parse(content, clock=clock_at(now)) == parse(content, clock=clock_at(now))


def test_clock_is_called_once(mocker, now) -> None:
    clock = mocker.Mock(return_value=now)
    parse("word,type,definition\na,noun,x\nb,noun,y\n", clock=clock)
    clock.assert_called_once_with()


def test_split_line() -> None:
    assert split_line('a,"b, c",d') == ["a", "b, c", "d"]
    assert split_line("a,,") == ["a", "", ""]
    # escaped quotes are not supported: each quote just toggles quoting
    assert split_line('a,"say ""hi""",b') == ["a", "say hi", "b"]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3/4/2023", datetime(2023, 3, 4, tzinfo=UTC)),
        ("03/04/2023", datetime(2023, 3, 4, tzinfo=UTC)),
        ("2023-12-31", datetime(2023, 12, 31, tzinfo=UTC)),
        ("25/12/2023", datetime(2023, 12, 25, tzinfo=UTC)),
        (" 2023-01-02 ", datetime(2023, 1, 2, tzinfo=UTC)),
        ("31.12.2023", None),
        ("", None),
    ],
)
def test_parse_date(value: str, expected) -> None:
    assert parse_date(value) == expected


def test_parse_file(tmp_path, now) -> None:
    path = tmp_path / "words.csv"
    path.write_text("\ufeffword,type,definition\nbook,noun,pages bound together\n", encoding="utf-8")
    [record] = parse_file(path, clock=clock_at(now))
    assert record.text == "book"
