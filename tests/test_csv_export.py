"""
Tests for the CSV exporter.
"""

import csv
import io
import logging

from flashexport.formatters.csv_export import UTF8_BOM, export_csv
from flashexport.models import Card, CsvOptions


def _rows(content: str, delimiter: str = ","):
    assert content.startswith(UTF8_BOM)
    return list(csv.reader(io.StringIO(content[1:]), delimiter=delimiter))


def test_header_and_rows_with_defaults(sample_card1, sample_card2):
    result = export_csv([sample_card1, sample_card2], CsvOptions())

    rows = _rows(result.content)
    assert rows[0] == ["front", "back", "tags", "notes"]
    assert rows[1] == ["What is 2 + 2?", "4", "math;arithmetic", "Warm-up"]
    assert rows[2] == ["Capital of France?", "Paris", "", ""]
    assert result.filename == "flashcards.csv"
    assert result.mime_type == "text/csv;charset=utf-8"


def test_field_with_separator_is_quoted():
    card = Card(front="A, B, and C", back="letters")
    result = export_csv([card], CsvOptions(include_tags=False, include_notes=False))

    lines = result.content[1:].splitlines()
    assert lines[1] == '"A, B, and C",letters'


def test_double_quotes_are_doubled():
    card = Card(front='Say "hi"', back="ok")
    result = export_csv([card], CsvOptions(include_tags=False, include_notes=False))

    assert '"Say ""hi"""' in result.content


def test_newline_in_field_is_quoted():
    card = Card(front="line one<br>line two", back="b")
    result = export_csv([card], CsvOptions(include_tags=False, include_notes=False))

    assert '"line one\nline two"' in result.content


def test_tab_separator_leaves_commas_unquoted():
    card = Card(front="a, b", back="c\td", tags=["x"], notes="n\tm")
    result = export_csv([card], CsvOptions(separator="tab"))

    lines = result.content[1:].split("\n")
    assert lines[0] == "front\tback\ttags\tnotes"
    assert lines[1] == 'a, b\tc d\tx\t"n\tm"'


def test_tab_inside_rich_text_becomes_a_space():
    card = Card(front="x\ty", back="<b>p</b>\t\tq")
    result = export_csv(
        [card],
        CsvOptions(separator="tab", include_tags=False, include_notes=False),
    )

    assert result.content[1:].split("\n")[1] == "x y\tp q"


def test_optional_columns_can_be_dropped(sample_card1):
    result = export_csv(
        [sample_card1], CsvOptions(include_tags=False, include_notes=True)
    )
    rows = _rows(result.content)
    assert rows[0] == ["front", "back", "notes"]
    assert rows[1] == ["What is 2 + 2?", "4", "Warm-up"]


def test_unicode_content_is_preserved():
    card = Card(front="日本語 🎌", back="中文 😀")
    result = export_csv([card], CsvOptions())

    assert "日本語 🎌" in result.content
    assert "中文 😀" in result.content
    assert result.content.encode("utf-8").startswith(b"\xef\xbb\xbf")


def test_output_is_deterministic(sample_card1, sample_card2):
    cards = [sample_card1, sample_card2]
    assert export_csv(cards, CsvOptions()) == export_csv(cards, CsvOptions())


def test_encoding_is_logged(sample_card1, sample_card2, caplog):
    caplog.set_level(logging.DEBUG, logger="flashexport.formatters.csv_export")
    export_csv([sample_card1, sample_card2], CsvOptions(separator="tab"))
    assert "Encoded 2 cards as CSV (separator=tab)" in caplog.text
