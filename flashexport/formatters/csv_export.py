"""
CSV export for spreadsheets, Anki's text importer and other flashcard apps.
"""

import csv
import io
import logging
from typing import List, Sequence

from ..constants import CSV_FILENAME
from ..models import Card, CsvOptions, ExportResult
from .html import strip_html

logger = logging.getLogger(__name__)

# Spreadsheet applications need the BOM to detect UTF-8.
UTF8_BOM = "\ufeff"


def _csv_header(options: CsvOptions) -> List[str]:
    header = ["front", "back"]
    if options.include_tags:
        header.append("tags")
    if options.include_notes:
        header.append("notes")
    return header


def _csv_row(card: Card, options: CsvOptions) -> List[str]:
    row = [strip_html(card.front), strip_html(card.back)]
    if options.include_tags:
        row.append(";".join(card.tags))
    if options.include_notes:
        row.append(card.notes)
    return row


def export_csv(cards: Sequence[Card], options: CsvOptions) -> ExportResult:
    """
    Export cards as CSV with a UTF-8 BOM and a header row.

    Fields holding the separator, a double quote or a newline are quoted with
    inner quotes doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=options.delimiter,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow(_csv_header(options))
    for card in cards:
        writer.writerow(_csv_row(card, options))

    logger.debug(
        f"Encoded {len(cards)} cards as CSV (separator={options.separator})"
    )
    return ExportResult(
        content=UTF8_BOM + buffer.getvalue(),
        mime_type="text/csv;charset=utf-8",
        filename=CSV_FILENAME,
    )
