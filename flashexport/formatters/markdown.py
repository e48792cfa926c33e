"""
Markdown export in the Obsidian Spaced Repetition plugin layout.

Per card::

    Question text
    ?
    Answer text
    <!--tags: tag1, tag2-->
    ---
"""

import logging
from typing import List, Sequence

from ..models import Card, ExportResult, MarkdownOptions
from .filenames import deck_filename
from .html import strip_html

logger = logging.getLogger(__name__)

DECK_TAG_MARKER = "#flashcards"
CARD_SEPARATOR = "---"


def export_markdown(
    cards: Sequence[Card], options: MarkdownOptions
) -> ExportResult:
    """Export cards as one Markdown document headed by the deck name."""
    lines: List[str] = [f"# {options.deck_name}", DECK_TAG_MARKER, ""]

    for index, card in enumerate(cards):
        lines.append(strip_html(card.front))
        lines.append("?")
        lines.append(strip_html(card.back))
        if card.tags:
            lines.append(f"<!--tags: {', '.join(card.tags)}-->")
        if index < len(cards) - 1:
            lines.append(CARD_SEPARATOR)

    logger.debug(f"Encoded {len(cards)} cards as Markdown")
    return ExportResult(
        content="\n".join(lines) + "\n",
        mime_type="text/markdown;charset=utf-8",
        filename=deck_filename(options.deck_name, ".md"),
    )
