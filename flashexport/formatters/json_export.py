"""
JSON export for custom processing and re-import.
"""

import json
import logging
from typing import Any, Dict, Sequence

from ..constants import JSON_FILENAME
from ..models import Card, ExportResult, JsonOptions

logger = logging.getLogger(__name__)


def _public_fields(card: Card) -> Dict[str, Any]:
    """Pick only the user-facing fields of a card."""
    clean: Dict[str, Any] = {
        "front": card.front,
        "back": card.back,
        "card_type": card.card_type,
        "tags": list(card.tags),
        "notes": card.notes,
    }
    if card.domain is not None:
        clean["domain"] = card.domain
    return clean


def export_json(cards: Sequence[Card], options: JsonOptions) -> ExportResult:
    """Export cards as a JSON array, compact unless pretty printing is on."""
    payload = [_public_fields(card) for card in cards]
    if options.pretty_print:
        content = json.dumps(payload, ensure_ascii=False, indent=2)
    else:
        content = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))

    logger.debug(
        f"Encoded {len(cards)} cards as JSON (pretty={options.pretty_print})"
    )
    return ExportResult(
        content=content,
        mime_type="application/json",
        filename=JSON_FILENAME,
    )
