"""
APKG generator: in-memory SQLite collection + ZIP packaging.

Builds a .apkg file that Anki desktop and mobile can import, without any
server round-trip. Insertion yields to the event loop between batches so a
host UI stays responsive, and a build can be cancelled at those points.
"""

import asyncio
import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..constants import (
    APKG_BATCH_SIZE,
    APKG_COLLECTION_MEMBER,
    APKG_COMPRESS_LEVEL,
    APKG_EMPTY_MEDIA_MANIFEST,
    APKG_MEDIA_MEMBER,
    MAX_APKG_CARDS,
)
from ..cancellation import CancellationToken
from ..exceptions import ExportCancelledError, ExportValidationError
from .collection import AnkiCollection
from .connection import ConnectionHandler
from .ids import MonotonicIdGenerator, default_id_generator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class ApkgCard:
    front: str
    back: str
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ApkgResult:
    data: bytes
    card_count: int
    deck_name: str


def validate_card_count(count: int) -> None:
    """Rejects empty and oversized exports before any engine work."""
    if count == 0:
        raise ExportValidationError("At least one card is required")
    if count > MAX_APKG_CARDS:
        raise ExportValidationError(
            f"Export is limited to {MAX_APKG_CARDS} cards per file. "
            f"You selected {count}. Please reduce your selection."
        )


def package_collection(collection_bytes: bytes) -> bytes:
    """Zips the collection database and an empty media manifest."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(
        buffer,
        "w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=APKG_COMPRESS_LEVEL,
    ) as zipf:
        zipf.writestr(APKG_COLLECTION_MEMBER, collection_bytes)
        zipf.writestr(APKG_MEDIA_MEMBER, APKG_EMPTY_MEDIA_MANIFEST)
    return buffer.getvalue()


async def _checkpoint(
    completed: int,
    total: int,
    on_progress: Optional[ProgressCallback],
    cancel_token: Optional[CancellationToken],
) -> None:
    if on_progress is not None:
        on_progress(completed / total)
    logger.debug(f"Inserted {completed}/{total} cards")
    await asyncio.sleep(0)
    if cancel_token is not None and cancel_token.cancelled:
        logger.warning(f"APKG export cancelled after {completed} cards")
        raise ExportCancelledError()


async def build_apkg(
    deck_name: str,
    cards: Sequence[ApkgCard],
    *,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    id_generator: Optional[MonotonicIdGenerator] = None,
) -> ApkgResult:
    """
    Generate an .apkg package from a deck name and a list of cards.

    Parameters:
        deck_name (str): Name of the single deck created in the package.
        cards (Sequence[ApkgCard]): Cards in study order; 1 to 2000 of them.
        on_progress (Optional[Callable[[float], None]]): Receives the completed
            fraction every 100 cards and 1.0 once all rows are inserted.
        cancel_token (Optional[CancellationToken]): Polled after each yield.
        id_generator (Optional[MonotonicIdGenerator]): Row id source; the
            process-wide generator when omitted.

    Returns:
        ApkgResult: The archive bytes, the number of cards packaged and the
        deck name.

    Raises:
        ExportValidationError: If the list is empty or over the card cap.
        ExportEngineError: If the SQLite engine cannot be opened.
        ExportCancelledError: If the token is cancelled mid-build.
    """
    validate_card_count(len(cards))
    ids = id_generator or default_id_generator
    total = len(cards)
    logger.info(f"Building APKG '{deck_name}' with {total} cards")

    handler = ConnectionHandler()
    try:
        collection = AnkiCollection(handler, ids)
        collection.initialize_schema()
        collection.create_deck(deck_name)

        for index, card in enumerate(cards):
            collection.add_note(card.front, card.back, card.tags, index)
            completed = index + 1
            if completed % APKG_BATCH_SIZE == 0 and completed < total:
                await _checkpoint(completed, total, on_progress, cancel_token)

        if on_progress is not None:
            on_progress(1.0)

        data = package_collection(collection.serialize())
    finally:
        handler.close_connection()

    logger.info(
        f"Built APKG '{deck_name}': {collection.card_count} cards, "
        f"{len(data)} bytes"
    )
    return ApkgResult(data=data, card_count=total, deck_name=deck_name)
