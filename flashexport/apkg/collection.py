"""
Writes notes and cards into an in-memory Anki collection database.
"""

import logging
import sqlite3
import time
from typing import Sequence

from ..constants import FIELD_SEPARATOR
from ..exceptions import CollectionWriteError, SchemaInitializationError
from .connection import ConnectionHandler
from .ids import MonotonicIdGenerator, field_checksum, generate_guid
from .schema import (
    APKG_SCHEMA_SQL,
    INSERT_CARD_SQL,
    INSERT_COL_SQL,
    INSERT_NOTE_SQL,
    build_col_row,
)

logger = logging.getLogger(__name__)


def format_tags(tags: Sequence[str]) -> str:
    """
    Render tags the way Anki stores them: space-joined and space-padded.

    Whitespace inside a tag becomes '_' since Anki splits tags on spaces.
    No tags gives an empty string.
    """
    cleaned = ["_".join(tag.split()) for tag in tags]
    cleaned = [tag for tag in cleaned if tag]
    if not cleaned:
        return ""
    return f" {' '.join(cleaned)} "


class AnkiCollection:
    """
    A single-deck, single-model Anki collection under construction.

    Every note gets exactly one card. Row ids come from the injected
    generator so notes and cards are strictly increasing in insertion order.
    """

    def __init__(
        self, handler: ConnectionHandler, id_generator: MonotonicIdGenerator
    ):
        self._handler = handler
        self._ids = id_generator
        self.deck_id: int = 0
        self.model_id: int = 0
        self.note_count: int = 0
        self.card_count: int = 0
        self._mod = int(time.time())

    @property
    def connection(self) -> sqlite3.Connection:
        return self._handler.get_connection()

    def initialize_schema(self) -> None:
        """Creates the schema 11 tables and indices."""
        try:
            self.connection.executescript(APKG_SCHEMA_SQL)
        except sqlite3.Error as e:
            logger.error(f"Error initializing collection schema: {e}")
            raise SchemaInitializationError(
                f"Failed to initialize schema: {e}", original_exception=e
            ) from e

    def create_deck(self, deck_name: str) -> None:
        """Allocates the deck and model ids and inserts the col row."""
        self.deck_id = self._ids.next_id()
        self.model_id = self._ids.next_id()
        col = build_col_row(deck_name, self.deck_id, self.model_id)
        try:
            self.connection.execute(INSERT_COL_SQL, col.as_params())
        except sqlite3.Error as e:
            raise CollectionWriteError(
                f"Failed to insert collection row: {e}", original_exception=e
            ) from e
        logger.debug(
            f"Created deck '{deck_name}' (deck id {self.deck_id}, "
            f"model id {self.model_id})"
        )

    def add_note(
        self, front: str, back: str, tags: Sequence[str], position: int
    ) -> int:
        """
        Inserts one note and its card, returning the note id.

        ``position`` is the card's place in the new-card queue.
        """
        note_id = self._ids.next_id()
        card_id = self._ids.next_id()
        note_params = (
            note_id,
            generate_guid(),
            self.model_id,
            self._mod,
            -1,  # usn
            format_tags(tags),
            f"{front}{FIELD_SEPARATOR}{back}",
            front,  # sfld
            field_checksum(front),
            0,  # flags
            "",  # data
        )
        card_params = (
            card_id,
            note_id,
            self.deck_id,
            0,  # ord
            self._mod,
            -1,  # usn
            0,  # type: new
            0,  # queue: new
            position,  # due
            0,  # ivl
            0,  # factor
            0,  # reps
            0,  # lapses
            0,  # left
            0,  # odue
            0,  # odid
            0,  # flags
            "",  # data
        )
        try:
            self.connection.execute(INSERT_NOTE_SQL, note_params)
            self.note_count += 1
            self.connection.execute(INSERT_CARD_SQL, card_params)
            self.card_count += 1
        except sqlite3.Error as e:
            raise CollectionWriteError(
                f"Failed to insert note {position}: {e}", original_exception=e
            ) from e
        return note_id

    def serialize(self) -> bytes:
        """Commits pending rows and returns the database file image."""
        conn = self.connection
        conn.commit()
        return bytes(conn.serialize())
