import io
import sqlite3
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List

import pytest

from flashexport.apkg.ids import MonotonicIdGenerator
from flashexport.models import Card, ConfidenceScores, LibraryCard


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test with the working directory set to its tmp_path."""
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def sample_card1() -> Card:
    """A basic card with two tags and a note."""
    return Card(
        front="What is <b>2 + 2</b>?",
        back="4",
        tags=["math", "arithmetic"],
        notes="Warm-up",
    )


@pytest.fixture
def sample_card2() -> Card:
    """A card without tags or notes."""
    return Card(front="Capital of France?", back="Paris")


@pytest.fixture
def library_card() -> LibraryCard:
    """
    A persisted card carrying the bookkeeping fields exports must drop.
    """
    return LibraryCard(
        id="card-1",
        user_id="user-42",
        generation_request_id="gen-7",
        front="Mitochondria",
        back="Powerhouse of the cell",
        card_type="basic",
        tags=["biology"],
        notes="",
        source_quote="The mitochondria is the powerhouse of the cell.",
        domain="med",
        confidence_scores=ConfidenceScores(atomicity=0.9, self_contained=0.8),
        created_at=datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 2, 10, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_cards() -> Callable[[int], List[Card]]:
    """Factory for ``n`` cards Q1/A1..Qn/An; the first is tagged."""

    def _make(count: int) -> List[Card]:
        return [
            Card(
                front=f"Q{i + 1}",
                back=f"A{i + 1}",
                tags=["math", "algebra"] if i == 0 else [],
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture
def frozen_clock_generator() -> MonotonicIdGenerator:
    """An id generator whose clock never advances."""
    return MonotonicIdGenerator(clock=lambda: 1_700_000_000_000)


@pytest.fixture
def open_collection(tmp_path: Path) -> Callable[[bytes], sqlite3.Connection]:
    """
    Open the collection.anki2 member of an .apkg archive as a SQLite database.
    """
    connections: List[sqlite3.Connection] = []

    def _open(apkg_bytes: bytes) -> sqlite3.Connection:
        with zipfile.ZipFile(io.BytesIO(apkg_bytes)) as zipf:
            data = zipf.read("collection.anki2")
        db_file = tmp_path / f"collection_{len(connections)}.anki2"
        db_file.write_bytes(data)
        conn = sqlite3.connect(db_file)
        connections.append(conn)
        return conn

    yield _open
    for conn in connections:
        conn.close()
