import json
import logging
from pathlib import Path

import pytest

from flashexport.parser import (
    YAMLDeckLoader,
    load_cards,
    load_cards_from_json,
    load_cards_from_yaml,
    merge_tags,
    sanitize_card_html,
)
from flashexport.yaml_models import CardLoaderConfig, CardSourceError


def create_yaml_file(base_path: Path, filename: str, content: str) -> Path:
    file_path = base_path / filename
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    return file_path


VALID_DECK = """
deck: Algebra
tags: [math]
cards:
  - q: What is x if 2x = 4?
    a: "2"
    tags: [algebra, math]
  - front: <b>Define</b> slope
    back: Rise over run
    notes: From chapter 3
    domain: stem-m
"""

DECK_WITH_BAD_CARD = """
deck: Mixed
cards:
  - q: Good question
    a: Good answer
  - q: Missing answer
  - just a string
"""


@pytest.fixture
def decks_dir(tmp_path: Path) -> Path:
    source = tmp_path / "decks"
    create_yaml_file(source, "b_algebra.yaml", VALID_DECK)
    create_yaml_file(source, "a_mixed.yml", DECK_WITH_BAD_CARD)
    create_yaml_file(source, "readme.txt", "not a deck")
    return source


def test_merge_tags_deck_first_without_duplicates():
    assert merge_tags(["math", " "], ["algebra", "math", " x "]) == [
        "math",
        "algebra",
        "x",
    ]


def test_sanitize_card_html_strips_unknown_tags():
    text = '<script>alert(1)</script><b>bold</b> <ruby>漢<rt>かん</rt></ruby>'
    cleaned = sanitize_card_html(text)
    assert "<script>" not in cleaned
    assert "<b>bold</b>" in cleaned
    assert "<ruby>漢<rt>かん</rt></ruby>" in cleaned


def test_load_file_builds_cards(tmp_path):
    path = create_yaml_file(tmp_path, "deck.yaml", VALID_DECK)
    loader = YAMLDeckLoader(CardLoaderConfig(source=path))

    deck_name, cards, errors = loader.load_file(path)

    assert deck_name == "Algebra"
    assert errors == []
    assert [card.front for card in cards] == [
        "What is x if 2x = 4?",
        "<b>Define</b> slope",
    ]
    assert cards[0].tags == ["math", "algebra"]
    assert cards[1].tags == ["math"]
    assert cards[1].notes == "From chapter 3"
    assert cards[1].domain == "stem-m"


def test_load_file_collects_per_card_errors(tmp_path):
    path = create_yaml_file(tmp_path, "mixed.yaml", DECK_WITH_BAD_CARD)
    loader = YAMLDeckLoader(CardLoaderConfig(source=path))

    _, cards, errors = loader.load_file(path)

    assert len(cards) == 1
    assert [error.card_index for error in errors] == [1, 2]
    assert "Card validation failed" in errors[0].message
    assert "not a dictionary" in errors[1].message


@pytest.mark.parametrize(
    "content, expected",
    [
        ("deck: [unclosed", "Invalid YAML syntax"),
        ("- just\n- a list\n", "must be a dictionary"),
        ("deck: Empty\ncards: []\n", "Validation error in field 'cards'"),
        ("cards:\n  - q: a\n    a: b\n", "Validation error in field 'deck'"),
    ],
)
def test_load_file_rejects_bad_files(tmp_path, content, expected):
    path = create_yaml_file(tmp_path, "bad.yaml", content)
    loader = YAMLDeckLoader(CardLoaderConfig(source=path))

    with pytest.raises(CardSourceError) as exc_info:
        loader.load_file(path)

    assert expected in exc_info.value.message


def test_directory_load_is_sorted_and_collects_errors(decks_dir):
    loaded = load_cards_from_yaml(CardLoaderConfig(source=decks_dir))

    assert loaded.deck_names == ["Mixed", "Algebra"]
    assert loaded.deck_name == "Mixed"
    assert [card.front for card in loaded.cards][0] == "Good question"
    assert len(loaded.cards) == 3
    assert len(loaded.errors) == 2


def test_fail_fast_raises_first_error(decks_dir):
    with pytest.raises(CardSourceError) as exc_info:
        load_cards_from_yaml(CardLoaderConfig(source=decks_dir, fail_fast=True))
    assert exc_info.value.card_index == 1


def test_missing_source_is_reported(tmp_path):
    loaded = load_cards_from_yaml(CardLoaderConfig(source=tmp_path / "nope"))
    assert loaded.cards == []
    assert "does not exist" in loaded.errors[0].message


def test_error_string_has_context(tmp_path):
    error = CardSourceError(
        tmp_path / "deck.yaml", "Boom", card_index=3, card_question_snippet="Q" * 60
    )
    assert str(error) == (
        f"File: deck.yaml | Card Index: 3 | Q: '{'Q' * 47}...' | Error: Boom"
    )


class TestJsonSource:
    def test_round_trips_json_export(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(
            json.dumps(
                [
                    {"front": "q1", "back": "a1", "tags": ["t"], "id": "ignored"},
                    {"front": "q2", "back": "a2", "domain": "law"},
                ]
            ),
            encoding="utf-8",
        )

        loaded = load_cards(CardLoaderConfig(source=path))

        assert [card.front for card in loaded.cards] == ["q1", "q2"]
        assert loaded.cards[0].tags == ["t"]
        assert loaded.cards[1].domain == "law"
        assert loaded.errors == []

    def test_bom_prefixed_file_is_read(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'[{"front": "q", "back": "a"}]')
        assert len(load_cards_from_json(CardLoaderConfig(source=path)).cards) == 1

    def test_invalid_entries_are_collected(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text('[{"front": "q"}, {"front": "q", "back": "a"}]')

        loaded = load_cards_from_json(CardLoaderConfig(source=path))

        assert len(loaded.cards) == 1
        assert loaded.errors[0].card_index == 0

    def test_top_level_must_be_array(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text('{"front": "q"}')
        with pytest.raises(CardSourceError, match="array"):
            load_cards_from_json(CardLoaderConfig(source=path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text("[{")
        with pytest.raises(CardSourceError) as exc_info:
            load_cards_from_json(CardLoaderConfig(source=path))
        assert "Invalid JSON" in exc_info.value.message


def test_directory_load_summary_is_logged(decks_dir, caplog):
    caplog.set_level(logging.INFO, logger="flashexport.parser")
    load_cards_from_yaml(CardLoaderConfig(source=decks_dir))
    assert "Loaded 3 cards from 2 files with 2 errors." in caplog.text
