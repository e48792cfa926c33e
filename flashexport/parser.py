import json
import logging
from pathlib import Path
from typing import Any, List, Tuple, Union

import bleach
import yaml
from pydantic import ValidationError

from .models import Card
from .yaml_models import (
    DEFAULT_ALLOWED_HTML_ATTRIBUTES,
    DEFAULT_ALLOWED_HTML_TAGS,
    CardLoaderConfig,
    CardSourceError,
    LoadedCards,
    _DeckContext,
    _RawYAMLCardEntry,
    _RawYAMLDeckFile,
)

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def sanitize_card_html(text: str) -> str:
    """Strip disallowed markup from authored card text, keeping its content."""
    return bleach.clean(
        text.strip(),
        tags=DEFAULT_ALLOWED_HTML_TAGS,
        attributes=DEFAULT_ALLOWED_HTML_ATTRIBUTES,
        strip=True,
    )


def merge_tags(deck_tags: List[str], card_tags: List[str]) -> List[str]:
    """Deck tags first, then card tags the deck does not already carry."""
    merged = [tag.strip() for tag in deck_tags if tag.strip()]
    for tag in card_tags:
        tag = tag.strip()
        if tag and tag not in merged:
            merged.append(tag)
    return merged


def _validation_message(e: ValidationError) -> str:
    error_details = e.errors()[0]
    field = ".".join(map(str, error_details["loc"]))
    return f"Validation error in field '{field}': {error_details['msg']}"


class YAMLDeckLoader:
    def __init__(self, config: CardLoaderConfig):
        self.config = config

    def load_file(
        self, file_path: Path
    ) -> Tuple[str, List[Card], List[CardSourceError]]:
        """
        Parse one YAML deck file into Card objects.

        Returns:
            The deck name, the cards built from the file and the per-card
            errors.

        Raises:
            CardSourceError: If the file is unreadable, is not valid YAML, or
                fails the deck-level schema.
        """
        try:
            content = file_path.read_text(encoding="utf-8")
            raw_yaml_content = yaml.safe_load(content)
        except FileNotFoundError:
            raise CardSourceError(file_path, "File not found.") from None
        except IOError as e:
            raise CardSourceError(file_path, f"Could not read file: {e}") from e
        except yaml.YAMLError as e:
            raise CardSourceError(
                file_path, f"Invalid YAML syntax: {e}"
            ) from e

        if not isinstance(raw_yaml_content, dict):
            raise CardSourceError(
                file_path,
                "Top level of YAML must be a dictionary (deck object).",
            )

        try:
            deck_data = _RawYAMLDeckFile.model_validate(raw_yaml_content)
        except ValidationError as e:
            raise CardSourceError(file_path, _validation_message(e)) from e

        context = _DeckContext(
            file_path=file_path,
            deck_name=deck_data.deck.strip(),
            deck_tags=list(deck_data.tags),
        )
        cards: List[Card] = []
        errors: List[CardSourceError] = []
        for idx, raw_card in enumerate(deck_data.cards):
            result = self._build_card(raw_card, idx, context)
            if isinstance(result, Card):
                cards.append(result)
            else:
                errors.append(result)
        return context.deck_name, cards, errors

    def _build_card(
        self, raw_card: Any, idx: int, context: _DeckContext
    ) -> Union[Card, CardSourceError]:
        if not isinstance(raw_card, dict):
            return CardSourceError(
                context.file_path,
                f"Card entry at index {idx} is not a dictionary.",
                card_index=idx,
            )
        snippet = str(raw_card.get("q", raw_card.get("front", "")))[:50]
        try:
            entry = _RawYAMLCardEntry.model_validate(raw_card)
        except ValidationError as e:
            return CardSourceError(
                context.file_path,
                f"Card validation failed: {_validation_message(e)}",
                card_index=idx,
                card_question_snippet=snippet,
            )

        front, back = entry.q, entry.a
        if self.config.sanitize_html:
            front, back = sanitize_card_html(front), sanitize_card_html(back)
        return Card(
            front=front,
            back=back,
            card_type=entry.type,
            tags=merge_tags(context.deck_tags, entry.tags),
            notes=entry.notes,
            domain=entry.domain,
        )


def load_cards_from_yaml(config: CardLoaderConfig) -> LoadedCards:
    """
    Load every ``*.yaml``/``*.yml`` deck under ``config.source`` (or the single
    file it names), in sorted path order.

    Per-card and per-file problems are collected in ``errors``; with
    ``fail_fast`` the first one is raised instead.
    """
    source = config.source
    loaded = LoadedCards()
    if not source.exists():
        error = CardSourceError(source, f"Source does not exist: {source}")
        if config.fail_fast:
            raise error
        loaded.errors.append(error)
        return loaded

    if source.is_dir():
        yaml_files = sorted(
            path
            for path in source.rglob("*")
            if path.is_file() and path.suffix.lower() in YAML_SUFFIXES
        )
    else:
        yaml_files = [source]
    logger.info(f"Found {len(yaml_files)} YAML files to load in {source}")

    loader = YAMLDeckLoader(config)
    for file_path in yaml_files:
        try:
            deck_name, cards, errors = loader.load_file(file_path)
        except CardSourceError as e:
            if config.fail_fast:
                raise
            loaded.errors.append(e)
            continue
        if config.fail_fast and errors:
            raise errors[0]
        loaded.deck_names.append(deck_name)
        loaded.cards.extend(cards)
        loaded.errors.extend(errors)

    logger.info(
        f"Loaded {len(loaded.cards)} cards from {len(yaml_files)} files "
        f"with {len(loaded.errors)} errors."
    )
    return loaded


def load_cards_from_json(config: CardLoaderConfig) -> LoadedCards:
    """
    Load cards from a JSON array such as the JSON exporter writes.

    Bookkeeping fields on the entries are ignored.
    """
    file_path = config.source
    try:
        raw: Any = json.loads(file_path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError:
        raise CardSourceError(file_path, "File not found.") from None
    except IOError as e:
        raise CardSourceError(file_path, f"Could not read file: {e}") from e
    except json.JSONDecodeError as e:
        raise CardSourceError(file_path, f"Invalid JSON: {e}") from e

    if not isinstance(raw, list):
        raise CardSourceError(
            file_path, "Top level of JSON must be an array of cards."
        )

    loaded = LoadedCards()
    for idx, item in enumerate(raw):
        try:
            loaded.cards.append(Card.model_validate(item))
        except ValidationError as e:
            snippet = item.get("front", "") if isinstance(item, dict) else ""
            error = CardSourceError(
                file_path,
                f"Card validation failed: {_validation_message(e)}",
                card_index=idx,
                card_question_snippet=str(snippet)[:50],
            )
            if config.fail_fast:
                raise error from e
            loaded.errors.append(error)

    logger.info(
        f"Loaded {len(loaded.cards)} cards from {file_path} "
        f"with {len(loaded.errors)} errors."
    )
    return loaded


def load_cards(config: CardLoaderConfig) -> LoadedCards:
    """Load cards from a JSON export file, a YAML deck file or a directory."""
    if config.source.is_file() and config.source.suffix.lower() == ".json":
        return load_cards_from_json(config)
    return load_cards_from_yaml(config)
