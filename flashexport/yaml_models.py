"""
Defines the Pydantic models, dataclasses, and constants for loading card sources.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field, model_validator

from .models import Card, CardDomain, CardType

# --- Configuration Constants ---

DEFAULT_ALLOWED_HTML_TAGS = [
    "p",
    "br",
    "div",
    "span",
    "strong",
    "em",
    "b",
    "i",
    "u",
    "s",
    "sub",
    "sup",
    "ul",
    "ol",
    "li",
    "blockquote",
    "pre",
    "code",
    "hr",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
    "a",
    "img",
    "ruby",
    "rb",
    "rt",
    "rp",
]
DEFAULT_ALLOWED_HTML_ATTRIBUTES = {
    "*": ["class"],
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan"],
}


# --- Internal Pydantic Models for Raw YAML Validation ---


class _RawYAMLCardEntry(PydanticBaseModel):
    q: str = Field(..., min_length=1)
    a: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    notes: str = Field(default="")
    type: CardType = Field(default="basic")
    domain: Optional[CardDomain] = Field(default=None)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def accept_long_field_names(cls, data: Any) -> Any:
        """Allow ``front``/``back`` as spellings of ``q``/``a``."""
        if isinstance(data, dict):
            data = dict(data)
            if "front" in data and "q" not in data:
                data["q"] = data.pop("front")
            if "back" in data and "a" not in data:
                data["a"] = data.pop("back")
        return data


class _RawYAMLDeckFile(PydanticBaseModel):
    deck: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    cards: List[Any] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


# --- Custom Error Reporting Dataclass ---
@dataclass
class CardSourceError(Exception):
    file_path: Path
    message: str
    card_index: Optional[int] = None
    card_question_snippet: Optional[str] = None

    def __str__(self) -> str:
        """
        Format the error with its file name, card index and a question preview
        (cut to 50 characters), followed by the message.
        """
        context_parts = [f"File: {self.file_path.name}"]
        if self.card_index is not None:
            context_parts.append(f"Card Index: {self.card_index}")
        if self.card_question_snippet:
            snippet = (
                (self.card_question_snippet[:47] + "...")
                if len(self.card_question_snippet) > 50
                else self.card_question_snippet
            )
            context_parts.append(f"Q: '{snippet}'")
        return f"{' | '.join(context_parts)} | Error: {self.message}"


# --- Dataclasses for Loading Context and Results ---


@dataclass
class _DeckContext:
    """Deck-level data shared by every card of one YAML file."""

    file_path: Path
    deck_name: str
    deck_tags: List[str]


@dataclass
class CardLoaderConfig:
    """Configuration for loading cards from a file or directory."""

    source: Path
    fail_fast: bool = False
    sanitize_html: bool = True


@dataclass
class LoadedCards:
    cards: List[Card] = field(default_factory=list)
    errors: List[CardSourceError] = field(default_factory=list)
    deck_names: List[str] = field(default_factory=list)

    @property
    def deck_name(self) -> Optional[str]:
        """The first deck name found in the source, if any."""
        return self.deck_names[0] if self.deck_names else None
