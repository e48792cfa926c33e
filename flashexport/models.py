"""
Pydantic models for export input, per-format options and export results.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_DECK_NAME

CardType = Literal["basic", "cloze"]
CardDomain = Literal[
    "lang",
    "general",
    "med",
    "stem-m",
    "stem-cs",
    "fin",
    "law",
    "arts",
    "skill",
    "mem",
]


class Card(BaseModel):
    """
    A flashcard as handed to the export subsystem.

    Front and back hold rich (HTML-like) text. Tags keep their order and are
    never deduplicated.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    front: str = Field(..., description="Question side, rich text.")
    back: str = Field(..., description="Answer side, rich text.")
    card_type: CardType = Field(
        default="basic", description="Generation style of the card."
    )
    tags: List[str] = Field(
        default_factory=list, description="Ordered tags as authored."
    )
    notes: str = Field(default="", description="Free-text notes.")
    domain: Optional[CardDomain] = Field(
        default=None, description="Optional domain classification."
    )


class ConfidenceScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    atomicity: float = 0.0
    self_contained: float = 0.0


class LibraryCard(Card):
    """
    A card as persisted in a user's library.

    Carries ownership, provenance and timestamp fields that exports must never
    leak.
    """

    id: str
    user_id: str
    generation_request_id: Optional[str] = None
    source_quote: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    confidence_scores: ConfidenceScores = Field(
        default_factory=ConfidenceScores
    )
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Per-format options ---


class _ExportOptions(BaseModel):
    # Wire keys are camelCase; field names also accepted.
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore"
    )


class ApkgExportOptions(_ExportOptions):
    deck_name: str = Field(
        default=DEFAULT_DECK_NAME, alias="deckName", min_length=1
    )


class CsvOptions(_ExportOptions):
    separator: Literal["comma", "tab"] = "comma"
    include_tags: bool = Field(default=True, alias="includeTags")
    include_notes: bool = Field(default=True, alias="includeNotes")

    @property
    def delimiter(self) -> str:
        return "\t" if self.separator == "tab" else ","


class MarkdownOptions(_ExportOptions):
    deck_name: str = Field(
        default=DEFAULT_DECK_NAME, alias="deckName", min_length=1
    )


class JsonOptions(_ExportOptions):
    pretty_print: bool = Field(default=False, alias="prettyPrint")


ExportOptions = Union[
    ApkgExportOptions, CsvOptions, MarkdownOptions, JsonOptions
]


class ExportResult(BaseModel):
    """
    A finished export: payload, MIME type and suggested filename.
    """

    model_config = ConfigDict(frozen=True)

    content: Union[str, bytes]
    mime_type: str
    filename: str

    @property
    def is_binary(self) -> bool:
        return isinstance(self.content, bytes)
