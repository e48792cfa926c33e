"""
Export format registry and dispatcher.

Holds the declarative metadata of every format (label, extension, option
fields) and routes a format id to its encoder. The APKG builder is imported
only when that format is requested.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from pydantic import ValidationError

from .cancellation import CancellationToken
from .constants import DEFAULT_DECK_NAME
from .exceptions import ExportOptionsError
from .formatters import export_csv, export_json, export_markdown
from .formatters.filenames import deck_filename
from .models import (
    ApkgExportOptions,
    Card,
    CsvOptions,
    ExportOptions,
    ExportResult,
    JsonOptions,
    MarkdownOptions,
)

if TYPE_CHECKING:
    from .apkg.ids import MonotonicIdGenerator

logger = logging.getLogger(__name__)

APKG_MIME_TYPE = "application/octet-stream"


class ExportFormat(str, Enum):
    APKG = "apkg"
    CSV = "csv"
    MARKDOWN = "markdown"
    JSON = "json"


@dataclass(frozen=True)
class ExportOptionField:
    """An option a host renders in its export options panel."""

    key: str
    label: str
    type: str  # "text" | "boolean" | "select"
    default: Union[str, bool]
    choices: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ExportFormatConfig:
    id: ExportFormat
    label: str
    description: str
    extension: str
    icon: str
    options: Tuple[ExportOptionField, ...] = field(default_factory=tuple)


_DECK_NAME_FIELD = ExportOptionField(
    key="deckName", label="Deck name", type="text", default=DEFAULT_DECK_NAME
)

EXPORT_FORMATS: Tuple[ExportFormatConfig, ...] = (
    ExportFormatConfig(
        id=ExportFormat.APKG,
        label="Anki Package",
        description="Import directly into Anki desktop or mobile",
        extension=".apkg",
        icon="Package",
        options=(_DECK_NAME_FIELD,),
    ),
    ExportFormatConfig(
        id=ExportFormat.CSV,
        label="CSV",
        description="Spreadsheets, Anki import, or other flashcard apps",
        extension=".csv",
        icon="Table",
        options=(
            ExportOptionField(
                key="separator",
                label="Separator",
                type="select",
                default="comma",
                choices=(("comma", "Comma"), ("tab", "Tab")),
            ),
            ExportOptionField(
                key="includeTags",
                label="Include tags",
                type="boolean",
                default=True,
            ),
            ExportOptionField(
                key="includeNotes",
                label="Include notes",
                type="boolean",
                default=True,
            ),
        ),
    ),
    ExportFormatConfig(
        id=ExportFormat.MARKDOWN,
        label="Markdown",
        description="Obsidian Spaced Repetition plugin format",
        extension=".md",
        icon="FileText",
        options=(_DECK_NAME_FIELD,),
    ),
    ExportFormatConfig(
        id=ExportFormat.JSON,
        label="JSON",
        description="Developer-friendly format for custom processing",
        extension=".json",
        icon="Braces",
        options=(
            ExportOptionField(
                key="prettyPrint",
                label="Pretty print",
                type="boolean",
                default=False,
            ),
        ),
    ),
)

_OPTION_MODELS: Dict[ExportFormat, Type[ExportOptions]] = {
    ExportFormat.APKG: ApkgExportOptions,
    ExportFormat.CSV: CsvOptions,
    ExportFormat.MARKDOWN: MarkdownOptions,
    ExportFormat.JSON: JsonOptions,
}


def get_format_config(
    export_format: Union[ExportFormat, str],
) -> ExportFormatConfig:
    """Return the registry entry for a format id."""
    export_format = ExportFormat(export_format)
    for config in EXPORT_FORMATS:
        if config.id is export_format:
            return config
    raise ValueError(f"Unknown export format: {export_format}")


def build_options(
    export_format: Union[ExportFormat, str],
    options: Union[ExportOptions, Mapping[str, Any], None] = None,
) -> ExportOptions:
    """
    Coerce caller options into the option model of ``export_format``.

    Accepts the model itself, a mapping keyed by wire key or field name, or
    None for all defaults. Unrecognized mapping keys are ignored.

    Raises:
        ExportOptionsError: If a value does not fit the documented shape, or a
            model for another format is passed.
    """
    model = _OPTION_MODELS[ExportFormat(export_format)]
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    if not isinstance(options, Mapping):
        raise ExportOptionsError(
            f"Options for '{ExportFormat(export_format).value}' must be a "
            f"{model.__name__} or a mapping, got {type(options).__name__}."
        )
    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        error_details = e.errors()[0]
        field_name = ".".join(map(str, error_details["loc"]))
        raise ExportOptionsError(
            f"Invalid export option '{field_name}': {error_details['msg']}",
            original_exception=e,
        ) from e


async def _export_apkg(
    cards: Sequence[Card],
    options: ApkgExportOptions,
    on_progress: Optional[Callable[[float], None]],
    cancel_token: Optional[CancellationToken],
    id_generator: Optional["MonotonicIdGenerator"],
) -> ExportResult:
    from .apkg import ApkgCard, build_apkg

    apkg_cards: List[ApkgCard] = [
        ApkgCard(front=card.front, back=card.back, tags=list(card.tags))
        for card in cards
    ]
    result = await build_apkg(
        options.deck_name,
        apkg_cards,
        on_progress=on_progress,
        cancel_token=cancel_token,
        id_generator=id_generator,
    )
    return ExportResult(
        content=result.data,
        mime_type=APKG_MIME_TYPE,
        filename=deck_filename(result.deck_name, ".apkg"),
    )


async def dispatch_export(
    export_format: Union[ExportFormat, str],
    cards: Sequence[Card],
    options: Union[ExportOptions, Mapping[str, Any], None] = None,
    *,
    on_progress: Optional[Callable[[float], None]] = None,
    cancel_token: Optional[CancellationToken] = None,
    id_generator: Optional["MonotonicIdGenerator"] = None,
) -> ExportResult:
    """
    Export ``cards`` in ``export_format``.

    Progress, cancellation and the id generator only apply to APKG; the flat
    formats complete without suspending.

    Raises:
        ValueError: If ``export_format`` is not a known format id.
        ExportOptionsError: If the options are malformed.
    """
    export_format = ExportFormat(export_format)
    resolved = build_options(export_format, options)
    logger.info(f"Exporting {len(cards)} cards as {export_format.value}")

    if export_format is ExportFormat.APKG:
        return await _export_apkg(
            cards, resolved, on_progress, cancel_token, id_generator
        )
    if export_format is ExportFormat.CSV:
        return export_csv(cards, resolved)
    if export_format is ExportFormat.MARKDOWN:
        return export_markdown(cards, resolved)
    return export_json(cards, resolved)


def export(
    export_format: Union[ExportFormat, str],
    cards: Sequence[Card],
    options: Union[ExportOptions, Mapping[str, Any], None] = None,
    **kwargs: Any,
) -> ExportResult:
    """
    Synchronous entry point: runs ``dispatch_export`` on a fresh event loop.

    Must not be called from inside a running event loop; await
    ``dispatch_export`` there instead.
    """
    return asyncio.run(
        dispatch_export(export_format, cards, options, **kwargs)
    )
