"""
Contains the business logic behind the `export` CLI command.
This logic is called by the CLI commands in main.py.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flashexport.download import save_export
from flashexport.exceptions import ExportValidationError
from flashexport.models import ExportResult
from flashexport.parser import load_cards
from flashexport.registry import ExportFormat, dispatch_export
from flashexport.yaml_models import CardLoaderConfig, LoadedCards

logger = logging.getLogger(__name__)


@dataclass
class ExportRequest:
    """Everything the `export` command collected from its flags."""

    export_format: ExportFormat
    source: Path
    deck_name: Optional[str] = None
    separator: str = "comma"
    include_tags: bool = True
    include_notes: bool = True
    pretty_print: bool = False
    fail_fast: bool = False


def load_source_cards(request: ExportRequest) -> LoadedCards:
    """Load cards for an export, raising if the source yields none."""
    loaded = load_cards(
        CardLoaderConfig(source=request.source, fail_fast=request.fail_fast)
    )
    if not loaded.cards:
        raise ExportValidationError(
            f"No cards could be loaded from {request.source}."
        )
    return loaded


def build_option_values(
    request: ExportRequest, default_deck_name: str
) -> Dict[str, Any]:
    """Translate CLI flags into the wire-keyed options of the chosen format."""
    if request.export_format in (ExportFormat.APKG, ExportFormat.MARKDOWN):
        return {"deckName": request.deck_name or default_deck_name}
    if request.export_format is ExportFormat.CSV:
        return {
            "separator": request.separator,
            "includeTags": request.include_tags,
            "includeNotes": request.include_notes,
        }
    return {"prettyPrint": request.pretty_print}


def run_export(
    request: ExportRequest,
    loaded: LoadedCards,
    default_deck_name: str,
    on_progress: Optional[Callable[[float], None]] = None,
) -> ExportResult:
    """Dispatch the export on a fresh event loop."""
    options = build_option_values(
        request, loaded.deck_name or default_deck_name
    )
    logger.info(
        f"Exporting {len(loaded.cards)} cards from {request.source} "
        f"as {request.export_format.value}"
    )
    return asyncio.run(
        dispatch_export(
            request.export_format,
            loaded.cards,
            options,
            on_progress=on_progress,
        )
    )


def write_result(result: ExportResult, output_dir: Path) -> Path:
    return save_export(result, output_dir / result.filename)
