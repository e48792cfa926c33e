"""flashexport - flashcard export to Anki packages, CSV, Markdown and JSON."""

from .cancellation import CancellationToken
from .download import save_export, write_export_to_stream
from .exceptions import (
    ExportCancelledError,
    ExportEngineError,
    ExportError,
    ExportOptionsError,
    ExportValidationError,
)
from .models import (
    ApkgExportOptions,
    Card,
    CsvOptions,
    ExportResult,
    JsonOptions,
    LibraryCard,
    MarkdownOptions,
)
from .registry import (
    EXPORT_FORMATS,
    ExportFormat,
    dispatch_export,
    export,
    get_format_config,
)

__all__ = [
    "ApkgExportOptions",
    "CancellationToken",
    "Card",
    "CsvOptions",
    "EXPORT_FORMATS",
    "ExportCancelledError",
    "ExportEngineError",
    "ExportError",
    "ExportFormat",
    "ExportOptionsError",
    "ExportResult",
    "ExportValidationError",
    "JsonOptions",
    "LibraryCard",
    "MarkdownOptions",
    "dispatch_export",
    "export",
    "get_format_config",
    "save_export",
    "write_export_to_stream",
]
