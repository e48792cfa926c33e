from typing import Optional


class ExportError(Exception):
    """Base exception for export failures."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class ExportValidationError(ExportError):
    """Raised when the card list is rejected before any work starts."""

    pass


class ExportOptionsError(ExportValidationError):
    """Raised when export options do not have the documented shape."""

    pass


class ExportEngineError(ExportError):
    """Raised when the embedded database engine cannot be opened."""

    pass


class SchemaInitializationError(ExportError):
    """Raised for errors while creating the collection schema."""

    pass


class CollectionWriteError(ExportError):
    """Raised for errors while inserting rows into the collection."""

    pass


class ExportCancelledError(Exception):
    """Raised when an export is cancelled by its caller.

    Not an ExportError: a cancelled export is not a failure.
    """

    def __init__(self, message: str = "Export was cancelled"):
        super().__init__(message)
