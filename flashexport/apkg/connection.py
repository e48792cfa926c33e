import logging
import sqlite3
from typing import Optional

from ..exceptions import ExportEngineError

logger = logging.getLogger(__name__)

ENGINE_LOAD_FAILED_MESSAGE = (
    "The APKG export engine failed to load. Reload and try again."
)


class ConnectionHandler:
    """Manages the lifecycle of the in-memory SQLite connection of one build."""

    def __init__(self) -> None:
        self._connection: Optional[sqlite3.Connection] = None
        self.close_count: int = 0

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def get_connection(self) -> sqlite3.Connection:
        """
        Provide the active connection, opening an in-memory database on first use.

        Raises:
            ExportEngineError: If SQLite cannot open the database.
        """
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(":memory:")
                logger.debug("Opened in-memory collection database.")
            except sqlite3.Error as e:
                logger.error(f"Could not open the collection database: {e}")
                raise ExportEngineError(
                    ENGINE_LOAD_FAILED_MESSAGE, original_exception=e
                ) from e
        return self._connection

    def close_connection(self) -> None:
        """Closes the connection if it is open; later calls are no-ops."""
        if self._connection is None:
            return
        try:
            self._connection.close()
            logger.debug("Collection database closed.")
        except sqlite3.Error as e:
            logger.error(f"Error closing the collection database: {e}")
        finally:
            self._connection = None
            self.close_count += 1

    def __enter__(self) -> sqlite3.Connection:
        return self.get_connection()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Closes the connection; exceptions from the block propagate."""
        self.close_connection()
