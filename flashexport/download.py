"""
Hands finished export payloads to the host filesystem.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Union

from .models import ExportResult

logger = logging.getLogger(__name__)


def _payload_bytes(result: ExportResult) -> bytes:
    if isinstance(result.content, bytes):
        return result.content
    return result.content.encode("utf-8")


def save_export(result: ExportResult, destination: Union[str, Path]) -> Path:
    """
    Write an export to disk and return the path written.

    A destination that is an existing directory, or ends with a path
    separator, receives the result's suggested filename. Anything else is
    taken as the target file path. Missing parent directories are created.

    Raises:
        IOError: If the file cannot be written.
    """
    names_directory = str(destination).endswith(("/", "\\"))
    destination = Path(destination)
    if names_directory or destination.is_dir():
        target = destination / result.filename
    else:
        target = destination

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(_payload_bytes(result))
    except OSError as e:
        logger.error(f"Could not write export to {target}: {e}")
        raise IOError(f"Failed to write export file: {e}") from e

    logger.info(f"Saved {result.mime_type} export to {target}")
    return target


def write_export_to_stream(result: ExportResult, stream: BinaryIO) -> int:
    """Write an export to a binary stream (e.g. stdout); returns bytes written."""
    payload = _payload_bytes(result)
    stream.write(payload)
    stream.flush()
    return len(payload)
