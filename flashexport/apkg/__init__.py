"""Anki package (.apkg) generation.

Only imported by the dispatcher when the APKG format is requested.
"""

from ..cancellation import CancellationToken
from .builder import (
    ApkgCard,
    ApkgResult,
    build_apkg,
    package_collection,
)
from .ids import MonotonicIdGenerator, default_id_generator

__all__ = [
    "ApkgCard",
    "ApkgResult",
    "CancellationToken",
    "MonotonicIdGenerator",
    "build_apkg",
    "default_id_generator",
    "package_collection",
]
