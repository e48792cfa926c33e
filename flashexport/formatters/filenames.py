import re

from ..constants import MAX_FILENAME_STEM

_UNSAFE_FILENAME_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")


def safe_filename_stem(deck_name: str) -> str:
    """Replace characters outside [A-Za-z0-9_-] with '_' and cut to 50 chars."""
    return _UNSAFE_FILENAME_CHARS_RE.sub("_", deck_name)[:MAX_FILENAME_STEM]


def deck_filename(deck_name: str, extension: str) -> str:
    return f"{safe_filename_stem(deck_name)}{extension}"
