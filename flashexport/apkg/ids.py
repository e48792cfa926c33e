"""
Identifier, GUID and checksum helpers for Anki collection rows.
"""

import secrets
import threading
import time
from typing import Callable, Optional

from ..constants import GUID_CHARS, GUID_LENGTH


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class MonotonicIdGenerator:
    """
    Produces strictly increasing 64-bit row ids.

    Uses the wall clock in milliseconds when it has advanced past the last id,
    otherwise the last id plus one. Ids stop tracking real time during bursts
    but never repeat or go backwards. Safe to share between threads.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or _now_ms
        self._last_id = 0
        self._lock = threading.Lock()

    @property
    def last_id(self) -> int:
        return self._last_id

    def next_id(self) -> int:
        with self._lock:
            now = self._clock()
            self._last_id = now if now > self._last_id else self._last_id + 1
            return self._last_id

    def reset(self) -> None:
        """Forget the last issued id."""
        with self._lock:
            self._last_id = 0


# Shared by builds that do not inject their own generator, so ids keep
# increasing from one export to the next.
default_id_generator = MonotonicIdGenerator()


def generate_guid() -> str:
    """Return a random 10-character note GUID in Anki's alphabet."""
    return "".join(secrets.choice(GUID_CHARS) for _ in range(GUID_LENGTH))


def field_checksum(text: str) -> int:
    """
    Rolling 31-multiplier hash of the sort field.

    Anki stores the first 8 hex digits of a SHA-1 here but recomputes it on
    import, so any stable, well-spread value is accepted. Computed over UTF-16
    code units with signed 32-bit wraparound.
    """
    encoded = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return abs(value)
