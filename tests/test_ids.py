"""
Tests for row id generation, GUIDs and the sort-field checksum.
"""

import threading

from flashexport.apkg.ids import (
    MonotonicIdGenerator,
    field_checksum,
    generate_guid,
)
from flashexport.constants import GUID_CHARS, GUID_LENGTH


class TestMonotonicIdGenerator:
    def test_ids_strictly_increase(self):
        generator = MonotonicIdGenerator()
        ids = [generator.next_id() for _ in range(100)]
        assert all(later > earlier for earlier, later in zip(ids, ids[1:]))
        assert len(set(ids)) == 100

    def test_stuck_clock_increments_by_one(self, frozen_clock_generator):
        ids = [frozen_clock_generator.next_id() for _ in range(5)]
        assert ids == [1_700_000_000_000 + i for i in range(5)]

    def test_clock_jump_forward_is_followed(self):
        ticks = iter([1000, 1000, 5000])
        generator = MonotonicIdGenerator(clock=lambda: next(ticks))
        assert [generator.next_id() for _ in range(3)] == [1000, 1001, 5000]

    def test_clock_going_backwards_never_repeats(self):
        ticks = iter([5000, 100, 100])
        generator = MonotonicIdGenerator(clock=lambda: next(ticks))
        assert [generator.next_id() for _ in range(3)] == [5000, 5001, 5002]

    def test_reset_forgets_last_id(self, frozen_clock_generator):
        frozen_clock_generator.next_id()
        frozen_clock_generator.next_id()
        frozen_clock_generator.reset()
        assert frozen_clock_generator.last_id == 0
        assert frozen_clock_generator.next_id() == 1_700_000_000_000

    def test_shared_between_threads_without_duplicates(self):
        generator = MonotonicIdGenerator(clock=lambda: 42)
        issued = []
        lock = threading.Lock()

        def worker():
            local = [generator.next_id() for _ in range(200)]
            with lock:
                issued.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(issued) == 800
        assert len(set(issued)) == 800


def test_guid_shape():
    guid = generate_guid()
    assert len(guid) == GUID_LENGTH
    assert all(char in GUID_CHARS for char in guid)


def test_guids_differ():
    assert len({generate_guid() for _ in range(50)}) == 50


class TestFieldChecksum:
    def test_deterministic(self):
        assert field_checksum("Hello") == field_checksum("Hello")

    def test_distinguishes_inputs(self):
        assert field_checksum("Hello") != field_checksum("World")

    def test_known_values(self):
        assert field_checksum("") == 0
        assert field_checksum("a") == 97
        assert field_checksum("ab") == 97 * 31 + 98

    def test_non_negative_after_wraparound(self):
        for text in ("x" * 100, "漢字かんじ" * 20, "🎌" * 30):
            value = field_checksum(text)
            assert 0 <= value <= 2**31
