"""
Tests for regionquery.store
"""

from regionquery.models import Point
from regionquery.query import compile_crop, crop
from regionquery.store import MemoryStore


class TestMemoryStore:
    """Tests for the in-memory PointStore."""

    def test_len(self, memory_store):
        assert len(memory_store) == 9

    def test_add_replaces_same_id(self, memory_store):
        added = memory_store.add_points([Point(id=1, group_id=1, x=0, y=0, category=0)])
        assert added == 1
        assert len(memory_store) == 9
        assert memory_store.fetch_by_ids([1])[0].x == 0

    def test_group_extents(self, memory_store):
        extents = memory_store.group_extents()
        assert extents[1] == (5.0, 5.0, 20.0, 20.0)
        assert extents[4] == (-5.0, 5.0, 6.0, 6.0)
        assert extents[5] == (5.0, 5.0, 5.0, 5.0)

    def test_fetch_by_filter(self, memory_store):
        points = memory_store.fetch_by_filter(compile_crop(crop(0, 0, 4, 4)))
        assert {p.id for p in points} == {3, 4}

    def test_fetch_by_filter_proper(self, memory_store):
        points = memory_store.fetch_by_filter(compile_crop(crop(0, 0, 10, 10, proper=True)))
        assert {p.id for p in points} == {3, 4, 5, 6, 9}

    def test_fetch_by_ids(self, memory_store):
        points = memory_store.fetch_by_ids({2, 7, 100})
        assert {p.id for p in points} == {2, 7}

    def test_fetch_by_no_ids(self, memory_store):
        assert memory_store.fetch_by_ids([]) == []

    def test_empty_store(self):
        store = MemoryStore()
        assert store.fetch_by_filter(compile_crop(crop(0, 0, 10, 10, proper=True))) == []

    def test_reader_yields_store(self, memory_store):
        with memory_store.reader() as reader:
            assert reader is memory_store
