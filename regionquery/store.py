"""
Store read contract and an in-memory implementation.

The evaluator only ever reads through PointStore. Database.reader()
provides the SQL-backed implementation; MemoryStore evaluates the same
filters over a list of points and is handy for small datasets and tests.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Generator, Iterable, List, Protocol, Sequence, Tuple

from regionquery.models import Point
from regionquery.query.compiler import CropFilter

logger = logging.getLogger(__name__)


class PointStore(Protocol):
    """Read interface consumed by the evaluator. Row order is unspecified."""

    def fetch_by_filter(self, crop_filter: CropFilter) -> Sequence[Point]:
        ...

    def fetch_by_ids(self, ids: Iterable[int]) -> Sequence[Point]:
        ...


class MemoryStore:
    """
    PointStore over an in-memory list of points.

    Group extents for proper crops are computed over every point held,
    matching what the SQL store does with its GROUP BY subquery.
    """

    def __init__(self, points: Iterable[Point] = ()):
        self._points: Dict[int, Point] = {}
        self.add_points(points)

    def add_points(self, points: Iterable[Point]) -> int:
        """Add points, replacing any with the same id. Returns the count added."""
        count = 0
        for point in points:
            self._points[point.id] = point
            count += 1
        return count

    def __len__(self) -> int:
        return len(self._points)

    def group_extents(self) -> Dict[int, Tuple[float, float, float, float]]:
        """Per group: (min_x, min_y, max_x, max_y)."""
        extents: Dict[int, Tuple[float, float, float, float]] = {}
        for p in self._points.values():
            current = extents.get(p.group_id)
            if current is None:
                extents[p.group_id] = (p.x, p.y, p.x, p.y)
            else:
                extents[p.group_id] = (
                    min(current[0], p.x), min(current[1], p.y),
                    max(current[2], p.x), max(current[3], p.y),
                )
        return extents

    def fetch_by_filter(self, crop_filter: CropFilter) -> List[Point]:
        matched = [p for p in self._points.values() if crop_filter.matches(p)]

        if crop_filter.whole_groups_within is not None:
            extents = self.group_extents()
            matched = [
                p for p in matched
                if crop_filter.group_qualifies(*extents[p.group_id])
            ]

        logger.debug("Memory store matched %d points for %r", len(matched), crop_filter)
        return matched

    def fetch_by_ids(self, ids: Iterable[int]) -> List[Point]:
        return [self._points[i] for i in ids if i in self._points]

    @contextmanager
    def reader(self) -> Generator["MemoryStore", None, None]:
        """Same scoped-acquisition shape as Database.reader()."""
        yield self
