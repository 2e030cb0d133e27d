"""
Result types and output for regionquery.

ResultSet is the id-keyed collection produced by evaluating any subtree.
finalize() turns one into the ordered sequence that is written out, one
"x y" line per point.
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Set, TextIO, Union

from regionquery.errors import IoFailure
from regionquery.models import Point

logger = logging.getLogger(__name__)


# =============================================================================
# Result Set
# =============================================================================

@dataclass
class ResultSet:
    """
    Points keyed by id.

    Two points with the same id are the same point: adding one that is
    already present keeps a single entry.
    """
    points: Dict[int, Point] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points.values())

    def __contains__(self, point_id: int) -> bool:
        return point_id in self.points

    def __bool__(self) -> bool:
        return len(self.points) > 0

    @property
    def ids(self) -> Set[int]:
        """The id set of this result."""
        return set(self.points)

    def union(self, *others: "ResultSet") -> "ResultSet":
        """Merge with other results, deduplicating by id."""
        merged = dict(self.points)
        for other in others:
            merged.update(other.points)
        return ResultSet(points=merged)

    def to_list(self) -> List[Point]:
        """Convert to a plain list, in no particular order."""
        return list(self.points.values())

    @classmethod
    def empty(cls) -> "ResultSet":
        """Create an empty result."""
        return cls()

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "ResultSet":
        """Create a result from points, collapsing duplicate ids."""
        return cls(points={p.id: p for p in points})


# =============================================================================
# Finalizer
# =============================================================================

def sort_key(point: Point):
    # (y, x); exact ties fall back to id so output is fully deterministic
    return (point.y, point.x, point.id)


def finalize(result: Union[ResultSet, Iterable[Point]]) -> List[Point]:
    """
    Order a result for output.

    Points are sorted by ascending y, then ascending x; points at exactly
    the same coordinates are ordered by ascending id.
    """
    return sorted(result, key=sort_key)


def format_number(value: float) -> str:
    """Format a coordinate the way the output file expects (%g)."""
    return f"{value:g}"


def format_point(point: Point) -> str:
    """Format a point as an output line, without the newline."""
    return f"{format_number(point.x)} {format_number(point.y)}"


def write_points(points: Iterable[Point], target: Union[str, Path, TextIO]) -> int:
    """
    Write points one per line as "x y".

    Args:
        points: Points, already in output order
        target: Output path, "-" for stdout, or an open text stream

    Returns:
        Number of lines written
    """
    if hasattr(target, 'write'):
        return _write_lines(points, target)

    if str(target) == '-':
        return _write_lines(points, sys.stdout)

    path = Path(target)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            count = _write_lines(points, f)
    except OSError as e:
        raise IoFailure(f"Cannot write output: {e.strerror or e}", {'path': str(path)}) from e

    logger.info("Wrote %d points to %s", count, path)
    return count


def _write_lines(points: Iterable[Point], stream: TextIO) -> int:
    count = 0
    for point in points:
        stream.write(format_point(point))
        stream.write('\n')
        count += 1
    return count
