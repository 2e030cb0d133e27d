"""
Predicate compiler for Crop leaves.

Turns a Crop into a CropFilter: a structured, declarative description
of the rows to read. Filters name store columns and carry plain values;
encoding them safely (bound parameters, SQL, ...) is up to the store.

    Crop(region, category=2, groups={7}, proper=True)
      -> CropFilter(
             conditions=(Between('coord_x', ...), Between('coord_y', ...),
                         Equals('category', 2), OneOf('group_id', (7,))),
             whole_groups_within=region,
         )
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from regionquery.models import Point
from .ast import Crop, Region


# Store column -> Point attribute
FIELD_ATTRS = {
    'coord_x': 'x',
    'coord_y': 'y',
    'category': 'category',
    'group_id': 'group_id',
}


# =============================================================================
# Conditions
# =============================================================================

class Condition(ABC):
    """A single column condition."""

    field: str

    @abstractmethod
    def evaluate(self, value: Any) -> bool:
        """Evaluate this condition against a column value."""
        pass


@dataclass(frozen=True)
class Between(Condition):
    """Inclusive range: low <= field <= high."""
    field: str
    low: float
    high: float

    def evaluate(self, value: Any) -> bool:
        if value is None:
            return False
        return self.low <= value <= self.high


@dataclass(frozen=True)
class Equals(Condition):
    """Equality: field = value."""
    field: str
    value: Any

    def evaluate(self, value: Any) -> bool:
        return value == self.value


@dataclass(frozen=True)
class OneOf(Condition):
    """Membership: field IN values."""
    field: str
    values: Tuple[Any, ...]

    def evaluate(self, value: Any) -> bool:
        return value in self.values


# =============================================================================
# Filter
# =============================================================================

@dataclass(frozen=True)
class CropFilter:
    """
    Compiled form of a Crop leaf.

    Attributes:
        conditions: Row conditions, all of which must hold
        whole_groups_within: When set, only rows whose whole group
            (every member, matched or not) lies inside this region
    """
    conditions: Tuple[Condition, ...]
    whole_groups_within: Optional[Region] = None

    def matches(self, point: Point) -> bool:
        """Evaluate the row conditions against a point (group check excluded)."""
        return all(
            cond.evaluate(getattr(point, FIELD_ATTRS[cond.field]))
            for cond in self.conditions
        )

    def group_qualifies(self, min_x: float, min_y: float, max_x: float, max_y: float) -> bool:
        """Check a group's coordinate extent against ``whole_groups_within``."""
        region = self.whole_groups_within
        if region is None:
            return True
        return (min_x >= region.min_x and max_x <= region.max_x
                and min_y >= region.min_y and max_y <= region.max_y)

    def __repr__(self):
        parts = [repr(c) for c in self.conditions]
        if self.whole_groups_within is not None:
            parts.append(f"whole_groups_within={self.whole_groups_within!r}")
        return f"CropFilter({', '.join(parts)})"


def compile_crop(node: Crop) -> CropFilter:
    """Compile a Crop leaf into a CropFilter."""
    region = node.region
    conditions = [
        Between('coord_x', region.min_x, region.max_x),
        Between('coord_y', region.min_y, region.max_y),
    ]

    if node.category is not None:
        conditions.append(Equals('category', node.category))

    if node.groups:
        conditions.append(OneOf('group_id', tuple(sorted(node.groups))))

    return CropFilter(
        conditions=tuple(conditions),
        whole_groups_within=region if node.proper else None,
    )
