"""
Query AST for regionquery.

A query is a tree of three node kinds:

    Crop   - leaf selecting points inside an axis-aligned region
    And    - intersection of its operands
    Or     - union of its operands

The tree is built once (by the parser or the helper constructors below)
and never mutated; every node is a frozen dataclass.

Example:
    all_of(
        crop(0, 0, 10, 10, category=1),
        any_of(
            crop(5, 5, 20, 20, groups=[3, 4]),
            crop(0, 0, 2, 2, proper=True),
        ),
    )
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union


# =============================================================================
# Region
# =============================================================================

@dataclass(frozen=True)
class Region:
    """
    Axis-aligned rectangle with inclusive bounds.

    A region whose min exceeds its max on either axis is empty: it
    selects no points, it is not an error.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    def contains(self, x: float, y: float) -> bool:
        """Check whether (x, y) lies inside the region, bounds included."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def to_dict(self) -> Dict[str, Any]:
        return {
            'p_min': {'x': self.min_x, 'y': self.min_y},
            'p_max': {'x': self.max_x, 'y': self.max_y},
        }

    def __repr__(self):
        return f"Region(({self.min_x}, {self.min_y}), ({self.max_x}, {self.max_y}))"


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Crop:
    """
    Leaf predicate: points inside ``region``.

    Attributes:
        region: Bounding rectangle
        category: Only points of this category (None for any)
        groups: Only points in one of these groups (None for any)
        proper: Only points whose entire group lies inside the region
    """
    region: Region
    category: Optional[int] = None
    groups: Optional[FrozenSet[int]] = None
    proper: bool = False

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {'region': self.region.to_dict()}
        if self.category is not None:
            body['category'] = self.category
        if self.groups:
            body['one_of_groups'] = sorted(self.groups)
        if self.proper:
            body['proper'] = True
        return {'operator_crop': body}

    def __repr__(self):
        parts = [repr(self.region)]
        if self.category is not None:
            parts.append(f"category={self.category}")
        if self.groups:
            parts.append(f"groups={sorted(self.groups)}")
        if self.proper:
            parts.append("proper")
        return f"Crop({', '.join(parts)})"


@dataclass(frozen=True)
class And:
    """Intersection of operands. An empty And matches nothing."""
    operands: Tuple["QueryNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'operator_and': [op.to_dict() for op in self.operands]}


@dataclass(frozen=True)
class Or:
    """Union of operands. An empty Or matches nothing."""
    operands: Tuple["QueryNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'operator_or': [op.to_dict() for op in self.operands]}


QueryNode = Union[Crop, And, Or]


def to_description(node: QueryNode) -> Dict[str, Any]:
    """Serialize a tree back into the description format the parser reads."""
    return {'query': node.to_dict()}


def depth(node: QueryNode) -> int:
    """Height of the tree; a single Crop has depth 1."""
    if isinstance(node, Crop):
        return 1
    return 1 + max((depth(op) for op in node.operands), default=0)


def leaves(node: QueryNode) -> Iterable[Crop]:
    """Yield every Crop leaf, left to right."""
    if isinstance(node, Crop):
        yield node
        return
    for op in node.operands:
        yield from leaves(op)


# =============================================================================
# Helper constructors
# =============================================================================

def crop(
    min_x: float,
    min_y: float,
    max_x: float,
    max_y: float,
    category: Optional[int] = None,
    groups: Optional[Iterable[int]] = None,
    proper: bool = False,
) -> Crop:
    """Create a Crop leaf. An empty ``groups`` means no group filter."""
    group_set = frozenset(groups) if groups else None
    return Crop(
        region=Region(min_x, min_y, max_x, max_y),
        category=category,
        groups=group_set,
        proper=proper,
    )


def all_of(*operands: QueryNode) -> And:
    """Create an And node."""
    return And(tuple(operands))


def any_of(*operands: QueryNode) -> Or:
    """Create an Or node."""
    return Or(tuple(operands))
