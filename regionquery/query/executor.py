"""
Query evaluation for regionquery.

Walks the AST, reads each Crop leaf from the store and combines the
per-operand result sets:

    Crop  -> store.fetch_by_filter(compile_crop(node))
    And   -> intersection of operand ids, fetched once by id
    Or    -> union of operand results

Empty And and empty Or both evaluate to the empty set. Any failure
aborts the whole evaluation; no partial result is returned.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Set

from .ast import And, Crop, Or, QueryNode
from .compiler import compile_crop
from .results import ResultSet, finalize

if TYPE_CHECKING:
    from regionquery.models import Point
    from regionquery.store import PointStore

logger = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    """
    Options for one evaluation.

    Attributes:
        max_workers: Evaluate sibling operands on up to this many
            threads; 1 evaluates sequentially
    """
    max_workers: int = 1


class QueryExecutor:
    """
    Evaluates query trees against an injected store.

    With ``max_workers > 1`` the operands of the first node that has
    more than one are evaluated on a thread pool; each worker evaluates
    its subtree sequentially, so the pool never waits on itself.
    """

    def __init__(self, store: "PointStore", context: Optional[ExecutionContext] = None):
        self.store = store
        self.context = context or ExecutionContext()

    def evaluate(self, node: QueryNode) -> ResultSet:
        """
        Evaluate a tree into an id-keyed result set.

        Args:
            node: Root of the tree

        Returns:
            ResultSet of matching points
        """
        if self.context.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.context.max_workers) as pool:
                return self._evaluate(node, pool)
        return self._evaluate(node, None)

    def _evaluate(self, node: QueryNode, pool: Optional[ThreadPoolExecutor]) -> ResultSet:
        if isinstance(node, Crop):
            return self._evaluate_crop(node)
        elif isinstance(node, And):
            return self._evaluate_and(node, pool)
        elif isinstance(node, Or):
            return self._evaluate_or(node, pool)
        raise TypeError(f"Unknown query node: {node!r}")

    def _evaluate_crop(self, node: Crop) -> ResultSet:
        crop_filter = compile_crop(node)
        result = ResultSet.from_points(self.store.fetch_by_filter(crop_filter))
        logger.debug("%r -> %d points", node, len(result))
        return result

    def _evaluate_and(self, node: And, pool: Optional[ThreadPoolExecutor]) -> ResultSet:
        if not node.operands:
            return ResultSet.empty()
        if len(node.operands) == 1:
            return self._evaluate(node.operands[0], pool)

        results = self._evaluate_operands(node.operands, pool)
        common_ids: Set[int] = results[0].ids
        for result in results[1:]:
            common_ids &= result.ids

        logger.debug("And of %d operands -> %d ids", len(results), len(common_ids))
        if not common_ids:
            return ResultSet.empty()
        return ResultSet.from_points(self.store.fetch_by_ids(common_ids))

    def _evaluate_or(self, node: Or, pool: Optional[ThreadPoolExecutor]) -> ResultSet:
        if not node.operands:
            return ResultSet.empty()

        results = self._evaluate_operands(node.operands, pool)
        merged = ResultSet.empty().union(*results)
        logger.debug("Or of %d operands -> %d ids", len(results), len(merged))
        return merged

    def _evaluate_operands(
        self,
        operands: Sequence[QueryNode],
        pool: Optional[ThreadPoolExecutor],
    ) -> List[ResultSet]:
        # Every operand is joined before combining; the first failure propagates
        if pool is None or len(operands) < 2:
            return [self._evaluate(op, pool) for op in operands]
        futures = [pool.submit(self._evaluate, op, None) for op in operands]
        return [f.result() for f in futures]


# =============================================================================
# Convenience Functions
# =============================================================================

def execute_query(db: Any, node: QueryNode, context: Optional[ExecutionContext] = None) -> List["Point"]:
    """
    Evaluate a tree against a store and return points in output order.

    Args:
        db: Anything with a ``reader()`` context manager yielding a
            PointStore (Database, MemoryStore)
        node: Root of the tree
        context: Optional execution options

    Returns:
        Matching points sorted by (y, x)
    """
    with db.reader() as store:
        result = QueryExecutor(store, context).evaluate(node)
    return finalize(result)


def run_query(db: Any, text: str, context: Optional[ExecutionContext] = None) -> List["Point"]:
    """Parse a description and evaluate it."""
    from .parser import parse_query_string
    return execute_query(db, parse_query_string(text), context)
