"""
Parser for regionquery query descriptions.

Descriptions are JSON; YAML is accepted as well.
An optional ``query`` wrapper holds exactly one operation object; each
operation object holds exactly one tag.

Example:

    {
      "query": {
        "operator_and": [
          {"operator_crop": {
             "region": {"p_min": {"x": 0, "y": 0}, "p_max": {"x": 10, "y": 10}},
             "category": 1
          }},
          {"operator_crop": {
             "region": {"p_min": {"x": 5, "y": 5}, "p_max": {"x": 20, "y": 20}},
             "one_of_groups": [3, 4],
             "proper": true
          }}
        ]
      }
    }

The short tags ``crop``, ``and`` and ``or`` are accepted as well, and
``groups`` is an alias for ``one_of_groups``.
"""

import json
import logging
from pathlib import Path
from typing import Any, FrozenSet, List, Optional, Union

import yaml

from regionquery.errors import IoFailure, MalformedQuery
from .ast import And, Crop, Or, QueryNode, Region

logger = logging.getLogger(__name__)


CROP_TAGS = ('operator_crop', 'crop')
AND_TAGS = ('operator_and', 'and')
OR_TAGS = ('operator_or', 'or')
OPERATION_TAGS = CROP_TAGS + AND_TAGS + OR_TAGS
GROUP_KEYS = ('one_of_groups', 'groups')


def _is_number(value: Any) -> bool:
    # bool is an int subclass; true/false are not coordinates
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class QueryParser:
    """
    Converts decoded query descriptions into QueryNode trees.

    Every error names the path of the offending element so a bad
    description can be fixed without guessing.
    """

    def parse(self, description: Any) -> QueryNode:
        """
        Parse a decoded description.

        Args:
            description: Either ``{"query": {<operation>}}`` or a bare
                operation object

        Returns:
            Root of the parsed tree
        """
        if not isinstance(description, dict):
            raise MalformedQuery(
                f"Query description must be an object, got {type(description).__name__}"
            )

        if 'query' in description:
            if len(description) != 1:
                extra = sorted(k for k in description if k != 'query')
                raise MalformedQuery("Unexpected keys beside 'query'", {'keys': extra})
            return self.parse_operation(description['query'], 'query')

        return self.parse_operation(description, '$')

    def parse_operation(self, obj: Any, path: str) -> QueryNode:
        """Parse one operation object holding exactly one tag."""
        if not isinstance(obj, dict):
            raise MalformedQuery(
                f"Operation must be an object, got {type(obj).__name__}",
                {'path': path},
            )

        tags = [key for key in obj if key in OPERATION_TAGS]
        if not tags:
            raise MalformedQuery(
                "No recognizable operation tag",
                {'path': path, 'keys': sorted(map(str, obj))},
            )
        if len(obj) != 1:
            raise MalformedQuery(
                "Operation object must contain exactly one tag",
                {'path': path, 'keys': sorted(map(str, obj))},
            )

        tag = tags[0]
        body = obj[tag]
        child_path = f"{path}.{tag}"

        if tag in CROP_TAGS:
            return self._parse_crop(body, child_path)
        if tag in AND_TAGS:
            return And(tuple(self._parse_operands(body, child_path)))
        return Or(tuple(self._parse_operands(body, child_path)))

    def _parse_operands(self, body: Any, path: str) -> List[QueryNode]:
        if not isinstance(body, list):
            raise MalformedQuery(
                f"Operands must be a list, got {type(body).__name__}",
                {'path': path},
            )
        return [self.parse_operation(item, f"{path}[{i}]") for i, item in enumerate(body)]

    def _parse_crop(self, body: Any, path: str) -> Crop:
        if not isinstance(body, dict):
            raise MalformedQuery(
                f"Crop parameters must be an object, got {type(body).__name__}",
                {'path': path},
            )
        if 'region' not in body:
            raise MalformedQuery("Crop requires a region", {'path': path})

        region = self._parse_region(body['region'], f"{path}.region")

        category = body.get('category')
        if category is not None and not _is_integer(category):
            raise MalformedQuery(
                f"Category must be an integer, got {category!r}",
                {'path': f"{path}.category"},
            )

        group_keys = [key for key in GROUP_KEYS if key in body]
        if len(group_keys) > 1:
            raise MalformedQuery(
                "Crop must not give both one_of_groups and groups",
                {'path': path},
            )
        groups_key = group_keys[0] if group_keys else GROUP_KEYS[0]
        groups = self._parse_groups(body.get(groups_key), f"{path}.{groups_key}")

        proper = body.get('proper')
        if proper is None:
            proper = False
        elif not isinstance(proper, bool):
            raise MalformedQuery(
                f"Proper must be a boolean, got {proper!r}",
                {'path': f"{path}.proper"},
            )

        return Crop(region=region, category=category, groups=groups, proper=proper)

    def _parse_region(self, region: Any, path: str) -> Region:
        if not isinstance(region, dict):
            raise MalformedQuery("Region must be an object", {'path': path})

        bounds = []
        for corner in ('p_min', 'p_max'):
            point = region.get(corner)
            if not isinstance(point, dict):
                raise MalformedQuery(f"Region requires {corner}", {'path': path})
            for axis in ('x', 'y'):
                value = point.get(axis)
                if not _is_number(value):
                    raise MalformedQuery(
                        f"Bound must be numeric, got {value!r}",
                        {'path': f"{path}.{corner}.{axis}"},
                    )
                try:
                    bounds.append(float(value))
                except OverflowError as e:
                    raise MalformedQuery(
                        "Bound out of range",
                        {'path': f"{path}.{corner}.{axis}"},
                    ) from e

        min_x, min_y, max_x, max_y = bounds
        return Region(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)

    def _parse_groups(self, groups: Any, path: str) -> Optional[FrozenSet[int]]:
        if groups is None:
            return None
        if not isinstance(groups, list):
            raise MalformedQuery("Groups must be a list of integers", {'path': path})
        for i, group in enumerate(groups):
            if not _is_integer(group):
                raise MalformedQuery(
                    f"Group id must be an integer, got {group!r}",
                    {'path': f"{path}[{i}]"},
                )
        # An explicitly empty list applies no group filter
        return frozenset(groups) or None


def parse_query(description: Any) -> QueryNode:
    """
    Parse a decoded query description.

    Convenience function that creates a parser and parses.
    """
    return QueryParser().parse(description)


def parse_query_string(text: str) -> QueryNode:
    """
    Parse a query description from JSON or YAML text.

    Args:
        text: Description text

    Returns:
        Root of the parsed tree
    """
    try:
        data = json.loads(text)
    except ValueError:
        # Not strict JSON, try YAML
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MalformedQuery(f"Cannot decode query description: {e}") from e

    return parse_query(data)


def parse_query_file(path: Union[str, Path]) -> QueryNode:
    """
    Parse a query description file.

    Args:
        path: Path to a JSON or YAML file

    Returns:
        Root of the parsed tree
    """
    path = Path(path)

    try:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise IoFailure(f"Cannot read query file: {e.strerror or e}", {'path': str(path)}) from e

    node = parse_query_string(text)
    logger.debug("Parsed query from %s: %r", path, node)
    return node
