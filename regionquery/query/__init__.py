"""
regionquery query language - boolean trees of region crops.

Example usage:

    from regionquery.query import crop, all_of, any_of, execute_query
    from regionquery.db import Database

    db = Database('points.db')

    q = all_of(
        crop(0, 0, 10, 10, category=1),
        any_of(crop(5, 5, 20, 20, groups=[3, 4]),
               crop(0, 0, 2, 2, proper=True)),
    )

    for point in execute_query(db, q):
        print(point.x, point.y)

    # Or from a JSON description
    from regionquery.query import parse_query_file

    q = parse_query_file('query.json')
    points = execute_query(db, q)
"""

# Query AST
from .ast import (
    Region,
    Crop,
    And,
    Or,
    QueryNode,
    crop,
    all_of,
    any_of,
    to_description,
    depth,
    leaves,
)

# Predicate compiler
from .compiler import (
    Condition,
    Between,
    Equals,
    OneOf,
    CropFilter,
    compile_crop,
)

# Results
from .results import (
    ResultSet,
    finalize,
    format_point,
    write_points,
)

# Parser
from .parser import (
    QueryParser,
    parse_query,
    parse_query_string,
    parse_query_file,
)

# Executor
from .executor import (
    ExecutionContext,
    QueryExecutor,
    execute_query,
    run_query,
)

__all__ = [
    # Query AST
    'Region',
    'Crop',
    'And',
    'Or',
    'QueryNode',
    'crop',
    'all_of',
    'any_of',
    'to_description',
    'depth',
    'leaves',

    # Compiler
    'Condition',
    'Between',
    'Equals',
    'OneOf',
    'CropFilter',
    'compile_crop',

    # Results
    'ResultSet',
    'finalize',
    'format_point',
    'write_points',

    # Parser
    'QueryParser',
    'parse_query',
    'parse_query_string',
    'parse_query_file',

    # Executor
    'ExecutionContext',
    'QueryExecutor',
    'execute_query',
    'run_query',
]
