"""
regionquery - boolean region-crop queries over 2-D inspection points.

A query is a tree of crop / and / or operations. Each crop selects the
points inside an axis-aligned region, optionally narrowed by category,
group membership, or whole-group containment ("proper"). The tree is
evaluated against a SQL store (SQLite, PostgreSQL, ... via SQLAlchemy)
into a deduplicated list of points ordered by (y, x).

Example Usage:
    >>> from regionquery import Database, parse_query_file, execute_query
    >>> db = Database("points.db")
    >>> points = execute_query(db, parse_query_file("query.json"))
    >>> [(p.x, p.y) for p in points]
"""

__version__ = "0.1.0"

# Configuration
from regionquery.config import RegionQueryConfig, get_config, init_config

# Errors
from regionquery.errors import RegionQueryError, MalformedQuery, StoreUnavailable, IoFailure

# Core database API
from regionquery.db import Database, get_db

# Models
from regionquery.models import Point

# Stores
from regionquery.store import MemoryStore, PointStore

# Query language
from regionquery.query import (
    Region,
    Crop,
    And,
    Or,
    crop,
    all_of,
    any_of,
    parse_query,
    parse_query_string,
    parse_query_file,
    execute_query,
    run_query,
    finalize,
    write_points,
)

__all__ = [
    "RegionQueryConfig",
    "get_config",
    "init_config",
    "RegionQueryError",
    "MalformedQuery",
    "StoreUnavailable",
    "IoFailure",
    "Database",
    "get_db",
    "Point",
    "MemoryStore",
    "PointStore",
    "Region",
    "Crop",
    "And",
    "Or",
    "crop",
    "all_of",
    "any_of",
    "parse_query",
    "parse_query_string",
    "parse_query_file",
    "execute_query",
    "run_query",
    "finalize",
    "write_points",
]
