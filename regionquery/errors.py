"""
Error types for regionquery.

Every failure surfaced to callers is a RegionQueryError carrying a
``kind`` that distinguishes malformed input, store failures and I/O
failures. Nothing is retried internally.
"""
from typing import Any, Dict, Optional


class RegionQueryError(Exception):
    """Base class for all regionquery errors."""

    kind = "error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class MalformedQuery(RegionQueryError):
    """
    The query description is unrecognized or structurally invalid.

    Raised for unknown or missing operation tags, missing required
    fields, non-numeric bounds and undecodable text.
    """
    kind = "malformed_query"


class StoreUnavailable(RegionQueryError):
    """The backing store cannot be reached or a read failed."""
    kind = "store_unavailable"


class IoFailure(RegionQueryError):
    """A query description or output file cannot be read or written."""
    kind = "io_failure"
