"""Errors raised while building a path tree or translating it to Cypher."""
from __future__ import annotations
from typing import Any, Optional


class PathQueryError(Exception):
    """Base class for every pathquery failure."""

    def __init__(self, message: str, *args: Any) -> None:
        self.message = message
        super().__init__(message, *args)

    def __str__(self) -> str:
        return self.message


class PathNotFoundError(PathQueryError):
    """A referenced path has no node in the tree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path not found in tree: {path}")


class InvalidOrderTargetError(PathQueryError):
    """An ORDER BY path resolved to a node or relationship instead of a property."""

    def __init__(self, path: str, kind: Any) -> None:
        self.path = path
        self.kind = kind
        name = getattr(kind, "name", kind)
        super().__init__(f"Cannot order by {path}: it is a {name}, not a PROPERTY")


class EmptyMatchError(PathQueryError):
    def __init__(self, message: str = "Query has no MATCH pattern") -> None:
        super().__init__(message)


class InvalidTreeError(PathQueryError):
    """Insertion would break a path tree invariant."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message)


class InvalidPathError(PathQueryError):
    """A path component is unknown to the graph schema."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path}: {reason}")


__all__ = [
    "PathQueryError", "PathNotFoundError", "InvalidOrderTargetError",
    "EmptyMatchError", "InvalidTreeError", "InvalidPathError",
]
