"""Exceptions raised by starstruct."""
from __future__ import annotations

from typing import Optional


class StarstructError(Exception):
    """Base exception for all flattening, shape and merge operations."""
    pass


class ShapeError(StarstructError, ValueError):
    """A field list cannot be derived from the given value."""
    pass


class AbsentValueError(ShapeError):
    """The top-level value is None and absent branches are not excluded."""
    pass


class EmptyShapeError(ShapeError):
    """A top-level collection has no elements and no declared element type."""
    pass


class UnsupportedKindError(StarstructError, TypeError):
    """A value's kind cannot be represented as text.

    Attributes:
        path: path of the offending value ("" for the top level)
        kind: type name of the offending value
    """

    def __init__(self, path: str, kind: str, message: Optional[str] = None):
        self.path = path
        self.kind = kind
        where = path or "<root>"
        super().__init__(message or f"unsupported value of type {kind} at {where}")


class CycleError(StarstructError, ValueError):
    """A value refers back to one of its own ancestors."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"cycle detected at {path or '<root>'}")


class AnnotationError(StarstructError, ValueError):
    """Field annotations of a composite type are inconsistent."""
    pass


class TableError(StarstructError, ValueError):
    """Tabular data cannot be decoded into records."""
    pass
