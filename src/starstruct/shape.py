"""Value-shape classification shared by the generator and the flattener.

Every value is one of a small set of kinds:

* COMPOSITE   dataclass, pydantic model or named tuple instance
* MAPPING     any ``collections.abc.Mapping``
* SEQUENCE    list, tuple, deque, set, frozenset, other non-text sequences
* LEAF        text, numbers, enums, UUIDs, paths, IP addresses, temporal values
* ABSENT      ``None``
* UNSUPPORTED everything else (callables, generators, queues, locks, ...)

Temporal values (datetime, date, time, timedelta) are always leaves even
though they carry internal structure.
"""
from __future__ import annotations

import collections
import collections.abc as cabc
import dataclasses
import datetime as _dt
import ipaddress
import numbers
import types
import typing
from contextlib import contextmanager
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple
from uuid import UUID

from pydantic import BaseModel

from .errors import AnnotationError, CycleError
from .paths import join_key
from .tags import DEFAULT_NAMESPACES, FieldTag, resolve_tag


class Kind(str, Enum):
    COMPOSITE = "composite"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    LEAF = "leaf"
    ABSENT = "absent"
    UNSUPPORTED = "unsupported"


TEMPORAL_TYPES = (_dt.datetime, _dt.date, _dt.time, _dt.timedelta)

LEAF_TYPES = (
    str,
    bytes,
    bytearray,
    numbers.Number,
    Enum,
    UUID,
    PurePath,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
) + TEMPORAL_TYPES

SEQUENCE_TYPES = (list, tuple, set, frozenset, collections.deque)

_UNION_TYPE = getattr(types, "UnionType", None)


# ---- classification ----

def is_composite_type(cls: Any) -> bool:
    if not isinstance(cls, type):
        return False
    if dataclasses.is_dataclass(cls) or issubclass(cls, BaseModel):
        return True
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def classify(value: Any) -> Kind:
    if value is None:
        return Kind.ABSENT
    if isinstance(value, LEAF_TYPES):
        return Kind.LEAF
    if isinstance(value, type):
        return Kind.UNSUPPORTED
    if isinstance(value, cabc.Mapping):
        return Kind.MAPPING
    if is_composite_type(type(value)):
        return Kind.COMPOSITE
    if isinstance(value, SEQUENCE_TYPES) or isinstance(value, cabc.Sequence):
        return Kind.SEQUENCE
    return Kind.UNSUPPORTED


def iter_elements(value: Any) -> List[Any]:
    """Elements of a sequence; unordered sets are visited in text order."""
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return list(value)


def mapping_items(value: cabc.Mapping, sort_keys: bool = False) -> List[Tuple[str, Any]]:
    items = [(str(k), v) for k, v in value.items()]
    if sort_keys:
        items.sort(key=lambda kv: kv[0])
    return items


# ---- declared members ----

@dataclasses.dataclass(frozen=True)
class Member:
    attr: str
    tag: FieldTag
    declared: Any = None
    value: Any = None

    @property
    def export(self) -> str:
        return self.tag.export_name(self.attr)


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError, AttributeError):
        # unresolvable forward references; fall back to the raw annotations
        return dict(getattr(cls, "__annotations__", {}))


def _pydantic_metadata(info: Any) -> Dict[str, Any]:
    extra = info.json_schema_extra
    meta = dict(extra) if isinstance(extra, dict) else {}
    alias = info.serialization_alias or info.alias
    if alias and "json" not in meta:
        meta["json"] = alias
    return meta


def _raw_members(cls: type, namespaces: Sequence[str]) -> Iterator[Member]:
    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        for f in dataclasses.fields(cls):
            yield Member(f.name, resolve_tag(f.metadata, namespaces), hints.get(f.name, f.type))
    elif issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            yield Member(name, resolve_tag(_pydantic_metadata(info), namespaces), info.annotation)
    else:
        hints = _type_hints(cls)
        for name in cls._fields:
            yield Member(name, FieldTag(), hints.get(name))


def declared_members(cls: type, namespaces: Sequence[str] = DEFAULT_NAMESPACES) -> List[Member]:
    """Visible members of a composite type, in declaration order.

    Private members (leading underscore) and members annotated ``-`` are
    dropped. Only one member per type may be marked ``inline``.
    """
    out = [
        m for m in _raw_members(cls, namespaces)
        if not m.attr.startswith("_") and not m.tag.exclude
    ]
    inline = [m.attr for m in out if m.tag.inline]
    if len(inline) > 1:
        raise AnnotationError(
            f"{cls.__name__}: only one inline member is supported, found {inline}"
        )
    return out


def members(value: Any, namespaces: Sequence[str] = DEFAULT_NAMESPACES) -> List[Member]:
    return [
        dataclasses.replace(m, value=getattr(value, m.attr, None))
        for m in declared_members(type(value), namespaces)
    ]


def inlines(member: Member) -> bool:
    """True if the member's leaves belong to the parent's namespace."""
    if not member.tag.inline:
        return False
    kind = classify(member.value)
    if kind is Kind.COMPOSITE:
        return True
    # an empty inline mapping still needs a column of its own
    return kind is Kind.MAPPING and len(member.value) > 0


# ---- declared types ----

def is_optional(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    if origin is typing.Union or (_UNION_TYPE is not None and origin is _UNION_TYPE):
        return type(None) in typing.get_args(tp)
    return False


def unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is typing.Union or (_UNION_TYPE is not None and origin is _UNION_TYPE):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return unwrap_optional(args[0])
    return tp


def element_type(tp: Any) -> Any:
    """Declared element type of a sequence annotation, or None."""
    if tp is None:
        return None
    tp = unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if not isinstance(origin, type):
        return None
    args = typing.get_args(tp)
    if issubclass(origin, cabc.Mapping) or not args:
        return None
    if origin is tuple or issubclass(origin, (cabc.Sequence, cabc.Set)) or origin is collections.deque:
        return args[0]
    return None


def type_kind(tp: Any) -> Optional[Kind]:
    """Kind of a declared type; None when the annotation says nothing useful."""
    if tp is None or tp is Any:
        return None
    tp = unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if origin is not None:
        if origin is typing.Literal:
            return Kind.LEAF
        if not isinstance(origin, type):
            return None
        if issubclass(origin, cabc.Mapping):
            return Kind.MAPPING
        if origin is cabc.Callable:
            return Kind.UNSUPPORTED
        if origin is tuple or issubclass(origin, (cabc.Sequence, cabc.Set)) or origin is collections.deque:
            return Kind.SEQUENCE
        return None
    if not isinstance(tp, type):
        return None
    if issubclass(tp, LEAF_TYPES):
        return Kind.LEAF
    if issubclass(tp, cabc.Mapping):
        return Kind.MAPPING
    if is_composite_type(tp):
        return Kind.COMPOSITE
    if issubclass(tp, SEQUENCE_TYPES):
        return Kind.SEQUENCE
    return None


# ---- traversal helpers ----

class Visiting:
    """Recursion stack keyed by object identity."""

    def __init__(self) -> None:
        self._ids: Set[int] = set()

    @contextmanager
    def visit(self, value: Any, path: str):
        key = id(value)
        if key in self._ids:
            raise CycleError(path)
        self._ids.add(key)
        try:
            yield
        finally:
            self._ids.discard(key)


def longest_sequence(value: Any, namespaces: Sequence[str] = DEFAULT_NAMESPACES) -> int:
    """Length of the longest sequence found anywhere inside value."""
    visiting = Visiting()

    def walk(v: Any, path: str) -> int:
        kind = classify(v)
        if kind not in (Kind.COMPOSITE, Kind.MAPPING, Kind.SEQUENCE):
            return 0
        with visiting.visit(v, path):
            if kind is Kind.COMPOSITE:
                return max((walk(m.value, join_key(path, m.export)) for m in members(v, namespaces)), default=0)
            if kind is Kind.MAPPING:
                return max((walk(x, join_key(path, k)) for k, x in mapping_items(v)), default=0)
            elems = iter_elements(v)
            return max([len(elems)] + [walk(x, join_key(path, str(i))) for i, x in enumerate(elems)])

    return walk(value, "")
