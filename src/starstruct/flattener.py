from __future__ import annotations

import datetime as _dt
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .config import DEFAULT_SETTINGS, Settings
from .errors import AbsentValueError, ShapeError, UnsupportedKindError
from .merge import merge_fields
from .paths import SEP, format_index, index_width, join_key, top_level
from .shape import (
    Kind,
    Visiting,
    classify,
    inlines,
    iter_elements,
    longest_sequence,
    mapping_items,
    members,
)


def render_leaf(value: Any) -> str:
    """Text form of a leaf value."""
    if isinstance(value, Enum):
        return render_leaf(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class _Flattener:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.visiting = Visiting()
        self.width = settings.min_index_width
        self.out: Dict[str, str] = {}

    def run(self, record: Any) -> Dict[str, str]:
        kind = classify(record)
        if kind is Kind.ABSENT:
            raise AbsentValueError("cannot flatten None")
        if kind is Kind.UNSUPPORTED:
            raise UnsupportedKindError("", type(record).__name__)
        if kind is Kind.LEAF:
            raise ShapeError(f"expected a record, mapping or collection, got {type(record).__name__}")

        longest = longest_sequence(record, self.settings.tag_namespaces)
        self.width = index_width(longest, self.settings.min_index_width)
        self.value(record, "")
        return self.out

    def put(self, key: str, text: str) -> None:
        # an empty root has no column of its own
        if key:
            self.out[key] = text

    def value(self, value: Any, prefix: str) -> None:
        kind = classify(value)
        if kind is Kind.ABSENT:
            self.put(prefix, self.settings.absent_marker)
            return
        if kind is Kind.LEAF:
            self.put(prefix, render_leaf(value))
            return
        if kind is Kind.UNSUPPORTED:
            raise UnsupportedKindError(prefix, type(value).__name__)

        with self.visiting.visit(value, prefix):
            if kind is Kind.COMPOSITE:
                for m in members(value, self.settings.tag_namespaces):
                    self.value(m.value, prefix if inlines(m) else join_key(prefix, m.export))
            elif kind is Kind.MAPPING:
                items = mapping_items(value, self.settings.sort_keys)
                if not items:
                    self.put(prefix, "")
                for key, v in items:
                    self.value(v, join_key(prefix, key))
            else:
                elems = iter_elements(value)
                if not elems:
                    self.put(prefix, "")
                for i, elem in enumerate(elems):
                    self.value(elem, join_key(prefix, format_index(i, self.width)))


def _ancestors(key: str) -> Iterator[str]:
    """The key itself and every dotted prefix of it."""
    parts = key.split(SEP)
    for i in range(1, len(parts) + 1):
        yield SEP.join(parts[:i])


def _select(flat: Dict[str, str], fields: Sequence[str]) -> Dict[str, str]:
    wanted = set(fields)
    return {k: v for k, v in flat.items() if any(a in wanted for a in _ancestors(k))}


def _order(flat: Dict[str, str], fields: Sequence[str], sort_fields: bool) -> Dict[str, str]:
    if sort_fields:
        return dict(sorted(flat.items()))

    groups: Dict[str, List[str]] = {}
    for key in flat:
        groups.setdefault(top_level(key), []).append(key)

    out: Dict[str, str] = {}
    for f in fields:
        for key in groups.pop(top_level(f), []):
            out[key] = flat[key]
    for keys in groups.values():
        for key in keys:
            out[key] = flat[key]
    return out


def flatten(
    record: Any,
    fields: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
) -> Dict[str, str]:
    """
    Flatten a record into an ordered ``path -> text`` mapping.

    Every leaf gets a value: absent members render as the absence marker
    (``<nil>`` by default), empty collections as ``""`` under their own path.
    Sequence indices are zero-padded to the width of the longest sequence in
    the record (two digits at least).

    With ``fields`` the output keeps only listed paths and their descendants;
    listed paths the record cannot reach are left out. Keys are grouped by
    their top-level segment in field-list order.

    Without ``fields`` every key is kept in traversal order, which is the
    order of the record's own shape.
    """
    settings = settings or DEFAULT_SETTINGS
    flat = _Flattener(settings).run(record)
    if fields is None:
        return dict(sorted(flat.items())) if settings.sort_fields else flat
    return _order(_select(flat, fields), fields, settings.sort_fields)


def flatten_fields(
    record: Any,
    fields: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
) -> List[str]:
    """
    Field list updated with the concrete paths found in record.

    Without ``fields`` these are the keys of ``flatten(record)``. With it,
    each listed path the record reaches is replaced in place by the concrete
    paths below it (``items`` becomes ``items.00.a``, ``items.01.a``, ...);
    paths the record does not reach stay, so rows built on the result keep
    their columns.
    """
    keys = list(flatten(record, fields, settings=settings))
    if fields is None:
        return keys
    return merge_fields(fields, keys)
