"""One-level record conversions (query parameters, JSON).

Unlike ``flatten`` these keep nesting: a nested record becomes a nested
dict and a sequence stays a list. ``to_map`` drops zero values by default,
which is what query-string builders want.
"""
from __future__ import annotations

import datetime as _dt
import json
import numbers
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from .config import DEFAULT_SETTINGS, Settings
from .errors import ShapeError
from .flattener import render_leaf
from .shape import Kind, classify, inlines, iter_elements, members


def is_zero(value: Any, settings: Optional[Settings] = None) -> bool:
    """None, "", 0, False, empty containers and records made only of those."""
    kind = classify(value)
    if kind is Kind.ABSENT:
        return True
    if kind is Kind.COMPOSITE:
        ns = (settings or DEFAULT_SETTINGS).tag_namespaces
        return all(is_zero(m.value, settings) for m in members(value, ns))
    if isinstance(value, (str, bytes, bytearray)) or kind in (Kind.MAPPING, Kind.SEQUENCE):
        return len(value) == 0
    if isinstance(value, numbers.Number) and not isinstance(value, Enum):
        return value == 0
    return False


def _convert(value: Any, include_zero_values: bool, settings: Optional[Settings]) -> Any:
    kind = classify(value)
    if kind is Kind.COMPOSITE:
        return to_map(value, include_zero_values, settings=settings)
    if kind is Kind.SEQUENCE:
        return [_convert(e, include_zero_values, settings) for e in iter_elements(value)]
    return value


def to_map(
    item: Any,
    include_zero_values: bool = False,
    *,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """
    Convert a record into a dict keyed by export names.

    Mappings are returned as a copy with text keys. Inline members are
    merged into the parent dict.
    """
    kind = classify(item)
    if kind is Kind.MAPPING:
        return {str(k): v for k, v in item.items()}
    if kind is not Kind.COMPOSITE:
        raise ShapeError(f"expected a record or mapping, got {type(item).__name__}")

    ns = (settings or DEFAULT_SETTINGS).tag_namespaces
    out: Dict[str, Any] = {}
    for m in members(item, ns):
        if not include_zero_values and is_zero(m.value, settings):
            continue
        if inlines(m):
            out.update(to_map(m.value, include_zero_values, settings=settings))
            continue
        out[m.export] = _convert(m.value, include_zero_values, settings)
    return out


def _param_text(value: Any) -> str:
    if value is None:
        return ""
    if classify(value) is Kind.LEAF:
        return render_leaf(value)
    return json.dumps(value, default=_json_default, separators=(",", ":"))


def query_params(
    item: Any,
    include_zero_values: bool = False,
    *,
    settings: Optional[Settings] = None,
) -> List[Tuple[str, str]]:
    """``(key, text)`` pairs for a query string; sequences repeat the key."""
    pairs: List[Tuple[str, str]] = []
    for key, value in to_map(item, include_zero_values, settings=settings).items():
        if classify(value) is Kind.SEQUENCE:
            pairs.extend((key, _param_text(e)) for e in iter_elements(value))
        else:
            pairs.append((key, _param_text(value)))
    return pairs


def query_string(item: Any, include_zero_values: bool = False, *, settings: Optional[Settings] = None) -> str:
    return urlencode(query_params(item, include_zero_values, settings=settings))


def _json_default(value: Any) -> Any:
    kind = classify(value)
    if kind is Kind.COMPOSITE:
        return to_map(value, include_zero_values=True)
    if kind is Kind.SEQUENCE:
        return iter_elements(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if kind is Kind.LEAF:
        return render_leaf(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def pretty_json(data: Any) -> str:
    """Indented JSON text of a record, mapping or collection."""
    if classify(data) is Kind.COMPOSITE:
        # named tuples would otherwise serialize as plain arrays
        data = to_map(data, include_zero_values=True)
    return json.dumps(data, indent=2, default=_json_default, ensure_ascii=False)
