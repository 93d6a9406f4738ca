"""Records <-> rows of text.

``to_rows`` aligns flattened records against a field list, one row per
record. ``from_rows`` goes the other way: the first row is the header and
every following row becomes a record whose values are all ``str``. The
decode is lossy (no types are recovered) and is not an inverse of
``to_rows`` in general; it reproduces each exported cell as text only.
"""
from __future__ import annotations

import keyword
import logging
import re
from dataclasses import field, make_dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .config import Settings
from .errors import TableError
from .flattener import flatten, flatten_fields
from .merge import merge_field_lists

logger = logging.getLogger(__name__)


def to_rows(
    fields: Sequence[str],
    records: Iterable[Any],
    *,
    settings: Optional[Settings] = None,
) -> List[List[str]]:
    """
    One row per record, one cell per field; unreachable fields are "".

    Cells are looked up by exact path, so ``fields`` should list concrete
    paths. A list from ``generate_shape`` names sequences by their bare path;
    expand it with ``reconcile_headers`` (or ``to_table``) first.
    """
    rows: List[List[str]] = []
    for rec in records:
        flat = flatten(rec, fields, settings=settings)
        rows.append([flat.get(f, "") for f in fields])
    return rows


def reconcile_headers(
    records: Iterable[Any],
    published: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
) -> List[str]:
    """
    Fold the concrete paths of every record into a header.

    A previously published header keeps its column order. Paths of it that
    a record reaches below (the bare path of a sequence, as produced by
    ``generate_shape``) are replaced in place by the concrete paths; paths
    new to the header are merged in with ``merge_field_lists``.
    """
    header = list(published or [])
    for rec in records:
        keys = flatten_fields(rec, settings=settings)
        if header:
            header = merge_field_lists(flatten_fields(rec, header, settings=settings), keys)
        else:
            header = keys
    return header


def to_table(
    records: Sequence[Any],
    published: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
) -> Tuple[List[str], List[List[str]]]:
    header = reconcile_headers(records, published, settings=settings)
    logger.debug("header has %d columns for %d records", len(header), len(records))
    return header, to_rows(header, records, settings=settings)


# ---- decode ----

def _identifier(header: str, index: int) -> str:
    s = re.sub(r"\W+", "_", header.strip()).strip("_")
    if not s:
        return f"field_{index}"
    if not (s[0].isalpha() or s[0] == "_"):
        s = "field_" + s
    if keyword.iskeyword(s):
        s += "_"
    return s


def _annotation(header: str) -> str:
    # "-" alone would exclude the member; "-," keeps it as a literal name
    if header == "-":
        return "-,"
    # commas cannot be expressed in an export name
    return "" if "," in header else header


def make_record_type(headers: Sequence[str], name: str = "Row") -> type:
    """Build a frozen dataclass with one ``str`` member per header."""
    used = set()
    columns = []
    for i, h in enumerate(headers, start=1):
        ident = _identifier(h, i)
        base, n = ident, 2
        while ident in used:
            ident = f"{base}_{n}"
            n += 1
        used.add(ident)
        columns.append((ident, str, field(default="", metadata={"json": _annotation(h)})))
    return make_dataclass(name, columns, frozen=True)


def from_rows(rows: Sequence[Sequence[Any]], name: str = "Row") -> List[Any]:
    """
    Decode a header row plus data rows into records of text values.

    Flattening a decoded record yields the original header names as keys.
    """
    if not rows:
        raise TableError("data is empty")
    headers = ["" if h is None else str(h) for h in rows[0]]
    record_type = make_record_type(headers, name)

    out: List[Any] = []
    for n, row in enumerate(rows[1:], start=2):
        if len(row) != len(headers):
            raise TableError(f"row {n}: expected {len(headers)} cells, got {len(row)}")
        out.append(record_type(*["" if v is None else str(v) for v in row]))
    return out
