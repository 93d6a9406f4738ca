"""Field-list reconciliation.

Two policies combine an ordered baseline field list with a candidate list:

``merge_fields``       shape-union, used while generating the shape of a
                       heterogeneous collection (one candidate per element)
``merge_field_lists``  reconcile a previously published header with a freshly
                       regenerated one

Both keep the baseline's relative order. A baseline entry is only ever
replaced in place by its own children from the candidate; everything new is
inserted next to its relatives or appended. Both are idempotent:
``merge(merge(a, b), b) == merge(a, b)``.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .paths import SEP, is_index, split_parent, top_level

logger = logging.getLogger(__name__)


class _Merged:
    """Ordered, duplicate-free list that also knows every proper ancestor."""

    def __init__(self) -> None:
        self.fields: List[str] = []
        self.seen: Set[str] = set()
        self.ancestors: Set[str] = set()

    def __contains__(self, f: str) -> bool:
        return f in self.seen

    def superseded(self, f: str) -> bool:
        """True if f is already represented through its own children."""
        return f in self.ancestors

    def _track(self, f: str) -> None:
        self.seen.add(f)
        parts = f.split(SEP)
        for i in range(1, len(parts)):
            self.ancestors.add(SEP.join(parts[:i]))

    def add(self, f: str) -> None:
        if f not in self.seen:
            self.fields.append(f)
            self._track(f)

    def insert_after_relatives(self, fields: Sequence[str], prefix: str) -> None:
        fresh = [f for f in fields if f not in self.seen]
        if not fresh:
            return
        anchor = -1
        for i, existing in enumerate(self.fields):
            if top_level(existing) == prefix:
                anchor = i
        if anchor == -1:
            self.fields.extend(fresh)
        else:
            self.fields[anchor + 1:anchor + 1] = fresh
            logger.debug("inserted %s after %s", fresh, self.fields[anchor])
        for f in fresh:
            self._track(f)


def _drop_superseded(candidate: Iterable[str]) -> List[str]:
    """Drop entries for which the candidate also lists children."""
    cand = list(dict.fromkeys(candidate))
    parents: Set[str] = set()
    for c in cand:
        parts = c.split(SEP)
        for i in range(1, len(parts)):
            parents.add(SEP.join(parts[:i]))
    return [c for c in cand if c not in parents]


def _numeric_suffix(path: str) -> Optional[int]:
    _, suffix = split_parent(path)
    return int(suffix) if is_index(suffix) else None


def _numeric_first(fields: List[str]) -> List[str]:
    numeric = [f for f in fields if _numeric_suffix(f) is not None]
    numeric.sort(key=lambda f: (split_parent(f)[0], _numeric_suffix(f)))
    return numeric + [f for f in fields if _numeric_suffix(f) is None]


# ============================================================================
# Shape-union
# ============================================================================

def merge_fields(baseline: Sequence[str], candidate: Sequence[str]) -> List[str]:
    """
    Union one more element shape into a running baseline.

    * a baseline entry with descendants in the candidate is replaced in place
      by them: numeric-suffixed ones first (by value), the rest in candidate
      order
    * other new dotted entries go after the last entry sharing their
      top-level segment, or at the end
    * new bare entries go at the end

    Dotted baseline entries are replaced too, not only bare ones: a sequence
    nested in a record is listed by its dotted path (``profile.phones``) and
    ``flatten_fields`` relies on this to expand it into ``profile.phones.00``
    and so on. Such an entry is then gone from the result, its children
    standing in its place.
    """
    cand = _drop_superseded(candidate)
    merged = _Merged()

    for base in baseline:
        subs = [c for c in cand if c.startswith(base + SEP)]
        if subs:
            for f in _numeric_first(subs):
                merged.add(f)
        else:
            merged.add(base)

    for c in cand:
        if c in merged or merged.superseded(c):
            continue
        if SEP in c:
            merged.insert_after_relatives([c], top_level(c))
        else:
            merged.add(c)

    return merged.fields


# ============================================================================
# External field-list merge
# ============================================================================

def _partition(candidate: Sequence[str]) -> Tuple[Dict[str, List[str]], Dict[str, List[str]], List[str]]:
    numeric: Dict[str, List[Tuple[int, str]]] = {}
    named: Dict[str, List[str]] = {}
    bare: List[str] = []
    for c in candidate:
        parent, suffix = split_parent(c)
        if parent is None:
            bare.append(c)
        elif is_index(suffix):
            numeric.setdefault(parent, []).append((int(suffix), c))
        else:
            named.setdefault(parent, []).append(c)
    numeric_sorted = {p: [c for _, c in sorted(v)] for p, v in numeric.items()}
    named_sorted = {p: sorted(v) for p, v in named.items()}
    return numeric_sorted, named_sorted, bare


def merge_field_lists(baseline: Sequence[str], candidate: Sequence[str]) -> List[str]:
    """
    Merge a regenerated header into a published one.

    1. A baseline entry that is the parent of candidate entries is replaced
       in place by them: numeric children (by value) then named children
       (lexically).
    2. Remaining child groups are inserted after the last merged entry whose
       top-level segment matches the group's, else appended.
    3. Bare candidate entries not yet present are appended.
    """
    numeric, named, bare = _partition(_drop_superseded(candidate))
    baseline_set = set(baseline)
    merged = _Merged()

    for b in baseline:
        children = numeric.pop(b, []) + named.pop(b, [])
        if children:
            for c in children:
                merged.add(c)
        else:
            merged.add(b)

    groups: Dict[str, List[str]] = {}
    for parent in sorted(set(numeric) | set(named)):
        group = numeric.get(parent, []) + named.get(parent, [])
        groups.setdefault(top_level(parent), []).extend(
            c for c in group if not merged.superseded(c)
        )
    for prefix in sorted(groups):
        merged.insert_after_relatives(groups[prefix], prefix)

    for c in bare:
        if c in baseline_set or c in merged or merged.superseded(c):
            continue
        merged.add(c)

    return merged.fields
