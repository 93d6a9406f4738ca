from __future__ import annotations

import logging
import typing
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Set

from .config import DEFAULT_SETTINGS, Settings
from .errors import AbsentValueError, EmptyShapeError, ShapeError, UnsupportedKindError
from .merge import merge_fields
from .paths import join_key
from .shape import (
    Kind,
    Visiting,
    classify,
    declared_members,
    element_type,
    inlines,
    is_optional,
    iter_elements,
    mapping_items,
    members,
    type_kind,
    unwrap_optional,
)

logger = logging.getLogger(__name__)


@dataclass
class _ShapeWalk:
    """One shape derivation; holds the recursion guards for that call only."""

    namespaces: Sequence[str]
    exclude_absent: bool = False
    sort_keys: bool = False
    visiting: Visiting = field(default_factory=Visiting)
    types_seen: Set[Any] = field(default_factory=set)

    @staticmethod
    def leaf(prefix: str) -> List[str]:
        if not prefix:
            raise ShapeError("cannot derive field names from a bare leaf value")
        return [prefix]

    # ---- live values ----

    def value(self, value: Any, prefix: str, declared: Any = None) -> List[str]:
        kind = classify(value)
        if kind in (Kind.ABSENT, Kind.LEAF):
            return self.leaf(prefix)
        if kind is Kind.UNSUPPORTED:
            raise UnsupportedKindError(prefix, type(value).__name__)
        with self.visiting.visit(value, prefix):
            if kind is Kind.COMPOSITE:
                return self.composite(value, prefix)
            if kind is Kind.MAPPING:
                return self.mapping(value, prefix)
            return self.sequence(value, prefix, declared)

    def composite(self, value: Any, prefix: str) -> List[str]:
        fields: List[str] = []
        for m in members(value, self.namespaces):
            key = join_key(prefix, m.export)
            if m.value is None:
                if not self.exclude_absent:
                    fields.append(key)
                continue
            if inlines(m):
                fields.extend(self.value(m.value, prefix, m.declared))
            else:
                fields.extend(self.value(m.value, key, m.declared))
        return fields

    def mapping(self, value: Any, prefix: str) -> List[str]:
        items = mapping_items(value, self.sort_keys)
        if not items:
            return [prefix] if prefix else []
        fields: List[str] = []
        for key, v in items:
            if v is None and self.exclude_absent:
                continue
            fields.extend(self.value(v, join_key(prefix, key)))
        return fields

    def sequence(self, value: Any, prefix: str, declared: Any = None) -> List[str]:
        if prefix:
            # elements get index segments when flattened; the bare path selects them all
            return [prefix]

        # top level: a collection of records, one shape for all of them
        elem_tp = element_type(declared)
        merged: Optional[List[str]] = None
        for elem in iter_elements(value):
            if elem is None:
                continue
            shape = self.value(elem, prefix, elem_tp)
            if not shape:
                continue
            merged = shape if merged is None else merge_fields(merged, shape)
        if merged:
            return merged

        if elem_tp is not None:
            shape = self.declared(elem_tp, prefix)
            if shape:
                logger.debug("no usable elements, using declared type %r", elem_tp)
                return shape
        raise EmptyShapeError(
            "cannot derive field names from an empty collection without a declared element type"
        )

    # ---- declared types (zero values) ----

    def declared(self, tp: Any, prefix: str) -> List[str]:
        kind = type_kind(tp)
        tp = unwrap_optional(tp)
        if kind is Kind.UNSUPPORTED:
            raise UnsupportedKindError(prefix, repr(tp))
        if kind is Kind.SEQUENCE:
            elem_tp = element_type(tp)
            if prefix or elem_tp is None:
                return self.leaf(prefix)
            return self.declared(elem_tp, prefix)
        if kind is not Kind.COMPOSITE:
            return self.leaf(prefix) if kind is Kind.LEAF or prefix else []
        if tp in self.types_seen:
            # self-referential type; stop at the member itself
            return [prefix] if prefix else []

        self.types_seen.add(tp)
        try:
            fields: List[str] = []
            for m in declared_members(tp, self.namespaces):
                key = join_key(prefix, m.export)
                if is_optional(m.declared):
                    # an optional branch is absent in a zero value
                    if not self.exclude_absent:
                        fields.append(key)
                    continue
                if m.tag.inline and type_kind(m.declared) is Kind.COMPOSITE:
                    fields.extend(self.declared(m.declared, prefix))
                else:
                    fields.extend(self.declared(m.declared, key))
            return fields
        finally:
            self.types_seen.discard(tp)


def _unique(fields: List[str]) -> List[str]:
    return list(dict.fromkeys(fields))


def _walk(settings: Optional[Settings], exclude_absent: Optional[bool]) -> _ShapeWalk:
    settings = settings or DEFAULT_SETTINGS
    if exclude_absent is None:
        exclude_absent = settings.exclude_absent
    return _ShapeWalk(
        namespaces=settings.tag_namespaces,
        exclude_absent=exclude_absent,
        sort_keys=settings.sort_keys,
    )


def generate_shape_for_type(
    tp: Any,
    *,
    exclude_absent: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> List[str]:
    """Field list of a declared type's zero value.

    Optional members are treated as absent: they yield their own bare path,
    or nothing with ``exclude_absent``.
    """
    return _unique(_walk(settings, exclude_absent).declared(tp, ""))


def generate_shape(
    sample: Any,
    *,
    element_type: Any = None,
    exclude_absent: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> List[str]:
    """
    Derive the ordered field list reachable as leaves of ``sample``.

    ``sample`` may be a record, a mapping, a collection of records (their
    shapes are unioned) or a composite type. ``element_type`` declares the
    element type of a top-level collection, used when it holds no usable
    element.

    A sequence nested inside a record yields its own bare path: flattening
    gives its elements indexed paths below it, and the bare path selects all
    of them.

    Mapping keys are visited in insertion order; pass
    ``Settings(sort_keys=True)`` for sorted keys.

    Raises:
        AbsentValueError: sample is None and absent branches are not excluded
        EmptyShapeError: empty top-level collection with no element type
        UnsupportedKindError: a value that cannot be rendered as text
        CycleError: the value contains itself
    """
    if isinstance(sample, type) or typing.get_origin(sample) is not None:
        return generate_shape_for_type(sample, exclude_absent=exclude_absent, settings=settings)

    walk = _walk(settings, exclude_absent)
    if sample is None:
        if walk.exclude_absent:
            return []
        raise AbsentValueError("cannot derive field names from None")

    declared = typing.List[element_type] if element_type is not None else None
    return _unique(walk.value(sample, "", declared))
