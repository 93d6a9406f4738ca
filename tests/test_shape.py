import datetime as dt
import queue
import threading
from collections import namedtuple
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

import pytest
from pydantic import BaseModel, Field

from starstruct.errors import AnnotationError, CycleError
from starstruct.shape import (
    Kind,
    classify,
    declared_members,
    element_type,
    longest_sequence,
    members,
    type_kind,
    unwrap_optional,
)


class Color(Enum):
    RED = "red"


@dataclass
class Address:
    city: str = ""
    state: str = ""


@dataclass
class Hidden:
    visible: str = ""
    _private: str = ""
    secret: str = field(default="", metadata={"json": "-"})


@dataclass
class TwoInline:
    a: Address = field(default_factory=Address, metadata={"json": ",inline"})
    b: Address = field(default_factory=Address, metadata={"json": ",inline"})


class Profile(BaseModel):
    display_name: str = Field(default="", alias="displayName")
    labels: Dict[str, str] = Field(default_factory=dict, json_schema_extra={"json": "tags"})


Point = namedtuple("Point", ["x", "y"])


@pytest.mark.parametrize(
    "value, kind",
    [
        (None, Kind.ABSENT),
        ("text", Kind.LEAF),
        (b"raw", Kind.LEAF),
        (3, Kind.LEAF),
        (True, Kind.LEAF),
        (Decimal("1.5"), Kind.LEAF),
        (Color.RED, Kind.LEAF),
        (uuid4(), Kind.LEAF),
        (dt.datetime(2024, 1, 2), Kind.LEAF),
        (dt.date(2024, 1, 2), Kind.LEAF),
        ({"a": 1}, Kind.MAPPING),
        ([1, 2], Kind.SEQUENCE),
        ((1, 2), Kind.SEQUENCE),
        ({1, 2}, Kind.SEQUENCE),
        (Address(), Kind.COMPOSITE),
        (Point(1, 2), Kind.COMPOSITE),
        (Profile(displayName="x"), Kind.COMPOSITE),
        (print, Kind.UNSUPPORTED),
        (lambda: None, Kind.UNSUPPORTED),
        ((i for i in range(3)), Kind.UNSUPPORTED),
        (queue.Queue(), Kind.UNSUPPORTED),
        (threading.Lock(), Kind.UNSUPPORTED),
        (Address, Kind.UNSUPPORTED),
    ],
)
def test_classify(value, kind):
    assert classify(value) is kind


def test_members_skip_private_and_excluded():
    names = [m.export for m in members(Hidden("v", "p", "s"))]
    assert names == ["visible"]


def test_pydantic_alias_and_schema_extra():
    ms = members(Profile(displayName="Ana", labels={"a": "b"}))
    assert [m.export for m in ms] == ["displayName", "tags"]
    assert ms[0].value == "Ana"


def test_namedtuple_members():
    assert [(m.export, m.value) for m in members(Point(1, 2))] == [("x", 1), ("y", 2)]


def test_only_one_inline_member():
    with pytest.raises(AnnotationError, match="only one inline"):
        declared_members(TwoInline)


def test_declared_type_helpers():
    assert unwrap_optional(Optional[Address]) is Address
    assert element_type(List[Address]) is Address
    assert element_type(Optional[List[int]]) is int
    assert element_type(Tuple[str, ...]) is str
    assert element_type(Dict[str, int]) is None
    assert type_kind(Optional[Address]) is Kind.COMPOSITE
    assert type_kind(List[int]) is Kind.SEQUENCE
    assert type_kind(Dict[str, int]) is Kind.MAPPING
    assert type_kind(dt.datetime) is Kind.LEAF
    assert type_kind(None) is None


def test_longest_sequence_looks_everywhere():
    value = {"a": [1, 2], "b": {"c": list(range(12))}, "d": [Address(), Address()]}
    assert longest_sequence(value) == 12
    assert longest_sequence({"a": 1}) == 0


def test_longest_sequence_detects_cycles():
    d = {"a": []}
    d["a"].append(d)
    with pytest.raises(CycleError):
        longest_sequence(d)
