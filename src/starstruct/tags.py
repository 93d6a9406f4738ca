"""Field annotation token language.

An annotation is a string ``name[,token...]`` attached to a declared member
under one or more namespaces (``json``, ``url``, ``xml`` by default):

    @dataclass
    class Profile:
        display_name: str = field(metadata={"json": "displayName"})
        extra: Dict[str, str] = field(default_factory=dict, metadata={"json": ",inline"})
        secret: str = field(default="", metadata={"json": "-"})

* empty name   -> export name derived from the identifier (``camel_key``)
* ``-``        -> the member is invisible to flattening and shape generation
* ``-,``       -> the literal export name ``-``
* ``inline``   -> the member's own leaves are placed in the parent's namespace

The first namespace (in priority order) holding a non-empty annotation wins
entirely; later namespaces are not consulted, not even for ``inline``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from .paths import camel_key

DEFAULT_NAMESPACES: Tuple[str, ...] = ("json", "url", "xml")

EXCLUDE = "-"
INLINE = "inline"


@dataclass(frozen=True)
class FieldTag:
    name: str = ""
    exclude: bool = False
    inline: bool = False
    options: Tuple[str, ...] = ()

    def export_name(self, attr: str) -> str:
        return self.name or camel_key(attr)

    def has(self, option: str) -> bool:
        return option in self.options


def parse_tag(raw: Optional[str]) -> FieldTag:
    if not raw:
        return FieldTag()
    raw = str(raw)
    if raw == EXCLUDE:
        return FieldTag(exclude=True)
    name, *tokens = [t.strip() for t in raw.split(",")]
    opts = tuple(t for t in tokens if t)
    return FieldTag(name=name, inline=INLINE in opts, options=opts)


def resolve_tag(
    metadata: Optional[Mapping[str, Any]],
    namespaces: Sequence[str] = DEFAULT_NAMESPACES,
) -> FieldTag:
    """Pick the annotation of the first namespace that carries one."""
    if not metadata:
        return FieldTag()
    for ns in namespaces:
        raw = metadata.get(ns)
        if raw:
            return parse_tag(raw)
    return FieldTag()
