from __future__ import annotations

from typing import Optional, Tuple

SEP = "."


def join_key(prefix: str, key: str) -> str:
    """Join two path parts without leading, trailing or doubled dots."""
    if not prefix:
        return key
    if not key:
        return prefix
    return prefix + SEP + key


def top_level(path: str) -> str:
    return path.split(SEP, 1)[0]


def split_parent(path: str) -> Tuple[Optional[str], str]:
    """Return (parent, last segment); a bare path has no parent."""
    if SEP not in path:
        return None, path
    parent, _, suffix = path.rpartition(SEP)
    return parent, suffix


def is_index(segment: str) -> bool:
    # str.isdigit() accepts things like superscripts; indices are ASCII only
    return bool(segment) and all("0" <= c <= "9" for c in segment)


def index_width(longest: int, floor: int = 2) -> int:
    """Digit width used to zero-pad sequence indices.

    Lexical order of padded indices equals numeric order as long as every
    index of the record is padded to the same width.
    """
    return max(floor, len(str(max(longest, 0))))


def format_index(i: int, width: int) -> str:
    return f"{i:0{width}d}"


def camel_key(name: str) -> str:
    """Lower-case the leading letter of a declared identifier."""
    if not name:
        return name
    return name[0].lower() + name[1:]
