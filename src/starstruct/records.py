from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Sequence, Union

import pandas as pd
import yaml

from .errors import TableError

PathLike = Union[str, Path]


def _existing(path: PathLike) -> Path:
    p = Path(path).expanduser()
    if not p.is_file():
        raise FileNotFoundError(p)
    return p


def read_records(path: PathLike) -> List[Any]:
    """
    Load records from .json, .jsonl or .yaml/.yml.

    A top-level array is a list of records; any other document is one record.
    """
    p = _existing(path)
    suffix = p.suffix.lower()

    if suffix == ".jsonl":
        records: List[Any] = []
        with p.open("r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise ValueError(f"{p}:{lineno}: invalid JSON") from e
        return records

    text = p.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"{p}: invalid JSON") from e

    if data is None:
        return []
    return data if isinstance(data, list) else [data]


def read_field_list(path: PathLike) -> List[str]:
    """One path per line (blank lines and # comments skipped), or a JSON array."""
    p = _existing(path)
    text = p.read_text(encoding="utf-8")
    if text.lstrip().startswith("["):
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError(f"{p}: expected a JSON array of paths")
        return [str(x) for x in data]
    out = []
    for line in text.splitlines():
        s = line.strip()
        if s and not s.startswith("#"):
            out.append(s)
    return out


def write_field_list(fields: Sequence[str], path: PathLike) -> None:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("".join(f + "\n" for f in fields), encoding="utf-8")


def write_csv(header: Sequence[str], rows: Sequence[Sequence[str]], path: PathLike) -> None:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(rows), columns=list(header), dtype=str)
    df.to_csv(p, index=False)


def read_csv_rows(path: PathLike) -> List[List[str]]:
    """Header row followed by data rows, every cell as text."""
    p = _existing(path)
    try:
        df = pd.read_csv(p, dtype=str, keep_default_na=False, na_filter=False)
    except pd.errors.EmptyDataError as e:
        raise TableError(f"{p}: no header row") from e
    return [[str(c) for c in df.columns]] + [[str(v) for v in row] for row in df.itertuples(index=False, name=None)]
