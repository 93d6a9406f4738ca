from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .tags import DEFAULT_NAMESPACES

ENV_VAR = "STARSTRUCT_CONFIG"

ABSENT_MARKER = "<nil>"


class Settings(BaseModel):
    # Options shared by shape generation, flattening and table export
    model_config = ConfigDict(frozen=True, extra="forbid")

    tag_namespaces: Tuple[str, ...] = Field(default=DEFAULT_NAMESPACES)
    absent_marker: str = Field(default=ABSENT_MARKER)
    min_index_width: int = Field(default=2, ge=1)
    exclude_absent: bool = False
    sort_fields: bool = False
    # dicts keep insertion order; set to visit mapping keys in sorted order
    sort_keys: bool = False


DEFAULT_SETTINGS = Settings()


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file.

    Resolution order: explicit path, then $STARSTRUCT_CONFIG, then defaults.
    """
    if path is None:
        env = os.environ.get(ENV_VAR)
        if not env:
            return DEFAULT_SETTINGS
        path = env

    p = Path(path).expanduser()
    if not p.is_file():
        raise FileNotFoundError(p)

    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        raise ValueError(f"{p}: settings must be a mapping, got {type(data).__name__}")

    if "tag_namespaces" in data and isinstance(data["tag_namespaces"], list):
        data["tag_namespaces"] = tuple(data["tag_namespaces"])
    return Settings(**data)
