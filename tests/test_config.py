from pathlib import Path

import pytest
from pydantic import ValidationError

from starstruct.config import DEFAULT_SETTINGS, ENV_VAR, Settings, load_settings


def test_defaults():
    s = Settings()
    assert s.tag_namespaces == ("json", "url", "xml")
    assert s.absent_marker == "<nil>"
    assert s.min_index_width == 2
    assert not s.exclude_absent
    assert not s.sort_fields
    assert not s.sort_keys


def test_settings_are_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_SETTINGS.absent_marker = "x"


def test_unknown_keys_rejected():
    with pytest.raises(ValidationError):
        Settings(nope=True)


def test_load_from_yaml(tmp_path: Path):
    p = tmp_path / "starstruct.yaml"
    p.write_text("tag_namespaces: [url, json]\nabsent_marker: ''\nmin_index_width: 3\n")
    s = load_settings(p)
    assert s.tag_namespaces == ("url", "json")
    assert s.absent_marker == ""
    assert s.min_index_width == 3


def test_env_var(tmp_path: Path, monkeypatch):
    p = tmp_path / "env.yaml"
    p.write_text("sort_fields: true\n")
    monkeypatch.setenv(ENV_VAR, str(p))
    assert load_settings().sort_fields


def test_no_file_means_defaults(tmp_path: Path, monkeypatch):
    monkeypatch.delenv(ENV_VAR, raising=False)
    assert load_settings() == DEFAULT_SETTINGS
    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_settings(empty) == DEFAULT_SETTINGS


def test_bad_files(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")
    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_settings(p)
    p.write_text("min_index_width: 0\n")
    with pytest.raises(ValidationError):
        load_settings(p)
