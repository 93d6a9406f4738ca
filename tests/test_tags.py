import pytest

from starstruct.tags import FieldTag, parse_tag, resolve_tag


@pytest.mark.parametrize(
    "raw, name, exclude, inline",
    [
        (None, "", False, False),
        ("", "", False, False),
        ("displayName", "displayName", False, False),
        ("displayName,omitempty", "displayName", False, False),
        (",inline", "", False, True),
        ("profile,inline,omitempty", "profile", False, True),
        ("-", "", True, False),
        ("-,", "-", False, False),
    ],
)
def test_parse_tag(raw, name, exclude, inline):
    tag = parse_tag(raw)
    assert tag.name == name
    assert tag.exclude is exclude
    assert tag.inline is inline


def test_parse_tag_keeps_options():
    tag = parse_tag("q,omitempty")
    assert tag.has("omitempty")
    assert not tag.has("inline")


def test_export_name_falls_back_to_identifier():
    assert FieldTag().export_name("DisplayName") == "displayName"
    assert FieldTag(name="dn").export_name("DisplayName") == "dn"


def test_first_non_empty_namespace_wins():
    meta = {"json": "", "url": "q,inline", "xml": "other"}
    tag = resolve_tag(meta)
    assert tag.name == "q"
    assert tag.inline


def test_inline_from_lower_priority_namespace_is_ignored():
    # json decides everything once it carries an annotation
    tag = resolve_tag({"json": "profile", "url": ",inline"})
    assert tag.name == "profile"
    assert not tag.inline


def test_custom_namespace_order():
    meta = {"json": "a", "url": "b"}
    assert resolve_tag(meta, ("url", "json")).name == "b"
    assert resolve_tag(None) == FieldTag()
