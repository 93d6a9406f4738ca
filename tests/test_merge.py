import pytest

from starstruct import merge_field_lists, merge_fields

POLICIES = [merge_fields, merge_field_lists]

PAIRS = [
    (["name", "age"], ["name", "age.years", "age.months"]),
    (["id", "emails", "name"], ["emails.01", "emails.00", "emails.10", "name"]),
    (["id", "profile.name", "email"], ["profile.address.city", "profile.address.zip", "other.x"]),
    (["a.b"], ["a"]),
    ([], ["b", "a.y", "a.x", "c.00"]),
    (["x", "y"], []),
    (["x", "y"], ["x", "y"]),
]


# ---- shape-union ----

def test_bare_entry_replaced_by_children_in_place():
    assert merge_fields(["name", "age"], ["name", "age.years", "age.months"]) == [
        "name",
        "age.years",
        "age.months",
    ]


def test_numeric_children_sorted_by_value():
    out = merge_fields(["name", "phones"], ["phones.10", "phones.2", "phones.00"])
    assert out == ["name", "phones.00", "phones.2", "phones.10"]


def test_dotted_entry_replaced_by_its_descendants():
    assert merge_fields(["id", "profile.address"], ["profile.address.city"]) == ["id", "profile.address.city"]


def test_new_entry_inserted_after_relatives():
    out = merge_fields(["id", "address.city", "name"], ["address.zip"])
    assert out == ["id", "address.city", "address.zip", "name"]


def test_unanchored_entries_are_appended():
    assert merge_fields(["id"], ["meta.x", "other"]) == ["id", "meta.x", "other"]


def test_baseline_order_is_kept():
    assert merge_fields(["z", "a", "m"], ["a", "q"]) == ["z", "a", "m", "q"]


def test_duplicates_are_dropped():
    assert merge_fields(["a"], ["a", "a", "b", "b"]) == ["a", "b"]


# ---- external field-list merge ----

def test_external_merge_sorts_named_children():
    assert merge_field_lists(["name", "age"], ["name", "age.years", "age.months"]) == [
        "name",
        "age.months",
        "age.years",
    ]


def test_external_merge_numeric_children():
    out = merge_field_lists(["id", "emails", "name"], ["emails.01", "emails.00", "emails.10", "name"])
    assert out == ["id", "emails.00", "emails.01", "emails.10", "name"]


def test_external_merge_numeric_before_named():
    out = merge_field_lists(["id", "phone"], ["phone.type", "phone.00"])
    assert out == ["id", "phone.00", "phone.type"]


def test_leftover_groups_anchor_on_top_level_segment():
    out = merge_field_lists(
        ["id", "profile.name", "email"],
        ["profile.address.city", "profile.address.zip", "other.x"],
    )
    assert out == ["id", "profile.name", "profile.address.city", "profile.address.zip", "email", "other.x"]


def test_bare_candidates_appended_once():
    assert merge_field_lists(["a"], ["b", "a", "b"]) == ["a", "b"]


def test_external_merge_into_empty_baseline():
    assert merge_field_lists([], ["b", "a.y", "a.x", "c.00"]) == ["a.x", "a.y", "c.00", "b"]


def test_candidate_parent_of_existing_entry_is_skipped():
    assert merge_field_lists(["a.b"], ["a"]) == ["a.b"]
    assert merge_fields(["a.b"], ["a"]) == ["a.b"]


# ---- properties shared by both policies ----

@pytest.mark.parametrize("merge", POLICIES)
@pytest.mark.parametrize("baseline, candidate", PAIRS)
def test_idempotent(merge, baseline, candidate):
    once = merge(baseline, candidate)
    assert merge(once, candidate) == once
    assert merge(once, once) == once


@pytest.mark.parametrize("merge", POLICIES)
@pytest.mark.parametrize("baseline, candidate", PAIRS)
def test_result_is_duplicate_free(merge, baseline, candidate):
    out = merge(baseline, candidate)
    assert len(out) == len(set(out))


@pytest.mark.parametrize("merge", POLICIES)
@pytest.mark.parametrize("baseline, candidate", PAIRS)
def test_surviving_baseline_entries_keep_relative_order(merge, baseline, candidate):
    out = merge(baseline, candidate)
    kept = [b for b in baseline if b in out]
    assert [f for f in out if f in kept] == kept
