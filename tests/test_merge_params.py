import pytest

from courier.networking.merge import has_key, merge_options, set_key
from courier.networking.params import normalize_params, normalize_value


def test_merge_keeps_override_value_and_casing():
    merged = merge_options(
        {"Content-Type": "text/plain", "X-Base": "1"},
        {"content-type": "application/json"},
    )

    assert merged == {"X-Base": "1", "content-type": "application/json"}


def test_merge_with_empty_mappings():
    assert merge_options({}, {}) == {}
    assert merge_options({"A": 1}, {}) == {"A": 1}
    assert merge_options({}, {"a": 1}) == {"a": 1}


def test_merge_does_not_mutate_inputs():
    base = {"Accept": "text/html"}
    override = {"ACCEPT": "application/json"}

    merge_options(base, override)

    assert base == {"Accept": "text/html"}
    assert override == {"ACCEPT": "application/json"}


def test_set_key_replaces_other_casing():
    headers = {"X-Token": "old", "Other": "1"}

    set_key(headers, "x-token", "new")

    assert headers == {"Other": "1", "x-token": "new"}
    assert has_key(headers, "X-TOKEN")
    assert not has_key(headers, "missing")


@pytest.mark.parametrize(("value", "expected"), [(True, "true"), (False, "false")])
def test_normalize_booleans(value, expected):
    assert normalize_value(value) == expected


@pytest.mark.parametrize("value", [0, 1, 2.5, "true", None, "", b"x"])
def test_normalize_passes_other_scalars(value):
    assert normalize_value(value) == value


def test_normalize_params():
    assert normalize_params({"a": True, "b": 3}) == {"a": "true", "b": 3}
