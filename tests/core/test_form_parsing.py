"""Nested Form Decoding — verifies bracketed-key expansion.

Tests:
    - Flat, repeated and blank keys
    - Nested objects and both list notations
    - Depth limit, unbalanced brackets, array index limit
    - Scalar/container conflicts raise BodyParseError
"""

import pytest

from movie_api.core.errors import BodyParseError
from movie_api.core.form_parsing import (
    ARRAY_LIMIT, parse_nested_query, split_key,
)


def test_flat_keys():
    assert parse_nested_query("name=Heat&rating=8") == {"name": "Heat", "rating": "8"}


def test_percent_and_plus_decoding():
    assert parse_nested_query("name=The+Thing%21") == {"name": "The Thing!"}


def test_blank_values_are_kept():
    assert parse_nested_query("name=") == {"name": ""}


def test_repeated_plain_key_becomes_list():
    assert parse_nested_query("t=1&t=2&t=3") == {"t": ["1", "2", "3"]}


def test_nested_objects():
    assert parse_nested_query("a[b][c]=1&a[b][d]=2") == {
        "a": {"b": {"c": "1", "d": "2"}},
    }


def test_push_notation_builds_list():
    assert parse_nested_query("time[]=18:00&time[]=21:00") == {
        "time": ["18:00", "21:00"],
    }


def test_indexed_notation_builds_ordered_list():
    assert parse_nested_query("a[1]=y&a[0]=x") == {"a": ["x", "y"]}


def test_sparse_indices_are_compacted():
    assert parse_nested_query("a[2]=x&a[7]=y") == {"a": ["x", "y"]}


def test_index_above_limit_keeps_object_form():
    key = ARRAY_LIMIT + 1
    assert parse_nested_query(f"a[{key}]=x") == {"a": {str(key): "x"}}


def test_list_of_objects():
    assert parse_nested_query("m[0][name]=Heat&m[1][name]=Ran") == {
        "m": [{"name": "Heat"}, {"name": "Ran"}],
    }


def test_push_after_plain_value_extends_list():
    assert parse_nested_query("a=1&a[]=2") == {"a": ["1", "2"]}


def test_plain_value_after_push_extends_list():
    assert parse_nested_query("a[]=1&a=2") == {"a": ["1", "2"]}


def test_unbalanced_bracket_is_literal_key():
    assert parse_nested_query("a[b=1") == {"a[b": "1"}


def test_leading_bracket_is_literal_key():
    assert parse_nested_query("[a]=1") == {"[a]": "1"}


def test_depth_limit_keeps_remainder_as_one_key():
    assert split_key("a[b][c][d]", depth=2) == ["a", "b", "c", "[d]"]


def test_split_key_push_segment():
    assert split_key("a[b][]") == ["a", "b", ""]


def test_scalar_then_object_conflict_raises():
    with pytest.raises(BodyParseError):
        parse_nested_query("a=1&a[b]=2")


def test_object_then_scalar_conflict_raises():
    with pytest.raises(BodyParseError):
        parse_nested_query("a[b]=1&a=2")


def test_empty_query():
    assert parse_nested_query("") == {}
