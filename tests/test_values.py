"""Tests for the JSON value model."""

import json

import pytest

from jvt.values import Value, ValueKind, decode


class TestDecode:
    """Decoding text into Values."""

    def test_object_keeps_key_order(self):
        value = decode('{"b": 1, "a": 2, "c": 3}')
        assert [k for k, _ in value.data] == ["b", "a", "c"]

    def test_array_keeps_element_order(self):
        value = decode("[3, 1, 2]")
        assert [v.data for v in value.data] == ["3", "1", "2"]

    def test_number_lexeme_preserved(self):
        value = decode("1.50")
        assert value.kind == ValueKind.NUMBER
        assert value.to_text() == "1.50"
        assert value.to_python() == 1.5

    def test_large_exponent_kept_as_text(self):
        assert decode("1e400").to_text() == "1e400"

    def test_duplicate_key_last_value_first_position(self):
        value = decode('{"a": 1, "b": 2, "a": 3}')
        assert [k for k, _ in value.data] == ["a", "b"]
        assert value.to_python() == {"a": 3, "b": 2}

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            decode("[NaN]")

    def test_malformed_raises_decode_error(self):
        with pytest.raises(json.JSONDecodeError):
            decode('{"a" 1}')

    def test_nested_structure(self):
        text = '{"a": [1, {"b": null}], "c": true, "d": "x"}'
        assert decode(text).to_python() == json.loads(text)

    def test_empty_and_mixed_containers(self):
        text = '[{}, [], {"a": [[], {"b": [1, {}]}]}, "s", [null]]'
        assert decode(text).to_python() == json.loads(text)

    def test_deep_nesting_decodes(self):
        depth = 600
        value = decode("[" * depth + "]" * depth)
        levels = 1
        while value.data:
            (value,) = value.data
            levels += 1
        assert levels == depth


class TestValue:
    """Value queries and conversions."""

    def test_from_python_round_trip(self):
        data = {"a": [1, 2.5, None, True, "x"], "b": {}}
        assert Value.from_python(data).to_python() == data

    def test_bool_is_not_number(self):
        assert Value.from_python(True).kind == ValueKind.BOOL

    def test_from_python_rejects_other_types(self):
        with pytest.raises(TypeError):
            Value.from_python(object())

    def test_scalar_text(self):
        assert Value.null().to_text() == "null"
        assert Value.boolean(False).to_text() == "false"
        assert Value.string('a"b').to_text() == '"a\\"b"'

    def test_search_text_uses_raw_string(self):
        assert Value.string("Hello").search_text() == "Hello"
        assert Value.number("42").search_text() == "42"

    def test_children(self):
        assert decode('["x", "y"]').children()[1][0] == 1
        assert decode('{"k": 1}').children()[0][0] == "k"
        assert Value.string("s").children() == []

    def test_len(self):
        assert len(decode("[1, 2, 3]")) == 3
        assert len(Value.string("abc")) == 0

    def test_is_container(self):
        assert decode("{}").is_container
        assert decode("[]").is_container
        assert not decode("1").is_container

    def test_unknown_kind_rejected(self):
        bogus = Value("bogus")
        with pytest.raises(TypeError):
            bogus.to_text()
        with pytest.raises(TypeError):
            bogus.children()
