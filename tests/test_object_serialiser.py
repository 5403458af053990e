"""
Unit tests for object_serialiser.py functions.
"""

import dataclasses
import json
from datetime import datetime

import pytest

from spancollector.object_serialiser import (
    sanitize_string_for_utf8,
    toNumber,
    safe_str_repr,
    object_to_dict,
    to_json_bytes,
)


class TestSanitizeStringForUTF8:
    """Tests for sanitize_string_for_utf8 function."""

    def test_valid_string(self):
        """Test that valid UTF-8 strings pass through unchanged."""
        text = "Hello, world! 你好"
        assert sanitize_string_for_utf8(text) == text

    def test_none(self):
        assert sanitize_string_for_utf8(None) is None

    def test_surrogate_characters(self):
        """Test that surrogate characters are replaced."""
        result = sanitize_string_for_utf8("Hello\ud800World")
        assert "Hello" in result
        assert "World" in result
        result.encode('utf-8')


class TestToNumber:
    """Tests for toNumber function."""

    def test_none(self):
        assert toNumber(None) == 0

    def test_int(self):
        assert toNumber(42) == 42

    def test_string_number(self):
        assert toNumber("42") == 42

    def test_suffixes(self):
        assert toNumber("10k") == 10 * 1024
        assert toNumber("5m") == 5 * 1024 * 1024
        assert toNumber("2g") == 2 * 1024 * 1024 * 1024
        assert toNumber("10kb") == 10 * 1024

    def test_invalid(self):
        with pytest.raises(ValueError):
            toNumber("many")


class TestSafeStrRepr:
    """Tests for safe_str_repr function."""

    def test_exception_in_repr(self):
        """Test that exceptions in __repr__ are handled."""
        class BadRepr:
            def __repr__(self):
                raise Exception("Bad repr")

        assert "BadRepr" in safe_str_repr(BadRepr())


class TestObjectToDict:
    """Tests for object_to_dict function."""

    def test_primitives(self):
        assert object_to_dict(None, set()) is None
        assert object_to_dict("hello", set()) == "hello"
        assert object_to_dict(42, set()) == 42
        assert object_to_dict(True, set()) is True

    def test_bytes_become_hex(self):
        assert object_to_dict(b"\x01\xff", set()) == "01ff"

    def test_datetime(self):
        assert object_to_dict(datetime(2023, 1, 1, 12, 30, 45), set()) == "2023-01-01T12:30:45"

    def test_circular_reference(self):
        obj = {}
        obj["self"] = obj
        assert object_to_dict(obj, set())["self"] == "<circular reference>"

    def test_max_depth(self):
        obj = {"level": {"level": {"level": "deep"}}}
        result = object_to_dict(obj, set(), max_depth=1)
        assert result["level"]["level"] == "<max depth exceeded>"

    def test_dataclass(self):
        @dataclasses.dataclass
        class TestClass:
            name: str
            value: int

        assert object_to_dict(TestClass(name="test", value=42), set()) == {"name": "test", "value": 42}

    def test_object_with_dict_skips_private(self):
        class TestClass:
            def __init__(self):
                self.name = "test"
                self._secret = "hidden"

        assert object_to_dict(TestClass(), set()) == {"name": "test"}

    def test_object_with_slots(self):
        class TestClass:
            __slots__ = ["name", "value"]

            def __init__(self):
                self.name = "test"
                self.value = 42

        assert object_to_dict(TestClass(), set()) == {"name": "test", "value": 42}


class TestToJsonBytes:
    """Tests for to_json_bytes function."""

    def test_round_trip(self):
        assert json.loads(to_json_bytes([{"a": 1}, "b"])) == [{"a": 1}, "b"]

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            to_json_bytes({"x": float("inf")})
