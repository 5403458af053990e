"""
Object serialization utilities for converting span objects to JSON-safe formats.
Handles dicts, dataclasses, plain objects, circular references and depth limits.
"""

import json
import os
import dataclasses
import logging
from .constants import LOG_TAG
from datetime import datetime, date, time
from typing import Any, Optional, Set, Union

logger = logging.getLogger(LOG_TAG)

def sanitize_string_for_utf8(text: Optional[str]) -> Optional[str]:
    """
    Sanitize a string to remove surrogate characters that can't be encoded to UTF-8.
    Surrogate characters (U+D800 to U+DFFF) are invalid in UTF-8 and can cause encoding errors.

    Args:
        text: The string to sanitize

    Returns:
        A string with surrogate characters replaced by the Unicode replacement character (U+FFFD)
    """
    if text is None:
        return None
    if not isinstance(text, str):
        text = str(text)
    try:
        text.encode('utf-8')
        return text
    except UnicodeEncodeError:
        return text.encode('utf-8', errors='replace').decode('utf-8', errors='replace')

def toNumber(value: Union[str, int, None]) -> int:
    """Convert string to number. handling units like g, m, k, (also mb kb gb though these should be avoided)"""
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        value = str(value)
    value = value.strip().lower()
    if value.endswith("b"): # drop the b
        value = value[:-1]
    if value.endswith("g"):
        return int(value[:-1]) * 1024 * 1024 * 1024
    elif value.endswith("m"):
        return int(value[:-1]) * 1024 * 1024
    elif value.endswith("k"):
        return int(value[:-1]) * 1024
    return int(value)


# Configurable limit for object string representation (in characters)
MAX_OBJECT_STR_CHARS = toNumber(os.getenv("SPANCOLLECTOR_MAX_OBJECT_STR_CHARS", "1m"))


def safe_str_repr(value: Any) -> str:
    """
    Safely convert a value to string representation.
    Handles objects with __repr__ that might raise exceptions.
    Uses SPANCOLLECTOR_MAX_OBJECT_STR_CHARS env var (default "1m") to limit length.
    """
    try:
        repr_str = repr(value)
        repr_str = sanitize_string_for_utf8(repr_str)
        if len(repr_str) > MAX_OBJECT_STR_CHARS:
            return repr_str[:MAX_OBJECT_STR_CHARS] + "... (truncated)"
        return repr_str
    except Exception:
        return f"<{type(value).__name__} object>"


def object_to_dict(
    obj: Any,
    visited: Set[int],
    max_depth: int = 10,
    current_depth: int = 0,
) -> Any:
    """
    Convert an object to a JSON-friendly representation (dicts, lists and primitives).

    Args:
        obj: The object to convert
        visited: Set of object IDs to detect circular references
        max_depth: Maximum recursion depth
        current_depth: Current recursion depth

    Returns:
        Dictionary representation of the object, or a string if conversion fails
    """
    if current_depth > max_depth:
        return "<max depth exceeded>"

    obj_id = id(obj)
    if obj_id in visited:
        return "<circular reference>"

    if obj is None or isinstance(obj, (bool, int, float)):
        return obj

    if isinstance(obj, str):
        return sanitize_string_for_utf8(obj)

    if isinstance(obj, bytes):
        return obj.hex()

    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()

    if isinstance(obj, dict):
        visited.add(obj_id)
        result = {}
        for k, v in obj.items():
            key_str = k if isinstance(k, str) else str(k)
            result[key_str] = object_to_dict(v, visited, max_depth, current_depth + 1)
        visited.remove(obj_id)
        return result

    if isinstance(obj, (list, tuple, set, frozenset)):
        visited.add(obj_id)
        result = [object_to_dict(item, visited, max_depth, current_depth + 1) for item in obj]
        visited.remove(obj_id)
        return result

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        visited.add(obj_id)
        result = {}
        for field in dataclasses.fields(obj):
            result[field.name] = object_to_dict(
                getattr(obj, field.name, None), visited, max_depth, current_depth + 1
            )
        visited.remove(obj_id)
        return result

    # Plain objects: public attributes only
    if hasattr(obj, "__dict__"):
        public = {k: v for k, v in vars(obj).items() if not str(k).startswith("_")}
        visited.add(obj_id)
        result = object_to_dict(public, visited, max_depth, current_depth)  # Don't count __dict__ as +1 depth
        visited.discard(obj_id)
        return result

    if hasattr(obj, "__slots__"):
        visited.add(obj_id)
        result = {}
        for slot in obj.__slots__:
            if slot.startswith("_") or not hasattr(obj, slot):
                continue
            result[slot] = object_to_dict(getattr(obj, slot), visited, max_depth, current_depth + 1)
        visited.remove(obj_id)
        return result

    return safe_str_repr(obj)


def to_json_bytes(value: Any) -> bytes:
    """
    Serialize a value to UTF-8 JSON bytes via object_to_dict.
    Unlike a best-effort repr, this raises if the converted structure is still not valid JSON
    (e.g. NaN floats), so callers can treat it as an encode failure.
    """
    converted = object_to_dict(value, set())
    return json.dumps(converted, ensure_ascii=False, allow_nan=False, separators=(",", ":")).encode("utf-8")
