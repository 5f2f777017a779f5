"""
JSON helpers backed by orjson
=============================

Thin json-module-like interface over orjson used for the message document.
orjson works in bytes; these helpers speak str so callers can keep using text
file handles.
"""

from typing import Any, Callable, Optional

import orjson


def dumps(obj: Any, indent: Optional[int] = None, default: Optional[Callable[[Any], Any]] = None) -> str:
    """
    Serialize obj to a JSON string.

    Args:
        obj: Object to serialize
        indent: Any non-None value pretty prints with two-space indentation
        default: Callable for objects orjson cannot serialize natively

    Returns:
        JSON text
    """
    option = orjson.OPT_SERIALIZE_UUID
    if indent is not None:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, default=default, option=option).decode("utf-8")


def loads(s: Any) -> Any:
    """Deserialize JSON text (str or bytes)."""
    return orjson.loads(s)


def dump(obj: Any, fp, indent: Optional[int] = None) -> None:
    """Serialize obj and write it to a text file-like object."""
    fp.write(dumps(obj, indent=indent))


def load(fp) -> Any:
    """Deserialize JSON read from a file-like object."""
    return loads(fp.read())


JSONDecodeError = orjson.JSONDecodeError
