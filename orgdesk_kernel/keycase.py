"""
Key-case translation between snake_case (Python / PostgreSQL) and
camelCase (browser JSON).

Both directions recurse through dicts, lists and tuples; scalar values
are returned untouched. For keys written in either convention the pair
is lossless: to_snake_keys(to_camel_keys(x)) == x and vice versa.
"""

from __future__ import annotations

import re
from typing import Any

_SNAKE_SEGMENT = re.compile(r"_([a-z])")
_UPPER = re.compile(r"[A-Z]")


def snake_to_camel(key: str) -> str:
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), key)


def camel_to_snake(key: str) -> str:
    return _UPPER.sub(lambda m: "_" + m.group(0).lower(), key)


def to_camel_keys(obj: Any) -> Any:
    return _convert(obj, snake_to_camel)


def to_snake_keys(obj: Any) -> Any:
    return _convert(obj, camel_to_snake)


def _convert(obj: Any, convert_key) -> Any:
    if isinstance(obj, dict):
        return {
            (convert_key(k) if isinstance(k, str) else k): _convert(v, convert_key)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_convert(v, convert_key) for v in obj]
    if isinstance(obj, tuple):
        return tuple(_convert(v, convert_key) for v in obj)
    return obj
