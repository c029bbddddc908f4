from __future__ import annotations
from typing import Any, Mapping
import dataclasses
import enum
import os
import orjson

from pydantic import BaseModel

__all__ = ["dumps", "sanitize", "to_jsonable"]

def _is_pydantic_model(obj: Any) -> bool:
    return isinstance(obj, BaseModel) or hasattr(obj, "model_dump")

def sanitize(obj: Any) -> Any:
    """Recursively convert *obj* into something JSON-serialisable.

    - Exceptions → {"error": <Type>, "message": str(e)}
    - Pydantic models → model_dump(mode="python"), then sanitized
    - dataclasses → field-wise mapping in declaration order
    - bytes → ``0x``-prefixed lowercase hex
    - enums → their value
    - sets/tuples → lists
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, BaseException):
        return {"error": obj.__class__.__name__, "message": str(obj)}

    if isinstance(obj, enum.Enum):
        return sanitize(obj.value)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return "0x" + bytes(obj).hex()

    if _is_pydantic_model(obj):
        try:
            return sanitize(obj.model_dump(mode="python"))
        except (AttributeError, TypeError, ValueError):
            return str(obj)

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: sanitize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}

    if isinstance(obj, Mapping):
        return {str(k): sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [sanitize(v) for v in obj]

    if isinstance(obj, os.PathLike):
        return os.fspath(obj)

    for attr in ("isoformat",):  # datetimes, dates, etc.
        if hasattr(obj, attr):
            try:
                return getattr(obj, attr)()
            except (TypeError, ValueError):
                pass

    return str(obj)

def to_jsonable(obj: Any) -> Any:
    """Thin alias of `sanitize` for call-sites that read better this way."""
    return sanitize(obj)

def dumps(obj: Any, *, pretty: bool = False, sort_keys: bool = True) -> str:
    """
    JSON dump that returns a *str* (UTF-8).

    Compact output sorts keys by default so hashes and caches stay stable;
    ``pretty=True`` indents by two spaces (files meant for people or older
    tools), and callers that must keep field order pass ``sort_keys=False``.
    """
    opts = 0
    if sort_keys:
        opts |= orjson.OPT_SORT_KEYS
    if pretty:
        opts |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, option=opts, default=sanitize).decode("utf-8")

