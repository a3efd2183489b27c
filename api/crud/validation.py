"""
Thin adapter over pydantic so handlers can take any schema type.

A schema is anything `pydantic.TypeAdapter` accepts: a model class, or a
union/list of model classes (e.g. `PostOrderBy`).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import TypeAdapter


@lru_cache(maxsize=None)
def adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def parse(schema: Any, value: Any) -> Any:
    """
    Validate `value` and return plain python data keyed by JSON aliases.

    Only keys present in the input are kept, so partial updates stay partial
    and defaults do not leak into query objects.
    """
    if schema is None:
        return value
    ta = adapter(schema)
    return ta.dump_python(ta.validate_python(value), by_alias=True, exclude_unset=True)


def serialize(schema: Any, value: Any) -> Any:
    """
    Validate `value` and return JSON-ready data (UUIDs/datetimes as strings).
    """
    if schema is None:
        return jsonable_encoder(value)
    ta = adapter(schema)
    return ta.dump_python(ta.validate_python(value), mode="json", by_alias=True, exclude_unset=True)
