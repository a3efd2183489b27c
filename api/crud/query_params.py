"""
Query-parameter translator for list endpoints.

`where`, `select`, `include` and `orderBy` arrive as JSON-encoded strings
(query string) or raw objects (JSON body). Each one is parsed and validated
on its own; anything malformed or rejected by its schema is dropped (treated
as "no filter") instead of failing the request.

Pagination (`page`, `limit`, `includeTotalCount`) travels inside `where` and
is split off by `paginate` before `where` reaches the data layer.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from schemas.base import DEFAULT_LIMIT, DEFAULT_PAGE

from . import validation

logger = logging.getLogger(__name__)

QUERY_KEYS = ("where", "select", "include", "orderBy")


@dataclass(frozen=True)
class ParsedQuery:
    where: dict[str, Any] | None = None
    select: dict[str, Any] | None = None
    include: dict[str, Any] | None = None
    order_by: Any = None
    include_total_count: bool = False


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    skip: int
    take: int
    include_total_count: bool = False

    def envelope(self, total_count: int | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {
            "page": self.page,
            "limit": self.limit,
            "skip": self.skip,
            "take": self.take,
        }
        if total_count is not None:
            out["totalCount"] = total_count
            out["totalPages"] = math.ceil(total_count / self.limit)
        return out


async def extract_params(request: Request) -> dict[str, Any]:
    """
    GET reads the query string; any other method reads the JSON body.
    """
    if request.method == "GET":
        return dict(request.query_params)
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return False


def parse_param(params: dict[str, Any], key: str, schema: Any) -> Any:
    if schema is None or key not in params:
        return None
    raw = params[key]
    try:
        value = json.loads(raw) if isinstance(raw, str) else raw
        return validation.parse(schema, value)
    except ValueError as exc:
        # pydantic.ValidationError and JSONDecodeError are both ValueErrors.
        logger.debug("query_param_dropped key=%s reason=%s", key, type(exc).__name__)
        return None


def parse_query(
    params: dict[str, Any],
    *,
    where_schema: Any = None,
    select_schema: Any = None,
    include_schema: Any = None,
    order_by_schema: Any = None,
) -> ParsedQuery:
    return ParsedQuery(
        where=parse_param(params, "where", where_schema),
        select=parse_param(params, "select", select_schema),
        include=parse_param(params, "include", include_schema),
        order_by=parse_param(params, "orderBy", order_by_schema),
        include_total_count=_truthy(params.get("includeTotalCount")),
    )


def paginate(where: dict[str, Any] | None, *, include_total_count: bool = False) -> Pagination:
    """
    Pop pagination controls off `where` (in place) and compute skip/take.
    """
    page = DEFAULT_PAGE
    limit = DEFAULT_LIMIT
    if where:
        page = int(where.pop("page", None) or DEFAULT_PAGE)
        limit = int(where.pop("limit", None) or DEFAULT_LIMIT)
        include_total_count = _truthy(where.pop("includeTotalCount", False)) or include_total_count

    skip = (page - 1) * limit
    return Pagination(
        page=page,
        limit=limit,
        skip=skip,
        take=limit,
        include_total_count=include_total_count,
    )
