"""
Generic REST handler factories.

Each factory takes a `HandlerConfig` (a model delegate plus optional pydantic
schemas) and returns an async FastAPI endpoint:

    router.add_api_route("/posts", read_many_handler(config), methods=["GET"])

Endpoints never raise: every failure is turned into a JSON error envelope by
`core.errors.error_response`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse

from core.errors import error_response

from . import query_params, validation

logger = logging.getLogger(__name__)

Endpoint = Callable[..., Awaitable[JSONResponse]]


@dataclass(frozen=True)
class HandlerConfig:
    # Model delegate: create/find_many/find_unique/update/delete/count.
    model: Any
    input_schema: Any = None
    output_schema: Any = None
    where_schema: Any = None
    select_schema: Any = None
    include_schema: Any = None
    order_by_schema: Any = None


def _shape(config: HandlerConfig, row: Any, *, selected: bool = False) -> Any:
    # A `select` returns partial rows, which the output schema would reject.
    if selected:
        return validation.serialize(None, row)
    return validation.serialize(config.output_schema, row)


def _record_id(item_id: str) -> UUID:
    return validation.parse(UUID, item_id)


def create_handler(config: HandlerConfig) -> Endpoint:
    async def create(request: Request) -> JSONResponse:
        try:
            body = await request.json()
            data = validation.parse(config.input_schema, body)
            created = await config.model.create(data=data)
            return JSONResponse(_shape(config, created), status_code=201)
        except Exception as exc:
            return error_response(exc)

    return create


def read_many_handler(config: HandlerConfig) -> Endpoint:
    async def read_many(request: Request) -> JSONResponse:
        try:
            params = await query_params.extract_params(request)
            query = query_params.parse_query(
                params,
                where_schema=config.where_schema,
                select_schema=config.select_schema,
                include_schema=config.include_schema,
                order_by_schema=config.order_by_schema,
            )
            where = query.where
            pagination = query_params.paginate(where, include_total_count=query.include_total_count)

            find_args: dict[str, Any] = {
                "where": where or None,
                "select": query.select,
                "include": query.include,
                "order_by": query.order_by,
                "skip": pagination.skip,
                "take": pagination.take,
            }
            results = await config.model.find_many(
                **{k: v for k, v in find_args.items() if v is not None}
            )

            total_count = None
            if pagination.include_total_count:
                total_count = await config.model.count(where=where or None)

            selected = query.select is not None
            return JSONResponse(
                {
                    "data": [_shape(config, row, selected=selected) for row in results],
                    "pagination": pagination.envelope(total_count),
                }
            )
        except Exception as exc:
            return error_response(exc)

    return read_many


def read_one_handler(config: HandlerConfig) -> Endpoint:
    async def read_one(request: Request, item_id: str) -> JSONResponse:
        try:
            record_id = _record_id(item_id)
            params = await query_params.extract_params(request)
            query = query_params.parse_query(
                params,
                select_schema=config.select_schema,
                include_schema=config.include_schema,
            )
            find_args: dict[str, Any] = {"select": query.select, "include": query.include}
            result = await config.model.find_unique(
                where={"id": record_id},
                **{k: v for k, v in find_args.items() if v is not None},
            )
            if result is None:
                return JSONResponse({"error": "Not found"}, status_code=404)
            return JSONResponse(_shape(config, result, selected=query.select is not None))
        except Exception as exc:
            return error_response(exc)

    return read_one


def update_handler(config: HandlerConfig) -> Endpoint:
    async def update(request: Request, item_id: str) -> JSONResponse:
        try:
            record_id = _record_id(item_id)
            body = await request.json()
            data = validation.parse(config.input_schema, body)
            updated = await config.model.update(where={"id": record_id}, data=data)
            return JSONResponse(_shape(config, updated))
        except Exception as exc:
            return error_response(exc)

    return update


def delete_handler(config: HandlerConfig) -> Endpoint:
    async def delete(request: Request, item_id: str) -> JSONResponse:
        try:
            record_id = _record_id(item_id)
            await config.model.delete(where={"id": record_id})
            logger.info("record_deleted model=%r id=%s", config.model, record_id)
            return JSONResponse({"success": True})
        except Exception as exc:
            return error_response(exc)

    return delete
