"""
FastAPI router for the Post resource.
"""

from __future__ import annotations

from fastapi import APIRouter

from crud import (
    HandlerConfig,
    create_handler,
    delete_handler,
    read_many_handler,
    read_one_handler,
    update_handler,
)
from schemas import (
    PostCreate,
    PostInclude,
    PostOrderBy,
    PostSelect,
    PostUpdate,
    PostWhere,
    PostWithAuthorOut,
)

from . import repository

router = APIRouter(prefix="/posts")

list_config = HandlerConfig(
    model=repository.posts,
    output_schema=PostWithAuthorOut,
    where_schema=PostWhere,
    select_schema=PostSelect,
    include_schema=PostInclude,
    order_by_schema=PostOrderBy,
)

router.add_api_route("", read_many_handler(list_config), methods=["GET"])
# Same listing, with where/select/include/orderBy as a JSON body.
router.add_api_route("/query", read_many_handler(list_config), methods=["POST"])
router.add_api_route(
    "",
    create_handler(
        HandlerConfig(
            model=repository.posts,
            input_schema=PostCreate,
            output_schema=PostWithAuthorOut,
        )
    ),
    methods=["POST"],
    status_code=201,
)
router.add_api_route(
    "/{item_id}",
    read_one_handler(
        HandlerConfig(
            model=repository.posts,
            output_schema=PostWithAuthorOut,
            select_schema=PostSelect,
            include_schema=PostInclude,
        )
    ),
    methods=["GET"],
)
router.add_api_route(
    "/{item_id}",
    update_handler(
        HandlerConfig(
            model=repository.posts,
            input_schema=PostUpdate,
            output_schema=PostWithAuthorOut,
        )
    ),
    methods=["PATCH"],
)
router.add_api_route(
    "/{item_id}",
    delete_handler(HandlerConfig(model=repository.posts)),
    methods=["DELETE"],
)
