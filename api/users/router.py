"""
FastAPI router for the User resource.
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
    UserCreate,
    UserInclude,
    UserOrderBy,
    UserSelect,
    UserUpdate,
    UserWhere,
    UserWithPostsOut,
)

from . import repository

router = APIRouter(prefix="/users")

list_config = HandlerConfig(
    model=repository.users,
    output_schema=UserWithPostsOut,
    where_schema=UserWhere,
    select_schema=UserSelect,
    include_schema=UserInclude,
    order_by_schema=UserOrderBy,
)

router.add_api_route("", read_many_handler(list_config), methods=["GET"])
# Same listing, with where/select/include/orderBy as a JSON body.
router.add_api_route("/query", read_many_handler(list_config), methods=["POST"])
router.add_api_route(
    "",
    create_handler(
        HandlerConfig(
            model=repository.users,
            input_schema=UserCreate,
            output_schema=UserWithPostsOut,
        )
    ),
    methods=["POST"],
    status_code=201,
)
router.add_api_route(
    "/{item_id}",
    read_one_handler(
        HandlerConfig(
            model=repository.users,
            output_schema=UserWithPostsOut,
            select_schema=UserSelect,
            include_schema=UserInclude,
        )
    ),
    methods=["GET"],
)
router.add_api_route(
    "/{item_id}",
    update_handler(
        HandlerConfig(
            model=repository.users,
            input_schema=UserUpdate,
            output_schema=UserWithPostsOut,
        )
    ),
    methods=["PATCH"],
)
router.add_api_route(
    "/{item_id}",
    delete_handler(HandlerConfig(model=repository.users)),
    methods=["DELETE"],
)
