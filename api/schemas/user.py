"""
User request/response schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import EmailStr, Field

from .base import (
    ApiModel,
    BoolField,
    DateTimeField,
    Direction,
    PaginationQuery,
    QueryModel,
    RelationFilter,
    StringField,
    UuidField,
)

if TYPE_CHECKING:
    from .post import PostWithAuthorOut


# -- input -------------------------------------------------------------------


class UserCreate(ApiModel):
    email: EmailStr
    name: str | None = Field(default=None, max_length=200)


class UserUpdate(ApiModel):
    # Optional, but not nullable.
    email: EmailStr = Field(default=None)
    name: str | None = Field(default=None, max_length=200)


# -- output ------------------------------------------------------------------


class UserOut(ApiModel):
    id: UUID
    created_at: datetime
    updated_at: datetime
    email: EmailStr
    name: str | None


class UserWithPostsOut(UserOut):
    # Only present when requested through `include`.
    posts: list[PostWithAuthorOut] | None = None


# -- query objects -----------------------------------------------------------


class UserScalarWhere(QueryModel):
    id: UuidField = None
    email: StringField = None
    name: StringField = None
    created_at: DateTimeField = None
    updated_at: DateTimeField = None


class UserPostsWhere(QueryModel):
    id: UuidField = None
    title: StringField = None
    content: StringField = None
    published: BoolField = None
    created_at: DateTimeField = None


class UserPostsFilter(UserPostsWhere, RelationFilter):
    """
    Filter on a user's posts. Bare fields mean "some post matches".
    """

    quantifiers = frozenset({"some", "every", "none"})

    some: UserPostsWhere | None = None
    every: UserPostsWhere | None = None
    none: UserPostsWhere | None = None


class UserWhereFilter(UserScalarWhere):
    posts: UserPostsFilter | None = None
    and_: list[UserWhereFilter] | UserWhereFilter | None = Field(default=None, alias="AND")
    or_: list[UserWhereFilter] | None = Field(default=None, alias="OR")
    not_: list[UserWhereFilter] | UserWhereFilter | None = Field(default=None, alias="NOT")


class UserWhere(PaginationQuery, UserWhereFilter):
    pass


class UserPostsSelect(QueryModel):
    id: bool | None = None
    title: bool | None = None
    content: bool | None = None
    published: bool | None = None
    author_id: bool | None = None
    created_at: bool | None = None
    updated_at: bool | None = None


class UserSelect(QueryModel):
    id: bool | None = None
    email: bool | None = None
    name: bool | None = None
    created_at: bool | None = None
    updated_at: bool | None = None
    posts: bool | UserPostsSelect | None = None


class UserPostsOrderBy(QueryModel):
    created_at: Direction | None = None
    updated_at: Direction | None = None
    title: Direction | None = None
    published: Direction | None = None


class UserPostsInclude(QueryModel):
    author: bool | None = None


class UserPostsArgs(QueryModel):
    where: UserPostsWhere | None = None
    order_by: UserPostsOrderBy | list[UserPostsOrderBy] | None = None
    include: UserPostsInclude | None = None


class UserInclude(QueryModel):
    posts: bool | UserPostsInclude | UserPostsArgs | None = None


class UserOrderByFields(QueryModel):
    created_at: Direction | None = None
    updated_at: Direction | None = None
    email: Direction | None = None
    name: Direction | None = None


UserOrderBy = UserOrderByFields | list[UserOrderByFields]
