"""
Post request/response schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

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
from .user import UserScalarWhere, UserWithPostsOut


# -- input -------------------------------------------------------------------


class PostCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str
    # May be omitted (column default), but never null.
    published: bool = Field(default=None)
    author_id: UUID


class PostUpdate(ApiModel):
    # Omitted fields are left alone; null is rejected for NOT NULL columns.
    title: str = Field(default=None, min_length=1, max_length=500)
    content: str = Field(default=None)
    published: bool = Field(default=None)
    author_id: UUID = Field(default=None)


# -- output ------------------------------------------------------------------


class PostOut(ApiModel):
    id: UUID
    created_at: datetime
    updated_at: datetime
    title: str
    content: str
    published: bool
    author_id: UUID


class PostWithAuthorOut(PostOut):
    # Only present when requested through `include`.
    author: UserWithPostsOut | None = None


# -- query objects -----------------------------------------------------------


class PostAuthorFilter(UserScalarWhere, RelationFilter):
    """
    Filter on a post's author. Bare fields mean "the author matches".
    """

    quantifiers = frozenset({"is_", "is_not"})

    is_: UserScalarWhere | None = Field(default=None, alias="is")
    is_not: UserScalarWhere | None = None


class PostWhereFilter(QueryModel):
    id: UuidField = None
    title: StringField = None
    content: StringField = None
    published: BoolField = None
    author_id: UuidField = None
    created_at: DateTimeField = None
    updated_at: DateTimeField = None
    author: PostAuthorFilter | None = None
    and_: list[PostWhereFilter] | PostWhereFilter | None = Field(default=None, alias="AND")
    or_: list[PostWhereFilter] | None = Field(default=None, alias="OR")
    not_: list[PostWhereFilter] | PostWhereFilter | None = Field(default=None, alias="NOT")


class PostWhere(PaginationQuery, PostWhereFilter):
    pass


class PostAuthorSelect(QueryModel):
    id: bool | None = None
    email: bool | None = None
    name: bool | None = None
    created_at: bool | None = None
    updated_at: bool | None = None


class PostSelect(QueryModel):
    id: bool | None = None
    title: bool | None = None
    content: bool | None = None
    published: bool | None = None
    author_id: bool | None = None
    created_at: bool | None = None
    updated_at: bool | None = None
    author: bool | PostAuthorSelect | None = None


class PostAuthorInclude(QueryModel):
    posts: bool | None = None


class PostInclude(QueryModel):
    author: bool | PostAuthorInclude | None = None


class PostOrderByFields(QueryModel):
    created_at: Direction | None = None
    updated_at: Direction | None = None
    title: Direction | None = None
    published: Direction | None = None


PostOrderBy = PostOrderByFields | list[PostOrderByFields]
