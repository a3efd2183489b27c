"""
Shared pydantic building blocks for request/response schemas.

JSON on the wire is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

Direction = Literal["asc", "desc"]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryModel(ApiModel):
    """
    Base for query objects (where/select/include/orderBy): unknown keys are
    rejected instead of silently ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class RelationFilter(QueryModel):
    """
    Filter on a related model: either bare fields or the quantifier keys
    (`some`/`every`/`none`, `is`/`isNot`), never both in one object.
    """

    quantifiers: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _bare_or_quantified(self) -> RelationFilter:
        quantified = self.model_fields_set & self.quantifiers
        if quantified and self.model_fields_set - self.quantifiers:
            raise ValueError("Relation filter mixes field conditions with quantifiers.")
        return self


class PaginationQuery(QueryModel):
    """
    Pagination controls carried inside `where`.

    They are popped off before `where` reaches the data layer.
    """

    page: int = Field(default=DEFAULT_PAGE, ge=1)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    # Accepts true/false as JSON booleans or "true"/"false" strings.
    include_total_count: bool = False


class StringFilter(QueryModel):
    equals: str | None = None
    not_: str | StringFilter | None = Field(default=None, alias="not")
    in_: list[str] | None = Field(default=None, alias="in")
    not_in: list[str] | None = None
    lt: str | None = None
    lte: str | None = None
    gt: str | None = None
    gte: str | None = None
    contains: str | None = None
    starts_with: str | None = None
    ends_with: str | None = None
    mode: Literal["default", "insensitive"] | None = None


class UuidFilter(QueryModel):
    equals: UUID | None = None
    not_: UUID | None = Field(default=None, alias="not")
    in_: list[UUID] | None = Field(default=None, alias="in")
    not_in: list[UUID] | None = None


class BoolFilter(QueryModel):
    equals: bool | None = None
    not_: bool | None = Field(default=None, alias="not")


class DateTimeFilter(QueryModel):
    equals: datetime | None = None
    not_: datetime | DateTimeFilter | None = Field(default=None, alias="not")
    in_: list[datetime] | None = Field(default=None, alias="in")
    not_in: list[datetime] | None = None
    lt: datetime | None = None
    lte: datetime | None = None
    gt: datetime | None = None
    gte: datetime | None = None


StringField = str | StringFilter | None
UuidField = UUID | UuidFilter | None
BoolField = bool | BoolFilter | None
DateTimeField = datetime | DateTimeFilter | None
