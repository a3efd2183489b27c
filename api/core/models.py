"""
Table metadata for the persisted models.

This mirrors `db/migrations/*_create_users_and_posts.sql`. API field names are
camelCase, SQL columns are snake_case; the SQL layer (`core/sql.py`) only ever
emits column names declared here.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Field:
    name: str
    column: str
    sql_type: str = "text"
    unique: bool = False
    # Set by the database on insert (defaults), never accepted as input.
    generated: bool = False
    # Refreshed to now() on every UPDATE.
    touch_on_update: bool = False


@dataclass(frozen=True)
class Relation:
    name: str
    target: str
    many: bool
    # Join condition: this.<local_key> = target.<remote_key>
    local_key: str
    remote_key: str


@dataclass(frozen=True)
class ModelSpec:
    name: str
    table: str
    fields: tuple[Field, ...]
    relations: tuple[Relation, ...] = ()
    primary_key: str = "id"

    def field(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def relation(self, name: str) -> Relation | None:
        for rel in self.relations:
            if rel.name == name:
                return rel
        return None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def unique_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.unique or f.name == self.primary_key]


USER = ModelSpec(
    name="User",
    table="users",
    fields=(
        Field("id", "id", "uuid", unique=True, generated=True),
        Field("createdAt", "created_at", "timestamptz", generated=True),
        Field("updatedAt", "updated_at", "timestamptz", generated=True, touch_on_update=True),
        Field("email", "email", "text", unique=True),
        Field("name", "name", "text"),
    ),
    relations=(
        Relation("posts", target="Post", many=True, local_key="id", remote_key="authorId"),
    ),
)

POST = ModelSpec(
    name="Post",
    table="posts",
    fields=(
        Field("id", "id", "uuid", unique=True, generated=True),
        Field("createdAt", "created_at", "timestamptz", generated=True),
        Field("updatedAt", "updated_at", "timestamptz", generated=True, touch_on_update=True),
        Field("title", "title", "text"),
        Field("content", "content", "text"),
        Field("published", "published", "boolean"),
        Field("authorId", "author_id", "uuid"),
    ),
    relations=(
        Relation("author", target="User", many=False, local_key="authorId", remote_key="id"),
    ),
)

MODELS: dict[str, ModelSpec] = {spec.name: spec for spec in (USER, POST)}


def get_model(name: str) -> ModelSpec:
    try:
        return MODELS[name]
    except KeyError:
        raise KeyError(f"Unknown model: {name}") from None
