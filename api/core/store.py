"""
Model delegates: the per-model query interface the CRUD handlers talk to.

Each delegate exposes create / find_many / find_unique / update / delete /
count over one table and speaks the same query-object shape the HTTP layer
accepts (`where`, `select`, `include`, `order_by`, `skip`, `take`).

Relations are loaded with one extra query per relation level
(`WHERE key = ANY($1)`) and attached to the parent rows.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

import asyncpg

from . import db, sql
from .errors import QueryError, RecordNotFoundError, StoreKnownError
from .models import Field, ModelSpec, get_model

logger = logging.getLogger(__name__)

# Keys that mark a nested relation value as query args rather than a bare
# field map, e.g. {"posts": {"where": {...}, "orderBy": {...}}}.
RELATION_ARG_KEYS = {"select", "include", "where", "orderBy"}


@dataclass(frozen=True)
class RelationArgs:
    where: dict[str, Any] | None = None
    order_by: Any = None
    select: dict[str, Any] | None = None
    include: dict[str, Any] | None = None


@dataclass
class FetchPlan:
    fields: list[Field]
    hidden: set[str] = field(default_factory=set)
    relations: dict[str, RelationArgs] = field(default_factory=dict)

    def require(self, spec: ModelSpec, name: str) -> None:
        """
        Make sure `name` is fetched (join keys), hiding it if not selected.
        """
        if any(f.name == name for f in self.fields):
            return
        f = spec.field(name)
        if f is None:
            raise QueryError(f"Unknown field '{name}' on {spec.name}.")
        self.fields.append(f)
        self.hidden.add(name)

    def strip(self, row: dict[str, Any]) -> dict[str, Any]:
        if not self.hidden:
            return row
        return {k: v for k, v in row.items() if k not in self.hidden}


def _relation_args(value: Any, bare_key: str) -> RelationArgs:
    if value is True:
        return RelationArgs()
    if not isinstance(value, dict):
        raise QueryError("Relation selection must be true or an object.")
    if value and set(value) <= RELATION_ARG_KEYS:
        return RelationArgs(
            where=value.get("where"),
            order_by=value.get("orderBy"),
            select=value.get("select"),
            include=value.get("include"),
        )
    # {"author": {"id": true, "email": true}} inside select means a nested
    # select; inside include it means a nested include.
    if bare_key == "select":
        return RelationArgs(select=value)
    return RelationArgs(include=value)


def plan_fetch(
    spec: ModelSpec,
    select: dict[str, Any] | None = None,
    include: dict[str, Any] | None = None,
) -> FetchPlan:
    if select and include:
        raise QueryError("Use either select or include, not both.", {"model": spec.name})

    if select:
        fields: list[Field] = []
        relations: dict[str, RelationArgs] = {}
        for name, value in select.items():
            if value is None or value is False:
                continue
            f = spec.field(name)
            if f is not None:
                fields.append(f)
                continue
            if spec.relation(name) is not None:
                relations[name] = _relation_args(value, "select")
                continue
            raise QueryError(f"Unknown field '{name}' on {spec.name}.", {"field": name})
        plan = FetchPlan(fields=fields, relations=relations)
        if not plan.fields:
            plan.require(spec, spec.primary_key)
    else:
        plan = FetchPlan(fields=list(spec.fields))
        for name, value in (include or {}).items():
            if value is None or value is False:
                continue
            if spec.relation(name) is None:
                raise QueryError(f"Unknown relation '{name}' on {spec.name}.", {"relation": name})
            plan.relations[name] = _relation_args(value, "include")

    for name in plan.relations:
        rel = spec.relation(name)
        plan.require(spec, rel.local_key)
    return plan


@contextmanager
def translate_errors(spec: ModelSpec) -> Iterator[None]:
    try:
        yield
    except (
        asyncpg.exceptions.IntegrityConstraintViolationError,
        asyncpg.exceptions.DataError,
    ) as exc:
        logger.info("store_error model=%s sqlstate=%s", spec.name, getattr(exc, "sqlstate", None))
        raise StoreKnownError.from_postgres(exc, model=spec.name) from exc


async def load_relations(spec: ModelSpec, rows: list[dict[str, Any]], plan: FetchPlan) -> None:
    """
    Attach each planned relation onto `rows` in place.
    """
    for name, args in plan.relations.items():
        rel = spec.relation(name)
        target = get_model(rel.target)

        keys = list({row[rel.local_key] for row in rows if row.get(rel.local_key) is not None})
        if not keys:
            for row in rows:
                row[name] = [] if rel.many else None
            continue

        child_plan = plan_fetch(target, args.select, args.include)
        child_plan.require(target, rel.remote_key)
        query, query_args = sql.select_query(
            target,
            child_plan.fields,
            where=args.where,
            order_by=args.order_by,
            key_in=(rel.remote_key, keys),
        )
        children = await db.fetch_all(query, *query_args)
        await load_relations(target, children, child_plan)

        grouped: dict[Any, list[dict[str, Any]]] = {}
        for child in children:
            grouped.setdefault(child[rel.remote_key], []).append(child_plan.strip(child))

        for row in rows:
            matches = grouped.get(row.get(rel.local_key), [])
            if rel.many:
                row[name] = matches
            else:
                row[name] = matches[0] if matches else None


class ModelDelegate:
    """
    Query interface for one model, e.g. `users.repository.users`.
    """

    def __init__(self, spec: ModelSpec) -> None:
        self.spec = spec

    def __repr__(self) -> str:
        return f"<ModelDelegate {self.spec.name}>"

    def _require_unique(self, where: dict[str, Any] | None, operation: str) -> dict[str, Any]:
        if not isinstance(where, dict):
            raise QueryError(f"{operation} on {self.spec.name} requires a where object.")
        unique = set(self.spec.unique_fields)
        if not any(k in unique and v is not None and not isinstance(v, dict) for k, v in where.items()):
            raise QueryError(
                f"{operation} on {self.spec.name} requires one of: {', '.join(sorted(unique))}.",
                {"model": self.spec.name, "operation": operation},
            )
        return where

    async def _finish(self, rows: list[dict[str, Any]], plan: FetchPlan) -> list[dict[str, Any]]:
        await load_relations(self.spec, rows, plan)
        return [plan.strip(row) for row in rows]

    async def find_many(
        self,
        *,
        where: dict[str, Any] | None = None,
        select: dict[str, Any] | None = None,
        include: dict[str, Any] | None = None,
        order_by: Any = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> list[dict[str, Any]]:
        plan = plan_fetch(self.spec, select, include)
        query, args = sql.select_query(
            self.spec,
            plan.fields,
            where=where,
            order_by=order_by,
            skip=skip,
            take=take,
        )
        with translate_errors(self.spec):
            rows = await db.fetch_all(query, *args)
            return await self._finish(rows, plan)

    async def find_unique(
        self,
        *,
        where: dict[str, Any],
        select: dict[str, Any] | None = None,
        include: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        self._require_unique(where, "find_unique")
        plan = plan_fetch(self.spec, select, include)
        query, args = sql.select_query(self.spec, plan.fields, where=where, take=1)
        with translate_errors(self.spec):
            row = await db.fetch_one(query, *args)
            if row is None:
                return None
            return (await self._finish([row], plan))[0]

    async def count(self, *, where: dict[str, Any] | None = None) -> int:
        query, args = sql.count_query(self.spec, where=where)
        with translate_errors(self.spec):
            return int(await db.fetch_val(query, *args) or 0)

    async def create(
        self,
        *,
        data: dict[str, Any],
        select: dict[str, Any] | None = None,
        include: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        plan = plan_fetch(self.spec, select, include)
        query, args = sql.insert_query(self.spec, data, plan.fields)
        with translate_errors(self.spec):
            row = await db.fetch_one(query, *args)
            if row is None:
                raise RuntimeError(f"Failed to create {self.spec.name}.")
            logger.debug("created model=%s", self.spec.name)
            return (await self._finish([row], plan))[0]

    async def update(
        self,
        *,
        where: dict[str, Any],
        data: dict[str, Any],
        select: dict[str, Any] | None = None,
        include: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self._require_unique(where, "update")
        plan = plan_fetch(self.spec, select, include)
        query, args = sql.update_query(self.spec, where, data, plan.fields)
        with translate_errors(self.spec):
            row = await db.fetch_one(query, *args)
            if row is None:
                raise RecordNotFoundError(self.spec.name, "update")
            return (await self._finish([row], plan))[0]

    async def delete(self, *, where: dict[str, Any]) -> dict[str, Any]:
        self._require_unique(where, "delete")
        query, args = sql.delete_query(self.spec, where, self.spec.fields)
        with translate_errors(self.spec):
            row = await db.fetch_one(query, *args)
        if row is None:
            raise RecordNotFoundError(self.spec.name, "delete")
        return row
