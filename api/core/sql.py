"""
Query-object -> SQL compiler.

Turns ORM-style query objects (`where`, `orderBy`, `skip`, `take`) into
raw SQL with asyncpg positional placeholders. Identifiers only ever come from
`core/models.py`; user input always travels as a bound parameter.

Every builder returns `(sql, args)`:

    sql, args = select_query(USER, USER.fields, where={"email": "a@b.c"})
    rows = await db.fetch_all(sql, *args)
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from .errors import QueryError
from .models import Field, ModelSpec, Relation, get_model

ROOT_ALIAS = "t0"

_COMBINATORS = ("AND", "OR", "NOT")
_TO_MANY_KEYS = {"some", "every", "none"}
_TO_ONE_KEYS = {"is", "isNot"}
_LIKE_OPS = {"contains", "startsWith", "endsWith"}
_COMPARISON_OPS = {"lt": "<", "lte": "<=", "gt": ">", "gte": ">="}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _join(parts: Sequence[str], op: str, *, empty: str) -> str:
    if not parts:
        return empty
    if len(parts) == 1:
        return parts[0]
    return "(" + f" {op} ".join(parts) + ")"


class QueryBuilder:
    """
    Accumulates bound arguments and table aliases for one SQL statement.
    """

    def __init__(self) -> None:
        self.args: list[Any] = []
        self._alias_count = 0

    def param(self, value: Any) -> str:
        self.args.append(value)
        return f"${len(self.args)}"

    def alias(self) -> str:
        self._alias_count += 1
        return f"t{self._alias_count}"

    # -- where --------------------------------------------------------------

    def where(self, spec: ModelSpec, where: dict[str, Any] | None, alias: str = ROOT_ALIAS) -> str:
        if not where:
            return "TRUE"
        if not isinstance(where, dict):
            raise QueryError(f"where for {spec.name} must be an object.")

        parts: list[str] = []
        for key, value in where.items():
            if key in _COMBINATORS:
                parts.extend(self._combinator(spec, key, value, alias))
                continue

            field = spec.field(key)
            if field is not None:
                parts.append(self._field_condition(field, value, alias))
                continue

            relation = spec.relation(key)
            if relation is not None:
                parts.append(self._relation_condition(spec, relation, value, alias))
                continue

            raise QueryError(f"Unknown field '{key}' on {spec.name}.", {"model": spec.name, "field": key})

        return _join(parts, "AND", empty="TRUE")

    def _combinator(self, spec: ModelSpec, key: str, value: Any, alias: str) -> list[str]:
        compiled = [self.where(spec, item, alias) for item in _as_list(value) if item is not None]
        if key == "AND":
            return [_join(compiled, "AND", empty="TRUE")]
        if key == "OR":
            return [_join(compiled, "OR", empty="FALSE")]
        # NOT [] matches everything.
        if not compiled:
            return []
        return [f"NOT {_join(compiled, 'AND', empty='TRUE')}"]

    def _field_condition(self, field: Field, value: Any, alias: str) -> str:
        column = f"{alias}.{field.column}"
        if value is None:
            return f"{column} IS NULL"
        if isinstance(value, dict):
            return self._operators(field, value, column)
        return f"{column} = {self.param(value)}"

    def _operators(self, field: Field, ops: dict[str, Any], column: str) -> str:
        insensitive = ops.get("mode") == "insensitive" and field.sql_type == "text"
        target = f"lower({column})" if insensitive else column

        parts: list[str] = []
        for op, operand in ops.items():
            if op == "mode":
                if operand not in ("default", "insensitive"):
                    raise QueryError(f"Unknown mode '{operand}'.")
                continue

            if op == "equals":
                if operand is None:
                    parts.append(f"{column} IS NULL")
                elif insensitive:
                    parts.append(f"{target} = lower({self.param(operand)})")
                else:
                    parts.append(f"{column} = {self.param(operand)}")
            elif op == "not":
                if operand is None:
                    parts.append(f"{column} IS NOT NULL")
                elif isinstance(operand, dict):
                    nested = dict(operand)
                    if insensitive:
                        nested.setdefault("mode", "insensitive")
                    parts.append(f"NOT ({self._operators(field, nested, column)})")
                elif insensitive:
                    parts.append(f"{target} <> lower({self.param(operand)})")
                else:
                    parts.append(f"{column} <> {self.param(operand)}")
            elif op in ("in", "notIn"):
                values = list(_as_list(operand))
                clause = f"{column} = ANY({self.param(values)})"
                parts.append(clause if op == "in" else f"NOT ({clause})")
            elif op in _COMPARISON_OPS:
                parts.append(f"{column} {_COMPARISON_OPS[op]} {self.param(operand)}")
            elif op in _LIKE_OPS:
                if field.sql_type != "text":
                    raise QueryError(f"Operator '{op}' requires a text field, got '{field.name}'.")
                pattern = _escape_like(str(operand))
                if op in ("contains", "endsWith"):
                    pattern = "%" + pattern
                if op in ("contains", "startsWith"):
                    pattern = pattern + "%"
                like = "ILIKE" if insensitive else "LIKE"
                parts.append(f"{column} {like} {self.param(pattern)} ESCAPE '\\'")
            else:
                raise QueryError(
                    f"Unknown operator '{op}' on field '{field.name}'.",
                    {"field": field.name, "operator": op},
                )

        return _join(parts, "AND", empty="TRUE")

    def _relation_condition(self, spec: ModelSpec, relation: Relation, value: Any, alias: str) -> str:
        target = get_model(relation.target)

        def exists(filter_: dict[str, Any] | None) -> str:
            inner = self.alias()
            join = (
                f"{inner}.{_column(target, relation.remote_key)} = "
                f"{alias}.{_column(spec, relation.local_key)}"
            )
            cond = self.where(target, filter_, inner)
            return f"EXISTS (SELECT 1 FROM {target.table} {inner} WHERE {join} AND {cond})"

        if relation.many:
            if isinstance(value, dict) and value and set(value) <= _TO_MANY_KEYS:
                parts = []
                for key, filter_ in value.items():
                    if key == "some":
                        parts.append(exists(filter_))
                    elif key == "none":
                        parts.append(f"NOT {exists(filter_)}")
                    elif filter_:
                        # every: no related row fails the filter.
                        parts.append(f"NOT {exists({'NOT': filter_})}")
                return _join(parts, "AND", empty="TRUE")
            if not isinstance(value, dict):
                raise QueryError(f"Relation filter '{relation.name}' must be an object.")
            return exists(value)

        if value is None:
            return f"NOT {exists(None)}"
        if not isinstance(value, dict):
            raise QueryError(f"Relation filter '{relation.name}' must be an object.")
        if value and set(value) <= _TO_ONE_KEYS:
            parts = []
            for key, filter_ in value.items():
                if key == "is":
                    parts.append(exists(filter_) if filter_ is not None else f"NOT {exists(None)}")
                else:
                    parts.append(f"NOT {exists(filter_)}" if filter_ is not None else exists(None))
            return _join(parts, "AND", empty="TRUE")
        return exists(value)

    # -- ordering / paging --------------------------------------------------

    def order_by(self, spec: ModelSpec, order_by: Any, alias: str = ROOT_ALIAS) -> str:
        if not order_by:
            return ""
        terms: list[str] = []
        for item in _as_list(order_by):
            if not isinstance(item, dict):
                raise QueryError("orderBy entries must be objects.")
            for name, direction in item.items():
                if direction is None:
                    continue
                field = spec.field(name)
                if field is None:
                    raise QueryError(f"Cannot order {spec.name} by '{name}'.", {"field": name})
                direction = str(direction).lower()
                if direction not in ("asc", "desc"):
                    raise QueryError(f"Invalid sort direction '{direction}'.", {"field": name})
                terms.append(f"{alias}.{field.column} {direction.upper()}")
        if not terms:
            return ""
        return " ORDER BY " + ", ".join(terms)

    def paging(self, skip: int | None, take: int | None) -> str:
        clause = ""
        if take is not None:
            clause += f" LIMIT {self.param(int(take))}"
        if skip:
            clause += f" OFFSET {self.param(int(skip))}"
        return clause


def _column(spec: ModelSpec, name: str) -> str:
    field = spec.field(name)
    if field is None:
        raise QueryError(f"Unknown field '{name}' on {spec.name}.")
    return field.column


def returning(fields: Iterable[Field], alias: str = ROOT_ALIAS) -> str:
    cols = [f'{alias}.{f.column} AS "{f.name}"' for f in fields]
    if not cols:
        raise QueryError("At least one field must be selected.")
    return ", ".join(cols)


def select_query(
    spec: ModelSpec,
    fields: Iterable[Field],
    *,
    where: dict[str, Any] | None = None,
    order_by: Any = None,
    skip: int | None = None,
    take: int | None = None,
    key_in: tuple[str, list[Any]] | None = None,
) -> tuple[str, list[Any]]:
    """
    SELECT for find_many/find_unique and relation loading.

    `key_in=(field_name, values)` restricts rows to `field = ANY(values)`;
    used to load one relation level for a batch of parents.
    """
    qb = QueryBuilder()
    conditions = []
    if key_in is not None:
        key_field, values = key_in
        conditions.append(f"{ROOT_ALIAS}.{_column(spec, key_field)} = ANY({qb.param(list(values))})")
    conditions.append(qb.where(spec, where))
    cond = _join([c for c in conditions if c != "TRUE"], "AND", empty="TRUE")

    sql = (
        f"SELECT {returning(fields)} FROM {spec.table} {ROOT_ALIAS} WHERE {cond}"
        f"{qb.order_by(spec, order_by)}{qb.paging(skip, take)}"
    )
    return sql, qb.args


def count_query(spec: ModelSpec, *, where: dict[str, Any] | None = None) -> tuple[str, list[Any]]:
    qb = QueryBuilder()
    cond = qb.where(spec, where)
    return f"SELECT count(*) FROM {spec.table} {ROOT_ALIAS} WHERE {cond}", qb.args


def _writable(spec: ModelSpec, data: dict[str, Any]) -> list[tuple[Field, Any]]:
    pairs = []
    for name, value in data.items():
        field = spec.field(name)
        if field is None:
            raise QueryError(f"Unknown field '{name}' on {spec.name}.", {"field": name})
        if field.generated:
            raise QueryError(f"Field '{name}' on {spec.name} is read-only.", {"field": name})
        pairs.append((field, value))
    return pairs


def insert_query(
    spec: ModelSpec,
    data: dict[str, Any],
    fields: Iterable[Field],
) -> tuple[str, list[Any]]:
    qb = QueryBuilder()
    pairs = _writable(spec, data or {})
    if pairs:
        columns = ", ".join(f.column for f, _ in pairs)
        values = ", ".join(qb.param(v) for _, v in pairs)
        body = f"({columns}) VALUES ({values})"
    else:
        body = "DEFAULT VALUES"
    sql = f"INSERT INTO {spec.table} AS {ROOT_ALIAS} {body} RETURNING {returning(fields)}"
    return sql, qb.args


def update_query(
    spec: ModelSpec,
    where: dict[str, Any],
    data: dict[str, Any],
    fields: Iterable[Field],
) -> tuple[str, list[Any]]:
    qb = QueryBuilder()
    assignments = [f"{f.column} = {qb.param(v)}" for f, v in _writable(spec, data or {})]
    assignments.extend(f"{f.column} = now()" for f in spec.fields if f.touch_on_update)
    if not assignments:
        raise QueryError(f"Nothing to update on {spec.name}.")
    cond = qb.where(spec, where)
    sql = (
        f"UPDATE {spec.table} {ROOT_ALIAS} SET {', '.join(assignments)} "
        f"WHERE {cond} RETURNING {returning(fields)}"
    )
    return sql, qb.args


def delete_query(
    spec: ModelSpec,
    where: dict[str, Any],
    fields: Iterable[Field],
) -> tuple[str, list[Any]]:
    qb = QueryBuilder()
    cond = qb.where(spec, where)
    sql = f"DELETE FROM {spec.table} {ROOT_ALIAS} WHERE {cond} RETURNING {returning(fields)}"
    return sql, qb.args
