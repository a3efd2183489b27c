"""Tests for the query-object -> SQL compiler."""

from __future__ import annotations

from uuid import uuid4

import pytest

from core import sql
from core.errors import QueryError
from core.models import POST, USER

USER_COLUMNS = (
    't0.id AS "id", t0.created_at AS "createdAt", t0.updated_at AS "updatedAt", '
    't0.email AS "email", t0.name AS "name"'
)


# ---------------------------------------------------------------------------
# where
# ---------------------------------------------------------------------------


class TestWhere:
    def test_scalar_equality(self) -> None:
        query, args = sql.select_query(USER, USER.fields, where={"email": "ada@example.com"})
        assert query == f"SELECT {USER_COLUMNS} FROM users t0 WHERE t0.email = $1"
        assert args == ["ada@example.com"]

    def test_empty_where_matches_everything(self) -> None:
        query, args = sql.select_query(USER, USER.fields, where={})
        assert query.endswith("FROM users t0 WHERE TRUE")
        assert args == []

    def test_null_means_is_null(self) -> None:
        qb = sql.QueryBuilder()
        assert qb.where(USER, {"name": None}) == "t0.name IS NULL"
        assert qb.args == []

    def test_multiple_fields_are_anded(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(POST, {"title": "a", "published": True})
        assert cond == "(t0.title = $1 AND t0.published = $2)"
        assert qb.args == ["a", True]

    def test_or_with_insensitive_contains(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(
            USER,
            {"OR": [{"email": "a"}, {"name": {"contains": "b%", "mode": "insensitive"}}]},
        )
        assert cond == "(t0.email = $1 OR t0.name ILIKE $2 ESCAPE '\\')"
        assert qb.args == ["a", "%b\\%%"]

    def test_empty_or_matches_nothing(self) -> None:
        qb = sql.QueryBuilder()
        assert qb.where(USER, {"OR": []}) == "FALSE"

    def test_not_accepts_object(self) -> None:
        qb = sql.QueryBuilder()
        assert qb.where(POST, {"NOT": {"published": True}}) == "NOT t0.published = $1"

    def test_operators(self) -> None:
        ids = [uuid4(), uuid4()]
        qb = sql.QueryBuilder()
        cond = qb.where(
            POST,
            {
                "id": {"in": ids},
                "title": {"startsWith": "How", "not": "How not to"},
                "createdAt": {"gte": "2025-01-01", "lt": "2026-01-01"},
            },
        )
        assert cond == (
            "(t0.id = ANY($1)"
            " AND (t0.title LIKE $2 ESCAPE '\\' AND t0.title <> $3)"
            " AND (t0.created_at >= $4 AND t0.created_at < $5))"
        )
        assert qb.args == [ids, "How%", "How not to", "2025-01-01", "2026-01-01"]

    def test_not_in_and_not_null(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(USER, {"email": {"notIn": ["a", "b"]}, "name": {"not": None}})
        assert cond == "(NOT (t0.email = ANY($1)) AND t0.name IS NOT NULL)"

    def test_insensitive_equals(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(USER, {"email": {"equals": "ADA@example.com", "mode": "insensitive"}})
        assert cond == "lower(t0.email) = lower($1)"

    def test_to_one_relation_filter(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(POST, {"author": {"email": "ada@example.com"}})
        assert cond == (
            "EXISTS (SELECT 1 FROM users t1 WHERE t1.id = t0.author_id AND t1.email = $1)"
        )

    def test_to_one_is_not(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(POST, {"author": {"isNot": {"name": "Bob"}}})
        assert cond.startswith("NOT EXISTS (SELECT 1 FROM users t1")

    def test_to_many_bare_filter_means_some(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(USER, {"posts": {"published": True}})
        assert cond == (
            "EXISTS (SELECT 1 FROM posts t1 WHERE t1.author_id = t0.id AND t1.published = $1)"
        )

    def test_to_many_none_and_every(self) -> None:
        qb = sql.QueryBuilder()
        cond = qb.where(USER, {"posts": {"none": {"published": True}}})
        assert cond == (
            "NOT EXISTS (SELECT 1 FROM posts t1 WHERE t1.author_id = t0.id AND t1.published = $1)"
        )

        qb = sql.QueryBuilder()
        cond = qb.where(USER, {"posts": {"every": {"published": True}}})
        assert cond == (
            "NOT EXISTS (SELECT 1 FROM posts t1 WHERE t1.author_id = t0.id AND NOT t1.published = $1)"
        )

    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(QueryError) as excinfo:
            sql.QueryBuilder().where(USER, {"password": "x"})
        assert excinfo.value.code == "invalid_query"
        assert excinfo.value.meta["field"] == "password"

    def test_unknown_operator_is_rejected(self) -> None:
        with pytest.raises(QueryError):
            sql.QueryBuilder().where(USER, {"email": {"regex": ".*"}})

    def test_like_requires_text_field(self) -> None:
        with pytest.raises(QueryError):
            sql.QueryBuilder().where(POST, {"published": {"contains": "t"}})


# ---------------------------------------------------------------------------
# orderBy / paging
# ---------------------------------------------------------------------------


class TestOrderAndPaging:
    def test_order_by_list(self) -> None:
        qb = sql.QueryBuilder()
        clause = qb.order_by(USER, [{"createdAt": "desc"}, {"email": "asc"}])
        assert clause == " ORDER BY t0.created_at DESC, t0.email ASC"

    def test_order_by_object(self) -> None:
        assert sql.QueryBuilder().order_by(POST, {"title": "asc"}) == " ORDER BY t0.title ASC"

    def test_order_by_bad_direction(self) -> None:
        with pytest.raises(QueryError):
            sql.QueryBuilder().order_by(POST, {"title": "sideways"})

    def test_order_by_unknown_field(self) -> None:
        with pytest.raises(QueryError):
            sql.QueryBuilder().order_by(POST, {"author": "asc"})

    def test_limit_then_offset(self) -> None:
        query, args = sql.select_query(
            POST,
            POST.fields,
            where={"published": True},
            order_by={"createdAt": "desc"},
            skip=10,
            take=5,
        )
        assert query.endswith(
            "WHERE t0.published = $1 ORDER BY t0.created_at DESC LIMIT $2 OFFSET $3"
        )
        assert args == [True, 5, 10]

    def test_zero_skip_has_no_offset(self) -> None:
        query, args = sql.select_query(POST, POST.fields, skip=0, take=10)
        assert query.endswith("WHERE TRUE LIMIT $1")
        assert args == [10]

    def test_key_in_restricts_rows(self) -> None:
        keys = [uuid4()]
        query, args = sql.select_query(
            POST, POST.fields, where={"published": True}, key_in=("authorId", keys)
        )
        assert "WHERE (t0.author_id = ANY($1) AND t0.published = $2)" in query
        assert args == [keys, True]


# ---------------------------------------------------------------------------
# writes
# ---------------------------------------------------------------------------


class TestWrites:
    def test_count(self) -> None:
        query, args = sql.count_query(POST, where={"published": True})
        assert query == "SELECT count(*) FROM posts t0 WHERE t0.published = $1"
        assert args == [True]

    def test_insert(self) -> None:
        query, args = sql.insert_query(USER, {"email": "a@b.co", "name": None}, USER.fields)
        assert query == (
            f"INSERT INTO users AS t0 (email, name) VALUES ($1, $2) RETURNING {USER_COLUMNS}"
        )
        assert args == ["a@b.co", None]

    def test_insert_rejects_generated_fields(self) -> None:
        with pytest.raises(QueryError):
            sql.insert_query(USER, {"id": uuid4(), "email": "a@b.co"}, USER.fields)

    def test_update_touches_updated_at(self) -> None:
        post_id = uuid4()
        query, args = sql.update_query(POST, {"id": post_id}, {"title": "New"}, POST.fields)
        assert query.startswith(
            "UPDATE posts t0 SET title = $1, updated_at = now() WHERE t0.id = $2 RETURNING "
        )
        assert args == ["New", post_id]

    def test_delete(self) -> None:
        user_id = uuid4()
        query, args = sql.delete_query(USER, {"id": user_id}, USER.fields)
        assert query == f"DELETE FROM users t0 WHERE t0.id = $1 RETURNING {USER_COLUMNS}"
        assert args == [user_id]
