"""Shared pytest fixtures: a fake `core.db` and sample rows."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import pytest

from core import db

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeDB:
    """Records every statement and replays queued results in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, list[Any]]] = []
        self._results: list[Any] = []

    def queue(self, *results: Any) -> None:
        self._results.extend(results)

    def _next(self, kind: str, sql: str, args: tuple[Any, ...], default: Any) -> Any:
        self.calls.append((kind, sql, list(args)))
        if not self._results:
            return default
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return [dict(r) for r in self._next("fetch_all", sql, args, [])]

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        row = self._next("fetch_one", sql, args, None)
        return dict(row) if row is not None else None

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        return self._next("fetch_val", sql, args, 0)

    @property
    def statements(self) -> list[str]:
        return [sql for _, sql, _ in self.calls]


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeDB:
    fake = FakeDB()
    monkeypatch.setattr(db, "fetch_all", fake.fetch_all)
    monkeypatch.setattr(db, "fetch_one", fake.fetch_one)
    monkeypatch.setattr(db, "fetch_val", fake.fetch_val)
    return fake


def make_user(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": uuid4(),
        "createdAt": NOW,
        "updatedAt": NOW,
        "email": "ada@example.com",
        "name": "Ada",
    }
    row.update(overrides)
    return row


def make_post(author_id: UUID | None = None, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": uuid4(),
        "createdAt": NOW,
        "updatedAt": NOW,
        "title": "Hello",
        "content": "First post",
        "published": False,
        "authorId": author_id or uuid4(),
    }
    row.update(overrides)
    return row
