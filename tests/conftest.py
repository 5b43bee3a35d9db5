"""Pytest fixtures: a recording stand-in for the Supabase client.

Repo and session functions take the client as an argument, so tests hand them
this fake and inspect what was sent to each table.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest


class FakeQuery:
    def __init__(self, table: "FakeTable", op: str, payload: Any = None, **kwargs: Any):
        self.table = table
        self.op = op
        self.payload = payload
        self.kwargs = kwargs
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None

    def select(self, *cols, **kwargs):
        return self

    def eq(self, col: str, value: Any):
        self.filters.append((col, value))
        return self

    def order(self, col: str, desc: bool = False):
        self.order_by = (col, desc)
        return self

    def limit(self, n: int):
        return self

    def execute(self):
        self.table.calls.append(self)
        if self.table.error:
            raise self.table.error
        if self.op == "select":
            rows = [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]
            return SimpleNamespace(data=rows)
        if self.op in ("insert", "upsert"):
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = [{"id": f"r{len(self.table.rows) + i + 1}", **p} for i, p in enumerate(payload)]
            self.table.rows.extend(stored)
            return SimpleNamespace(data=stored)
        if self.op == "update":
            hits = [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]
            for r in hits:
                r.update(self.payload)
            return SimpleNamespace(data=hits)
        if self.op == "delete":
            self.table.rows[:] = [r for r in self.table.rows if not all(r.get(c) == v for c, v in self.filters)]
            return SimpleNamespace(data=[])
        raise AssertionError(self.op)


class FakeTable:
    def __init__(self, name: str):
        self.name = name
        self.rows: List[Dict[str, Any]] = []
        self.calls: List[FakeQuery] = []
        self.error: Optional[Exception] = None

    def select(self, *cols, **kwargs):
        return FakeQuery(self, "select")

    def insert(self, payload):
        return FakeQuery(self, "insert", payload)

    def upsert(self, payload, **kwargs):
        return FakeQuery(self, "upsert", payload, **kwargs)

    def update(self, payload):
        return FakeQuery(self, "update", payload)

    def delete(self):
        return FakeQuery(self, "delete")


class FakeBucket:
    def __init__(self, name: str):
        self.name = name
        self.uploads: List[Dict[str, Any]] = []

    def upload(self, path, file, file_options=None):
        self.uploads.append({"path": path, "file": file, "file_options": file_options})
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.buckets: Dict[str, FakeBucket] = {}

    def from_(self, name: str) -> FakeBucket:
        return self.buckets.setdefault(name, FakeBucket(name))


class FakeAuth:
    def __init__(self):
        self.user = None
        self.session_on_sign_up = True
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    def _check(self, name, *args):
        self.calls.append((name, *args))
        if self.error:
            raise self.error

    def sign_in_with_password(self, creds):
        self._check("sign_in", creds["email"])
        self.user = SimpleNamespace(id="user-1", email=creds["email"], created_at=None)
        return SimpleNamespace(user=self.user, session=object())

    def sign_up(self, creds):
        self._check("sign_up", creds["email"])
        user = SimpleNamespace(id="user-2", email=creds["email"], created_at=None)
        return SimpleNamespace(user=user, session=object() if self.session_on_sign_up else None)

    def sign_out(self):
        self._check("sign_out")
        self.user = None

    def reset_password_for_email(self, email):
        self._check("reset", email)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, FakeTable] = {}
        self.storage = FakeStorage()
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable(name))


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()
