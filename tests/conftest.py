"""Shared fixtures: an in-memory stand-in for the Supabase table API."""

import copy
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from hifdh_api.schemas.auth import Role, SessionContext
from hifdh_api.services.store import DocumentStore


class FakeQuery:
    def __init__(self, db, table, mode, payload=None, columns="*", on_conflict=None):
        self.db = db
        self.table = table
        self.mode = mode
        self.payload = payload
        self.columns = columns
        self.on_conflict = on_conflict
        self.filters = []
        self.ordering = None
        self.row_limit = None

    def eq(self, column, value):
        self.filters.append(lambda row: column in row and row[column] is not None and row[column] == value)
        return self

    def is_(self, column, value):
        assert value == "null"
        self.filters.append(lambda row: row.get(column) is None)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.mode))
        failure = self.db.pop_failure(self.table, self.mode)
        if failure is not None:
            raise failure
        if self.mode == "update" and self.db.before_update:
            hook, self.db.before_update = self.db.before_update, None
            hook(self.db)

        rows = self.db.tables.setdefault(self.table, [])

        if self.mode == "select":
            found = [row for row in rows if self._matches(row)]
            if self.ordering:
                column, desc = self.ordering
                found.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
            if self.row_limit:
                found = found[: self.row_limit]
            if self.columns != "*":
                keep = [c.strip() for c in self.columns.split(",")]
                found = [{k: row.get(k) for k in keep} for row in found]
            return SimpleNamespace(data=copy.deepcopy(found))

        if self.mode == "upsert":
            keys = [k.strip() for k in self.on_conflict.split(",")]
            for row in rows:
                if all(row.get(k) == self.payload.get(k) for k in keys):
                    row.update(copy.deepcopy(self.payload))
                    return SimpleNamespace(data=[copy.deepcopy(row)])
            rows.append(copy.deepcopy(self.payload))
            return SimpleNamespace(data=[copy.deepcopy(self.payload)])

        if self.mode == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return SimpleNamespace(data=updated)

        raise AssertionError(f"unsupported mode {self.mode}")


class FakeTable:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def select(self, columns="*"):
        return FakeQuery(self.db, self.name, "select", columns=columns)

    def upsert(self, payload, on_conflict=""):
        return FakeQuery(self.db, self.name, "upsert", payload=payload, on_conflict=on_conflict)

    def update(self, payload):
        return FakeQuery(self.db, self.name, "update", payload=payload)


class FakeSupabase:
    def __init__(self):
        self.tables = {"profiles": [], "daily_logs": []}
        self.calls = []
        self.failures = []
        self.before_update = None
        self.auth = MagicMock()
        self.postgrest = MagicMock()

    def table(self, name):
        return FakeTable(self, name)

    def fail(self, table, mode, error, times=1):
        for _ in range(times):
            self.failures.append((table, mode, error))

    def pop_failure(self, table, mode):
        for i, (t, m, error) in enumerate(self.failures):
            if t == table and m == mode:
                del self.failures[i]
                return error
        return None

    # helpers for arranging data
    def add_profile(self, uid, **fields):
        row = {"id": uid, "email": f"{uid}@example.com", "role": "student", **fields}
        self.tables["profiles"].append(row)
        return row

    def add_log(self, uid, date_key, **fields):
        row = {"userId": uid, "dateKey": date_key, **fields}
        self.tables["daily_logs"].append(row)
        return row

    def profile(self, uid):
        return next(r for r in self.tables["profiles"] if r["id"] == uid)

    def log(self, uid, date_key):
        return next(
            (r for r in self.tables["daily_logs"] if r["userId"] == uid and r["dateKey"] == date_key),
            None,
        )


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def store(fake_db):
    return DocumentStore(fake_db, retry_delays=[], sleep=lambda s: None)


@pytest.fixture
def student(fake_db):
    fake_db.add_profile("stu-1", email="student@example.com")
    return SessionContext(supabase=fake_db, user_id="stu-1", email="student@example.com", role=Role.STUDENT)


@pytest.fixture
def admin(fake_db):
    fake_db.add_profile("adm-1", email="ustad@example.com", role="admin")
    return SessionContext(supabase=fake_db, user_id="adm-1", email="ustad@example.com", role=Role.ADMIN)
