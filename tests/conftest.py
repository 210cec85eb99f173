"""
Pytest configuration and fixtures
"""
import copy
import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError


class FakeQuery:
    """Just enough of the PostgREST request builder for the app's queries."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.columns = "*"
        self.filters = []
        self.ordering = None
        self.max_rows = None
        self.action = "select"
        self.payload = None
        self.options = {}

    # --- builders ---
    def select(self, columns="*"):
        self.columns = columns
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict="", ignore_duplicates=False):
        self.action, self.payload = "upsert", payload
        self.options = {"on_conflict": on_conflict, "ignore_duplicates": ignore_duplicates}
        return self

    def delete(self):
        self.action = "delete"
        return self

    # --- execution ---
    def execute(self):
        self.db.calls.append(self)
        error = self.db.errors.get(self.table)
        if isinstance(error, Exception):
            raise error
        if error is not None:
            raise APIError(error)

        rows = self.db.tables.setdefault(self.table, [])
        handler = getattr(self, f"_{self.action}")
        return SimpleNamespace(data=handler(rows))

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _select(self, rows):
        result = [copy.deepcopy(r) for r in rows if self._matches(r)]
        if self.ordering:
            column, desc = self.ordering
            result.sort(key=lambda r: r.get(column), reverse=desc)
        if self.max_rows is not None:
            result = result[: self.max_rows]
        if self.columns != "*":
            wanted = [c.strip() for c in self.columns.split(",")]
            result = [{c: r.get(c) for c in wanted} for r in result]
        return result

    def _payload_rows(self):
        return self.payload if isinstance(self.payload, list) else [self.payload]

    def _insert(self, rows):
        unique = self.db.unique.get(self.table)
        inserted = []
        for new in self._payload_rows():
            if unique and any(all(r.get(c) == new.get(c) for c in unique) for r in rows):
                raise APIError({
                    "message": "duplicate key value violates unique constraint",
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })
            row = {"id": str(uuid.uuid4()), **new}
            rows.append(row)
            inserted.append(copy.deepcopy(row))
        return inserted

    def _upsert(self, rows):
        keys = [c.strip() for c in self.options["on_conflict"].split(",") if c.strip()]
        result = []
        for new in self._payload_rows():
            existing = next(
                (r for r in rows if keys and all(r.get(k) == new.get(k) for k in keys)),
                None,
            )
            if existing is None:
                existing = {"id": str(uuid.uuid4())}
                rows.append(existing)
            existing.update(new)
            result.append(copy.deepcopy(existing))
        return result

    def _delete(self, rows):
        removed = [r for r in rows if self._matches(r)]
        rows[:] = [r for r in rows if not self._matches(r)]
        return removed


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.errors = {}
        self.unique = {}
        self.calls = []
        self.auth = MagicMock()

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, code="PGRST000", message="boom"):
        self.errors[table] = {"message": message, "code": code, "hint": None, "details": None}

    def disconnect(self, table):
        self.errors[table] = httpx.ConnectError("Connection refused")

    def last_call(self, table=None):
        calls = [c for c in self.calls if table is None or c.table == table]
        return calls[-1]


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def shop_row():
    return {
        "id": "shop-1",
        "slug": "barbearia-central",
        "name": "Barbearia Central",
        "logo_url": None,
        "whatsapp_number": "+258 84 123 4567",
        "primary_color": "#D4AF37",
        "secondary_color": "#2A2A2A",
        "background_color": "#121212",
        "text_color": "#FFFFFF",
        "opening_time": "09:00:00",
        "closing_time": "19:00:00",
        "active": True,
        "created_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def barber_rows():
    return [
        {"id": "b-2", "barbershop_id": "shop-1", "name": "Zeca", "specialty": None,
         "active": True, "has_app_access": False},
        {"id": "b-1", "barbershop_id": "shop-1", "name": "Armando", "specialty": "Degradê",
         "active": True, "has_app_access": True},
        {"id": "b-3", "barbershop_id": "shop-1", "name": "Inativo", "specialty": None,
         "active": False, "has_app_access": False},
        {"id": "b-9", "barbershop_id": "shop-2", "name": "Outro", "specialty": None,
         "active": True, "has_app_access": True},
    ]
