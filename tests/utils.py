"""In-memory stand-ins for the Supabase client used by the check tests."""

from __future__ import annotations

import uuid
from types import SimpleNamespace

from postgrest.exceptions import APIError


def api_error(code: str, message: str) -> APIError:
    return APIError({"code": code, "message": message, "hint": None, "details": None})


class FakeQuery:
    def __init__(self, client: FakeSupabaseClient, table: str):
        self._client = client
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters: list[tuple[str, str, object]] = []
        self.row_limit: int | None = None

    def select(self, *columns, **kwargs):
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def like(self, column, pattern):
        self.filters.append(("like", column, pattern))
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def single(self):
        return self

    def execute(self):
        return self._client.handle(self)


class FakeSupabaseClient:
    """Tracks calls and mimics PostgREST behaviour for the ``products`` table.

    ``read_only`` rejects writes like row level security does for the anon role.
    """

    def __init__(
        self,
        rows: list[dict] | None = None,
        read_only: bool = False,
        missing_tables: tuple[str, ...] = ("non_existent_table", "_test_connection"),
        enforce_constraints: bool = True,
        error: APIError | None = None,
    ):
        self.rows = rows if rows is not None else []
        self.read_only = read_only
        self.missing_tables = missing_tables
        self.enforce_constraints = enforce_constraints
        self.error = error
        self.calls: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def _matches(self, row: dict, filters) -> bool:
        for kind, column, value in filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "like" and not str(row.get(column, "")).startswith(str(value).rstrip("%")):
                return False
        return True

    def handle(self, query: FakeQuery):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        if query.table in self.missing_tables:
            raise api_error("42P01", f'relation "public.{query.table}" does not exist')

        if query.operation == "select":
            rows = [r for r in self.rows if self._matches(r, query.filters)]
            if query.row_limit is not None:
                rows = rows[: query.row_limit]
            return SimpleNamespace(data=rows)

        if self.read_only:
            raise api_error("42501", 'new row violates row-level security policy for table "products"')

        if query.operation == "insert":
            payloads = query.payload if isinstance(query.payload, list) else [query.payload]
            created = []
            for payload in payloads:
                if self.enforce_constraints and (
                    payload.get("price", 0) < 0 or payload.get("stock_quantity", 0) < 0
                ):
                    raise api_error("23514", "new row violates check constraint")
                row = {
                    "id": str(uuid.uuid4()),
                    "description": None,
                    "stock_quantity": 0,
                    "created_at": "2025-08-04T00:00:00+00:00",
                    "updated_at": "2025-08-04T00:00:00+00:00",
                    **payload,
                }
                created.append(row)
            self.rows.extend(created)
            return SimpleNamespace(data=created)

        matched = [r for r in self.rows if self._matches(r, query.filters)]
        if query.operation == "update":
            for row in matched:
                row.update(query.payload)
            return SimpleNamespace(data=matched)

        self.rows[:] = [r for r in self.rows if r not in matched]
        return SimpleNamespace(data=matched)
