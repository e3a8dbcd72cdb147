"""
Fixtures compartidas.

FakeSupabase reemplaza al cliente de Supabase con un query builder en
memoria que implementa el subconjunto que usan los repositorios.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Optional

import pytest
from postgrest.exceptions import APIError

from estospaces.api import create_app
from estospaces.config import Settings
from estospaces.database import SupabaseClient


def _coerce(value):
    """Compara timestamps ISO como datetimes."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.filters = []
        self.orders = []
        self.window: Optional[tuple[int, int]] = None
        self.max_rows: Optional[int] = None
        self.count = None
        self.operation = "select"
        self.payload = None
        self.on_conflict = None

    # SELECT
    def select(self, *columns, count=None):
        self.count = count
        return self

    def in_(self, column, values):
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda r: needle in str(r.get(column) or "").lower())
        return self

    def gte(self, column, value):
        self.filters.append(lambda r: _coerce(r.get(column)) >= _coerce(value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda r: _coerce(r.get(column)) <= _coerce(value))
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def limit(self, size):
        self.max_rows = size
        return self

    # Escrituras
    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def upsert(self, data, on_conflict=None):
        self.operation = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    def execute(self):
        self.db.executed.append(self)

        error = self.db.errors.get(self.table)
        if error is not None:
            raise error
        for column, _ in self.orders:
            if column in self.db.failing_orders:
                raise self.db.failing_orders[column]

        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            row = {"id": f"{self.table}-{len(rows) + 1}", **self.payload}
            rows.append(row)
            return SimpleNamespace(data=[row], count=None)

        if self.operation == "upsert":
            key = self.on_conflict
            for i, existing in enumerate(rows):
                if key and existing.get(key) == self.payload.get(key):
                    rows[i] = {**existing, **self.payload}
                    return SimpleNamespace(data=[rows[i]], count=None)
            rows.append(dict(self.payload))
            return SimpleNamespace(data=[dict(self.payload)], count=None)

        result = [dict(r) for r in rows if all(f(r) for f in self.filters)]
        total = len(result)

        # Orden estable: se aplica desde la última clave a la primera
        for column, desc in reversed(self.orders):
            result.sort(key=lambda r: r.get(column), reverse=desc)

        if self.window is not None:
            start, end = self.window
            # PostgREST responde 416 si el offset supera el total
            if start >= total > 0:
                raise api_error("Requested range not satisfiable", code="PGRST103")
            result = result[start:end + 1]
        if self.max_rows is not None:
            result = result[: self.max_rows]

        return SimpleNamespace(data=result, count=total if self.count else None)


class FakeAuth:
    def __init__(self, tokens: dict[str, str]):
        self.tokens = tokens

    def get_user(self, token):
        user_id = self.tokens.get(token)
        return SimpleNamespace(user=SimpleNamespace(id=user_id) if user_id else None)


class FakeSupabase:
    """Cliente de Supabase en memoria."""

    def __init__(self, tables: Optional[dict] = None, tokens: Optional[dict] = None):
        self.tables = tables or {}
        self.errors: dict[str, Exception] = {}
        self.failing_orders: dict[str, Exception] = {}
        self.executed: list[FakeQuery] = []
        self.auth = FakeAuth(tokens or {"valid-token": "user-1"})

    def table(self, name):
        return FakeQuery(self, name)


def api_error(message: str, code: str = "PGRST000") -> APIError:
    return APIError({"message": message, "code": code, "hint": None, "details": None})


def make_property(
    property_id: str,
    listing_type: str = "rent",
    status: str = "online",
    days_ago: float = 1,
    views: int = 0,
    inquiries: int = 0,
    favorites: int = 0,
    featured: bool = False,
    price: float = 1000,
    city: str = "London",
    postcode: str = "SW1A 1AA",
    country: str = "UK",
    bedrooms: int = 2,
) -> dict:
    created = datetime.now(timezone.utc) - timedelta(days=days_ago)
    return {
        "id": property_id,
        "title": f"Property {property_id}",
        "listing_type": listing_type,
        "status": status,
        "price": price,
        "city": city,
        "postcode": postcode,
        "country": country,
        "bedrooms": bedrooms,
        "views": views,
        "inquiries": inquiries,
        "favorites": favorites,
        "featured": featured,
        "created_at": created.isoformat(),
    }


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        supabase_url="https://test.supabase.co",
        supabase_key="anon-key",
        supabase_service_key="service-key",
        zoopla_api_key=None,
        public_base_url=None,
        allowed_origin="http://localhost:5173",
        environment="test",
    )


@pytest.fixture
def properties():
    """3 rent + 2 sale visibles, más uno en borrador que nunca debe aparecer."""
    return [
        make_property("rent-1", "rent", "online", days_ago=1, views=50, price=900),
        make_property("rent-2", "rent", "active", days_ago=2, views=10, price=1500),
        make_property("rent-3", "rent", "online", days_ago=3, views=30, price=2500),
        make_property("sale-1", "sale", "online", days_ago=4, views=80, price=250000),
        make_property("sale-2", "sale", "active", days_ago=5, views=5, price=400000),
        make_property("draft-1", "rent", "draft", days_ago=0.5, views=999, price=1000),
    ]


@pytest.fixture
def fake_supabase(properties):
    return FakeSupabase(tables={"properties": properties})


@pytest.fixture
def supabase_client(fake_supabase, settings):
    return SupabaseClient(fake_supabase, settings)


@pytest.fixture
def api_client(aiohttp_client, settings, supabase_client):
    """Cliente HTTP contra la app con el backend en memoria."""

    async def _make(client=supabase_client, zoopla=None, app_settings=settings):
        return await aiohttp_client(create_app(app_settings, client, zoopla))

    return _make
