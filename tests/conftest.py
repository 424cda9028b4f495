"""
Pytest configuration for DB Explorer.

Provides fixtures for:
- An in-memory fake of the connection pool used by unit tests
- A FastAPI TestClient wired to that fake
- Database connection management and a scratch table for integration tests
"""

from __future__ import annotations

import os
from typing import Any, Dict, Generator, List, Optional, Tuple

import psycopg
import pytest
from fastapi.testclient import TestClient

from db_explorer.api import create_app, get_explorer
from db_explorer.config import Settings
from db_explorer.service import Explorer

# (column_name, data_type, is_nullable) in ordinal order
USERS_COLUMNS = [
    ("user_id", "integer", "NO"),
    ("login", "character varying", "NO"),
    ("password", "character varying", "NO"),
    ("email", "character varying", "NO"),
    ("info", "text", "NO"),
    ("updated", "character varying", "YES"),
]

ITEMS_COLUMNS = [
    ("id", "integer", "NO"),
    ("title", "character varying", "NO"),
    ("description", "text", "NO"),
    ("updated", "character varying", "YES"),
    ("rank", "integer", "YES"),
    ("price", "numeric", "YES"),
]


class FakeCursor:
    def __init__(self, db: "FakeDatabase", row_factory: Any = None) -> None:
        self._db = db
        self._row_factory = row_factory
        self._rows: List[Any] = []
        self.rowcount = -1

    def execute(self, query: Any, params: Tuple[Any, ...] = ()) -> None:
        if self._db.error is not None:
            raise self._db.error
        if isinstance(query, str):
            self._rows = self._db.catalog_rows(query, params)
            return
        if self._db.statement_error is not None:
            raise self._db.statement_error
        self._db.executed.append((query.as_string(None), tuple(params)))
        result = self._db.results.pop(0) if self._db.results else []
        if isinstance(result, int):
            self.rowcount = result
            self._rows = []
        else:
            self._rows = list(result)
            self.rowcount = len(self._rows)

    def fetchall(self) -> List[Any]:
        return list(self._rows)

    def fetchone(self) -> Optional[Any]:
        return self._rows[0] if self._rows else None

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


class FakeConnection:
    def __init__(self, db: "FakeDatabase") -> None:
        self._db = db

    def cursor(self, row_factory: Any = None) -> FakeCursor:
        return FakeCursor(self._db, row_factory=row_factory)

    def __enter__(self) -> "FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


class FakeDatabase:
    """
    Pool stand-in: answers information_schema queries from `tables` and
    every other statement from the `results` queue (row lists or rowcounts).
    """

    def __init__(self, tables: Dict[str, List[Tuple[str, str, str]]]) -> None:
        self.tables = tables
        self.results: List[Any] = []
        self.executed: List[Tuple[str, Tuple[Any, ...]]] = []
        self.error: Optional[Exception] = None
        self.statement_error: Optional[Exception] = None
        self.connections = 0

    def connection(self) -> FakeConnection:
        self.connections += 1
        return FakeConnection(self)

    def catalog_rows(self, query: str, params: Tuple[Any, ...]) -> List[Any]:
        if "information_schema.tables" in query:
            return [(name,) for name in sorted(self.tables)]
        if "information_schema.columns" in query:
            return list(self.tables.get(params[1], []))
        raise AssertionError(f"unexpected catalog query: {query}")


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase({"users": list(USERS_COLUMNS), "items": list(ITEMS_COLUMNS)})


@pytest.fixture
def unit_settings() -> Settings:
    return Settings(db_schema="public", default_offset=0, default_limit=5)


@pytest.fixture
def explorer(fake_db: FakeDatabase, unit_settings: Settings) -> Explorer:
    return Explorer(fake_db, unit_settings)


@pytest.fixture
def client(explorer: Explorer) -> Generator[TestClient, None, None]:
    app = create_app()
    app.dependency_overrides[get_explorer] = lambda: explorer
    yield TestClient(app)
    app.dependency_overrides.clear()


# --------------------------------------------------------------------------
# Integration fixtures (real PostgreSQL)
# --------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "db_explorer"),
        db_schema="public",
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_pool(test_dsn: str, db_connection_available: bool):
    """
    Provide a session-scoped connection pool for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    from psycopg_pool import ConnectionPool

    pool = ConnectionPool(conninfo=test_dsn, min_size=1, max_size=4, open=True)
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture(scope="function")
def items_table(db_pool) -> Generator[str, None, None]:
    """
    Create a scratch `explorer_items` table, dropped after the test.
    """
    with db_pool.connection() as conn:
        conn.execute("DROP TABLE IF EXISTS public.explorer_items;")
        conn.execute(
            """
            CREATE TABLE public.explorer_items (
                id SERIAL PRIMARY KEY,
                title VARCHAR(255) NOT NULL,
                description TEXT NOT NULL,
                updated TEXT NULL,
                rank INTEGER NULL
            );
            """
        )
        conn.execute(
            """
            INSERT INTO public.explorer_items (title, description, updated, rank) VALUES
                ('database/sql', 'Package sql provides a generic interface', 'rvasily', 1),
                ('memcache', 'Memcached client', NULL, NULL),
                ('net/http', 'HTTP client and server', 'admin', 3);
            """
        )
    yield "explorer_items"
    with db_pool.connection() as conn:
        conn.execute("DROP TABLE IF EXISTS public.explorer_items;")


@pytest.fixture
def live_client(db_pool, test_settings: Settings, items_table: str):
    app = create_app()
    live_explorer = Explorer(db_pool, test_settings)
    app.dependency_overrides[get_explorer] = lambda: live_explorer
    yield TestClient(app)
    app.dependency_overrides.clear()
