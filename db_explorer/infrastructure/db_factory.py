"""
Database connection factory utilities for DB Explorer.

Provides centralized management of the process-wide psycopg connection pool.
The PoolManager singleton ensures the pool is closed on application exit.

Requests never retry: a failed acquisition surfaces immediately. The only
retry lives in `wait_for_database`, used once at server startup so the API
can come up alongside its database container.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from db_explorer.config import Settings, get_settings
from db_explorer.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


class PoolManager:
    """
    Thread-safe singleton for managing the database connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._pool: Optional[ConnectionPool] = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_pool(self, settings: Optional[Settings] = None) -> ConnectionPool:
        """
        Get or create the connection pool.

        Parameters
        ----------
        settings : Settings | None
            Settings used on first creation; defaults to `get_settings()`.

        Returns
        -------
        ConnectionPool
            The managed pool instance, already opened.
        """
        with self._lock:
            if self._pool is None:
                settings = settings or get_settings()
                self._pool = ConnectionPool(
                    conninfo=build_dsn(settings),
                    min_size=settings.pool_min_size,
                    max_size=settings.pool_max_size,
                    timeout=settings.pool_timeout,
                    open=False,
                )
                self._pool.open()
                log.info(
                    "Connection pool opened",
                    extra={
                        "db_host": settings.db_host,
                        "db_name": settings.db_name,
                        "pool_min_size": settings.pool_min_size,
                        "pool_max_size": settings.pool_max_size,
                    },
                )
            return self._pool

    @contextmanager
    def connection(self) -> Generator[Connection, None, None]:
        """
        Context manager for obtaining a connection from the pool.

        Example
        -------
            manager = PoolManager()
            with manager.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1")
        """
        pool = self.get_pool()
        with pool.connection() as conn:
            yield conn

    def close_all(self) -> None:
        """
        Close the managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._pool is not None:
                try:
                    self._pool.close()
                except Exception:
                    log.warning("Connection pool did not close cleanly", exc_info=True)
                finally:
                    self._pool = None


def get_pool(settings: Optional[Settings] = None) -> ConnectionPool:
    """
    Get or create the shared connection pool via PoolManager.
    """
    return PoolManager().get_pool(settings)


def close_pool() -> None:
    PoolManager().close_all()


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, PoolTimeout)),
    reraise=True,
)
def wait_for_database(pool: ConnectionPool, timeout: float = 5.0) -> None:
    """
    Block until the pool holds its minimum number of working connections.

    Retries up to 5 times with exponential backoff. Only meant for startup;
    request handling never calls this.

    Raises
    ------
    psycopg_pool.PoolTimeout
        If the database is still unreachable after all attempts.
    """
    log.info("Waiting for database", extra={"timeout": timeout})
    pool.wait(timeout=timeout)
    with pool.connection() as conn:
        conn.execute("SELECT 1")


__all__ = [
    "PoolManager",
    "build_dsn",
    "close_pool",
    "get_pool",
    "wait_for_database",
]
