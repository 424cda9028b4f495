"""
Infrastructure package for DB Explorer.

Centralizes database connectivity concerns (DSN, pooling, startup wait).
Keep this layer focused on I/O and resource management, decoupled from
catalog/query logic.
"""

from db_explorer.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    close_pool,
    get_pool,
    wait_for_database,
)

__all__ = [
    "PoolManager",
    "build_dsn",
    "close_pool",
    "get_pool",
    "wait_for_database",
]
