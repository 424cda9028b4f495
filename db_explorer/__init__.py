"""
DB Explorer - a generic REST API over an arbitrary PostgreSQL schema.

Tables and columns are discovered at runtime; no per-table code exists.
The package is organized around:

- Schema catalog (table enumeration, column kind discovery)
- Value coercion (driver values to JSON, JSON bodies to bound values)
- Query builder (parameterized SELECT/INSERT/UPDATE/DELETE)
- Explorer service and a thin FastAPI surface
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from db_explorer.catalog import SchemaCatalog, kind_for
from db_explorer.config import Settings, get_settings
from db_explorer.domain.models import Column, ColumnKind, Record, TableDescriptor
from db_explorer.errors import (
    ConnectivityError,
    DMLError,
    ExplorerError,
    NotFoundError,
    SchemaError,
    ValidationError,
)
from db_explorer.service import Explorer
from db_explorer.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Schema
    "Column",
    "ColumnKind",
    "Record",
    "SchemaCatalog",
    "TableDescriptor",
    "kind_for",
    # Service
    "Explorer",
    # Errors
    "ExplorerError",
    "ConnectivityError",
    "DMLError",
    "NotFoundError",
    "SchemaError",
    "ValidationError",
    # Logging
    "configure_logging",
    "get_logger",
]
