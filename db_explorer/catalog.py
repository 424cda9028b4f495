"""
Schema catalog: table enumeration and column kind discovery.

The catalog reads `information_schema` on every call. Nothing is cached, so
a table altered between two requests is seen in its new shape by the second
one.

Kind mapping:
    text / character varying       -> TEXT_REQUIRED or TEXT_NULLABLE
    integer / smallint             -> INT_REQUIRED or INT_NULLABLE
    anything else                  -> UNREPRESENTED

The first integer column in ordinal order becomes the table's identity
column. It is not necessarily a declared primary key.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import psycopg

from db_explorer.domain.models import Column, ColumnKind, TableDescriptor
from db_explorer.errors import ConnectivityError, SchemaError
from db_explorer.utils.logging import get_logger

log = get_logger(__name__)

TEXT_TYPES = frozenset({"text", "character varying", "varchar"})
INT_TYPES = frozenset({"integer", "int", "int4", "smallint", "int2"})

_LIST_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = %s AND table_type = 'BASE TABLE'
    ORDER BY table_name;
"""

_DESCRIBE_TABLE_SQL = """
    SELECT column_name, data_type, is_nullable
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position;
"""


def kind_for(db_type: str, nullable: bool) -> ColumnKind:
    """Map a database type name and nullability flag to a ColumnKind."""
    type_name = db_type.strip().lower()
    if type_name in TEXT_TYPES:
        return ColumnKind.TEXT_NULLABLE if nullable else ColumnKind.TEXT_REQUIRED
    if type_name in INT_TYPES:
        return ColumnKind.INT_NULLABLE if nullable else ColumnKind.INT_REQUIRED
    return ColumnKind.UNREPRESENTED


def build_descriptor(
    name: str, rows: List[tuple], schema_name: Optional[str] = None
) -> TableDescriptor:
    """
    Build a TableDescriptor from `(column_name, data_type, is_nullable)` rows
    given in ordinal order.
    """
    columns: Dict[str, Column] = {}
    identity: Optional[str] = None
    for column_name, data_type, is_nullable in rows:
        nullable = str(is_nullable).upper() == "YES"
        kind = kind_for(data_type, nullable)
        if kind is ColumnKind.UNREPRESENTED:
            log.debug(
                "Column type not represented",
                extra={"table": name, "column": column_name, "db_type": data_type},
            )
        if identity is None and kind.is_int:
            identity = column_name
        columns[column_name] = Column(
            name=column_name, db_type=data_type, nullable=nullable, kind=kind
        )
    return TableDescriptor(
        name=name, schema_name=schema_name, columns=columns, identity_column=identity
    )


class SchemaCatalog:
    """
    Reads table names and column metadata through a connection pool.

    Parameters
    ----------
    pool
        Any object exposing `connection()` as a context manager yielding a
        psycopg connection (normally a `psycopg_pool.ConnectionPool`).
    schema : str
        Database schema whose tables are exposed.
    """

    def __init__(self, pool, schema: str = "public") -> None:
        self._pool = pool
        self.schema = schema

    def list_tables(self) -> List[str]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(_LIST_TABLES_SQL, (self.schema,))
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            log.exception("Listing tables failed", extra={"schema": self.schema})
            raise ConnectivityError(f"cannot list tables: {exc}") from exc

        names: List[str] = []
        for (table_name,) in rows:
            if table_name not in names:
                names.append(table_name)
        return names

    def describe_table(self, name: str) -> TableDescriptor:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(_DESCRIBE_TABLE_SQL, (self.schema, name))
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            log.exception("Describing table failed", extra={"table": name})
            raise SchemaError(f"cannot describe table {name}: {exc}") from exc

        if not rows:
            raise SchemaError(f"no columns reported for table {name}")

        descriptor = build_descriptor(name, rows, schema_name=self.schema)
        log.debug(
            "Table described",
            extra={
                "table": name,
                "columns": len(descriptor.columns),
                "identity_column": descriptor.identity_column,
            },
        )
        return descriptor


__all__ = ["SchemaCatalog", "build_descriptor", "kind_for"]
