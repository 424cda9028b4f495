"""
Explorer service: one method per HTTP operation.

Each call re-reads the schema (table list, then the requested table's
columns), validates its inputs, builds a statement and runs it on a pooled
connection. Connections are acquired per statement and released on exit;
nothing survives the call.

Failures of read statements raise ConnectivityError, failures of
INSERT/UPDATE/DELETE raise DMLError. Both are logged with distinct messages
and answered with the same generic 500 by the HTTP layer.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import psycopg
from psycopg.rows import dict_row

from db_explorer import query_builder
from db_explorer.catalog import SchemaCatalog
from db_explorer.coercion import coerce_row, validate_fields
from db_explorer.config import Settings, get_settings
from db_explorer.domain.models import Record, TableDescriptor
from db_explorer.errors import ConnectivityError, DMLError, NotFoundError
from db_explorer.query_builder import Statement
from db_explorer.utils.logging import get_logger

log = get_logger(__name__)

UNKNOWN_TABLE = "unknown table"
RECORD_NOT_FOUND = "record not found"


class Explorer:
    """
    Generic CRUD over the tables of one database schema.

    Parameters
    ----------
    pool
        Object exposing `connection()` as a context manager, normally a
        `psycopg_pool.ConnectionPool`.
    settings : Settings | None
        Schema name, pagination defaults and passthrough flag.
    """

    def __init__(self, pool, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._pool = pool
        self.catalog = SchemaCatalog(pool, schema=self.settings.db_schema)

    # ------------------------------------------------------------------ schema

    def list_tables(self) -> List[str]:
        return self.catalog.list_tables()

    def table(self, name: str) -> TableDescriptor:
        """Describe `name` if it is one of the listed tables."""
        if name not in self.catalog.list_tables():
            raise NotFoundError(UNKNOWN_TABLE)
        return self.catalog.describe_table(name)

    # ------------------------------------------------------------------- reads

    def _fetch(self, statement: Statement) -> List[Dict[str, Any]]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(statement.query, statement.params)
                    return cur.fetchall()
        except psycopg.Error as exc:
            log.exception("Read statement failed")
            raise ConnectivityError(f"read failed: {exc}") from exc

    def _records(self, table: TableDescriptor, rows: List[Dict[str, Any]]) -> List[Record]:
        passthrough = self.settings.passthrough_unrepresented
        return [coerce_row(table, row, passthrough_unrepresented=passthrough) for row in rows]

    def read_records(
        self,
        table_name: str,
        offset: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> List[Record]:
        """
        Read a keyset window of rows. `offset` and `limit` are the raw
        query-string values.
        """
        table = self.table(table_name)
        page = query_builder.parse_page(
            offset,
            limit,
            default_offset=self.settings.default_offset,
            default_limit=self.settings.default_limit,
        )
        rows = self._fetch(query_builder.select_all(table, page))
        log.info(
            "Records read",
            extra={"table": table_name, "rows": len(rows), "offset": page.offset, "limit": page.limit},
        )
        return self._records(table, rows)

    def read_record(self, table_name: str, raw_id: Any) -> Record:
        table = self.table(table_name)
        record_id = query_builder.parse_record_id(raw_id)
        rows = self._fetch(query_builder.select_by_id(table, record_id))
        if not rows:
            raise NotFoundError(RECORD_NOT_FOUND)
        return self._records(table, rows[:1])[0]

    # ------------------------------------------------------------------ writes

    def _execute(self, statement: Statement, returning: bool = False) -> Any:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(statement.query, statement.params)
                    if returning:
                        row = cur.fetchone()
                        return row[0] if row else None
                    return cur.rowcount
        except psycopg.Error as exc:
            log.exception("DML statement failed")
            raise DMLError(f"statement failed: {exc}") from exc

    def create_record(self, table_name: str, body: Any) -> Dict[str, Any]:
        """
        Insert one row. Returns `{identity_column: new_id}`, or
        `{"inserted": count}` for a table without identity column.
        """
        table = self.table(table_name)
        fields = validate_fields(table, body)
        statement = query_builder.insert(table, fields)
        if table.identity_column is None:
            inserted = self._execute(statement)
            log.info("Record inserted", extra={"table": table_name, "inserted": inserted})
            return {"inserted": inserted}
        new_id = self._execute(statement, returning=True)
        log.info("Record inserted", extra={"table": table_name, "record_id": new_id})
        return {table.identity_column: new_id}

    def update_record(self, table_name: str, raw_id: Any, body: Any) -> int:
        table = self.table(table_name)
        record_id = query_builder.parse_record_id(raw_id)
        fields = validate_fields(table, body, exclude_identity=True)
        updated = self._execute(query_builder.update(table, record_id, fields))
        log.info(
            "Record updated",
            extra={"table": table_name, "record_id": record_id, "updated": updated},
        )
        return updated

    def delete_record(self, table_name: str, raw_id: Any) -> int:
        table = self.table(table_name)
        record_id = query_builder.parse_record_id(raw_id)
        deleted = self._execute(query_builder.delete(table, record_id))
        log.info(
            "Record deleted",
            extra={"table": table_name, "record_id": record_id, "deleted": deleted},
        )
        return deleted


__all__ = ["Explorer", "RECORD_NOT_FOUND", "UNKNOWN_TABLE"]
