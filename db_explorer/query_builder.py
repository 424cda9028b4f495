"""
SQL statement construction for DB Explorer.

Every builder takes a TableDescriptor and returns a Statement: a composed
psycopg SQL object plus its bound parameters. Table and column names are
only ever taken from the descriptor and are quoted with `sql.Identifier`;
values (including the record id, offset and limit) are always parameters.

Pagination is keyset based: `offset` is compared with `>` against the
identity column, it is not a row skip count.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from psycopg import sql

from db_explorer.domain.models import FieldSet, TableDescriptor
from db_explorer.errors import NotFoundError, ValidationError, invalid_field

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 5

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_NON_NEGATIVE_RE = re.compile(r"^\+?[0-9]+$")


@dataclass(frozen=True)
class Statement:
    """A composed SQL statement and its bound parameters."""

    query: sql.Composed
    params: Tuple[Any, ...] = ()

    def as_string(self, context: Any = None) -> str:
        return self.query.as_string(context)


@dataclass(frozen=True)
class Page:
    """Keyset window for SELECT-all. None means the clause is omitted."""

    offset: Optional[int] = None
    limit: Optional[int] = None


def _parse_non_negative(raw: Optional[str], default: int) -> Optional[int]:
    if raw is None or raw == "":
        return None
    raw = raw.strip()
    if not _NON_NEGATIVE_RE.match(raw):
        return default
    return int(raw)


def parse_page(
    offset: Optional[str],
    limit: Optional[str],
    default_offset: int = DEFAULT_OFFSET,
    default_limit: int = DEFAULT_LIMIT,
) -> Page:
    """
    Parse raw `offset`/`limit` query-string values.

    An absent (or empty) parameter adds no clause: it is NOT replaced by
    `default_offset` or `default_limit`, so `GET /<table>` without parameters
    returns every row. Only a present value that is not a non-negative
    integer falls back to the default.
    """
    return Page(
        offset=_parse_non_negative(offset, default_offset),
        limit=_parse_non_negative(limit, default_limit),
    )


def parse_record_id(raw: Any) -> int:
    """
    Validate a record id taken from the URL path.

    Raises
    ------
    ValidationError
        If the id is not an integer in the 32-bit signed range.
    """
    text = str(raw).strip()
    if not _INTEGER_RE.match(text):
        raise ValidationError("invalid record id")
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValidationError("invalid record id")
    return value


def _table(table: TableDescriptor) -> sql.Identifier:
    if table.schema_name:
        return sql.Identifier(table.schema_name, table.name)
    return sql.Identifier(table.name)


def _identity(table: TableDescriptor) -> sql.Identifier:
    if table.identity_column is None:
        raise NotFoundError("record not found")
    return sql.Identifier(table.identity_column)


def _checked_columns(table: TableDescriptor, fields: FieldSet) -> list:
    names = list(fields)
    for name in names:
        if name not in table:
            raise invalid_field(name)
    return names


def select_all(table: TableDescriptor, page: Page = Page()) -> Statement:
    """SELECT * with optional `identity > offset`, ascending order and LIMIT."""
    parts = [sql.SQL("SELECT * FROM {}").format(_table(table))]
    params: list = []
    if table.identity_column is not None:
        identity = sql.Identifier(table.identity_column)
        if page.offset is not None:
            parts.append(sql.SQL("WHERE {} > %s").format(identity))
            params.append(page.offset)
        parts.append(sql.SQL("ORDER BY {}").format(identity))
    if page.limit is not None:
        parts.append(sql.SQL("LIMIT %s"))
        params.append(page.limit)
    return Statement(sql.SQL(" ").join(parts), tuple(params))


def select_by_id(table: TableDescriptor, record_id: int) -> Statement:
    query = sql.SQL("SELECT * FROM {} WHERE {} = %s").format(
        _table(table), _identity(table)
    )
    return Statement(query, (record_id,))


def insert(table: TableDescriptor, fields: FieldSet) -> Statement:
    """
    INSERT the given fields, returning the new identity value when the table
    has an identity column.
    """
    names = _checked_columns(table, fields)
    if names:
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            _table(table),
            sql.SQL(", ").join(sql.Identifier(name) for name in names),
            sql.SQL(", ").join(sql.Placeholder() for _ in names),
        )
    else:
        query = sql.SQL("INSERT INTO {} DEFAULT VALUES").format(_table(table))
    if table.identity_column is not None:
        query = query + sql.SQL(" RETURNING {}").format(sql.Identifier(table.identity_column))
    return Statement(query, tuple(fields[name] for name in names))


def update(table: TableDescriptor, record_id: int, fields: FieldSet) -> Statement:
    """UPDATE the given fields of one row; the identity column is never SET."""
    identity = _identity(table)
    names = [name for name in _checked_columns(table, fields) if name != table.identity_column]
    if not names:
        raise ValidationError("no fields to update")
    assignments = sql.SQL(", ").join(
        sql.SQL("{} = %s").format(sql.Identifier(name)) for name in names
    )
    query = sql.SQL("UPDATE {} SET {} WHERE {} = %s").format(
        _table(table), assignments, identity
    )
    return Statement(query, tuple(fields[name] for name in names) + (record_id,))


def delete(table: TableDescriptor, record_id: int) -> Statement:
    query = sql.SQL("DELETE FROM {} WHERE {} = %s").format(
        _table(table), _identity(table)
    )
    return Statement(query, (record_id,))


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_OFFSET",
    "Page",
    "Statement",
    "delete",
    "insert",
    "parse_page",
    "parse_record_id",
    "select_all",
    "select_by_id",
    "update",
]
