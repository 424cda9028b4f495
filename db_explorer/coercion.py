"""
Value coercion between the driver and JSON.

Read direction: a fetched row (column name -> driver value) becomes a Record
whose values are str, int or None, following each column's kind.

Write direction: a decoded JSON object becomes a FieldSet. Only JSON strings
(for text columns) and null (for nullable columns) are accepted. JSON numbers
are rejected for every kind, including integer columns: the API reads
integers but has no numeric write path.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from db_explorer.domain.models import Column, ColumnKind, FieldSet, Record, TableDescriptor
from db_explorer.errors import ValidationError, invalid_field
from db_explorer.utils.logging import get_logger

log = get_logger(__name__)

_JSON_NATIVE = (str, int, float, bool)


def coerce_value(column: Column, value: Any) -> Any:
    """Convert one driver value according to the column kind."""
    kind = column.kind
    if value is None:
        return None
    if kind in (ColumnKind.TEXT_REQUIRED, ColumnKind.TEXT_NULLABLE):
        return value if isinstance(value, str) else str(value)
    if kind in (ColumnKind.INT_REQUIRED, ColumnKind.INT_NULLABLE):
        return int(value)
    # Unrepresented, only reached in passthrough mode
    return value if isinstance(value, _JSON_NATIVE) else str(value)


def coerce_row(
    table: TableDescriptor,
    row: Mapping[str, Any],
    passthrough_unrepresented: bool = False,
) -> Record:
    """
    Build a Record from a fetched row.

    Columns the descriptor does not know are dropped. UNREPRESENTED columns
    are dropped unless `passthrough_unrepresented` is set.
    """
    record: Record = {}
    for name, value in row.items():
        column = table.column(name)
        if column is None:
            continue
        if not column.kind.is_represented and not passthrough_unrepresented:
            continue
        record[name] = coerce_value(column, value)
    return record


def validate_field(column: Column, value: Any) -> Optional[str]:
    """
    Check a JSON value against a column and return the value to bind.

    Raises
    ------
    ValidationError
        If the JSON type is incompatible with the column kind.
    """
    if value is None:
        if column.kind.is_represented and column.kind.is_nullable:
            return None
        raise invalid_field(column.name)
    if isinstance(value, str) and column.kind.is_text:
        return value
    # numbers, booleans, arrays, objects and anything aimed at an
    # unrepresented column
    raise invalid_field(column.name)


def validate_fields(
    table: TableDescriptor,
    body: Any,
    exclude_identity: bool = False,
) -> FieldSet:
    """
    Validate a decoded request body into a FieldSet.

    Keys that are not columns of `table` are ignored and never reach SQL.
    With `exclude_identity` the identity column is validated and then left
    out (update path). The first invalid field aborts validation.
    """
    if not isinstance(body, dict):
        raise ValidationError("request body must be a JSON object")

    fields: FieldSet = {}
    for name, value in body.items():
        column = table.column(name)
        if column is None:
            log.debug("Ignoring unknown field", extra={"table": table.name, "field": name})
            continue
        validated = validate_field(column, value)
        if exclude_identity and name == table.identity_column:
            log.debug("Ignoring identity field", extra={"table": table.name, "field": name})
            continue
        fields[name] = validated
    return fields


__all__ = ["coerce_row", "coerce_value", "validate_field", "validate_fields"]
