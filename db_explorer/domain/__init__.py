"""
Domain package for DB Explorer.

Exports the table/column descriptors and value aliases shared by the
catalog, the coercion engine, the query builder and the service.
"""

from db_explorer.domain.models import (
    Column,
    ColumnKind,
    FieldSet,
    Record,
    TableDescriptor,
    Value,
)

__all__ = [
    "Column",
    "ColumnKind",
    "FieldSet",
    "Record",
    "TableDescriptor",
    "Value",
]
