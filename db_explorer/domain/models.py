"""
Domain models for DB Explorer.

Describes a discovered table the way the rest of the package consumes it:
every column carries exactly one ColumnKind, resolved once when the table is
described, and the table knows which column acts as its identity.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

Value = Union[str, int, None]
Record = Dict[str, Value]
FieldSet = Dict[str, Optional[str]]


class ColumnKind(str, Enum):
    """Semantic type of a column."""

    TEXT_REQUIRED = "TextRequired"
    TEXT_NULLABLE = "TextNullable"
    INT_REQUIRED = "IntRequired"
    INT_NULLABLE = "IntNullable"
    UNREPRESENTED = "Unrepresented"

    @property
    def is_text(self) -> bool:
        return self in (ColumnKind.TEXT_REQUIRED, ColumnKind.TEXT_NULLABLE)

    @property
    def is_int(self) -> bool:
        return self in (ColumnKind.INT_REQUIRED, ColumnKind.INT_NULLABLE)

    @property
    def is_nullable(self) -> bool:
        return self in (ColumnKind.TEXT_NULLABLE, ColumnKind.INT_NULLABLE)

    @property
    def is_represented(self) -> bool:
        return self is not ColumnKind.UNREPRESENTED


class Column(BaseModel):
    """
    A single column of a discovered table.
    """

    name: str = Field(..., description="Column name as reported by the catalog.")
    db_type: str = Field(..., description="Database type name, e.g. 'character varying'.")
    nullable: bool = Field(..., description="Whether the column accepts NULL.")
    kind: ColumnKind = Field(..., description="Semantic kind derived from type and nullability.")

    model_config = {
        "frozen": True,
    }


class TableDescriptor(BaseModel):
    """
    Column map and identity column of one table, in schema order.
    """

    name: str = Field(..., description="Table name, unique within the schema.")
    schema_name: Optional[str] = Field(None, description="Schema the table lives in.")
    columns: Dict[str, Column] = Field(default_factory=dict)
    identity_column: Optional[str] = Field(
        None, description="First integer column in schema order, if any."
    )

    model_config = {
        "frozen": True,
    }

    def __contains__(self, column_name: object) -> bool:
        return column_name in self.columns

    def column(self, name: str) -> Optional[Column]:
        return self.columns.get(name)

    @property
    def represented_columns(self) -> List[Column]:
        return [col for col in self.columns.values() if col.kind.is_represented]


__all__ = [
    "Column",
    "ColumnKind",
    "FieldSet",
    "Record",
    "TableDescriptor",
    "Value",
]
