"""Report Data Table

Column descriptions plus rows of typed cells, serialised into the
cols/rows JSON shape consumed by the charting front end.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel, Field

from portal_stats.lib.errors import TypeMismatchError


class ValueType(str, Enum):
    """Type of every cell in a column."""
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    TEXT = "string"


@dataclass(frozen=True)
class ColumnDescription:
    """One column of a report table."""
    id: str
    type: ValueType
    label: str


def _matches(value_type: ValueType, value: Any) -> bool:
    if value_type is ValueType.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if value_type is ValueType.DATETIME:
        return isinstance(value, datetime)
    if value_type is ValueType.DATE:
        return isinstance(value, date) and not isinstance(value, datetime)
    return isinstance(value, str)


def _serialize(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class DataTable:
    """Table of typed cells with a fixed, ordered set of columns.

    Rows are validated as they are added: a row must have one cell per column
    and every cell must match its column's value type.
    """

    def __init__(self):
        self.columns: list[ColumnDescription] = []
        self.rows: list[list[Any]] = []

    def add_column(self, column: ColumnDescription) -> None:
        if self.rows:
            raise ValueError("Columns cannot be added once the table has rows")
        if any(c.id == column.id for c in self.columns):
            raise ValueError(f"Duplicate column id '{column.id}'")
        self.columns.append(column)

    def add_columns(self, columns: Sequence[ColumnDescription]) -> None:
        for column in columns:
            self.add_column(column)

    def add_row(self, values: Sequence[Any]) -> None:
        """Append a row.

        Raises:
            TypeMismatchError: If the row length differs from the column count
                or a cell does not match its column type
        """
        if len(values) != len(self.columns):
            raise TypeMismatchError(
                f"Row has {len(values)} cells but the table has {len(self.columns)} columns"
            )
        for column, value in zip(self.columns, values):
            if not _matches(column.type, value):
                raise TypeMismatchError(
                    f"Value {value!r} does not match type '{column.type.value}' "
                    f"of column '{column.id}'"
                )
        self.rows.append(list(values))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> dict:
        return {
            'cols': [
                {'id': c.id, 'label': c.label, 'type': c.type.value}
                for c in self.columns
            ],
            'rows': [
                {'c': [{'v': _serialize(v)} for v in row]}
                for row in self.rows
            ],
        }


# Response models (OpenAPI schema for the data endpoint)


class DataTableColumn(BaseModel):
    id: str = Field(..., description='Column identifier')
    label: str = Field(..., description='Column header shown in the chart')
    type: ValueType = Field(..., description='Type of every cell in the column')


class DataTableCell(BaseModel):
    v: Any = Field(..., description='Cell value (dates as ISO 8601 strings)')


class DataTableRow(BaseModel):
    c: list[DataTableCell] = Field(..., description='One cell per column')


class DataTableResponse(BaseModel):
    """Report data in the charting front end's table format."""
    cols: list[DataTableColumn]
    rows: list[DataTableRow]

    model_config = {
        "json_schema_extra": {
            "example": {
                "cols": [
                    {"id": "date", "label": "Date", "type": "date"},
                    {"id": "local.Everyone/3", "label": "Welcome", "type": "number"}
                ],
                "rows": [
                    {"c": [{"v": "2024-03-01"}, {"v": 42}]},
                    {"c": [{"v": "2024-03-02"}, {"v": 0}]}
                ]
            }
        }
    }
