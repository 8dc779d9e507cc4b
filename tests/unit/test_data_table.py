"""Unit tests for the report data table."""

from datetime import date, datetime

import pytest

from portal_stats.lib.errors import TypeMismatchError
from portal_stats.models.data_table import ColumnDescription, DataTable, ValueType


@pytest.fixture
def table():
    table = DataTable()
    table.add_columns([
        ColumnDescription('date', ValueType.DATE, 'Date'),
        ColumnDescription('Welcome', ValueType.NUMBER, 'Welcome'),
    ])
    return table


class TestDataTable:

    def test_add_row(self, table):
        table.add_row([date(2024, 3, 1), 12])

        assert table.row_count == 1
        assert table.rows == [[date(2024, 3, 1), 12]]

    def test_row_length_must_match_columns(self, table):
        with pytest.raises(TypeMismatchError):
            table.add_row([date(2024, 3, 1)])

    def test_cell_type_must_match_column(self, table):
        with pytest.raises(TypeMismatchError) as exc_info:
            table.add_row([date(2024, 3, 1), '12'])

        assert exc_info.value.error_code == 'REPORT_VALUE_TYPE_MISMATCH'
        assert isinstance(exc_info.value, TypeError)
        assert table.row_count == 0

    def test_datetime_is_not_a_date_cell(self, table):
        with pytest.raises(TypeMismatchError):
            table.add_row([datetime(2024, 3, 1, 12), 1])

    def test_bool_is_not_a_number_cell(self, table):
        with pytest.raises(TypeMismatchError):
            table.add_row([date(2024, 3, 1), True])

    def test_columns_are_fixed_once_rows_exist(self, table):
        table.add_row([date(2024, 3, 1), 1])

        with pytest.raises(ValueError):
            table.add_column(ColumnDescription('Academics', ValueType.NUMBER, 'Academics'))

    def test_column_ids_must_be_unique(self, table):
        with pytest.raises(ValueError, match='Duplicate column id'):
            table.add_column(ColumnDescription('Welcome', ValueType.NUMBER, 'Welcome (again)'))

        assert [c.id for c in table.columns] == ['date', 'Welcome']

    def test_to_dict(self):
        table = DataTable()
        table.add_column(ColumnDescription('date', ValueType.DATETIME, 'Date'))
        table.add_column(ColumnDescription('Welcome - Everyone', ValueType.NUMBER, 'Welcome - Everyone'))
        table.add_row([datetime(2024, 3, 1, 9, 30), 0])

        assert table.to_dict() == {
            'cols': [
                {'id': 'date', 'label': 'Date', 'type': 'datetime'},
                {'id': 'Welcome - Everyone', 'label': 'Welcome - Everyone', 'type': 'number'},
            ],
            'rows': [{'c': [{'v': '2024-03-01T09:30:00'}, {'v': 0}]}],
        }

    def test_empty_table(self):
        assert DataTable().to_dict() == {'cols': [], 'rows': []}
