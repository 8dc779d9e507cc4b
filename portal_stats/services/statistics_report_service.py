"""Statistics report service.

Builds the data table for any aggregation report. The report-specific parts
(which columns exist, how they are keyed, labelled and filled) come from a
ReportDefinition; the store supplies the aggregations.

Table layout:
- first column is the bucket date ('date' for intervals of a day or longer,
  'datetime' otherwise)
- then the columns of every discriminator, in column map order
- one row per interval bucket between the form's start and end, whether or
  not any aggregation exists for it
"""

import time
from datetime import datetime
from itertools import islice
from typing import Any, Collection, Hashable, Iterable, List, Mapping, Optional, Protocol

from portal_stats.lib.errors import ReportRangeError, StatisticsReportError
from portal_stats.lib.metrics import record_report_build, record_report_request
from portal_stats.lib.structured_logger import StructuredLogger
from portal_stats.models.aggregation_interval import AggregationInterval
from portal_stats.models.data_table import ColumnDescription, DataTable, ValueType

logger = StructuredLogger(__name__)

DATE_COLUMN_ID = 'date'
DATE_COLUMN_LABEL = 'Date'


class ReportForm(Protocol):
    interval: AggregationInterval
    start_date_time: datetime
    end_date_time: datetime


class Aggregation(Protocol):
    date_time: datetime
    aggregation_discriminator: Hashable


class ReportDefinition(Protocol):
    """What a report contributes to the shared report pipeline."""

    report_name: str
    data_resource_id: str
    title: str

    def build_column_map(self, form: Any) -> Mapping[Hashable, List[Aggregation]]:
        ...

    def build_query_keys(self, discriminators: Iterable[Hashable], interval: AggregationInterval) -> Collection[Hashable]:
        ...

    def render_columns(self, discriminator: Any, form: Any) -> List[ColumnDescription]:
        ...

    def row_values(self, aggregation: Optional[Aggregation], form: Any) -> List[Any]:
        ...


class AggregationStore(Protocol):
    def get_aggregations(self, start: datetime, end: datetime, keys: Collection[Hashable]) -> List[Aggregation]:
        ...


class StatisticsReportService:
    """Assembles report data tables from a report definition and an aggregation store."""

    def __init__(self, definition: ReportDefinition, store: AggregationStore, max_report_rows: int):
        """Initialize the report service.

        Args:
            definition: Report-specific column mapping and formatting
            store: Source of aggregation records
            max_report_rows: Largest number of interval buckets a report may span
        """
        self.definition = definition
        self.store = store
        self.max_report_rows = max_report_rows

    def render_report(self, form: ReportForm) -> DataTable:
        """Build the data table for a report form.

        Raises:
            GroupNotFoundError, TabNotFoundError: If the form names unknown ids
            ReportRangeError: If the date range spans too many buckets
            ReportStoreError: If the aggregation store fails
            TypeMismatchError: If a row value does not match its column
        """
        report_name = self.definition.report_name
        started = time.perf_counter()

        try:
            table = self._build_table(form)
        except StatisticsReportError as e:
            record_report_request(report_name, e.error_code)
            raise

        duration = time.perf_counter() - started
        record_report_request(report_name, 'success')
        record_report_build(report_name, duration, table.row_count)
        logger.info(
            f'Built report {report_name}',
            report_name=report_name,
            interval=form.interval.value,
            column_count=len(table.columns),
            row_count=table.row_count,
            duration_ms=round(duration * 1000, 2),
        )
        return table

    def _build_table(self, form: ReportForm) -> DataTable:
        interval = form.interval
        # Unknown group or tab ids are reported before an oversized range
        column_map = self.definition.build_column_map(form)
        buckets = self._report_buckets(form)

        keys = self.definition.build_query_keys(column_map.keys(), interval)
        # The first bucket of a week/month/quarter/year report can start before form.start
        query_start = buckets[0] if buckets else form.start_date_time
        aggregations = self.store.get_aggregations(query_start, form.end_date_time, keys)

        for aggregation in aggregations:
            column = column_map.get(aggregation.aggregation_discriminator)
            if column is None:
                logger.debug(f'Ignoring aggregation outside the report columns: {aggregation!r}')
                continue
            column.append(aggregation)
        for column in column_map.values():
            column.sort(key=lambda a: a.date_time)

        table = DataTable()
        date_type = ValueType.DATE if interval.is_date_based else ValueType.DATETIME
        table.add_column(ColumnDescription(DATE_COLUMN_ID, date_type, DATE_COLUMN_LABEL))
        for discriminator in column_map:
            table.add_columns(self.definition.render_columns(discriminator, form))

        by_bucket = [
            {interval.truncate(a.date_time): a for a in column}
            for column in column_map.values()
        ]
        for bucket in buckets:
            row: List[Any] = [bucket.date() if interval.is_date_based else bucket]
            for column_aggregations in by_bucket:
                row.extend(self.definition.row_values(column_aggregations.get(bucket), form))
            table.add_row(row)

        return table

    def _report_buckets(self, form: ReportForm) -> List[datetime]:
        buckets = list(islice(
            form.interval.buckets_between(form.start_date_time, form.end_date_time),
            self.max_report_rows + 1
        ))
        if len(buckets) > self.max_report_rows:
            raise ReportRangeError(
                f'Report spans more than {self.max_report_rows} {form.interval.value} intervals; '
                f'choose a shorter date range or a coarser interval'
            )
        return buckets
