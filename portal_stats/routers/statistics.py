"""Statistics report API endpoints.

Route table for the tab render report: the list of available reports, the
default form with its selectable tabs/groups/intervals, and the report data
in the charting table format.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.orm import Session

from portal_stats.lib.config import Settings, get_settings
from portal_stats.lib.database import get_db_session
from portal_stats.lib.errors import InvalidReportFormError
from portal_stats.models.aggregation_interval import AggregationInterval
from portal_stats.models.data_table import DataTableResponse
from portal_stats.models.report_form import TabRenderReportForm
from portal_stats.services.catalog_service import GroupLookupService, TabLookupService
from portal_stats.services.statistics_report_service import StatisticsReportService
from portal_stats.services.tab_render_aggregation_store import TabRenderAggregationStore
from portal_stats.services.tab_render_report import TabRenderReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/v1/statistics', tags=['Statistics'])


# Pydantic models for responses


class ReportDescriptor(BaseModel):
  """A report the statistics service can render."""

  report_name: str = Field(..., description='Report identifier')
  data_resource_id: str = Field(..., description='Resource id of the report data')
  title: str = Field(..., description='Human-readable report title')


class TabOption(BaseModel):
  id: int
  display_string: str


class GroupOption(BaseModel):
  id: int
  group_service: str
  group_name: str


class IntervalOption(BaseModel):
  value: AggregationInterval
  label: str


class TabRenderFormResponse(BaseModel):
  """Default report form plus the choices it can be changed to."""

  report_name: str
  form: TabRenderReportForm
  tabs: List[TabOption]
  groups: List[GroupOption]
  intervals: List[IntervalOption]


# Dependencies


def get_tab_render_report(
  db: Session = Depends(get_db_session),
  settings: Settings = Depends(get_settings),
) -> TabRenderReport:
  return TabRenderReport(GroupLookupService(db), TabLookupService(db), settings)


def get_tab_render_aggregation_store(db: Session = Depends(get_db_session)) -> TabRenderAggregationStore:
  return TabRenderAggregationStore(db)


def get_tab_render_report_service(
  report: TabRenderReport = Depends(get_tab_render_report),
  store: TabRenderAggregationStore = Depends(get_tab_render_aggregation_store),
  settings: Settings = Depends(get_settings),
) -> StatisticsReportService:
  return StatisticsReportService(report, store, settings.max_report_rows)


# Endpoints


@router.get('/reports', response_model=List[ReportDescriptor])
async def list_reports():
  """List the reports this service renders."""
  return [
    ReportDescriptor(
      report_name=TabRenderReport.report_name,
      data_resource_id=TabRenderReport.data_resource_id,
      title=TabRenderReport.title,
    )
  ]


@router.get('/groups', response_model=List[GroupOption])
async def list_groups(report: TabRenderReport = Depends(get_tab_render_report)):
  """Groups with aggregated data, sorted by name."""
  return [GroupOption(**g.to_dict()) for g in report.get_groups()]


@router.get('/tabs', response_model=List[TabOption])
async def list_tabs(report: TabRenderReport = Depends(get_tab_render_report)):
  """Tabs with aggregated data, sorted by display string."""
  return [TabOption(id=t.id, display_string=t.display_string) for t in report.get_tabs()]


@router.get('/tab-render/form', response_model=TabRenderFormResponse)
async def get_tab_render_form(report: TabRenderReport = Depends(get_tab_render_report)):
  """Get the default tab render report form.

  Returns:
      The pre-filled form (daily interval, default group, first tab) and
      the tabs, groups and intervals it can be changed to
  """
  return TabRenderFormResponse(
    report_name=report.report_name,
    form=report.create_default_form(),
    tabs=[TabOption(id=t.id, display_string=t.display_string) for t in report.get_tabs()],
    groups=[GroupOption(**g.to_dict()) for g in report.get_groups()],
    intervals=[IntervalOption(value=i, label=i.display_name) for i in AggregationInterval],
  )


@router.get('/tab-render/data', response_model=DataTableResponse)
async def get_tab_render_data(
  interval: AggregationInterval = Query(AggregationInterval.DAY),
  start: Optional[date] = Query(None, description='First day (defaults to the default form span)'),
  end: Optional[date] = Query(None, description='Last day (defaults to today)'),
  groups: List[int] = Query([]),
  tabs: List[int] = Query([]),
  service: StatisticsReportService = Depends(get_tab_render_report_service),
  settings: Settings = Depends(get_settings),
):
  """Render the tab render report.

  One column per selected (group, tab) pair, one row per interval bucket
  between start and end. Buckets without data report 0 renders.

  Raises:
      404: Unknown group or tab id
      400: Date range spans more than MAX_REPORT_ROWS buckets
      422: start is after end
      503: Aggregation database unavailable
  """
  end_day = end or date.today()
  start_day = start or end_day - timedelta(days=settings.default_report_days - 1)

  try:
    form = TabRenderReportForm(interval=interval, start=start_day, end=end_day, groups=groups, tabs=tabs)
  except ValidationError as e:
    raise InvalidReportFormError(
      '; '.join(err['msg'] for err in e.errors())
    ) from e

  logger.info(
    f'Tab render report requested (interval={interval.value}, start={start_day}, '
    f'end={end_day}, groups={groups}, tabs={tabs})'
  )

  return service.render_report(form).to_dict()
