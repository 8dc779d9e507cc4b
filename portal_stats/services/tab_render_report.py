"""Tab render report.

Reports how often portal tabs were rendered, one column per selected
(group, tab) pair and one row per interval bucket.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set

from portal_stats.lib.config import Settings
from portal_stats.models.aggregated_group import AggregatedGroupMapping
from portal_stats.models.aggregated_tab import AggregatedTabMapping
from portal_stats.models.aggregation_interval import AggregationInterval
from portal_stats.models.data_table import ColumnDescription, ValueType
from portal_stats.models.report_form import TabRenderReportForm
from portal_stats.models.tab_render_aggregation import (
    TabRenderAggregation,
    TabRenderAggregationKey,
    TabRenderDiscriminator,
    discriminator_sort_key,
)
from portal_stats.services.catalog_service import GroupLookupService, TabLookupService

REPORT_NAME = 'tabRender.totals'
DATA_TABLE_RESOURCE_ID = 'tabRenderData'
REPORT_TITLE = 'Tab Render Totals'


class TabRenderReport:
    """Column mapping and formatting for the tab render report."""

    report_name = REPORT_NAME
    data_resource_id = DATA_TABLE_RESOURCE_ID
    title = REPORT_TITLE

    def __init__(self, group_lookup: GroupLookupService, tab_lookup: TabLookupService, settings: Settings):
        self.group_lookup = group_lookup
        self.tab_lookup = tab_lookup
        self.settings = settings

    def get_tabs(self) -> List[AggregatedTabMapping]:
        """Tabs that exist for the aggregation, sorted by display string."""
        return self.tab_lookup.get_tab_mappings()

    def get_groups(self) -> List[AggregatedGroupMapping]:
        return self.group_lookup.get_group_mappings()

    def create_default_form(self, today: Optional[date] = None) -> TabRenderReportForm:
        """Form pre-filled for a new report.

        Daily interval over the configured number of days ending today, the
        default group if it has been aggregated, and the first tab by
        display string.
        """
        end = today or date.today()
        start = end - timedelta(days=self.settings.default_report_days - 1)

        groups: List[int] = []
        default_group = self.group_lookup.find_group_mapping(
            self.settings.default_group_service, self.settings.default_group_name
        )
        if default_group is not None:
            groups.append(default_group.id)

        tabs: List[int] = []
        available_tabs = self.get_tabs()
        if available_tabs:
            tabs.append(available_tabs[0].id)

        return TabRenderReportForm(
            interval=AggregationInterval.DAY, start=start, end=end, groups=groups, tabs=tabs
        )

    def build_query_keys(
        self,
        discriminators: Iterable[TabRenderDiscriminator],
        interval: AggregationInterval
    ) -> Set[TabRenderAggregationKey]:
        # Keys exclude the date/time so each one matches every bucket of its column
        return {
            TabRenderAggregationKey(interval, d.aggregated_group, d.tab_mapping)
            for d in discriminators
        }

    def build_column_map(
        self,
        form: TabRenderReportForm
    ) -> Dict[TabRenderDiscriminator, List[TabRenderAggregation]]:
        """Map every selected (group, tab) pair to an empty, time-ordered column.

        The mapping iterates in (group name, tab display string) order.

        Raises:
            GroupNotFoundError, TabNotFoundError: If the form names an unknown id
        """
        discriminators = []
        for group_id in form.groups:
            group = self.group_lookup.get_group_mapping(group_id)
            for tab_id in form.tabs:
                tab = self.tab_lookup.get_tab_mapping(tab_id)
                discriminators.append(TabRenderDiscriminator(group, tab))

        return {d: [] for d in sorted(set(discriminators), key=discriminator_sort_key)}

    def render_columns(
        self,
        discriminator: TabRenderDiscriminator,
        form: TabRenderReportForm
    ) -> List[ColumnDescription]:
        """One count column per discriminator.

        The id is unique per (group, tab) even when two groups share a name;
        the label is what the chart shows.
        """
        group = discriminator.aggregated_group
        column_id = f'{group.group_key}/{discriminator.tab_mapping.id}'
        label = discriminator.tab_mapping.display_string
        if len(set(form.groups)) > 1:
            label += f' - {group.group_name}'
        return [ColumnDescription(column_id, ValueType.NUMBER, label)]

    def row_values(
        self,
        aggregation: Optional[TabRenderAggregation],
        form: TabRenderReportForm
    ) -> List[int]:
        # A bucket without an aggregation had no renders
        count = aggregation.render_count if aggregation is not None else 0
        return [count]
