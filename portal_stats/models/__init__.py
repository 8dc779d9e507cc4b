"""Models package for aggregation entities and report types."""

from portal_stats.models.aggregated_group import AggregatedGroupMapping
from portal_stats.models.aggregated_tab import AggregatedTabMapping
from portal_stats.models.aggregation_interval import AggregationInterval
from portal_stats.models.tab_render_aggregation import (
    TabRenderAggregation,
    TabRenderAggregationKey,
    TabRenderDiscriminator,
)

__all__ = [
    'AggregatedGroupMapping',
    'AggregatedTabMapping',
    'AggregationInterval',
    'TabRenderAggregation',
    'TabRenderAggregationKey',
    'TabRenderDiscriminator',
]
