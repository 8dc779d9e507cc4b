"""Tab render aggregation records and the values that identify them.

A TabRenderAggregation is one pre-computed count of tab renders for a
(interval, group, tab) key at one bucket start time. A TabRenderDiscriminator
names one report column; a TabRenderAggregationKey is the discriminator plus
the interval, without any time component, so it matches every bucket of that
column.
"""

from dataclasses import dataclass, field

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from portal_stats.lib.database import Base
from portal_stats.models.aggregated_group import AggregatedGroupMapping
from portal_stats.models.aggregated_tab import AggregatedTabMapping
from portal_stats.models.aggregation_interval import AggregationInterval


@dataclass(frozen=True)
class TabRenderDiscriminator:
    """Immutable (group, tab) pair identifying one report column.

    Equality and hashing use the group and tab ids, so discriminators built
    from catalog lookups match those derived from query results.
    """
    aggregated_group: AggregatedGroupMapping = field(compare=False)
    tab_mapping: AggregatedTabMapping = field(compare=False)
    group_id: int = field(init=False, repr=False)
    tab_id: int = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'group_id', self.aggregated_group.id)
        object.__setattr__(self, 'tab_id', self.tab_mapping.id)


def discriminator_sort_key(discriminator: TabRenderDiscriminator) -> tuple:
    """Order columns by group name, then tab display string (ids break ties)."""
    return (
        discriminator.aggregated_group.group_name,
        discriminator.tab_mapping.display_string,
        discriminator.aggregated_group.id,
        discriminator.tab_mapping.id,
    )


@dataclass(frozen=True)
class TabRenderAggregationKey:
    """Lookup key matching every time bucket of one report column."""
    interval: AggregationInterval
    aggregated_group: AggregatedGroupMapping = field(compare=False, repr=False)
    tab_mapping: AggregatedTabMapping = field(compare=False, repr=False)
    group_id: int = field(init=False)
    tab_id: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'group_id', self.aggregated_group.id)
        object.__setattr__(self, 'tab_id', self.tab_mapping.id)


class TabRenderAggregation(Base):
    """
    Pre-computed count of tab renders for one group, tab and interval bucket.
    duration is the number of minutes of activity the bucket covers.
    """
    __tablename__ = 'tab_render_aggregation'

    id = Column(Integer, primary_key=True, autoincrement=True)
    interval = Column(
        SQLEnum(AggregationInterval, name='aggregation_interval', values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    date_time = Column(DateTime, nullable=False)
    aggregated_group_id = Column(Integer, ForeignKey('aggr_group_mapping.id'), nullable=False)
    tab_mapping_id = Column(Integer, ForeignKey('aggr_tab_mapping.id'), nullable=False)
    render_count = Column(Integer, nullable=False, default=0)
    duration = Column(Integer, nullable=False, default=0)

    aggregated_group = relationship(AggregatedGroupMapping, lazy='joined')
    tab_mapping = relationship(AggregatedTabMapping, lazy='joined')

    __table_args__ = (
        UniqueConstraint(
            'interval', 'date_time', 'aggregated_group_id', 'tab_mapping_id',
            name='uq_tab_render_aggregation'
        ),
        Index('ix_tab_render_aggregation_date_time', 'date_time'),
        Index('ix_tab_render_aggregation_key', 'interval', 'aggregated_group_id', 'tab_mapping_id'),
    )

    @property
    def aggregation_discriminator(self) -> TabRenderDiscriminator:
        return TabRenderDiscriminator(self.aggregated_group, self.tab_mapping)

    @property
    def aggregation_key(self) -> TabRenderAggregationKey:
        return TabRenderAggregationKey(self.interval, self.aggregated_group, self.tab_mapping)

    def __repr__(self) -> str:
        return (
            f"<TabRenderAggregation(interval={self.interval.value if self.interval else None}, "
            f"date_time={self.date_time}, group_id={self.aggregated_group_id}, "
            f"tab_id={self.tab_mapping_id}, render_count={self.render_count})>"
        )
