"""Tab render aggregation store.

Reads pre-computed tab render aggregations. The aggregations themselves are
produced elsewhere; this store only queries them.
"""

from datetime import datetime
from typing import Collection, List

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal_stats.lib.errors import ReportStoreError
from portal_stats.lib.structured_logger import StructuredLogger
from portal_stats.models.tab_render_aggregation import TabRenderAggregation, TabRenderAggregationKey

logger = StructuredLogger(__name__)


class TabRenderAggregationStore:
    """Query access to the tab_render_aggregation table."""

    def __init__(self, db: Session):
        """Initialize the store.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_aggregations(
        self,
        start: datetime,
        end: datetime,
        keys: Collection[TabRenderAggregationKey]
    ) -> List[TabRenderAggregation]:
        """Get every aggregation matching one of the keys within [start, end].

        Args:
            start: Earliest bucket start to include
            end: Latest bucket start to include
            keys: Keys (interval, group, tab) to match

        Returns:
            Matching aggregations ordered by date_time

        Raises:
            ReportStoreError: If the database query fails
        """
        if not keys:
            return []

        wanted = set(keys)
        intervals = sorted({k.interval for k in wanted})
        group_ids = sorted({k.group_id for k in wanted})
        tab_ids = sorted({k.tab_id for k in wanted})

        try:
            # The column filters select a superset of the keys; exact
            # (interval, group, tab) matching happens below
            candidates = self.db.query(TabRenderAggregation).filter(
                and_(
                    TabRenderAggregation.interval.in_(intervals),
                    TabRenderAggregation.aggregated_group_id.in_(group_ids),
                    TabRenderAggregation.tab_mapping_id.in_(tab_ids),
                    TabRenderAggregation.date_time >= start,
                    TabRenderAggregation.date_time <= end
                )
            ).order_by(TabRenderAggregation.date_time).all()
        except SQLAlchemyError as e:
            logger.error(f'Failed to query tab render aggregations: {e}', exc_info=True)
            raise ReportStoreError(f'Aggregation query failed: {e}') from e

        aggregations = [a for a in candidates if a.aggregation_key in wanted]

        logger.debug(
            f'Loaded {len(aggregations)} tab render aggregations for {len(wanted)} keys',
            record_count=len(aggregations)
        )
        return aggregations
