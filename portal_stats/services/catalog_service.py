"""Group and Tab Catalog Services

Resolve the group and tab ids a report form refers to into their mappings,
and list the groups and tabs a report can be run for.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal_stats.lib.errors import GroupNotFoundError, ReportStoreError, TabNotFoundError
from portal_stats.lib.structured_logger import StructuredLogger
from portal_stats.models.aggregated_group import AggregatedGroupMapping
from portal_stats.models.aggregated_tab import AggregatedTabMapping

logger = StructuredLogger(__name__)


def group_sort_key(group: AggregatedGroupMapping) -> tuple:
    return (group.group_name, group.group_service, group.id)


def tab_sort_key(tab: AggregatedTabMapping) -> tuple:
    return (tab.display_string, tab.id)


class GroupLookupService:
    """Lookup of aggregated group mappings."""

    def __init__(self, db: Session):
        self.db = db

    def get_group_mapping(self, group_id: int) -> AggregatedGroupMapping:
        """Get the mapping for a group id.

        Raises:
            GroupNotFoundError: If no group has this id
            ReportStoreError: If the database query fails
        """
        try:
            group = self.db.get(AggregatedGroupMapping, group_id)
        except SQLAlchemyError as e:
            logger.error(f'Failed to look up group {group_id}: {e}', exc_info=True, group_id=group_id)
            raise ReportStoreError(f'Group lookup failed: {e}') from e

        if group is None:
            logger.warning(f'Unknown group id {group_id}', group_id=group_id, error_code='GROUP_NOT_FOUND')
            raise GroupNotFoundError(group_id)
        return group

    def find_group_mapping(self, group_service: str, group_name: str) -> Optional[AggregatedGroupMapping]:
        """Find a group by service and name, returning None when it does not exist."""
        try:
            return (
                self.db.query(AggregatedGroupMapping)
                .filter_by(group_service=group_service, group_name=group_name)
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f'Failed to find group {group_service}.{group_name}: {e}', exc_info=True)
            raise ReportStoreError(f'Group lookup failed: {e}') from e

    def get_group_mappings(self) -> list[AggregatedGroupMapping]:
        """All groups, sorted by name."""
        try:
            groups = self.db.query(AggregatedGroupMapping).all()
        except SQLAlchemyError as e:
            logger.error(f'Failed to list groups: {e}', exc_info=True)
            raise ReportStoreError(f'Group listing failed: {e}') from e
        return sorted(groups, key=group_sort_key)


class TabLookupService:
    """Lookup of aggregated tab mappings."""

    def __init__(self, db: Session):
        self.db = db

    def get_tab_mapping(self, tab_id: int) -> AggregatedTabMapping:
        """Get the mapping for a tab id.

        Raises:
            TabNotFoundError: If no tab has this id
            ReportStoreError: If the database query fails
        """
        try:
            tab = self.db.get(AggregatedTabMapping, tab_id)
        except SQLAlchemyError as e:
            logger.error(f'Failed to look up tab {tab_id}: {e}', exc_info=True, tab_id=tab_id)
            raise ReportStoreError(f'Tab lookup failed: {e}') from e

        if tab is None:
            logger.warning(f'Unknown tab id {tab_id}', tab_id=tab_id, error_code='TAB_NOT_FOUND')
            raise TabNotFoundError(tab_id)
        return tab

    def get_tab_mappings(self) -> list[AggregatedTabMapping]:
        """All tabs, sorted by display string."""
        try:
            tabs = self.db.query(AggregatedTabMapping).all()
        except SQLAlchemyError as e:
            logger.error(f'Failed to list tabs: {e}', exc_info=True)
            raise ReportStoreError(f'Tab listing failed: {e}') from e
        return sorted(tabs, key=tab_sort_key)
