"""Integration tests for the aggregation store and catalog lookups against SQLite."""

from datetime import datetime
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from portal_stats.lib.errors import GroupNotFoundError, ReportStoreError, TabNotFoundError
from portal_stats.models import AggregationInterval, TabRenderAggregationKey
from portal_stats.services.catalog_service import GroupLookupService, TabLookupService
from portal_stats.services.tab_render_aggregation_store import TabRenderAggregationStore

MARCH_1 = datetime(2024, 3, 1)
MARCH_3_END = datetime(2024, 3, 3, 23, 59, 59, 999999)


def _key(catalog, group_id, tab_id, interval=AggregationInterval.DAY):
    return TabRenderAggregationKey(interval, catalog['groups'][group_id], catalog['tabs'][tab_id])


# ============================================================================
# Aggregation store
# ============================================================================

def test_get_aggregations_matches_keys_within_range(test_db_session, sample_catalog, sample_aggregations):
    store = TabRenderAggregationStore(test_db_session)

    results = store.get_aggregations(MARCH_1, MARCH_3_END, [_key(sample_catalog, 1, 1)])

    assert [(a.date_time, a.render_count) for a in results] == [
        (datetime(2024, 3, 1), 10),
        (datetime(2024, 3, 3), 30),
    ]
    assert all(a.interval is AggregationInterval.DAY for a in results)


def test_get_aggregations_excludes_unrequested_combinations(test_db_session, sample_catalog, sample_aggregations):
    store = TabRenderAggregationStore(test_db_session)

    # (1, 2) and (2, 1) both exist; only (1, 2) is requested alongside (2, 3)
    results = store.get_aggregations(
        MARCH_1, MARCH_3_END, [_key(sample_catalog, 1, 2), _key(sample_catalog, 2, 3)]
    )

    assert [(a.aggregated_group_id, a.tab_mapping_id, a.render_count) for a in results] == [(1, 2, 4)]


def test_get_aggregations_filters_by_interval(test_db_session, sample_catalog, sample_aggregations):
    store = TabRenderAggregationStore(test_db_session)

    results = store.get_aggregations(
        MARCH_1, MARCH_3_END, [_key(sample_catalog, 1, 1, AggregationInterval.HOUR)]
    )

    assert len(results) == 1
    assert results[0].date_time == datetime(2024, 3, 1, 9)
    assert results[0].render_count == 3


def test_get_aggregations_results_are_keyed_to_the_request(test_db_session, sample_catalog, sample_aggregations):
    store = TabRenderAggregationStore(test_db_session)
    keys = {_key(sample_catalog, 1, 1), _key(sample_catalog, 2, 1)}

    results = store.get_aggregations(MARCH_1, MARCH_3_END, keys)

    assert len(results) == 3
    assert all(a.aggregation_key in keys for a in results)
    assert [a.date_time for a in results] == sorted(a.date_time for a in results)


def test_get_aggregations_with_no_keys(test_db_session, sample_aggregations):
    assert TabRenderAggregationStore(test_db_session).get_aggregations(MARCH_1, MARCH_3_END, []) == []


def test_get_aggregations_wraps_database_errors(sample_catalog):
    db = Mock()
    db.query.side_effect = OperationalError('SELECT', {}, Exception('database is locked'))

    with pytest.raises(ReportStoreError) as exc_info:
        TabRenderAggregationStore(db).get_aggregations(MARCH_1, MARCH_3_END, [_key(sample_catalog, 1, 1)])

    assert exc_info.value.status_code == 503


# ============================================================================
# Catalog lookups
# ============================================================================

def test_group_lookup(test_db_session, sample_catalog):
    lookup = GroupLookupService(test_db_session)

    assert lookup.get_group_mapping(2).group_name == 'Students'
    assert lookup.find_group_mapping('local', 'Everyone').id == 1
    assert lookup.find_group_mapping('local', 'Nobody') is None
    assert [g.group_name for g in lookup.get_group_mappings()] == ['Everyone', 'Students']


def test_group_lookup_unknown_id(test_db_session, sample_catalog):
    with pytest.raises(GroupNotFoundError) as exc_info:
        GroupLookupService(test_db_session).get_group_mapping(404)

    assert exc_info.value.to_dict() == {
        'error_code': 'GROUP_NOT_FOUND',
        'message': 'No aggregated group mapping exists for id 404',
    }


def test_tab_lookup_sorted_by_display_string(test_db_session, sample_catalog):
    lookup = TabLookupService(test_db_session)

    assert [t.display_string for t in lookup.get_tab_mappings()] == [
        'Academics',
        'My Courses (Student Fragment)',
        'Welcome',
    ]
    assert lookup.get_tab_mapping(3).fragment_name == 'Student Fragment'


def test_tab_lookup_unknown_id(test_db_session, sample_catalog):
    with pytest.raises(TabNotFoundError):
        TabLookupService(test_db_session).get_tab_mapping(99)


def test_lookup_wraps_database_errors():
    db = Mock()
    db.get.side_effect = OperationalError('SELECT', {}, Exception('connection refused'))

    with pytest.raises(ReportStoreError):
        TabLookupService(db).get_tab_mapping(1)
