"""Shared test fixtures and utilities for all tests.

This conftest.py provides reusable fixtures that can be used across
unit, contract, and integration tests: an in-memory SQLite database with a
small group/tab catalog and tab render aggregations, test settings, and a
FastAPI TestClient wired to both.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

# CRITICAL: Ensure the correct project root is first in sys.path
# This prevents importing from other projects with similar module names
project_root = str(Path(__file__).parent.parent.absolute())
if project_root not in sys.path:
    sys.path.insert(0, project_root)
elif sys.path[0] != project_root:
    sys.path.remove(project_root)
    sys.path.insert(0, project_root)

# Set BEFORE any app import so module-level settings never touch a real database
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from portal_stats.lib.config import Settings, get_settings
from portal_stats.lib.database import Base, create_statistics_engine, get_db_session
from portal_stats.lib.distributed_tracing import reset_correlation_id
from portal_stats.lib.structured_logger import PACKAGE_LOGGER
from portal_stats.models import (
    AggregatedGroupMapping,
    AggregatedTabMapping,
    AggregationInterval,
    TabRenderAggregation,
)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def test_engine():
    """Fresh in-memory SQLite engine with all report tables created."""
    engine = create_statistics_engine('sqlite:///:memory:')
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_engine):
    """Database session bound to the in-memory engine."""
    SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = SessionFactory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def sample_catalog(test_db_session):
    """Two groups and three tabs with fixed ids.

    Groups: 1 = local.Everyone, 2 = local.Students
    Tabs:   1 = Welcome, 2 = Academics, 3 = My Courses (Student Fragment)
    """
    groups = {
        1: AggregatedGroupMapping(id=1, group_service='local', group_name='Everyone'),
        2: AggregatedGroupMapping(id=2, group_service='local', group_name='Students'),
    }
    tabs = {
        1: AggregatedTabMapping(id=1, fragment_name=None, tab_name='Welcome'),
        2: AggregatedTabMapping(id=2, fragment_name=None, tab_name='Academics'),
        3: AggregatedTabMapping(id=3, fragment_name='Student Fragment', tab_name='My Courses'),
    }
    test_db_session.add_all(list(groups.values()) + list(tabs.values()))
    test_db_session.commit()
    return {'groups': groups, 'tabs': tabs}


@pytest.fixture
def sample_aggregations(test_db_session, sample_catalog):
    """Daily and hourly tab render aggregations around 2024-03-01..03."""
    groups = sample_catalog['groups']
    tabs = sample_catalog['tabs']

    def aggregation(interval, when, group_id, tab_id, count):
        return TabRenderAggregation(
            interval=interval,
            date_time=when,
            aggregated_group=groups[group_id],
            tab_mapping=tabs[tab_id],
            render_count=count,
            duration=60 if interval is AggregationInterval.HOUR else 1440,
        )

    day = AggregationInterval.DAY
    records = [
        aggregation(day, datetime(2024, 2, 28), 1, 1, 99),
        aggregation(day, datetime(2024, 3, 1), 1, 1, 10),
        aggregation(day, datetime(2024, 3, 3), 1, 1, 30),
        aggregation(day, datetime(2024, 3, 2), 2, 1, 7),
        aggregation(day, datetime(2024, 3, 1), 1, 2, 4),
        aggregation(AggregationInterval.HOUR, datetime(2024, 3, 1, 9), 1, 1, 3),
    ]
    test_db_session.add_all(records)
    test_db_session.commit()
    return records


# ============================================================================
# Settings and Application Fixtures
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings used by report services and the API under test."""
    return Settings(
        database_url='sqlite:///:memory:',
        default_group_service='local',
        default_group_name='Everyone',
        default_report_days=30,
        max_report_rows=500,
    )


@pytest.fixture
def app(test_db_session, test_settings):
    """FastAPI app with database and settings dependencies overridden."""
    from portal_stats.app import app as fastapi_app

    def override_get_db_session():
        yield test_db_session

    fastapi_app.dependency_overrides[get_db_session] = override_get_db_session
    fastapi_app.dependency_overrides[get_settings] = lambda: test_settings
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Test client for the statistics API."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_correlation_id():
    """Every test starts without a correlation ID in context."""
    reset_correlation_id()
    yield
    reset_correlation_id()


@pytest.fixture
def caplog(caplog):
    """caplog that also captures the package logger, which does not propagate to root."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.addHandler(caplog.handler)
    yield caplog
    package_logger.removeHandler(caplog.handler)
