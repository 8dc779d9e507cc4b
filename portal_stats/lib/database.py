"""Database Connection Module

Provides the SQLAlchemy declarative base, a lazily created engine and the
per-request session dependency used by the statistics endpoints.
"""

from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from portal_stats.lib.config import get_settings

Base = declarative_base()


def create_statistics_engine(
    connection_string: str | None = None,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
) -> Engine:
    """Create SQLAlchemy engine for the aggregation database.

    Args:
        connection_string: Database URL (DATABASE_URL setting if None)
        pool_size: Number of connections to maintain in pool
        max_overflow: Maximum overflow connections beyond pool_size
        pool_pre_ping: Test connections before use to detect stale connections

    Returns:
        Configured SQLAlchemy engine

    Example:
        engine = create_statistics_engine('postgresql+psycopg://stats@db:5432/portal')
    """
    if connection_string is None:
        connection_string = get_settings().database_url

    if connection_string.startswith('sqlite'):
        # In-memory databases only exist on a single shared connection
        if ':memory:' in connection_string:
            return create_engine(
                connection_string,
                connect_args={'check_same_thread': False},
                poolclass=StaticPool,
            )
        return create_engine(connection_string, connect_args={'check_same_thread': False})

    return create_engine(
        connection_string,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False
    )


# Global engine instance (lazy-initialized)
_engine: Engine | None = None


def get_engine() -> Engine:
    """Get or create global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_statistics_engine()
    return _engine


def reset_engine() -> None:
    """Dispose of the global engine so the next call to get_engine() recreates it."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


def get_session_factory() -> sessionmaker:
    """Get session factory bound to the global engine.

    Usage:
        SessionFactory = get_session_factory()
        with SessionFactory() as session:
            tabs = session.query(AggregatedTabMapping).all()
    """
    engine = get_engine()
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db_session() -> Generator[Session, None, None]:
    """Get database session for dependency injection.

    Yields:
        Database session, committed on success and rolled back on error

    Usage (FastAPI):
        @router.get("/tabs")
        async def list_tabs(db: Session = Depends(get_db_session)):
            return TabLookupService(db).get_tab_mappings()
    """
    SessionFactory = get_session_factory()
    session = SessionFactory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
