"""Sample Data Setup Script for the portal statistics database.

This script creates a small catalog of portal groups and layout tabs plus
daily and hourly tab render aggregations for them, so the report endpoints
have something to show in local development.

Commands:
- seed: Create the tables (SQLite only) and insert sample aggregations
- cleanup: Remove all aggregations and catalog rows (destructive!)
"""

import random
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

# Load environment variables from .env.local
env_path = Path(__file__).parent.parent / '.env.local'
console = Console()
if env_path.exists():
  load_dotenv(env_path)
  console.print(f'[dim]Loaded environment from {env_path}[/dim]')
else:
  console.print(f'[dim]No .env.local file found at {env_path}, using system environment[/dim]')

from portal_stats.lib.config import get_settings  # noqa: E402
from portal_stats.lib.database import Base, create_statistics_engine  # noqa: E402
from portal_stats.models import (  # noqa: E402
  AggregatedGroupMapping,
  AggregatedTabMapping,
  AggregationInterval,
  TabRenderAggregation,
)

SAMPLE_GROUPS = [
  ('local', 'Everyone'),
  ('local', 'Students'),
  ('local', 'Staff'),
]

SAMPLE_TABS = [
  (None, 'Welcome'),
  (None, 'Academics'),
  ('Student Fragment', 'My Courses'),
  ('Staff Fragment', 'Payroll'),
]


def _get_or_create_group(session, group_service: str, group_name: str) -> AggregatedGroupMapping:
  group = (
    session.query(AggregatedGroupMapping)
    .filter_by(group_service=group_service, group_name=group_name)
    .one_or_none()
  )
  if group is None:
    group = AggregatedGroupMapping(group_service=group_service, group_name=group_name)
    session.add(group)
    session.flush()
  return group


def _get_or_create_tab(session, fragment_name, tab_name: str) -> AggregatedTabMapping:
  tab = (
    session.query(AggregatedTabMapping)
    .filter_by(fragment_name=fragment_name, tab_name=tab_name)
    .one_or_none()
  )
  if tab is None:
    tab = AggregatedTabMapping(fragment_name=fragment_name, tab_name=tab_name)
    session.add(tab)
    session.flush()
  return tab


def _session_factory(database_url):
  engine = create_statistics_engine(database_url or get_settings().database_url)
  return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


@click.group()
def cli():
  """Sample data setup for the portal statistics service."""
  pass


@cli.command()
@click.option('--database-url', default=None, help='Database URL (from DATABASE_URL)')
@click.option('--days', default=30, type=int, help='Number of days of daily aggregations')
@click.option('--hours', default=48, type=int, help='Number of hours of hourly aggregations')
@click.option('--skip-every', default=5, type=int, help='Leave every Nth day without data (0 disables)')
@click.option('--random-seed', default=42, type=int, help='Seed for reproducible render counts')
def seed(database_url, days, hours, skip_every, random_seed):
  """Insert sample groups, tabs and tab render aggregations."""
  console.print('\n[bold]Creating tab render sample data...[/bold]')
  rng = random.Random(random_seed)

  try:
    engine, SessionFactory = _session_factory(database_url)

    if engine.dialect.name == 'sqlite':
      console.print('[cyan]1. Creating tables (SQLite)...[/cyan]')
      Base.metadata.create_all(engine)
    else:
      console.print('[cyan]1. Using existing schema (run alembic upgrade head first)...[/cyan]')

    with SessionFactory() as session:
      console.print(f'[cyan]2. Inserting {len(SAMPLE_GROUPS)} groups and {len(SAMPLE_TABS)} tabs...[/cyan]')
      groups = [_get_or_create_group(session, service, name) for service, name in SAMPLE_GROUPS]
      tabs = [_get_or_create_tab(session, fragment, name) for fragment, name in SAMPLE_TABS]

      # Existing sample aggregations are replaced so repeated runs stay consistent
      session.query(TabRenderAggregation).delete()

      console.print(f'[cyan]3. Inserting {days} days and {hours} hours of aggregations...[/cyan]')
      today = date.today()
      inserted = 0
      for offset in range(days):
        if skip_every and offset % skip_every == skip_every - 1:
          continue
        day_start = datetime.combine(today - timedelta(days=offset), datetime.min.time())
        for group in groups:
          for tab in tabs:
            session.add(TabRenderAggregation(
              interval=AggregationInterval.DAY,
              date_time=day_start,
              aggregated_group=group,
              tab_mapping=tab,
              render_count=rng.randint(0, 500),
              duration=24 * 60,
            ))
            inserted += 1

      now_hour = AggregationInterval.HOUR.truncate(datetime.now())
      for offset in range(hours):
        hour_start = now_hour - timedelta(hours=offset)
        for tab in tabs:
          session.add(TabRenderAggregation(
            interval=AggregationInterval.HOUR,
            date_time=hour_start,
            aggregated_group=groups[0],
            tab_mapping=tab,
            render_count=rng.randint(0, 40),
            duration=60,
          ))
          inserted += 1

      session.commit()

      console.print('[cyan]4. Verifying data...[/cyan]')
      count = session.query(TabRenderAggregation).count()

      preview = Table(title='Sample Catalog')
      preview.add_column('Kind', style='cyan')
      preview.add_column('ID', justify='right')
      preview.add_column('Name')
      for group in groups:
        preview.add_row('group', str(group.id), group.group_key)
      for tab in tabs:
        preview.add_row('tab', str(tab.id), tab.display_string)
      console.print(preview)

    console.print('\n[green]✓ Tab render sample data created successfully![/green]')
    console.print(f'  Aggregations inserted: {inserted}')
    console.print(f'  Aggregations in table: {count}')

  except SQLAlchemyError as e:
    console.print(f'[red]Database error: {e}[/red]')
    console.print('[yellow]Check DATABASE_URL and that the schema exists[/yellow]')
    sys.exit(1)


@cli.command()
@click.option('--database-url', default=None, help='Database URL (from DATABASE_URL)')
@click.option('--confirm', is_flag=True, help='Skip confirmation prompt')
def cleanup(database_url, confirm):
  """Remove sample data (destructive operation!)."""
  if not confirm:
    console.print('[yellow]This will DELETE all tab render data. Use --confirm flag to proceed.[/yellow]')
    sys.exit(0)

  console.print('[bold red]Cleaning up sample data...[/bold red]\n')

  try:
    _, SessionFactory = _session_factory(database_url)
    with SessionFactory() as session:
      aggregations = session.query(TabRenderAggregation).delete()
      tabs = session.query(AggregatedTabMapping).delete()
      groups = session.query(AggregatedGroupMapping).delete()
      session.commit()

    console.print(f'[green]✓ Deleted {aggregations} aggregations, {tabs} tabs and {groups} groups[/green]')

  except SQLAlchemyError as e:
    console.print(f'[red]Error during cleanup: {e}[/red]')
    sys.exit(1)


if __name__ == '__main__':
  cli()
