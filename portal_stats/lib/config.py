"""Application settings.

Settings are read from environment variables after `.env` and `.env.local`
(if present) have been loaded into the environment.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_CORS_ORIGINS = [
  'http://localhost:5173',
  'http://127.0.0.1:5173',
  'http://localhost:3000',
  'http://127.0.0.1:3000',
]


class Settings(BaseModel):
  """Statistics service settings.

  Report defaults:
  - default_group_service/default_group_name select the group pre-selected
    in a new report form (the portal's "everyone" group).
  - default_report_days is the span of a new report form, ending today.
  - max_report_rows caps the number of interval buckets a single report may
    produce.
  """

  database_url: str = Field(default='sqlite:///./portal_stats.db')
  log_level: str = Field(default='INFO')

  default_group_service: str = Field(default='local')
  default_group_name: str = Field(default='Everyone')
  default_report_days: int = Field(default=30, ge=1)
  max_report_rows: int = Field(default=5000, ge=1)

  cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

  @field_validator('log_level')
  @classmethod
  def validate_log_level(cls, v: str) -> str:
    normalized = v.upper()
    if normalized not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
      raise ValueError(f'Unknown log level: {v}')
    return normalized


# Environment variable -> settings field
ENV_FIELDS = {
  'DATABASE_URL': 'database_url',
  'LOG_LEVEL': 'log_level',
  'DEFAULT_GROUP_SERVICE': 'default_group_service',
  'DEFAULT_GROUP_NAME': 'default_group_name',
  'DEFAULT_REPORT_DAYS': 'default_report_days',
  'MAX_REPORT_ROWS': 'max_report_rows',
}


def load_settings(env_dir: Optional[Path] = None) -> Settings:
  """Load settings from .env files and the process environment.

  Precedence:
    1) defaults
    2) .env, then .env.local (never overriding variables already set)
    3) process environment

  Raises:
      ValueError: If a configured value fails validation
  """
  base_dir = env_dir or Path('.')
  load_dotenv(dotenv_path=base_dir / '.env', override=False)
  load_dotenv(dotenv_path=base_dir / '.env.local', override=False)

  values: Dict[str, Any] = {}
  for env_key, field_name in ENV_FIELDS.items():
    value = _getenv(env_key)
    if value is not None:
      values[field_name] = value

  cors_origins = _getenv('CORS_ORIGINS')
  if cors_origins is not None:
    values['cors_origins'] = [o.strip() for o in cors_origins.split(',') if o.strip()]

  try:
    return Settings.model_validate(values)
  except ValidationError as exc:
    raise ValueError(f'Invalid configuration: {exc}') from exc


def _getenv(key: str) -> Optional[str]:
  value = os.getenv(key)
  if value is None:
    return None
  value = value.strip()
  return value or None


@lru_cache
def get_settings() -> Settings:
  """Return the process-wide settings, loading them on first use."""
  return load_settings()
