"""FastAPI application for the portal statistics service."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from portal_stats.lib.config import get_settings
from portal_stats.lib.database import Base, get_engine, reset_engine
from portal_stats.lib.distributed_tracing import generate_correlation_id, set_correlation_id
from portal_stats.lib.errors import StatisticsReportError
from portal_stats.lib.metrics import record_request_duration
from portal_stats.lib.structured_logger import StructuredLogger, configure_logging, log_event, log_request
from portal_stats.routers import router

settings = get_settings()
configure_logging(settings.log_level)

logger = StructuredLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
  """Manage application lifespan.

  SQLite databases (local development) get their tables created on startup;
  other databases are managed with Alembic migrations.
  """
  if settings.database_url.startswith('sqlite'):
    Base.metadata.create_all(get_engine())
  log_event('service.started', context={'log_level': settings.log_level})
  yield
  reset_engine()
  log_event('service.stopped')


app = FastAPI(
  title='Portal Statistics API',
  description='Tab render statistics reports over pre-aggregated portal events',
  version='0.1.0',
  lifespan=lifespan,
)

app.add_middleware(
  CORSMiddleware,
  allow_origins=settings.cors_origins,
  allow_credentials=True,
  allow_methods=['GET'],
  allow_headers=['*'],
)


@app.middleware('http')
async def add_correlation_id(request: Request, call_next):
  """Inject correlation ID into the request and record request metrics.

  - Extracts X-Correlation-ID header or generates new UUID
  - Sets correlation ID in context for logging
  - Adds X-Correlation-ID to response headers
  - Logs request with duration
  """
  correlation_id = request.headers.get('X-Correlation-ID')
  if correlation_id:
    set_correlation_id(correlation_id)
  else:
    correlation_id = generate_correlation_id()
  request.state.correlation_id = correlation_id

  start_time = time.time()

  response = await call_next(request)

  duration_seconds = time.time() - start_time
  response.headers['X-Correlation-ID'] = correlation_id

  # Skip health and metrics endpoints to reduce noise
  if request.url.path not in ['/health', '/api/health', '/metrics']:
    record_request_duration(
      endpoint=request.url.path,
      method=request.method,
      status=response.status_code,
      duration_seconds=duration_seconds,
    )
    log_request(
      endpoint=request.url.path,
      method=request.method,
      status_code=response.status_code,
      duration_ms=duration_seconds * 1000,
    )

  return response


@app.get('/health')
async def health_root():
  """Health check endpoint at root level (for load balancers)."""
  return {'status': 'healthy'}


@app.get('/api/health')
async def health_api():
  """Health check endpoint under /api prefix."""
  return {'status': 'healthy'}


@app.get('/metrics')
async def metrics_root():
  """Prometheus metrics endpoint (report and request metrics)."""
  return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


@app.exception_handler(StatisticsReportError)
async def statistics_report_exception_handler(request: Request, exc: StatisticsReportError):
  """Convert report failures into JSON error responses.

  No partial report is ever returned: the whole request fails with the
  error's status code and a body of {error_code, message}.
  """
  if exc.status_code >= 500:
    logger.error(
      f'Report request failed: {exc.message}',
      endpoint=request.url.path,
      error_code=exc.error_code,
    )
  else:
    logger.warning(
      f'Report request rejected: {exc.message}',
      endpoint=request.url.path,
      error_code=exc.error_code,
    )

  return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(router)
