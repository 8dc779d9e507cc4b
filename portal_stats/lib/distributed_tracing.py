"""Correlation IDs for report requests.

Keeps the current request's correlation ID in a context variable so log lines
emitted while a report is assembled can be tied back to the HTTP request.
"""

import contextvars
from uuid import uuid4

DEFAULT_CORRELATION_ID = 'no-request-id'

correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
  'request_id', default=DEFAULT_CORRELATION_ID
)


def get_correlation_id() -> str:
  """Return the current request's correlation ID, or 'no-request-id' outside a request."""
  return correlation_id.get()


def set_correlation_id(request_id: str) -> None:
  """Set the correlation ID for the current request context.

  Args:
      request_id: Value of the X-Correlation-ID header or a generated UUID
  """
  correlation_id.set(request_id)


def generate_correlation_id() -> str:
  """Generate a new correlation ID, set it in context and return it."""
  request_id = str(uuid4())
  set_correlation_id(request_id)
  return request_id


def reset_correlation_id() -> None:
  """Reset correlation ID to the default value."""
  correlation_id.set(DEFAULT_CORRELATION_ID)
