"""Statistics report errors.

Every failure while building a report is fatal to the request. Each error
carries the error code and HTTP status the API reports it with.
"""


class StatisticsReportError(Exception):
  """Base class for report failures."""

  error_code = 'REPORT_FAILED'
  status_code = 500

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message

  def to_dict(self) -> dict:
    return {'error_code': self.error_code, 'message': self.message}


class GroupNotFoundError(StatisticsReportError, LookupError):
  """Raised when a group id is not present in the group catalog."""

  error_code = 'GROUP_NOT_FOUND'
  status_code = 404

  def __init__(self, group_id: int):
    super().__init__(f'No aggregated group mapping exists for id {group_id}')
    self.group_id = group_id


class TabNotFoundError(StatisticsReportError, LookupError):
  """Raised when a tab id is not present in the tab catalog."""

  error_code = 'TAB_NOT_FOUND'
  status_code = 404

  def __init__(self, tab_id: int):
    super().__init__(f'No aggregated tab mapping exists for id {tab_id}')
    self.tab_id = tab_id


class ReportStoreError(StatisticsReportError):
  """Raised when the aggregation database cannot be queried."""

  error_code = 'REPORT_STORE_UNAVAILABLE'
  status_code = 503


class ReportRangeError(StatisticsReportError):
  """Raised when a report would span more interval buckets than allowed."""

  error_code = 'REPORT_RANGE_TOO_LARGE'
  status_code = 400


class TypeMismatchError(StatisticsReportError, TypeError):
  """Raised when a report cell does not match its column's value type."""

  error_code = 'REPORT_VALUE_TYPE_MISMATCH'
  status_code = 500


class InvalidReportFormError(StatisticsReportError):
  """Raised when report request parameters do not form a valid report form."""

  error_code = 'INVALID_REPORT_FORM'
  status_code = 422
