"""Splunk CLI exceptions.

Every failure the search pipeline can produce is a ``SplunkError``. Front ends
render them verbatim; nothing here retries.
"""

from typing import Optional


class SplunkError(Exception):
  """Base exception for all splunk-cli errors."""

  def __init__(self, message: str, status_code: int = 500):
    super().__init__(message)
    self.message = message
    self.status_code = status_code
    self.type = "splunk_error"
    self.error_id = "splunk_error"

  def __str__(self) -> str:
    return self.message


class ConfigurationMissing(SplunkError):
  """Raised when the Splunk host or token cannot be found.

  Fatal: the caller is expected to tell the user how to run
  ``splunk configure <host>`` or which environment variables to set.
  """

  def __init__(self, message: str, setting: Optional[str] = None):
    super().__init__(message, status_code=400)
    self.setting = setting
    self.type = "configuration_missing"
    self.error_id = "configuration_missing"


class TransportFailure(SplunkError):
  """Raised when a request never got an HTTP response.

  This can happen due to:
  - DNS resolution failure
  - Connection refused
  - TLS/SSL errors
  - Request timeout
  """

  def __init__(self, message: str, original_error: Optional[Exception] = None):
    super().__init__(message, status_code=503)
    self.original_error = original_error
    self.type = "transport_failure"
    self.error_id = "transport_failure"


class RemoteRejected(SplunkError):
  """Raised when Splunk answers with a non-success status."""

  def __init__(self, status_code: int, body: str):
    super().__init__(f"API request failed with status {status_code}: {body}", status_code=status_code)
    self.body = body
    self.type = "remote_rejected"
    self.error_id = "remote_rejected"


class DecodeFailure(SplunkError):
  """Raised when a successful response carries a body we cannot use."""

  def __init__(self, message: str, body: Optional[str] = None):
    super().__init__(message, status_code=502)
    self.body = body
    self.type = "decode_failure"
    self.error_id = "decode_failure"


class InvalidQueryError(SplunkError):
  """Raised when a search query is empty after trimming."""

  def __init__(self, message: str = "search query must not be empty"):
    super().__init__(message, status_code=400)
    self.type = "invalid_query"
    self.error_id = "invalid_query"


class PollTimeout(SplunkError):
  """Raised when a search job did not finish before the deadline."""

  def __init__(self, sid: str, timeout_seconds: float):
    super().__init__(f"Search timed out after {timeout_seconds:g} seconds", status_code=504)
    self.sid = sid
    self.timeout_seconds = timeout_seconds
    self.type = "poll_timeout"
    self.error_id = "poll_timeout"


class SearchCancelled(SplunkError):
  """Raised when a search was interrupted before it finished."""

  def __init__(self, sid: Optional[str] = None):
    message = f"Search {sid} was cancelled" if sid else "Search was cancelled"
    super().__init__(message, status_code=499)
    self.sid = sid
    self.type = "search_cancelled"
    self.error_id = "search_cancelled"


# =============================================================================
# Stage wrappers
# =============================================================================


class SearchStageError(SplunkError):
  """A failure tied to one stage of a search job.

  ``cause`` is the underlying transport, status or decode error, so callers
  can tell "the job never finished" apart from "the results were lost".
  """

  stage = "search"
  prefix = "Search failed"

  def __init__(self, cause: SplunkError):
    super().__init__(f"{self.prefix}: {cause}", status_code=cause.status_code)
    self.cause = cause
    self.type = f"{self.stage}_error"
    self.error_id = f"{self.stage}_error"


class SubmitError(SearchStageError):
  """Creating the search job failed."""

  stage = "submit"
  prefix = "Failed to run search"


class PollError(SearchStageError):
  """A status request for a running job failed."""

  stage = "poll"
  prefix = "Failed to get search status"


class FetchError(SearchStageError):
  """The job finished but its results could not be retrieved."""

  stage = "fetch"
  prefix = "Failed to get search results"
