"""Search job submission."""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from splunk_cli.exceptions import DecodeFailure, InvalidQueryError
from splunk_cli.search.models import JobHandle, SearchJobCreated
from splunk_cli.search.query import normalize_query
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import log_debug

JOBS_PATH = "/services/search/jobs"


class JobSubmitter:
  """Creates search jobs. One ``submit`` call is one network request."""

  def __init__(self, transport: SplunkTransport):
    self._transport = transport

  async def submit(
    self,
    query: str,
    earliest_time: Optional[str] = None,
    latest_time: Optional[str] = None,
  ) -> JobHandle:
    """Create a search job and return its handle.

    Time bounds are passed through untouched; Splunk parses them.

    Raises:
        InvalidQueryError: If the query is blank.
        TransportFailure, RemoteRejected, DecodeFailure: From the request.
    """
    if not query or not query.strip():
      raise InvalidQueryError()

    form: Dict[str, Any] = {
      "search": normalize_query(query),
      "output_mode": "json",
    }
    if earliest_time:
      form["earliest_time"] = earliest_time
    if latest_time:
      form["latest_time"] = latest_time

    body = await self._transport.request("POST", JOBS_PATH, data=form)

    try:
      created = SearchJobCreated.model_validate(body)
    except ValidationError as e:
      raise DecodeFailure(f"Failed to decode response: {e}", body=str(body)[:200])

    log_debug(f"Search job created: {created.sid}")
    return JobHandle(created.sid)
