"""Result retrieval for finished search jobs."""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from splunk_cli.exceptions import DecodeFailure
from splunk_cli.search.models import JobHandle, ResultSet, SearchResultsPayload
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import log_debug


class ResultFetcher:
  """Reads the results of a job that reported done."""

  def __init__(self, transport: SplunkTransport):
    self._transport = transport

  async def fetch(self, handle: JobHandle, max_count: int, total_count: Optional[int] = None) -> ResultSet:
    """Fetch up to ``max_count`` rows in server order.

    ``max_count <= 0`` leaves the page size to Splunk. ``total_count`` is
    display metadata only and defaults to the number of rows returned.

    Raises:
        TransportFailure, RemoteRejected, DecodeFailure
    """
    params: Dict[str, Any] = {"output_mode": "json"}
    if max_count > 0:
      params["count"] = max_count

    body = await self._transport.request("GET", f"/services/search/jobs/{handle.sid}/results", params=params)

    try:
      payload = SearchResultsPayload.model_validate(body if body is not None else {})
    except ValidationError as e:
      raise DecodeFailure(f"Failed to decode response: {e}", body=str(body)[:200])

    rows = tuple(payload.results)
    log_debug(f"Fetched {len(rows)} row(s) for {handle}")
    return ResultSet(rows=rows, total_count=len(rows) if total_count is None else total_count)
