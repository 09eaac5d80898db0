"""Submit, poll, fetch.

``SearchRunner`` wires the three search components together for one query
and returns a single ``PollOutcome``. Both front ends use it; they differ
only in the deadline and the cancellation source they hand in.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from splunk_cli.cancellation import CancellationToken
from splunk_cli.exceptions import FetchError, InvalidQueryError, PollTimeout, SearchCancelled, SplunkError, SubmitError
from splunk_cli.search.fetcher import ResultFetcher
from splunk_cli.search.models import Cancelled, Completed, Done, Failed, JobHandle, PollOutcome, TimedOut
from splunk_cli.search.poller import DEFAULT_POLL_INTERVAL, CompletionPoller, StatusCallback
from splunk_cli.search.submitter import JobSubmitter
from splunk_cli.transport import SplunkTransport

SubmittedCallback = Callable[[JobHandle], None]


class SearchRunner:
  """Runs one search job end to end."""

  def __init__(
    self,
    transport: SplunkTransport,
    interval: float = DEFAULT_POLL_INTERVAL,
    deadline: Optional[float] = None,
    token: Optional[CancellationToken] = None,
    on_submitted: Optional[SubmittedCallback] = None,
    on_status: Optional[StatusCallback] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
  ) -> None:
    self.token = token or CancellationToken()
    self.submitter = JobSubmitter(transport)
    self.poller = CompletionPoller(
      transport,
      interval=interval,
      deadline=deadline,
      token=self.token,
      on_status=on_status,
      sleep=sleep,
      clock=clock,
    )
    self.fetcher = ResultFetcher(transport)
    self._on_submitted = on_submitted

  async def run(
    self,
    query: str,
    earliest_time: Optional[str] = None,
    latest_time: Optional[str] = None,
    max_results: int = 100,
  ) -> PollOutcome:
    """Run the search and return its outcome.

    Raises:
        InvalidQueryError: If the query is blank. Every other failure is
        returned as ``Failed``.
    """
    if self.token.is_cancelled:
      return Cancelled()

    try:
      handle = await self.submitter.submit(query, earliest_time, latest_time)
    except InvalidQueryError:
      raise
    except SplunkError as e:
      return Failed(SubmitError(e))

    if self._on_submitted is not None:
      self._on_submitted(handle)

    result = await self.poller.wait(handle)
    if not isinstance(result, Done):
      return result

    try:
      results = await self.fetcher.fetch(handle, max_results, total_count=result.status.result_count)
    except SplunkError as e:
      return Failed(FetchError(e), handle)

    return Completed(results, result.status)


def raise_for_outcome(outcome: PollOutcome) -> Completed:
  """Return ``Completed`` or raise the matching typed error."""
  if isinstance(outcome, Completed):
    return outcome
  if isinstance(outcome, TimedOut):
    raise PollTimeout(outcome.handle.sid, outcome.deadline)
  if isinstance(outcome, Cancelled):
    raise SearchCancelled(outcome.handle.sid if outcome.handle else None)
  if isinstance(outcome, Failed):
    raise outcome.error
  raise TypeError(f"Unknown poll outcome: {outcome!r}")
