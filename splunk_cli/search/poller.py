"""Completion poller: the search job state machine.

    Submitted -> Polling -> Done | TimedOut | PollError | Cancelled

Each tick checks cancellation and the deadline, then issues exactly one
status request and waits for the next tick. Requests are strictly
sequential and none is sent after a terminal state is reached.

The command line runs it with no deadline; the tool-call server runs the
same machine with a 60 second deadline.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from splunk_cli.cancellation import CancellationToken
from splunk_cli.exceptions import DecodeFailure, PollError, SplunkError
from splunk_cli.search.models import (
  Cancelled,
  Done,
  Failed,
  JobHandle,
  JobStatus,
  JobStatusContent,
  PollResult,
  TimedOut,
  job_status_content,
)
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import log_debug

DEFAULT_POLL_INTERVAL = 2.0

StatusCallback = Callable[[JobStatus], None]


class CompletionPoller:
  """Polls one search job until it is done, times out, fails or is cancelled.

  Example:
      poller = CompletionPoller(transport, deadline=60.0, token=token)
      result = await poller.wait(handle)
      if isinstance(result, Done):
          ...
  """

  def __init__(
    self,
    transport: SplunkTransport,
    interval: float = DEFAULT_POLL_INTERVAL,
    deadline: Optional[float] = None,
    token: Optional[CancellationToken] = None,
    on_status: Optional[StatusCallback] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
  ) -> None:
    """Initialize the poller.

    Args:
        transport: Shared transport for status requests.
        interval: Seconds between ticks.
        deadline: Overall time limit in seconds, or None to poll until done.
        token: Cancellation source, checked at every tick boundary.
        on_status: Called with every snapshot, e.g. to print progress.
        sleep: Tick wait; injectable for tests.
        clock: Monotonic clock; injectable for tests.
    """
    if interval <= 0:
      raise ValueError("interval must be positive")
    if deadline is not None and deadline < 0:
      raise ValueError("deadline must not be negative")

    self._transport = transport
    self.interval = interval
    self.deadline = deadline
    self.token = token or CancellationToken()
    self._on_status = on_status
    self._sleep = sleep
    self._clock = clock

  async def get_status(self, handle: JobHandle) -> JobStatus:
    """Fetch one status snapshot.

    Raises:
        TransportFailure, RemoteRejected, DecodeFailure
    """
    body = await self._transport.request(
      "GET",
      f"/services/search/jobs/{handle.sid}",
      params={"output_mode": "json"},
    )
    try:
      content = JobStatusContent.model_validate(job_status_content(body))
    except ValidationError as e:
      raise DecodeFailure(f"Failed to decode response: {e}", body=str(body)[:200])
    return JobStatus.from_content(content)

  async def wait(self, handle: JobHandle) -> PollResult:
    """Run the state machine to a terminal state. Never raises for job errors."""
    started = self._clock()
    last_status: Optional[JobStatus] = None
    ticks = 0

    while True:
      if self.token.is_cancelled:
        log_debug(f"Search {handle} cancelled after {ticks} tick(s)")
        return Cancelled(handle)

      remaining = self._remaining(started)
      if remaining is not None and remaining <= 0:
        log_debug(f"Search {handle} timed out after {ticks} tick(s)")
        return TimedOut(handle, self.deadline, last_status)  # type: ignore[arg-type]

      ticks += 1
      try:
        status = await self.get_status(handle)
      except SplunkError as e:
        log_debug(f"Status request {ticks} for {handle} failed: {e}")
        return Failed(PollError(e), handle)

      last_status = status
      log_debug(f"Search {handle} tick {ticks}: done={status.is_done} state={status.dispatch_state}")

      if self.token.is_cancelled:
        return Cancelled(handle)

      if self._on_status is not None:
        self._on_status(status)

      if status.is_done:
        return Done(status)

      remaining = self._remaining(started)
      wait_for = self.interval if remaining is None else max(0.0, min(self.interval, remaining))
      await self._sleep(wait_for)

  def _remaining(self, started: float) -> Optional[float]:
    if self.deadline is None:
      return None
    return self.deadline - (self._clock() - started)
