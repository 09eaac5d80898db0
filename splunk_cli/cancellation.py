"""Cooperative cancellation for search jobs."""

import signal
from dataclasses import dataclass
from typing import Iterable

from splunk_cli.utils.log import log_debug


@dataclass
class CancellationToken:
  """Cooperative cancellation token for a search.

  Create a token, pass it to the poller, and call ``token.cancel()`` from a
  signal handler or another coroutine to stop polling.

  The poller checks ``is_cancelled`` at tick boundaries only: a status
  request already in flight is allowed to finish, nothing is sent after it.
  """

  _cancelled: bool = False

  def cancel(self) -> None:
    """Request cancellation. Thread-safe (single bool write)."""
    self._cancelled = True

  @property
  def is_cancelled(self) -> bool:
    return self._cancelled


def install_signal_handlers(
  loop,
  token: CancellationToken,
  signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM),
) -> bool:
  """Route process signals to ``token.cancel()`` on the running loop.

  Returns False where the loop cannot take signal handlers (Windows), in
  which case Ctrl+C falls back to ``KeyboardInterrupt``.
  """
  try:
    for sig in signals:
      loop.add_signal_handler(sig, token.cancel)
  except (NotImplementedError, RuntimeError, ValueError) as e:
    log_debug(f"Signal handlers unavailable: {e}")
    return False
  return True


def remove_signal_handlers(loop, signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM)) -> None:
  for sig in signals:
    try:
      loop.remove_signal_handler(sig)
    except (NotImplementedError, RuntimeError, ValueError):
      pass
