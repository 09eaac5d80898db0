"""Unit tests for CancellationToken and signal wiring."""

import asyncio
import os
import signal
import sys

import pytest

from splunk_cli.cancellation import CancellationToken, install_signal_handlers, remove_signal_handlers


@pytest.mark.unit
class TestCancellationToken:
  def test_initial_state(self):
    assert not CancellationToken().is_cancelled

  def test_cancel(self):
    token = CancellationToken()
    token.cancel()
    assert token.is_cancelled

  def test_cancel_twice(self):
    token = CancellationToken()
    token.cancel()
    token.cancel()
    assert token.is_cancelled


class FakeLoop:
  def __init__(self, error=None):
    self.error = error
    self.handlers = {}

  def add_signal_handler(self, sig, callback):
    if self.error is not None:
      raise self.error
    self.handlers[sig] = callback

  def remove_signal_handler(self, sig):
    self.handlers.pop(sig, None)


@pytest.mark.unit
class TestSignalHandlers:
  def test_handlers_cancel_token(self):
    loop, token = FakeLoop(), CancellationToken()
    assert install_signal_handlers(loop, token) is True
    assert set(loop.handlers) == {signal.SIGINT, signal.SIGTERM}

    loop.handlers[signal.SIGINT]()
    assert token.is_cancelled

  def test_unsupported_loop_returns_false(self):
    assert install_signal_handlers(FakeLoop(NotImplementedError()), CancellationToken()) is False

  def test_remove(self):
    loop = FakeLoop()
    install_signal_handlers(loop, CancellationToken())
    remove_signal_handlers(loop)
    assert loop.handlers == {}

  @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
  @pytest.mark.asyncio
  async def test_sigterm_on_running_loop(self):
    loop = asyncio.get_running_loop()
    token = CancellationToken()
    assert install_signal_handlers(loop, token, signals=(signal.SIGTERM,))
    try:
      os.kill(os.getpid(), signal.SIGTERM)
      for _ in range(50):
        if token.is_cancelled:
          break
        await asyncio.sleep(0.01)
    finally:
      remove_signal_handlers(loop, signals=(signal.SIGTERM,))
    assert token.is_cancelled
