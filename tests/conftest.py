"""
Root conftest: shared fixtures for the whole test suite.

  fake_splunk     scripted Splunk REST endpoints behind httpx.MockTransport
  fake_clock      monotonic clock + sleep that only advance when slept on
  config          SplunkConfig pointing at the fake host
  make_transport  SplunkTransport factory wired to fake_splunk

No test touches the network, the real keyring or the user's config dir.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

from splunk_cli.config import SplunkConfig
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import LOGGER_NAME

SID = "1700000000.42"

Reply = Tuple[int, Any]


def status_body(done: bool, result_count: int = 0, event_count: int = 0, state: str = "RUNNING") -> Dict[str, Any]:
  """Job status in Splunk's ``entry[0].content`` shape."""
  return {
    "entry": [
      {
        "name": f"search {SID}",
        "content": {
          "isDone": done,
          "resultCount": result_count,
          "eventCount": event_count,
          "dispatchState": "DONE" if done and state == "RUNNING" else state,
        },
      }
    ]
  }


def _build(reply: Reply) -> httpx.Response:
  status_code, body = reply
  if isinstance(body, str):
    return httpx.Response(status_code, text=body)
  return httpx.Response(status_code, json=body)


def form_of(request: httpx.Request) -> Dict[str, str]:
  """Decode a form-encoded request body into single values."""
  return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def json_of(request: httpx.Request) -> Any:
  return json.loads(request.content.decode())


class FakeSplunk:
  """In-memory Splunk management API.

  Responses are stored as ``(status_code, body)`` pairs and a fresh
  ``httpx.Response`` is built per request; a ``str`` body is sent as text,
  anything else as JSON. Status responses are consumed in order and the last
  one repeats forever. Every request is recorded in ``requests``.
  """

  def __init__(self) -> None:
    self.requests: List[httpx.Request] = []
    self.sid = SID
    self.submit_response: Reply = (201, {"sid": SID})
    self.status_responses: List[Reply] = [(200, status_body(True))]
    self.results: List[Dict[str, Any]] = []
    self.results_response: Optional[Reply] = None
    self.routes: Dict[Tuple[str, str], Reply] = {}
    self.on_request: Optional[Callable[[httpx.Request], None]] = None

  status_body = staticmethod(status_body)
  form_of = staticmethod(form_of)
  json_of = staticmethod(json_of)

  def script_statuses(self, *replies: Any) -> None:
    """Each item is a status body dict or a ``(status_code, body)`` pair."""
    self.status_responses = [r if isinstance(r, tuple) else (200, r) for r in replies]

  def handler(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    if self.on_request is not None:
      self.on_request(request)

    path = request.url.path
    jobs = "/services/search/jobs"

    if request.method == "POST" and path == jobs:
      return _build(self.submit_response)
    if request.method == "GET" and path == f"{jobs}/{self.sid}":
      if len(self.status_responses) > 1:
        return _build(self.status_responses.pop(0))
      return _build(self.status_responses[0])
    if request.method == "GET" and path == f"{jobs}/{self.sid}/results":
      if self.results_response is not None:
        return _build(self.results_response)
      return _build((200, {"results": self.results}))

    route = self.routes.get((request.method, path))
    if route is not None:
      return _build(route)
    return _build((404, f"no route for {request.method} {path}"))

  # -- inspection helpers --

  def submits(self) -> List[httpx.Request]:
    return [r for r in self.requests if r.method == "POST" and r.url.path == "/services/search/jobs"]

  def status_requests(self) -> List[httpx.Request]:
    return [r for r in self.requests if r.url.path == f"/services/search/jobs/{self.sid}"]

  def result_requests(self) -> List[httpx.Request]:
    return [r for r in self.requests if r.url.path.endswith("/results")]


class FakeClock:
  """Clock and sleep pair: time only moves when ``sleep`` is awaited."""

  def __init__(self) -> None:
    self.now = 0.0
    self.sleeps: List[float] = []

  def __call__(self) -> float:
    return self.now

  async def sleep(self, seconds: float) -> None:
    self.sleeps.append(seconds)
    self.now += seconds


@pytest.fixture
def fake_splunk() -> FakeSplunk:
  return FakeSplunk()


@pytest.fixture
def fake_clock() -> FakeClock:
  return FakeClock()


@pytest.fixture
def config() -> SplunkConfig:
  return SplunkConfig(host="splunk.test", token="s3cr3t-token")


@pytest.fixture
def make_transport(config, fake_splunk) -> Callable[..., SplunkTransport]:
  def _make(cfg: Optional[SplunkConfig] = None) -> SplunkTransport:
    return SplunkTransport(cfg or config, http_transport=httpx.MockTransport(fake_splunk.handler))

  return _make


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
  """Keep real credentials and config dirs out of every test."""
  monkeypatch.delenv("SPLUNK_HOST", raising=False)
  monkeypatch.delenv("SPLUNK_TOKEN", raising=False)
  monkeypatch.delenv("SPLUNK_INSECURE", raising=False)
  monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
  monkeypatch.setattr("splunk_cli.credentials.user_config_dir", lambda: tmp_path / "xdg")
  monkeypatch.setattr("keyring.get_password", lambda service, username: None)
  yield


@pytest.fixture(autouse=True)
def reset_logger():
  """Drop handlers bound to streams a previous test may have closed."""
  yield
  logger = logging.getLogger(LOGGER_NAME)
  for handler in list(logger.handlers):
    logger.removeHandler(handler)
  logger.setLevel(logging.NOTSET)
  logger.propagate = True
