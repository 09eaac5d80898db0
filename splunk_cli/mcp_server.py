"""MCP tool server over stdio.

Tool handlers are plain coroutines returning ``ToolResult``; domain failures
never escape as exceptions from them. ``build_server`` registers them on a
FastMCP instance and hands each result back as a ``CallToolResult``, so error
text reaches the client exactly as written.

Lifecycle:
  1. ``SplunkConfig.load()`` resolves host and token once
  2. one ``SplunkTransport`` is opened for the lifetime of the server
  3. every tool call shares it; a cancelled tool call is stopped by the MCP
     library cancelling its task, which interrupts the poll sleep or request
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent

from splunk_cli.client import SplunkClient
from splunk_cli.config import SplunkConfig
from splunk_cli.exceptions import InvalidQueryError, SplunkError
from splunk_cli.render import (
  render_alerts,
  render_saved_searches,
  render_search_tool_result,
  render_server_info,
)
from splunk_cli.search import Cancelled, Completed, Failed, SearchRunner, TimedOut
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import log_debug, log_info, log_warning

SERVER_NAME = "splunk-cli-mcp-server"
SERVER_VERSION = "1.0.0"


@dataclass
class ToolResult:
  text: str
  is_error: bool = False

  @classmethod
  def error(cls, text: str) -> "ToolResult":
    return cls(text=text, is_error=True)


def _string_arg(arguments: Dict[str, Any], name: str, default: str = "") -> str:
  value = arguments.get(name)
  return value if isinstance(value, str) else default


def _required_string(arguments: Dict[str, Any], name: str) -> Optional[str]:
  value = arguments.get(name)
  if not isinstance(value, str) or not value.strip():
    return None
  return value


def _int_arg(arguments: Dict[str, Any], name: str, default: int) -> int:
  value = arguments.get(name)
  if isinstance(value, bool) or value is None:
    return default
  if isinstance(value, (int, float)):
    return int(value)
  if isinstance(value, str):
    try:
      return int(value)
    except ValueError:
      return default
  return default


class SplunkTools:
  """Handlers for every tool, bound to one transport."""

  def __init__(
    self,
    transport: SplunkTransport,
    config: SplunkConfig,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
  ) -> None:
    self._transport = transport
    self._config = config
    self._client = SplunkClient(transport)
    self._sleep = sleep
    self._clock = clock

  async def search(self, arguments: Dict[str, Any]) -> ToolResult:
    query = _required_string(arguments, "query")
    if query is None:
      return ToolResult.error("Missing or invalid 'query' argument: a non-empty string is required")

    runner = SearchRunner(
      self._transport,
      interval=self._config.poll_interval,
      deadline=self._config.tool_deadline,
      sleep=self._sleep,
      clock=self._clock,
    )
    try:
      outcome = await runner.run(
        query,
        earliest_time=_string_arg(arguments, "earliest_time") or None,
        latest_time=_string_arg(arguments, "latest_time") or None,
        max_results=_int_arg(arguments, "max_results", self._config.max_results),
      )
    except InvalidQueryError as e:
      return ToolResult.error(f"Missing or invalid 'query' argument: {e}")

    if isinstance(outcome, Completed):
      return ToolResult(render_search_tool_result(outcome))
    if isinstance(outcome, TimedOut):
      return ToolResult.error(f"Search timed out after {outcome.deadline:g} seconds")
    if isinstance(outcome, Cancelled):
      return ToolResult.error("Search was cancelled")
    if isinstance(outcome, Failed):
      return ToolResult.error(str(outcome.error))
    return ToolResult.error(f"Unexpected search outcome: {outcome!r}")

  async def list_saved_searches(self, arguments: Dict[str, Any]) -> ToolResult:
    try:
      searches = await self._client.list_saved_searches()
    except SplunkError as e:
      return ToolResult.error(f"Failed to list saved searches: {e}")
    return ToolResult(render_saved_searches(searches))

  async def create_saved_search(self, arguments: Dict[str, Any]) -> ToolResult:
    name = _required_string(arguments, "name")
    if name is None:
      return ToolResult.error("Missing or invalid 'name' argument")
    query = _required_string(arguments, "query")
    if query is None:
      return ToolResult.error("Missing or invalid 'query' argument")

    try:
      await self._client.create_saved_search(name, query, _string_arg(arguments, "description") or None)
    except SplunkError as e:
      return ToolResult.error(f"Failed to create saved search: {e}")
    return ToolResult(f"Successfully created saved search: {name}")

  async def list_alerts(self, arguments: Dict[str, Any]) -> ToolResult:
    try:
      alerts = await self._client.list_alerts()
    except SplunkError as e:
      return ToolResult.error(f"Failed to list alerts: {e}")
    return ToolResult(render_alerts(alerts))

  async def server_info(self, arguments: Dict[str, Any]) -> ToolResult:
    try:
      info = await self._client.get_server_info()
    except SplunkError as e:
      return ToolResult.error(f"Failed to get server info: {e}")
    return ToolResult(render_server_info(info))

  async def send_event(self, arguments: Dict[str, Any]) -> ToolResult:
    index = _required_string(arguments, "index")
    if index is None:
      return ToolResult.error("Missing or invalid 'index' argument")
    event_json = _required_string(arguments, "event")
    if event_json is None:
      return ToolResult.error("Missing or invalid 'event' argument")

    try:
      event = json.loads(event_json)
    except json.JSONDecodeError as e:
      return ToolResult.error(f"Failed to parse event JSON: {e}")
    if not isinstance(event, dict):
      return ToolResult.error("Failed to parse event JSON: expected a JSON object")

    try:
      await self._client.send_event(
        index,
        event,
        source=_string_arg(arguments, "source") or None,
        sourcetype=_string_arg(arguments, "sourcetype") or None,
      )
    except SplunkError as e:
      return ToolResult.error(f"Failed to send event: {e}")
    return ToolResult(f"Successfully sent event to index: {index}")


def _to_call_result(name: str, result: ToolResult) -> CallToolResult:
  if result.is_error:
    log_warning(f"Tool {name} failed: {result.text}")
  return CallToolResult(content=[TextContent(type="text", text=result.text)], isError=result.is_error)


def build_server(tools: SplunkTools) -> FastMCP:
  """Register every tool on a new FastMCP server."""
  mcp = FastMCP(SERVER_NAME)

  @mcp.tool(name="search", description="Run a Splunk search query and return results")
  async def search(
    query: str,
    earliest_time: str = "",
    latest_time: str = "",
    max_results: int = 100,
  ) -> CallToolResult:
    """Run an SPL query.

    Args:
        query: SPL (Search Processing Language) query to execute
        earliest_time: Earliest time for search (e.g., '-1h', '-24h', '2024-01-01T00:00:00')
        latest_time: Latest time for search (e.g., 'now', '2024-01-01T23:59:59')
        max_results: Maximum number of results to return (default: 100)
    """
    return _to_call_result(
      "search",
      await tools.search(
        {
          "query": query,
          "earliest_time": earliest_time,
          "latest_time": latest_time,
          "max_results": max_results,
        }
      )
    )

  @mcp.tool(name="list_saved_searches", description="List all saved searches in Splunk")
  async def list_saved_searches() -> CallToolResult:
    return _to_call_result("list_saved_searches", await tools.list_saved_searches({}))

  @mcp.tool(name="create_saved_search", description="Create a new saved search in Splunk")
  async def create_saved_search(name: str, query: str, description: str = "") -> CallToolResult:
    return _to_call_result("create_saved_search", await tools.create_saved_search({"name": name, "query": query, "description": description}))

  @mcp.tool(name="list_alerts", description="List all scheduled alerts in Splunk")
  async def list_alerts() -> CallToolResult:
    return _to_call_result("list_alerts", await tools.list_alerts({}))

  @mcp.tool(name="server_info", description="Get Splunk server information including version, OS, and configuration")
  async def server_info() -> CallToolResult:
    return _to_call_result("server_info", await tools.server_info({}))

  @mcp.tool(name="send_event", description="Send an event to Splunk via HTTP Event Collector")
  async def send_event(index: str, event: str, source: str = "", sourcetype: str = "") -> CallToolResult:
    """Send one event.

    Args:
        index: Target index for the event
        event: Event data as JSON string
        source: Source field for the event
        sourcetype: Sourcetype field for the event
    """
    return _to_call_result("send_event", await tools.send_event({"index": index, "event": event, "source": source, "sourcetype": sourcetype}))

  return mcp


async def serve_stdio(config: SplunkConfig) -> None:
  """Serve the tools over stdio until the client disconnects."""
  async with SplunkTransport(config) as transport:
    server = build_server(SplunkTools(transport, config))
    log_info(f"{SERVER_NAME} {SERVER_VERSION} serving {config.base_url} over stdio")
    await server.run_stdio_async()
  log_debug(f"{SERVER_NAME} stopped")
