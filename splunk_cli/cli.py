"""Command line entry point: ``splunk <command> [args...]``.

Every command resolves its configuration once, opens one transport, runs,
and exits non-zero with ``Error: <message>`` on stderr when anything fails.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import typer
from keyring.errors import KeyringError

from splunk_cli.cancellation import CancellationToken, install_signal_handlers, remove_signal_handlers
from splunk_cli.client import SplunkClient
from splunk_cli.config import SplunkConfig
from splunk_cli.credentials import save_host, save_token
from splunk_cli.exceptions import SplunkError
from splunk_cli.mcp_server import serve_stdio
from splunk_cli.render import render_alerts, render_saved_searches, render_search_completed, render_server_info
from splunk_cli.search import JobHandle, JobStatus, SearchRunner, normalize_query, raise_for_outcome
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import configure_logging, set_log_level_to_debug

T = TypeVar("T")

app = typer.Typer(
  name="splunk",
  help="Run Splunk searches and manage saved searches from the terminal.",
  no_args_is_help=True,
  add_completion=False,
)


def load_config() -> SplunkConfig:
  return SplunkConfig.load()


def open_transport(config: SplunkConfig) -> SplunkTransport:
  return SplunkTransport(config)


def _fail(message: str) -> NoReturn:
  typer.echo(f"Error: {message}", err=True)
  raise typer.Exit(code=1)


def _execute(fn: Callable[[SplunkTransport, SplunkConfig], Awaitable[T]]) -> T:
  """Load config, open the transport, run ``fn`` and map failures to exit 1."""

  async def _run() -> T:
    config = load_config()
    async with open_transport(config) as transport:
      return await fn(transport, config)

  try:
    return asyncio.run(_run())
  except SplunkError as e:
    _fail(str(e))


@app.callback()
def main_callback(
  verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and job state to stderr."),
) -> None:
  if verbose:
    set_log_level_to_debug()
  else:
    configure_logging()


@app.command()
def configure(host: str = typer.Argument(..., help="Splunk host name, without scheme or port.")) -> None:
  """Configure Splunk host and token (reads token from stdin)."""
  if not host.strip():
    _fail("host is required")

  typer.echo("To create an authentication token in Splunk:", err=True)
  typer.echo(f"1. Log in to your Splunk instance at https://{host}:8000", err=True)
  typer.echo("2. Go to Settings > Tokens", err=True)
  typer.echo("3. Click 'New Token' and generate a token", err=True)
  typer.echo("The token will be stored securely in your system's keyring.", err=True)
  typer.echo("", err=True)

  token = typer.prompt("Enter Splunk API token", hide_input=True, err=True, default="", show_default=False)
  if not token:
    _fail("token cannot be empty")

  try:
    save_host(host)
  except OSError as e:
    _fail(f"failed to write config file: {e}")
  try:
    save_token(host, token)
  except KeyringError as e:
    _fail(f"failed to store token in keyring: {e}")

  typer.echo(f"Configuration saved successfully for host: {host}", err=True)


def _print_progress(status: JobStatus) -> None:
  if not status.is_done:
    typer.echo(f"Search in progress ({status.dispatch_state})...")


def _print_submitted(handle: JobHandle) -> None:
  typer.echo(f"Search job created: {handle}")


@app.command(context_settings={"ignore_unknown_options": True})
def search(
  query: str = typer.Argument(..., help="SPL query; 'search ' is prepended when missing."),
  earliest_time: Optional[str] = typer.Argument(None, help="Earliest time, e.g. -24h."),
  latest_time: Optional[str] = typer.Argument(None, help="Latest time, e.g. now."),
) -> None:
  """Run a Splunk search query and wait for it to finish."""

  async def _search(transport: SplunkTransport, config: SplunkConfig) -> str:
    if query.strip():
      typer.echo(f"Running search: {normalize_query(query)}")

    token = CancellationToken()
    loop = asyncio.get_running_loop()
    installed = install_signal_handlers(loop, token)
    try:
      runner = SearchRunner(
        transport,
        interval=config.poll_interval,
        deadline=None,
        token=token,
        on_submitted=_print_submitted,
        on_status=_print_progress,
      )
      outcome = await runner.run(query, earliest_time, latest_time, max_results=config.max_results)
    finally:
      if installed:
        remove_signal_handlers(loop)
    return render_search_completed(raise_for_outcome(outcome))

  typer.echo(_execute(_search), nl=False)


@app.command("list-saved-searches")
def list_saved_searches() -> None:
  """List all saved searches."""

  async def _list(transport: SplunkTransport, config: SplunkConfig) -> str:
    try:
      searches = await SplunkClient(transport).list_saved_searches()
    except SplunkError as e:
      raise SplunkError(f"failed to list saved searches: {e}", e.status_code) from e
    return render_saved_searches(searches)

  typer.echo(_execute(_list), nl=False)


@app.command("create-saved-search")
def create_saved_search(
  name: str = typer.Argument(..., help="Name of the saved search."),
  query: str = typer.Argument(..., help="SPL search query."),
  description: Optional[str] = typer.Argument(None, help="Optional description."),
) -> None:
  """Create a saved search."""

  async def _create(transport: SplunkTransport, config: SplunkConfig) -> None:
    try:
      await SplunkClient(transport).create_saved_search(name, query, description)
    except SplunkError as e:
      raise SplunkError(f"failed to create saved search: {e}", e.status_code) from e

  _execute(_create)
  typer.echo(f"Successfully created saved search: {name}")


@app.command("list-alerts")
def list_alerts() -> None:
  """List scheduled alerts."""

  async def _list(transport: SplunkTransport, config: SplunkConfig) -> str:
    try:
      alerts = await SplunkClient(transport).list_alerts()
    except SplunkError as e:
      raise SplunkError(f"failed to list alerts: {e}", e.status_code) from e
    return render_alerts(alerts)

  typer.echo(_execute(_list), nl=False)


@app.command("server-info")
def server_info() -> None:
  """Get Splunk server information."""

  async def _info(transport: SplunkTransport, config: SplunkConfig) -> str:
    try:
      info = await SplunkClient(transport).get_server_info()
    except SplunkError as e:
      raise SplunkError(f"failed to get server info: {e}", e.status_code) from e
    return render_server_info(info)

  typer.echo(_execute(_info), nl=False)


@app.command("send-event")
def send_event(
  index: str = typer.Argument(..., help="Target index."),
  source: str = typer.Argument(..., help="Source field."),
  sourcetype: str = typer.Argument(..., help="Sourcetype field."),
  event_json: str = typer.Argument(..., metavar="JSON_EVENT", help="Event body as a JSON object."),
) -> None:
  """Send an event to Splunk."""
  try:
    event: Any = json.loads(event_json)
  except json.JSONDecodeError as e:
    _fail(f"failed to parse event JSON: {e}")
  if not isinstance(event, dict):
    _fail("failed to parse event JSON: expected a JSON object")

  async def _send(transport: SplunkTransport, config: SplunkConfig) -> None:
    try:
      await SplunkClient(transport).send_event(index, event, source=source, sourcetype=sourcetype)
    except SplunkError as e:
      raise SplunkError(f"failed to send event: {e}", e.status_code) from e

  _execute(_send)
  typer.echo(f"Successfully sent event to index: {index}")


@app.command("mcp-server")
def mcp_server() -> None:
  """Start MCP server (stdio transport)."""
  try:
    config = load_config()
    asyncio.run(serve_stdio(config))
  except SplunkError as e:
    _fail(str(e))


def main() -> None:
  app()


if __name__ == "__main__":
  main()
