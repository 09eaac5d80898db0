"""
splunk-cli: run Splunk searches from a terminal or from an AI assistant.

Quick Start:
    from splunk_cli import SplunkConfig, SplunkTransport
    from splunk_cli.search import SearchRunner, raise_for_outcome

    config = SplunkConfig.load()
    async with SplunkTransport(config) as transport:
        outcome = await SearchRunner(transport, deadline=60.0).run("error", earliest_time="-1h")
        for row in raise_for_outcome(outcome).results:
            print(row)

Front ends:
    splunk search <query> [earliest-time] [latest-time]
    splunk mcp-server
"""

from splunk_cli.client import SplunkClient
from splunk_cli.config import SplunkConfig
from splunk_cli.exceptions import (
  ConfigurationMissing,
  DecodeFailure,
  FetchError,
  InvalidQueryError,
  PollError,
  PollTimeout,
  RemoteRejected,
  SearchCancelled,
  SplunkError,
  SubmitError,
  TransportFailure,
)
from splunk_cli.transport import SplunkTransport

__version__ = "1.0.0"

__all__ = [
  "ConfigurationMissing",
  "DecodeFailure",
  "FetchError",
  "InvalidQueryError",
  "PollError",
  "PollTimeout",
  "RemoteRejected",
  "SearchCancelled",
  "SplunkClient",
  "SplunkConfig",
  "SplunkError",
  "SplunkTransport",
  "SubmitError",
  "TransportFailure",
  "__version__",
]
