"""
Search job orchestration.

Quick Start:
    from splunk_cli.search import SearchRunner, raise_for_outcome

    async with SplunkTransport(config) as transport:
        runner = SearchRunner(transport, deadline=60.0)
        outcome = await runner.run("error", earliest_time="-1h")
        completed = raise_for_outcome(outcome)
        for row in completed.results:
            ...
"""

from splunk_cli.search.fetcher import ResultFetcher
from splunk_cli.search.models import (
  Cancelled,
  Completed,
  Done,
  Failed,
  FieldValue,
  JobHandle,
  JobStatus,
  PollOutcome,
  PollResult,
  ResultRow,
  ResultSet,
  TimedOut,
)
from splunk_cli.search.poller import CompletionPoller
from splunk_cli.search.query import normalize_query
from splunk_cli.search.runner import SearchRunner, raise_for_outcome
from splunk_cli.search.submitter import JobSubmitter

__all__ = [
  "Cancelled",
  "Completed",
  "CompletionPoller",
  "Done",
  "Failed",
  "FieldValue",
  "JobHandle",
  "JobStatus",
  "JobSubmitter",
  "PollOutcome",
  "PollResult",
  "ResultFetcher",
  "ResultRow",
  "ResultSet",
  "SearchRunner",
  "TimedOut",
  "normalize_query",
  "raise_for_outcome",
]
