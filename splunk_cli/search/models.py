"""Search job types.

Wire models (pydantic) decode Splunk responses; the dataclasses below are
the front-end-neutral values the rest of the program works with.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from splunk_cli.exceptions import DecodeFailure

# A result field value: scalar | sequence | mapping, recursively.
FieldValue = JsonValue
ResultRow = Dict[str, FieldValue]


# =============================================================================
# Wire models
# =============================================================================


class SearchJobCreated(BaseModel):
  """Body of ``POST /services/search/jobs``."""

  sid: str = Field(min_length=1)


class JobStatusContent(BaseModel):
  """The ``content`` block of a search job entry."""

  model_config = ConfigDict(populate_by_name=True, extra="ignore")

  is_done: bool = Field(alias="isDone")
  result_count: int = Field(default=0, alias="resultCount")
  event_count: int = Field(default=0, alias="eventCount")
  dispatch_state: str = Field(default="", alias="dispatchState")


class SearchResultsPayload(BaseModel):
  """Body of ``GET /services/search/jobs/<sid>/results``."""

  model_config = ConfigDict(extra="ignore")

  results: List[Dict[str, JsonValue]] = Field(default_factory=list)


def job_status_content(data: Any) -> Dict[str, Any]:
  """Locate the job ``content`` block.

  Splunk nests it under ``entry[0]``; a flat ``content`` key is accepted too.

  Raises:
      DecodeFailure: If neither is present, e.g. a ``messages``-only body for
      a job Splunk no longer knows.
  """
  if not isinstance(data, dict):
    raise DecodeFailure("Failed to decode response: job status is not an object", body=str(data)[:200])
  entries = data.get("entry")
  if isinstance(entries, list) and entries and isinstance(entries[0], dict):
    content = entries[0].get("content")
  else:
    content = data.get("content")
  if not isinstance(content, dict):
    raise DecodeFailure("Failed to decode response: job status has no content", body=str(data)[:200])
  return content


# =============================================================================
# Neutral values
# =============================================================================


@dataclass(frozen=True)
class JobHandle:
  """Opaque search id returned by Splunk."""

  sid: str

  def __str__(self) -> str:
    return self.sid


@dataclass(frozen=True)
class JobStatus:
  """One status snapshot, produced per poll tick."""

  is_done: bool
  result_count: int = 0
  event_count: int = 0
  dispatch_state: str = ""

  @classmethod
  def from_content(cls, content: JobStatusContent) -> "JobStatus":
    return cls(
      is_done=content.is_done,
      result_count=content.result_count,
      event_count=content.event_count,
      dispatch_state=content.dispatch_state,
    )


@dataclass(frozen=True)
class ResultSet:
  """Rows in server order plus the total count reported for the job."""

  rows: Tuple[ResultRow, ...] = ()
  total_count: int = 0

  def __len__(self) -> int:
    return len(self.rows)

  def __iter__(self):
    return iter(self.rows)


# =============================================================================
# Poll outcomes
# =============================================================================


@dataclass(frozen=True)
class Done:
  """Poller terminal state: the job reported ``isDone``."""

  status: JobStatus


@dataclass(frozen=True)
class Completed:
  """Search finished and its results were fetched."""

  results: ResultSet
  status: JobStatus


@dataclass(frozen=True)
class TimedOut:
  handle: JobHandle
  deadline: float
  last_status: Optional[JobStatus] = None


@dataclass(frozen=True)
class Cancelled:
  handle: Optional[JobHandle] = None


@dataclass(frozen=True)
class Failed:
  """A stage failed; ``error`` is a SubmitError, PollError or FetchError."""

  error: Exception
  handle: Optional[JobHandle] = field(default=None)


PollResult = Union[Done, TimedOut, Cancelled, Failed]
PollOutcome = Union[Completed, TimedOut, Cancelled, Failed]
