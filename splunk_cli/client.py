"""Saved searches, alerts, server info and event submission.

Plain request/response calls on top of ``SplunkTransport``. Search jobs
live in ``splunk_cli.search``.
"""

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from splunk_cli.exceptions import DecodeFailure, SplunkError
from splunk_cli.transport import SplunkTransport
from splunk_cli.utils.log import log_debug

SAVED_SEARCHES_PATH = "/services/saved/searches"
SERVER_INFO_PATH = "/services/server/info"
RECEIVERS_SIMPLE_PATH = "/services/receivers/simple"


class _EntryContent(BaseModel):
  model_config = ConfigDict(extra="ignore")

  search: Optional[str] = ""
  description: Optional[str] = ""
  cron_schedule: Optional[str] = ""
  actions: Optional[str] = ""


class _Entry(BaseModel):
  model_config = ConfigDict(extra="ignore")

  name: str
  content: _EntryContent = Field(default_factory=_EntryContent)


class _EntryList(BaseModel):
  model_config = ConfigDict(extra="ignore")

  entry: List[_Entry] = Field(default_factory=list)


class SavedSearch(BaseModel):
  name: str
  search: str = ""
  description: str = ""
  cron_schedule: str = ""


class Alert(SavedSearch):
  actions: str = ""


def _decode(model, body: Any):
  try:
    return model.model_validate(body if body is not None else {})
  except ValidationError as e:
    raise DecodeFailure(f"Failed to decode response: {e}", body=str(body)[:200])


class SplunkClient:
  """Request/response operations other than search jobs."""

  def __init__(self, transport: SplunkTransport):
    self._transport = transport

  async def list_saved_searches(self) -> List[SavedSearch]:
    body = await self._transport.request(
      "GET",
      SAVED_SEARCHES_PATH,
      params={"output_mode": "json", "count": 0},
    )
    entries = _decode(_EntryList, body).entry
    return [
      SavedSearch(
        name=e.name,
        search=e.content.search or "",
        description=e.content.description or "",
        cron_schedule=e.content.cron_schedule or "",
      )
      for e in entries
    ]

  async def create_saved_search(self, name: str, search: str, description: Optional[str] = None) -> None:
    form: Dict[str, Any] = {"name": name, "search": search, "output_mode": "json"}
    if description:
      form["description"] = description
    await self._transport.request("POST", SAVED_SEARCHES_PATH, data=form)
    log_debug(f"Created saved search {name}")

  async def list_alerts(self) -> List[Alert]:
    """Saved searches that are scheduled."""
    body = await self._transport.request(
      "GET",
      SAVED_SEARCHES_PATH,
      params={"output_mode": "json", "count": 0, "search": "is_scheduled=1"},
    )
    entries = _decode(_EntryList, body).entry
    return [
      Alert(
        name=e.name,
        search=e.content.search or "",
        description=e.content.description or "",
        cron_schedule=e.content.cron_schedule or "",
        actions=e.content.actions or "",
      )
      for e in entries
    ]

  async def get_server_info(self) -> Dict[str, Any]:
    body = await self._transport.request("GET", SERVER_INFO_PATH, params={"output_mode": "json"})
    entries = body.get("entry") if isinstance(body, dict) else None
    if not entries or not isinstance(entries[0], dict):
      raise SplunkError("no server info found", status_code=404)
    content = entries[0].get("content")
    if not isinstance(content, dict):
      raise DecodeFailure("Failed to decode response: server info entry has no content", body=str(body)[:200])
    return content

  async def send_event(
    self,
    index: str,
    event: Dict[str, Any],
    source: Optional[str] = None,
    sourcetype: Optional[str] = None,
    timestamp: Optional[int] = None,
  ) -> None:
    """Send one event, wrapped in an HEC-style envelope."""
    envelope: Dict[str, Any] = {
      "event": event,
      "time": int(time.time()) if timestamp is None else timestamp,
    }
    if index:
      envelope["index"] = index
    if source:
      envelope["source"] = source
    if sourcetype:
      envelope["sourcetype"] = sourcetype

    await self._transport.request(
      "POST",
      RECEIVERS_SIMPLE_PATH,
      params={"output_mode": "json"},
      json_body=envelope,
    )
    log_debug(f"Sent event to index {index}")
