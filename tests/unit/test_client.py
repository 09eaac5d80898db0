"""Unit tests for SplunkClient."""

import pytest

from splunk_cli.client import Alert, SavedSearch, SplunkClient
from splunk_cli.exceptions import DecodeFailure, RemoteRejected, SplunkError

SAVED = "/services/saved/searches"


def _entries(*entries):
  return {"entry": list(entries)}


@pytest.mark.unit
class TestSavedSearches:
  @pytest.mark.asyncio
  async def test_list_saved_searches(self, make_transport, fake_splunk):
    fake_splunk.routes[("GET", SAVED)] = (
      200,
      _entries(
        {"name": "Errors last hour", "content": {"search": "index=main error", "description": "5xx", "cron_schedule": "*/5 * * * *"}},
        {"name": "Bare", "content": {"search": "index=_internal"}},
      ),
    )
    async with make_transport() as transport:
      searches = await SplunkClient(transport).list_saved_searches()

    assert searches == [
      SavedSearch(name="Errors last hour", search="index=main error", description="5xx", cron_schedule="*/5 * * * *"),
      SavedSearch(name="Bare", search="index=_internal"),
    ]
    params = fake_splunk.requests[0].url.params
    assert params["output_mode"] == "json"
    assert params["count"] == "0"
    assert "search" not in params

  @pytest.mark.asyncio
  async def test_null_content_fields_become_empty(self, make_transport, fake_splunk):
    fake_splunk.routes[("GET", SAVED)] = (200, _entries({"name": "n", "content": {"search": "x", "description": None}}))
    async with make_transport() as transport:
      searches = await SplunkClient(transport).list_saved_searches()

    assert searches[0].description == ""

  @pytest.mark.asyncio
  async def test_create_saved_search(self, make_transport, fake_splunk):
    fake_splunk.routes[("POST", SAVED)] = (201, _entries({"name": "new"}))
    async with make_transport() as transport:
      await SplunkClient(transport).create_saved_search("new", "index=main", "desc")

    form = fake_splunk.form_of(fake_splunk.requests[0])
    assert form == {"name": "new", "search": "index=main", "output_mode": "json", "description": "desc"}

  @pytest.mark.asyncio
  async def test_create_without_description(self, make_transport, fake_splunk):
    fake_splunk.routes[("POST", SAVED)] = (201, _entries({"name": "new"}))
    async with make_transport() as transport:
      await SplunkClient(transport).create_saved_search("new", "index=main")

    assert "description" not in fake_splunk.form_of(fake_splunk.requests[0])

  @pytest.mark.asyncio
  async def test_create_conflict(self, make_transport, fake_splunk):
    fake_splunk.routes[("POST", SAVED)] = (409, "An object with name=new already exists")
    async with make_transport() as transport:
      with pytest.raises(RemoteRejected, match="409"):
        await SplunkClient(transport).create_saved_search("new", "index=main")


@pytest.mark.unit
class TestAlerts:
  @pytest.mark.asyncio
  async def test_list_alerts_filters_scheduled(self, make_transport, fake_splunk):
    fake_splunk.routes[("GET", SAVED)] = (
      200,
      _entries({"name": "Disk full", "content": {"search": "df", "cron_schedule": "0 * * * *", "actions": "email"}}),
    )
    async with make_transport() as transport:
      alerts = await SplunkClient(transport).list_alerts()

    assert alerts == [Alert(name="Disk full", search="df", cron_schedule="0 * * * *", actions="email")]
    assert fake_splunk.requests[0].url.params["search"] == "is_scheduled=1"

  @pytest.mark.asyncio
  async def test_malformed_listing(self, make_transport, fake_splunk):
    fake_splunk.routes[("GET", SAVED)] = (200, {"entry": [{"content": {}}]})
    async with make_transport() as transport:
      with pytest.raises(DecodeFailure):
        await SplunkClient(transport).list_alerts()


@pytest.mark.unit
class TestServerInfo:
  @pytest.mark.asyncio
  async def test_returns_first_entry_content(self, make_transport, fake_splunk):
    content = {"serverName": "idx1", "version": "9.2.1", "os_name": "Linux"}
    fake_splunk.routes[("GET", "/services/server/info")] = (200, _entries({"name": "server-info", "content": content}))
    async with make_transport() as transport:
      info = await SplunkClient(transport).get_server_info()

    assert info == content
    assert list(info) == ["serverName", "version", "os_name"]

  @pytest.mark.asyncio
  async def test_no_entries(self, make_transport, fake_splunk):
    fake_splunk.routes[("GET", "/services/server/info")] = (200, {"entry": []})
    async with make_transport() as transport:
      with pytest.raises(SplunkError, match="no server info found"):
        await SplunkClient(transport).get_server_info()


@pytest.mark.unit
class TestSendEvent:
  @pytest.mark.asyncio
  async def test_envelope(self, make_transport, fake_splunk):
    fake_splunk.routes[("POST", "/services/receivers/simple")] = (200, {"text": "Success", "code": 0})
    async with make_transport() as transport:
      await SplunkClient(transport).send_event(
        "main",
        {"action": "login", "user": "alice"},
        source="app",
        sourcetype="json",
        timestamp=1700000000,
      )

    request = fake_splunk.requests[0]
    assert request.url.params["output_mode"] == "json"
    assert fake_splunk.json_of(request) == {
      "event": {"action": "login", "user": "alice"},
      "time": 1700000000,
      "index": "main",
      "source": "app",
      "sourcetype": "json",
    }

  @pytest.mark.asyncio
  async def test_optional_fields_omitted(self, make_transport, fake_splunk):
    fake_splunk.routes[("POST", "/services/receivers/simple")] = (200, {"code": 0})
    async with make_transport() as transport:
      await SplunkClient(transport).send_event("main", {"a": 1})

    body = fake_splunk.json_of(fake_splunk.requests[0])
    assert "source" not in body
    assert "sourcetype" not in body
    assert isinstance(body["time"], int)
