"""HTTP transport for the Splunk management REST API.

One ``SplunkTransport`` owns one ``httpx.AsyncClient`` (connection pool,
TLS settings and bearer token) for the whole invocation. It performs no
retries; every failure is mapped to a typed ``SplunkError``.
"""

import contextlib
import json
from typing import Any, Dict, Optional

import httpx

from splunk_cli.config import SplunkConfig
from splunk_cli.exceptions import DecodeFailure, RemoteRejected, TransportFailure
from splunk_cli.utils.log import log_debug


class SplunkTransport:
  """Authenticated request/response plumbing.

  Example:
      async with SplunkTransport(config) as transport:
          data = await transport.request("GET", "/services/server/info", params={"output_mode": "json"})
  """

  def __init__(
    self,
    config: SplunkConfig,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
  ) -> None:
    """Initialize the transport.

    Args:
        config: Connection settings and credentials.
        http_transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """
    self._config = config
    self._http_transport = http_transport
    self._client: Optional[httpx.AsyncClient] = None

  @property
  def config(self) -> SplunkConfig:
    return self._config

  @property
  def connected(self) -> bool:
    return self._client is not None

  async def connect(self) -> httpx.AsyncClient:
    if self._client is not None:
      return self._client

    log_debug(f"Creating HTTP client for {self._config.base_url}")
    self._client = httpx.AsyncClient(
      base_url=self._config.base_url,
      timeout=httpx.Timeout(self._config.request_timeout),
      verify=self._config.verify_tls,
      headers={"Authorization": f"Bearer {self._config.token}"},
      transport=self._http_transport,
    )
    return self._client

  async def close(self) -> None:
    """Close the HTTP client. Idempotent."""
    if self._client is None:
      return
    client, self._client = self._client, None
    with contextlib.suppress(Exception):
      await client.aclose()
    log_debug("HTTP client closed")

  async def __aenter__(self) -> "SplunkTransport":
    await self.connect()
    return self

  async def __aexit__(self, exc_type, exc, tb) -> None:
    await self.close()

  async def request(
    self,
    method: str,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    json_body: Optional[Any] = None,
  ) -> Any:
    """Send one request and return the decoded JSON body.

    ``data`` is sent form-encoded, ``json_body`` as ``application/json``.

    Raises:
        TransportFailure: No HTTP response (DNS, connect, TLS, timeout).
        RemoteRejected: Status code 400 or above.
        DecodeFailure: The body is not valid JSON.
    """
    client = self._client or await self.connect()

    log_debug(f"-> {method} {path}")

    try:
      response = await client.request(method, path, params=params, data=data, json=json_body)
    except httpx.TimeoutException as e:
      raise TransportFailure(f"Request {method} {path} timed out after {self._config.request_timeout:g}s", original_error=e)
    except httpx.TransportError as e:
      raise TransportFailure(f"Failed to execute request: {e}", original_error=e)

    log_debug(f"<- {response.status_code} {method} {path}")

    if response.status_code >= 400:
      raise RemoteRejected(response.status_code, response.text)

    if not response.content:
      return None

    try:
      return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
      raise DecodeFailure(f"Failed to decode response: {e}", body=response.text[:200])
