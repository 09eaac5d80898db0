"""Splunk connection configuration.

One ``SplunkConfig`` is built per invocation and passed explicitly to the
transport and to every search component.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from splunk_cli.credentials import load_host, load_token
from splunk_cli.utils.log import log_debug

INSECURE_ENV_VAR = "SPLUNK_INSECURE"


@dataclass
class SplunkConfig:
  """Configuration for talking to one Splunk management endpoint.

  Example:
      config = SplunkConfig(host="splunk.example.com", token="...")
      async with SplunkTransport(config) as transport:
          ...
  """

  host: str
  token: str

  # Management API location
  port: int = 8089
  scheme: str = "https"
  verify_tls: bool = True

  # Per-request timeout (seconds), owned by the transport
  request_timeout: float = 30.0

  # Search job polling
  poll_interval: float = 2.0
  tool_deadline: float = 60.0
  max_results: int = 100

  def __post_init__(self) -> None:
    """Validate configuration after initialization."""
    if not self.host or not self.host.strip():
      raise ValueError("SplunkConfig: host is required")
    if not self.token:
      raise ValueError("SplunkConfig: token is required")
    if self.scheme not in ("http", "https"):
      raise ValueError(f"SplunkConfig: unsupported scheme '{self.scheme}'")
    if self.request_timeout <= 0:
      raise ValueError("SplunkConfig: request_timeout must be positive")
    if self.poll_interval <= 0:
      raise ValueError("SplunkConfig: poll_interval must be positive")
    if self.tool_deadline <= 0:
      raise ValueError("SplunkConfig: tool_deadline must be positive")

  @property
  def base_url(self) -> str:
    return f"{self.scheme}://{self.host}:{self.port}"

  def to_dict(self) -> Dict[str, Any]:
    """Convert to dictionary representation. The token is never included."""
    return {
      "host": self.host,
      "port": self.port,
      "scheme": self.scheme,
      "verify_tls": self.verify_tls,
      "request_timeout": self.request_timeout,
      "poll_interval": self.poll_interval,
      "tool_deadline": self.tool_deadline,
      "max_results": self.max_results,
    }

  @classmethod
  def load(cls, config_path: Optional[Path] = None, **overrides: Any) -> "SplunkConfig":
    """Resolve host and token through the credential chains.

    Credentials are read exactly once here and never refreshed afterwards.

    Raises:
        ConfigurationMissing: If the host or the token cannot be found.
    """
    host = load_host(config_path)
    token = load_token(host)
    verify_tls = os.environ.get(INSECURE_ENV_VAR, "").lower() not in ("1", "true", "yes")
    overrides.setdefault("verify_tls", verify_tls)
    config = cls(host=host, token=token, **overrides)
    log_debug(f"Loaded config: {config.to_dict()}")
    return config
