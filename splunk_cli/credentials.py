"""Credential providers.

Host and token are resolved by walking an ordered list of providers and
stopping at the first one that yields a non-empty value:

  host:  config file  -> SPLUNK_HOST
  token: SPLUNK_TOKEN -> OS keyring

Providers never prompt. A provider that cannot answer returns ``None``.
"""

import json
import os
import sys
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

import keyring
from keyring.errors import KeyringError

from splunk_cli.exceptions import ConfigurationMissing
from splunk_cli.utils.log import log_debug

SERVICE_NAME = "splunk-cli"
CONFIG_FILE_NAME = "config.json"

HOST_ENV_VAR = "SPLUNK_HOST"
TOKEN_ENV_VAR = "SPLUNK_TOKEN"


def user_config_dir() -> Path:
  """Per-user configuration directory for the current platform."""
  if sys.platform == "win32":
    appdata = os.environ.get("APPDATA")
    if appdata:
      return Path(appdata)
  elif sys.platform == "darwin":
    return Path.home() / "Library" / "Application Support"
  xdg = os.environ.get("XDG_CONFIG_HOME")
  if xdg:
    return Path(xdg)
  return Path.home() / ".config"


def default_config_path() -> Path:
  return user_config_dir() / SERVICE_NAME / CONFIG_FILE_NAME


class CredentialProvider(Protocol):
  """Something that may know a credential value."""

  name: str

  def try_load(self, host: Optional[str] = None) -> Optional[str]: ...


class EnvProvider:
  """Reads a value from an environment variable."""

  def __init__(self, var: str):
    self.var = var
    self.name = f"env:{var}"

  def try_load(self, host: Optional[str] = None) -> Optional[str]:
    return os.environ.get(self.var) or None


class ConfigFileHostProvider:
  """Reads ``host`` from the JSON config file written by ``splunk configure``."""

  def __init__(self, path: Optional[Path] = None):
    self.path = Path(path) if path else default_config_path()
    self.name = f"file:{self.path}"

  def try_load(self, host: Optional[str] = None) -> Optional[str]:
    if not self.path.is_file():
      return None
    try:
      with self.path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
      log_debug(f"Could not read config file {self.path}: {e}")
      return None
    if not isinstance(data, dict):
      return None
    return data.get("host") or None

  def save(self, host: str) -> None:
    """Write the host, creating the directory with owner-only permissions."""
    self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    with self.path.open("w", encoding="utf-8") as f:
      json.dump({"host": host}, f, indent=2)
    os.chmod(self.path, 0o600)


class KeyringTokenProvider:
  """Reads the API token stored in the OS keyring under the host name."""

  def __init__(self, service: str = SERVICE_NAME):
    self.service = service
    self.name = f"keyring:{service}"

  def try_load(self, host: Optional[str] = None) -> Optional[str]:
    if not host:
      return None
    try:
      return keyring.get_password(self.service, host) or None
    except KeyringError as e:
      log_debug(f"Keyring lookup for {host} failed: {e}")
      return None

  def save(self, host: str, token: str) -> None:
    keyring.set_password(self.service, host, token)


class CredentialChain:
  """Ordered providers for one setting; the first non-empty answer wins."""

  def __init__(self, setting: str, providers: Sequence[CredentialProvider], missing_message: str):
    self.setting = setting
    self.providers: List[CredentialProvider] = list(providers)
    self.missing_message = missing_message

  def try_load(self, host: Optional[str] = None) -> Optional[str]:
    for provider in self.providers:
      value = provider.try_load(host)
      if value:
        log_debug(f"Loaded {self.setting} from {provider.name}")
        return value
    return None

  def load(self, host: Optional[str] = None) -> str:
    """Resolve the value or raise ``ConfigurationMissing``."""
    value = self.try_load(host)
    if not value:
      raise ConfigurationMissing(self.missing_message, setting=self.setting)
    return value


def host_chain(config_path: Optional[Path] = None) -> CredentialChain:
  return CredentialChain(
    "host",
    [ConfigFileHostProvider(config_path), EnvProvider(HOST_ENV_VAR)],
    "Splunk host must be configured (use 'splunk configure <host>' or set SPLUNK_HOST env var)",
  )


def token_chain(service: str = SERVICE_NAME) -> CredentialChain:
  return CredentialChain(
    "token",
    [EnvProvider(TOKEN_ENV_VAR), KeyringTokenProvider(service)],
    "Splunk token must be set (use 'splunk configure <host>' or set SPLUNK_TOKEN env var)",
  )


def load_host(config_path: Optional[Path] = None) -> str:
  return host_chain(config_path).load()


def load_token(host: str, service: str = SERVICE_NAME) -> str:
  return token_chain(service).load(host)


def save_host(host: str, config_path: Optional[Path] = None) -> None:
  ConfigFileHostProvider(config_path).save(host)


def save_token(host: str, token: str, service: str = SERVICE_NAME) -> None:
  KeyringTokenProvider(service).save(host, token)
