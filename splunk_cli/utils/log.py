"""Logging helpers shared by every splunk-cli module.

All records go to stderr. Stdout carries command output and, for
``splunk mcp-server``, the MCP stdio stream, so it must stay clean.
"""

import logging
import sys

LOGGER_NAME = "splunk_cli"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: int = logging.WARNING) -> logging.Logger:
  """Attach a stderr handler once and set the level."""
  if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
  logger.setLevel(level)
  return logger


def set_log_level_to_debug() -> None:
  configure_logging(logging.DEBUG)


def log_debug(msg: str, *args, **kwargs) -> None:
  logger.debug(msg, *args, **kwargs)


def log_info(msg: str, *args, **kwargs) -> None:
  logger.info(msg, *args, **kwargs)


def log_warning(msg: str, *args, **kwargs) -> None:
  logger.warning(msg, *args, **kwargs)

