"""Text rendering for both front ends.

Pure functions from neutral values to strings. Nothing upstream of this
module formats text.
"""

import json
from typing import Any, Dict, List, Sequence

from splunk_cli.client import Alert, SavedSearch
from splunk_cli.search.models import Completed, FieldValue, ResultRow


def format_value(value: FieldValue) -> str:
  """Render one field value on a single line."""
  if value is None:
    return ""
  if isinstance(value, bool):
    return "true" if value else "false"
  if isinstance(value, str):
    return value
  if isinstance(value, (int, float)):
    return str(value)
  if isinstance(value, (list, dict)):
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
  raise TypeError(f"Unsupported field value type: {type(value).__name__}")


def render_row(index: int, row: ResultRow) -> str:
  lines = [f"Result {index}:"]
  for key, value in row.items():
    lines.append(f"  {key}: {format_value(value)}")
  return "\n".join(lines) + "\n\n"


def render_rows(rows: Sequence[ResultRow]) -> str:
  return "".join(render_row(i, row) for i, row in enumerate(rows, start=1))


def render_search_completed(completed: Completed) -> str:
  """Command line: header, blank line, one block per row."""
  header = f"Search completed. Found {completed.status.result_count} results.\n\n"
  return header + render_rows(completed.results.rows)


def render_search_tool_result(completed: Completed) -> str:
  """Tool-call response body."""
  header = f"Search completed. Found {completed.status.result_count} result(s).\n\n"
  return header + render_rows(completed.results.rows)


def render_saved_searches(searches: List[SavedSearch]) -> str:
  if not searches:
    return "No saved searches found\n"
  out = [f"Found {len(searches)} saved search(es):\n\n"]
  for s in searches:
    out.append(f"Name: {s.name}\n")
    out.append(f"Search: {s.search}\n")
    if s.description:
      out.append(f"Description: {s.description}\n")
    if s.cron_schedule:
      out.append(f"Schedule: {s.cron_schedule}\n")
    out.append("---\n")
  return "".join(out)


def render_alerts(alerts: List[Alert]) -> str:
  if not alerts:
    return "No scheduled alerts found\n"
  out = [f"Found {len(alerts)} alert(s):\n\n"]
  for a in alerts:
    out.append(f"Name: {a.name}\n")
    out.append(f"Search: {a.search}\n")
    if a.description:
      out.append(f"Description: {a.description}\n")
    if a.cron_schedule:
      out.append(f"Schedule: {a.cron_schedule}\n")
    if a.actions:
      out.append(f"Actions: {a.actions}\n")
    out.append("---\n")
  return "".join(out)


def render_server_info(info: Dict[str, Any]) -> str:
  lines = ["Splunk Server Information:"]
  for key, value in info.items():
    lines.append(f"  {key}: {format_value(value)}")
  return "\n".join(lines) + "\n"
