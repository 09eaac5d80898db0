"""Query normalization."""

SEARCH_KEYWORD = "search"
PIPE = "|"


def normalize_query(query: str) -> str:
  """Make sure Splunk receives a top-level search.

  A query whose trimmed text starts with ``search`` or ``|`` is returned as
  is. Anything else gets ``"search "`` prepended to the original text, so
  ``"error"`` becomes ``"search error"``. Applying it twice changes nothing.
  """
  trimmed = query.strip()
  if trimmed.startswith(SEARCH_KEYWORD) or trimmed.startswith(PIPE):
    return query
  return f"{SEARCH_KEYWORD} {query}"
