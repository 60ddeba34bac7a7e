"""
Keyword search over the most recent lifelogs.

The API has no search endpoint, so this fetches a bounded window of recent
lifelogs (newest first) and scans titles and markdown locally. Matches older
than the window are never found; ``SearchResult.scanned`` says how far back the
scan actually reached.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .client import ApiClient
from .config import DEFAULT_SEARCH_FETCH_LIMIT, MAX_SEARCH_FETCH_LIMIT
from .criteria import DESC, RequestCriteria, TimezoneProvider
from .dates import local_timezone_name
from .errors import InvalidParams
from .models import LifelogRecord
from .pagination import collect


@dataclass(frozen=True)
class SearchResult:
    term: str
    matches: Tuple[LifelogRecord, ...]
    scanned: int


def matches_term(record: LifelogRecord, needle: str) -> bool:
    """``needle`` must already be lower-cased."""
    for text in (record.title, record.markdown):
        if text and needle in text.lower():
            return True
    return False

def search_lifelogs(client: ApiClient, term: str, fetch_scope: int=DEFAULT_SEARCH_FETCH_LIMIT,
                    limit: Optional[int]=None, timezone: Optional[str]=None,
                    include_markdown: Optional[bool]=None, include_headings: Optional[bool]=None,
                    timezone_provider: TimezoneProvider=local_timezone_name) -> SearchResult:
    if not isinstance(term, str) or not term.strip():
        raise InvalidParams("search_term must be a non-empty string", field="search_term")
    if isinstance(fetch_scope, bool) or not isinstance(fetch_scope, int) \
            or not 1 <= fetch_scope <= MAX_SEARCH_FETCH_LIMIT:
        raise InvalidParams(f"fetch_limit must be between 1 and {MAX_SEARCH_FETCH_LIMIT}", field="fetch_limit")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0):
        raise InvalidParams("limit must be a positive integer", field="limit")

    # Markdown is always fetched: the scan needs the body even if the caller doesn't.
    window = collect(client, RequestCriteria(
        limit=fetch_scope,
        timezone=timezone,
        direction=DESC,
        include_markdown=True,
        include_headings=include_headings,
    ), timezone_provider)

    needle = term.lower()
    found: List[LifelogRecord] = [lg for lg in window if matches_term(lg, needle)]
    if limit is not None:
        found = found[:limit]
    if include_markdown is False:
        found = [dataclasses.replace(lg, markdown=None) for lg in found]
    client.log(f"Search '{term}': {len(found)} match(es) in {len(window)} lifelogs")
    return SearchResult(term=term, matches=tuple(found), scanned=len(window))
