"""
Cursor-following aggregation over GET /v1/lifelogs.

Pages are fetched strictly one after another: the cursor for page N+1 is the
``nextCursor`` of page N, never reused or reordered. A walk stops when

  * the API returns no next cursor,
  * a page holds fewer records than the batch size asked for (end of data), or
  * the caller's limit has been reached.

Any failure aborts the walk; callers never see a partial result.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from .client import ApiClient
from .config import PAGE_LIMIT
from .criteria import RequestCriteria, TimezoneProvider, resolve_criteria
from .dates import local_timezone_name
from .models import LifelogRecord, Page


def iter_pages(client: ApiClient, criteria: RequestCriteria,
               timezone_provider: TimezoneProvider=local_timezone_name,
               page_size: int=PAGE_LIMIT) -> Iterator[Page]:
    resolved = resolve_criteria(criteria, timezone_provider)
    limit = resolved.limit
    collected = 0
    cursor: Optional[str] = None
    page_no = 0
    while True:
        page_no += 1
        batch = page_size if limit is None else min(page_size, limit - collected)
        page = client.fetch_page(resolved, batch, cursor)
        collected += len(page.records)
        client.log(f"Page {page_no}: {len(page.records)} of {batch} requested, {collected} so far")
        yield page
        if not page.next_cursor or len(page.records) < batch:
            return
        if limit is not None and collected >= limit:
            return
        cursor = page.next_cursor

def collect(client: ApiClient, criteria: RequestCriteria,
            timezone_provider: TimezoneProvider=local_timezone_name,
            page_size: int=PAGE_LIMIT) -> List[LifelogRecord]:
    """Up to ``criteria.limit`` records (all available when unset), in API order."""
    records: List[LifelogRecord] = []
    for page in iter_pages(client, criteria, timezone_provider, page_size):
        records.extend(page.records)
    if criteria.limit is not None:
        del records[criteria.limit:]
    return records
