"""
The five lifelog operations offered to callers (a tool server, the CLI, ...).

Each one validates its arguments before anything touches the network and
always returns a ``Result``.
"""

from __future__ import annotations

from typing import List, Optional

from .client import ApiClient
from .config import (DEFAULT_RECENT_LIMIT, DEFAULT_SEARCH_FETCH_LIMIT, MAX_LIFELOG_LIMIT,
                     MAX_SEARCH_FETCH_LIMIT, Settings)
from .criteria import DESC, DIRECTIONS, RequestCriteria, TimezoneProvider
from .dates import local_timezone_name, parse_date, validate_date_or_datetime
from .errors import InvalidParams
from .lookup import get_lifelog
from .models import LifelogRecord
from .pagination import collect
from .results import Result, summarize_list, summarize_record, summarize_search, translate
from .search import search_lifelogs


def validate_limit(value: Optional[int], field: str, max_value: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParams(f"{field} must be an integer", field=field)
    if value <= 0 or value > max_value:
        raise InvalidParams(f"{field} must be between 1 and {max_value}", field=field)

def validate_direction(value: Optional[str]) -> None:
    if value is not None and value not in DIRECTIONS:
        raise InvalidParams(f"direction must be one of {', '.join(DIRECTIONS)}", field="direction")

def validate_timezone(value: Optional[str]) -> None:
    if value is not None and (not isinstance(value, str) or not value.strip()):
        raise InvalidParams("timezone must be a non-empty IANA name", field="timezone")


class LifelogOperations:
    def __init__(self, client: ApiClient, timezone_provider: TimezoneProvider=local_timezone_name):
        self.client = client
        self.timezone_provider = timezone_provider

    @classmethod
    def from_settings(cls, settings: Settings, verbose: bool=False) -> "LifelogOperations":
        return cls(ApiClient(settings, verbose=verbose))

    @classmethod
    def from_env(cls, verbose: bool=False) -> "LifelogOperations":
        """Raises ConfigError when the API key is missing."""
        return cls.from_settings(Settings.from_env(), verbose=verbose)

    def _list(self, criteria: RequestCriteria) -> List[LifelogRecord]:
        validate_limit(criteria.limit, "limit", MAX_LIFELOG_LIMIT)
        validate_timezone(criteria.timezone)
        validate_direction(criteria.direction)
        return collect(self.client, criteria, self.timezone_provider)

    def get_by_id(self, lifelog_id: str, include_markdown: Optional[bool]=None,
                  include_headings: Optional[bool]=None) -> Result:
        return translate(
            lambda: get_lifelog(self.client, lifelog_id, include_markdown, include_headings),
            summarize_record,
        )

    def list_by_date(self, date: str, limit: Optional[int]=None, timezone: Optional[str]=None,
                     include_markdown: Optional[bool]=None, include_headings: Optional[bool]=None,
                     direction: Optional[str]=None) -> Result:
        def call():
            parse_date(date)
            return self._list(RequestCriteria(
                date=date, limit=limit, timezone=timezone, direction=direction,
                include_markdown=include_markdown, include_headings=include_headings,
            ))
        return translate(call, lambda records: summarize_list(records, limit))

    def list_by_range(self, start: str, end: str, limit: Optional[int]=None, timezone: Optional[str]=None,
                      include_markdown: Optional[bool]=None, include_headings: Optional[bool]=None,
                      direction: Optional[str]=None) -> Result:
        # start <= end is left to the API.
        def call():
            validate_date_or_datetime(start, "start")
            validate_date_or_datetime(end, "end")
            return self._list(RequestCriteria(
                start=start, end=end, limit=limit, timezone=timezone, direction=direction,
                include_markdown=include_markdown, include_headings=include_headings,
            ))
        return translate(call, lambda records: summarize_list(records, limit))

    def list_recent(self, limit: Optional[int]=DEFAULT_RECENT_LIMIT, timezone: Optional[str]=None,
                    include_markdown: Optional[bool]=None, include_headings: Optional[bool]=None) -> Result:
        if limit is None:
            limit = DEFAULT_RECENT_LIMIT
        return translate(
            lambda: self._list(RequestCriteria(
                limit=limit, timezone=timezone, direction=DESC,
                include_markdown=include_markdown, include_headings=include_headings,
            )),
            lambda records: summarize_list(records, limit),
        )

    def search(self, search_term: str, fetch_limit: Optional[int]=DEFAULT_SEARCH_FETCH_LIMIT,
               limit: Optional[int]=None, timezone: Optional[str]=None,
               include_markdown: Optional[bool]=None, include_headings: Optional[bool]=None) -> Result:
        if fetch_limit is None:
            fetch_limit = DEFAULT_SEARCH_FETCH_LIMIT
        def call():
            validate_limit(fetch_limit, "fetch_limit", MAX_SEARCH_FETCH_LIMIT)
            validate_limit(limit, "limit", MAX_LIFELOG_LIMIT)
            validate_timezone(timezone)
            return search_lifelogs(
                self.client, search_term, fetch_scope=fetch_limit, limit=limit, timezone=timezone,
                include_markdown=include_markdown, include_headings=include_headings,
                timezone_provider=self.timezone_provider,
            )
        return translate(call, lambda result: summarize_search(result, limit))
