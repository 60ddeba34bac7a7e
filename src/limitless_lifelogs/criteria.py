"""
Request criteria for the lifelog listing endpoint.

All defaulting lives here:
  - include_markdown / include_headings default to True
  - timezone defaults to whatever the injected provider returns; if that is None
    the parameter is left off the request and the API falls back to UTC
  - direction defaults to "desc" for recency listings and "asc" for a single
    date or a start/end range
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .errors import InvalidParams

ASC  = "asc"
DESC = "desc"
DIRECTIONS = (ASC, DESC)

TimezoneProvider = Callable[[], Optional[str]]


class SelectionMode(enum.Enum):
    DATE   = "date"
    RANGE  = "range"
    RECENT = "recent"


def _flag(value: Optional[bool]) -> bool:
    return True if value is None else bool(value)

def _api_bool(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class InclusionFlags:
    include_markdown: Optional[bool] = None
    include_headings: Optional[bool] = None

    def resolved(self) -> "InclusionFlags":
        return InclusionFlags(_flag(self.include_markdown), _flag(self.include_headings))

    def to_params(self) -> Dict[str, str]:
        flags = self.resolved()
        return {
            "includeMarkdown": _api_bool(flags.include_markdown),
            "includeHeadings": _api_bool(flags.include_headings),
        }


@dataclass(frozen=True)
class RequestCriteria:
    date: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    limit: Optional[int] = None
    timezone: Optional[str] = None
    direction: Optional[str] = None
    include_markdown: Optional[bool] = None
    include_headings: Optional[bool] = None

    @property
    def mode(self) -> SelectionMode:
        if self.date is not None:
            return SelectionMode.DATE
        if self.start is not None or self.end is not None:
            return SelectionMode.RANGE
        return SelectionMode.RECENT


@dataclass(frozen=True)
class ResolvedCriteria:
    """Criteria with every default applied. Only built by resolve_criteria."""

    mode: SelectionMode
    direction: str
    include_markdown: bool
    include_headings: bool
    limit: Optional[int] = None
    timezone: Optional[str] = None
    date: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None

    def to_params(self, batch_size: int, cursor: Optional[str]=None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "limit": batch_size,
            "includeMarkdown": _api_bool(self.include_markdown),
            "includeHeadings": _api_bool(self.include_headings),
            "direction": self.direction,
        }
        for key, value in (("date", self.date), ("start", self.start), ("end", self.end),
                           ("timezone", self.timezone), ("cursor", cursor)):
            if value:
                params[key] = value
        return params


def resolve_criteria(criteria: RequestCriteria, timezone_provider: TimezoneProvider) -> ResolvedCriteria:
    if criteria.date is not None and (criteria.start is not None or criteria.end is not None):
        raise InvalidParams("date cannot be combined with start/end", field="date")
    limit = criteria.limit
    if limit is not None:
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidParams("limit must be an integer", field="limit")
        if limit <= 0:
            raise InvalidParams("limit must be a positive integer", field="limit")
    if criteria.direction is not None and criteria.direction not in DIRECTIONS:
        raise InvalidParams(f"direction must be one of {', '.join(DIRECTIONS)}", field="direction")

    mode = criteria.mode
    direction = criteria.direction or (DESC if mode is SelectionMode.RECENT else ASC)
    return ResolvedCriteria(
        mode=mode,
        direction=direction,
        include_markdown=_flag(criteria.include_markdown),
        include_headings=_flag(criteria.include_headings),
        limit=limit,
        timezone=criteria.timezone or timezone_provider(),
        date=criteria.date,
        start=criteria.start,
        end=criteria.end,
    )
