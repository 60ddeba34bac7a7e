from __future__ import annotations

from typing import Optional

from .client import ApiClient
from .criteria import InclusionFlags
from .errors import InvalidParams
from .models import LifelogRecord


def get_lifelog(client: ApiClient, lifelog_id: str, include_markdown: Optional[bool]=None,
                include_headings: Optional[bool]=None) -> LifelogRecord:
    if not isinstance(lifelog_id, str) or not lifelog_id.strip():
        raise InvalidParams("lifelog_id must be a non-empty string", field="lifelog_id")
    flags = InclusionFlags(include_markdown, include_headings).resolved()
    client.log(f"Fetching lifelog ID '{lifelog_id}'")
    return client.fetch_by_id(lifelog_id, flags)
