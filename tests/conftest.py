from __future__ import annotations

import io
import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from limitless_lifelogs.config import Settings
from limitless_lifelogs.errors import LifelogError
from limitless_lifelogs.models import LifelogRecord, Page


def make_record(n: int, title: Optional[str]=None, markdown: Optional[str]=None) -> LifelogRecord:
    return LifelogRecord(
        id=f"log-{n}",
        start_time=f"2025-03-11T10:{n % 60:02d}:00-07:00",
        end_time=f"2025-03-11T10:{n % 60:02d}:30-07:00",
        title=title if title is not None else f"Entry {n}",
        markdown=markdown,
    )


def make_response(status: int=200, payload: Any=None, text: Optional[str]=None,
                  reason: str="OK") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp.encoding = "utf-8"
    if text is None:
        text = json.dumps(payload)
    resp.raw = io.BytesIO(text.encode("utf-8"))
    return resp


class FakeClient:
    """
    Stand-in for ApiClient.fetch_page serving a fixed store of records.

    Cursors are the string offset into the store. ``short_pages`` maps a page
    number (1-based) to a forced record count; ``fail_on`` raises on that page.
    """

    def __init__(self, store: List[LifelogRecord], short_pages: Optional[Dict[int, int]]=None,
                 fail_on: Optional[int]=None, error: Optional[LifelogError]=None):
        self.store = store
        self.short_pages = short_pages or {}
        self.fail_on = fail_on
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.logged: List[str] = []

    def log(self, msg: str):
        self.logged.append(msg)

    def fetch_page(self, criteria, batch_size, cursor=None) -> Page:
        self.calls.append({"criteria": criteria, "batch_size": batch_size, "cursor": cursor})
        page_no = len(self.calls)
        if self.fail_on == page_no:
            raise self.error
        offset = int(cursor) if cursor else 0
        size = self.short_pages.get(page_no, batch_size)
        records = tuple(self.store[offset:offset + size])
        end = offset + len(records)
        next_cursor = str(end) if end < len(self.store) else None
        return Page(records=records, next_cursor=next_cursor, count=len(records))


@pytest.fixture
def settings():
    return Settings(api_key="test-key", base_url="https://api.example.test")


@pytest.fixture
def fixed_tz():
    return lambda: "America/Los_Angeles"
