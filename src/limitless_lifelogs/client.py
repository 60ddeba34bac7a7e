from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .config import API_VERSION, Settings
from .criteria import InclusionFlags, ResolvedCriteria
from .errors import ApiError, NetworkError, NotFound, RequestTimeout
from .models import LifelogRecord, Page
from .util import eprint


CHUNK_SIZE = 1024


def _decode_body(resp: requests.Response, body: bytes) -> Any:
    text = body.decode(resp.encoding or "utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text

def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise NetworkError(f"Malformed response from Limitless API: '{key}' is not an object")
    return value

def _parse_records(items: Any) -> tuple:
    if not isinstance(items, list):
        raise NetworkError("Malformed response from Limitless API: 'lifelogs' is not a list")
    try:
        return tuple(LifelogRecord.from_dict(item) for item in items)
    except (KeyError, TypeError, AttributeError) as exc:
        raise NetworkError(f"Malformed lifelog in Limitless API response: {exc!r}") from exc


# ── HTTP ─────────────────────────────────────────────────────────────────────
class ApiClient:
    """
    One GET per call against the lifelog API. Each call, body included, must
    finish within ``settings.timeout`` seconds or raise RequestTimeout; nothing
    is retried here.
    """

    def __init__(self, settings: Settings, verbose: bool=False, session: Optional[requests.Session]=None):
        self.settings = settings
        self.verbose = verbose
        self.session = session or requests.Session()

    def log(self, msg: str):
        eprint(f"[API] {msg}", self.verbose)

    def _timeout(self, url: str) -> RequestTimeout:
        self.log(f"Timed out after {self.settings.timeout}s: {url}")
        return RequestTimeout(self.settings.timeout)

    def _read_body(self, resp: requests.Response, url: str, deadline: float) -> bytes:
        """Stream the body, giving up once ``deadline`` (monotonic) has passed."""
        chunks = []
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise self._timeout(url)
                chunks.append(chunk)
        except requests.RequestException as exc:
            # requests reports a stalled body read as ConnectionError; a read
            # timeout here always lands at or past the deadline.
            if isinstance(exc, requests.Timeout) or time.monotonic() >= deadline:
                raise self._timeout(url) from exc
            raise NetworkError(f"Network error reading Limitless API response: {exc}") from exc
        finally:
            resp.close()
        if time.monotonic() > deadline:
            raise self._timeout(url)
        return b"".join(chunks)

    def request(self, endpoint: str, params: Dict[str,Any]) -> Dict[str,Any]:
        url = f"{self.settings.base_url}/{API_VERSION}/{endpoint.lstrip('/')}"
        headers = {"X-API-Key": self.settings.api_key, "Accept": "application/json"}
        self.log(f"GET {url} params={params}")
        # requests' timeout only bounds each socket operation; the deadline bounds the whole call.
        deadline = time.monotonic() + self.settings.timeout
        try:
            resp = self.session.get(url, headers=headers, params=params,
                                    timeout=self.settings.timeout, stream=True)
        except requests.Timeout as exc:
            raise self._timeout(url) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Network error calling Limitless API: {exc}") from exc
        body = self._read_body(resp, url, deadline)

        if not resp.ok:
            error_body = _decode_body(resp, body)
            self.log(f"Error response {resp.status_code} from {url}: {error_body}")
            raise ApiError(f"Limitless API Error: {resp.status_code} {resp.reason or ''}".rstrip(),
                           status=resp.status_code, body=error_body)
        try:
            data = json.loads(body.decode(resp.encoding or "utf-8"))
        except ValueError as exc:
            raise NetworkError("Malformed response from Limitless API: body is not JSON") from exc
        if not isinstance(data, dict):
            raise NetworkError("Malformed response from Limitless API: expected a JSON object")
        return data

    def fetch_page(self, criteria: ResolvedCriteria, batch_size: int, cursor: Optional[str]=None) -> Page:
        data = self.request("lifelogs", criteria.to_params(batch_size, cursor))
        records = _parse_records(_section(data, "data").get("lifelogs") or [])
        meta = _section(_section(data, "meta"), "lifelogs")
        return Page(
            records=records,
            next_cursor=meta.get("nextCursor") or None,
            count=meta.get("count", len(records)),
        )

    def fetch_by_id(self, lifelog_id: str, flags: InclusionFlags) -> LifelogRecord:
        try:
            data = self.request(f"lifelogs/{quote(lifelog_id, safe='')}", flags.to_params())
        except ApiError as exc:
            if exc.status == 404:
                raise NotFound(lifelog_id, exc.body) from exc
            raise
        payload = _section(data, "data").get("lifelog")
        if not payload:
            raise NotFound(lifelog_id)
        return _parse_records([payload])[0]
