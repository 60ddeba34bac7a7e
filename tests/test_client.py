"""Unit tests for ApiClient against a mocked requests session."""

from __future__ import annotations

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from limitless_lifelogs.client import ApiClient
from limitless_lifelogs.config import Settings
from limitless_lifelogs.criteria import InclusionFlags, RequestCriteria, resolve_criteria
from limitless_lifelogs.errors import ApiError, NetworkError, NotFound, RequestTimeout
from limitless_lifelogs.models import SectionNode

LIFELOG = {
    "id": "abc123",
    "title": "Budget sync",
    "markdown": "# Budget sync\n\n> We agreed on the budget.",
    "startTime": "2025-03-11T09:00:00-07:00",
    "endTime": "2025-03-11T09:30:00-07:00",
    "contents": [
        {"type": "heading1", "content": "Budget sync", "children": [
            {"type": "blockquote", "content": "We agreed on the budget.",
             "speakerName": "Dana", "speakerIdentifier": "user", "startOffsetMs": 0, "endOffsetMs": 1500},
        ]},
    ],
}


def client_with(settings, response=None, side_effect=None):
    session = MagicMock()
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = response
    return ApiClient(settings, session=session), session


def resolved(**kwargs):
    return resolve_criteria(RequestCriteria(**kwargs), lambda: "Europe/Berlin")


def test_fetch_page_parses_records_and_cursor(settings):
    payload = {"data": {"lifelogs": [LIFELOG]}, "meta": {"lifelogs": {"nextCursor": "c2", "count": 1}}}
    client, session = client_with(settings, make_response(200, payload))
    page = client.fetch_page(resolved(date="2025-03-11"), 10)

    assert page.next_cursor == "c2"
    assert page.count == 1
    record = page.records[0]
    assert record.id == "abc123"
    assert isinstance(record.contents[0], SectionNode)
    assert record.contents[0].children[0].speaker_identifier == "user"


def test_fetch_page_sends_headers_and_query(settings):
    payload = {"data": {"lifelogs": []}, "meta": {"lifelogs": {"count": 0}}}
    client, session = client_with(settings, make_response(200, payload))
    client.fetch_page(resolved(start="2025-03-01", end="2025-03-02", include_headings=False), 7, "cur-1")

    args, kwargs = session.get.call_args
    assert args[0] == "https://api.example.test/v1/lifelogs"
    assert kwargs["headers"]["X-API-Key"] == "test-key"
    assert kwargs["timeout"] == settings.timeout
    assert kwargs["params"] == {
        "limit": 7,
        "includeMarkdown": "true",
        "includeHeadings": "false",
        "direction": "asc",
        "start": "2025-03-01",
        "end": "2025-03-02",
        "timezone": "Europe/Berlin",
        "cursor": "cur-1",
    }


def test_missing_meta_means_no_cursor(settings):
    client, _ = client_with(settings, make_response(200, {"data": {"lifelogs": [LIFELOG]}}))
    page = client.fetch_page(resolved(), 10)
    assert page.next_cursor is None
    assert page.count == 1


def test_error_status_carries_json_body(settings):
    resp = make_response(429, {"error": "slow down"}, reason="Too Many Requests")
    client, _ = client_with(settings, resp)
    with pytest.raises(ApiError) as exc_info:
        client.fetch_page(resolved(), 10)
    assert exc_info.value.status == 429
    assert exc_info.value.body == {"error": "slow down"}


def test_error_status_keeps_text_body(settings):
    client, _ = client_with(settings, make_response(502, text="bad gateway", reason="Bad Gateway"))
    with pytest.raises(ApiError) as exc_info:
        client.fetch_page(resolved(), 10)
    assert exc_info.value.status == 502
    assert exc_info.value.body == "bad gateway"


def test_timeout_is_typed(settings):
    client, session = client_with(settings, side_effect=requests.ReadTimeout("read timed out"))
    with pytest.raises(RequestTimeout):
        client.fetch_page(resolved(), 10)
    assert session.get.call_count == 1


def test_connection_failure_is_network_error(settings):
    client, session = client_with(settings, side_effect=requests.ConnectionError("reset"))
    with pytest.raises(NetworkError):
        client.fetch_page(resolved(), 10)
    assert session.get.call_count == 1


def test_non_json_body_is_network_error(settings):
    client, _ = client_with(settings, make_response(200, text="<html>oops</html>"))
    with pytest.raises(NetworkError):
        client.fetch_page(resolved(), 10)


def test_malformed_record_is_network_error(settings):
    payload = {"data": {"lifelogs": [{"title": "no id"}]}}
    client, _ = client_with(settings, make_response(200, payload))
    with pytest.raises(NetworkError):
        client.fetch_page(resolved(), 10)


def test_fetch_by_id_success(settings):
    client, session = client_with(settings, make_response(200, {"data": {"lifelog": LIFELOG}}))
    record = client.fetch_by_id("abc123", InclusionFlags().resolved())
    assert record.title == "Budget sync"
    args, kwargs = session.get.call_args
    assert args[0] == "https://api.example.test/v1/lifelogs/abc123"
    assert kwargs["params"] == {"includeMarkdown": "true", "includeHeadings": "true"}


def test_fetch_by_id_404_is_not_found(settings):
    client, _ = client_with(settings, make_response(404, {"error": "not found"}, reason="Not Found"))
    with pytest.raises(NotFound) as exc_info:
        client.fetch_by_id("missing", InclusionFlags())
    assert not isinstance(exc_info.value, ApiError)
    assert exc_info.value.lifelog_id == "missing"


def test_fetch_by_id_empty_payload_is_not_found(settings):
    client, _ = client_with(settings, make_response(200, {"data": {}}))
    with pytest.raises(NotFound):
        client.fetch_by_id("ghost", InclusionFlags())


def test_fetch_by_id_other_errors_stay_api_errors(settings):
    client, _ = client_with(settings, make_response(500, text="boom", reason="Server Error"))
    with pytest.raises(ApiError) as exc_info:
        client.fetch_by_id("abc123", InclusionFlags())
    assert exc_info.value.status == 500


def test_fetch_by_id_quotes_identifier(settings):
    client, session = client_with(settings, make_response(200, {"data": {"lifelog": LIFELOG}}))
    client.fetch_by_id("a/b c", InclusionFlags())
    assert session.get.call_args[0][0].endswith("/v1/lifelogs/a%2Fb%20c")


class SlowBodyHandler(BaseHTTPRequestHandler):
    """Sends a valid page, a few bytes at a time, well past a one-second deadline."""

    body = json.dumps({"data": {"lifelogs": []}, "meta": {"lifelogs": {"count": 0}},
                       "padding": "x" * 4000}).encode("utf-8")

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for i in range(0, len(self.body), 200):
                self.wfile.write(self.body[i:i + 200])
                self.wfile.flush()
                time.sleep(0.2)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def slow_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), SlowBodyHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_slow_body_hits_deadline(slow_server):
    """A server that keeps trickling bytes can't stretch a call past its deadline."""
    client = ApiClient(Settings(api_key="test-key", base_url=slow_server, timeout=1))
    started = time.monotonic()
    with pytest.raises(RequestTimeout):
        client.fetch_page(resolved(), 10)
    assert time.monotonic() - started < 3.5


class StalledRaw:
    """Body stream whose read blocks past the deadline, then fails like requests does."""

    def read(self, amt=None):
        time.sleep(0.05)
        raise requests.ConnectionError("Read timed out.")

    def close(self):
        pass


def test_stalled_body_read_is_timeout():
    resp = make_response(200, {"data": {"lifelogs": []}})
    resp.raw = StalledRaw()
    client, _ = client_with(Settings(api_key="k", timeout=0.01), resp)
    with pytest.raises(RequestTimeout):
        client.fetch_page(resolved(), 10)


def test_broken_body_before_deadline_is_network_error(settings):
    resp = make_response(200, {"data": {"lifelogs": []}})
    resp.raw = MagicMock(spec=["read", "close"])
    resp.raw.read.side_effect = requests.ConnectionError("connection reset")
    client, _ = client_with(settings, resp)
    with pytest.raises(NetworkError):
        client.fetch_page(resolved(), 10)
