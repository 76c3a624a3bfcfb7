from __future__ import annotations

import threading

import pytest
import requests

from depthmesh.common.errors import RequestCancelledError
from depthmesh.common.http import HttpClient, HttpRequestError, RetryConfig, RetryableHttpError


class FakeResponse:
    def __init__(self, status_code: int, chunks: list[bytes] | None = None, on_chunk=None):
        self.status_code = status_code
        self._chunks = chunks or []
        self._on_chunk = on_chunk
        self.closed = False

    def iter_content(self, chunk_size: int):
        for chunk in self._chunks:
            yield chunk
            if self._on_chunk is not None:
                self._on_chunk()

    def close(self):
        self.closed = True


def test_http_get_bytes_joins_chunks(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    response = FakeResponse(200, [b"PK", b"", b"\x03\x04"])

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: response)
    payload = client.get_bytes("https://example.com/mesh500_35_139.zip")

    assert payload == b"PK\x03\x04"
    assert response.closed is True


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503))

    with pytest.raises(RetryableHttpError):
        client.get_bytes("https://example.com/a.zip")


def test_http_client_error_is_not_retried(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.01, max_wait=0.01))
    calls = []

    def fake_request(**kwargs):
        calls.append(kwargs["url"])
        return FakeResponse(404)

    monkeypatch.setattr(client.session, "request", fake_request)

    with pytest.raises(HttpRequestError):
        client.get_bytes("https://example.com/a.zip")
    assert len(calls) == 1


def test_http_connection_error_is_retried_then_succeeds(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.01, max_wait=0.01), rate_per_sec=100.0)
    responses = iter([requests.ConnectionError("reset"), FakeResponse(200, [b"ok"])])

    def fake_request(**_kwargs):
        item = next(responses)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(client.session, "request", fake_request)

    assert client.get_bytes("https://example.com/a.zip") == b"ok"


def test_http_download_honours_cancel_event(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    cancel = threading.Event()
    response = FakeResponse(200, [b"a", b"b", b"c"], on_chunk=cancel.set)
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: response)

    with pytest.raises(RequestCancelledError):
        client.get_bytes("https://example.com/a.zip", cancel_event=cancel)
    assert response.closed is True
