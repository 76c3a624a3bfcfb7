"""HTTP client for archive downloads with retries, timeouts and rate limiting."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from types import TracebackType

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from depthmesh.common.constants import USER_AGENT
from depthmesh.common.errors import RequestCancelledError, StageError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}
DEFAULT_CHUNK_SIZE = 1024 * 128


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 5
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class TokenBucket:
    """Shared request budget so concurrent conversions do not hammer one host."""

    def __init__(self, rate_per_sec: float, capacity: float | None = None) -> None:
        self.rate_per_sec = rate_per_sec
        self.capacity = capacity if capacity is not None else max(rate_per_sec, 1.0)
        self.tokens = self.capacity
        self.updated_at = time.monotonic()
        self.lock = threading.Lock()

    def acquire(self, tokens: float = 1.0) -> None:
        while True:
            with self.lock:
                now = time.monotonic()
                self.tokens = min(self.capacity, self.tokens + (now - self.updated_at) * self.rate_per_sec)
                self.updated_at = now
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                wait_for = max((tokens - self.tokens) / self.rate_per_sec, 0.01)
            time.sleep(wait_for)


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        rate_per_sec: float = 2.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.chunk_size = chunk_size
        self.session = requests.Session()
        self.limiter = TokenBucket(rate_per_sec=rate_per_sec)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "application/zip, */*"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status_or_retry(self, response: requests.Response) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(f"Retryable HTTP status: {status}")
        if status >= 400:
            raise HttpRequestError(f"HTTP status: {status}")

    def _download(
        self,
        url: str,
        *,
        headers: dict[str, str] | None,
        timeout: TimeoutConfig | None,
        cancel_event: threading.Event | None,
    ) -> bytes:
        req_timeout = timeout or self.timeout
        self.limiter.acquire()

        try:
            response = self.session.request(
                method="GET",
                url=url,
                headers=self._headers(headers),
                timeout=(req_timeout.connect, req_timeout.read),
                stream=True,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RetryableHttpError(f"Connection failed for {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise HttpRequestError(f"Request failed for {url}: {exc}") from exc

        try:
            self._raise_for_status_or_retry(response)
            chunks: list[bytes] = []
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if cancel_event is not None and cancel_event.is_set():
                    raise RequestCancelledError(f"Download cancelled: {url}")
                if chunk:
                    chunks.append(chunk)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RetryableHttpError(f"Download interrupted for {url}: {exc}") from exc
        finally:
            response.close()

        return b"".join(chunks)

    def get_bytes(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
        cancel_event: threading.Event | None = None,
    ) -> bytes:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        def _wrapped() -> bytes:
            if cancel_event is not None and cancel_event.is_set():
                raise RequestCancelledError(f"Download cancelled: {url}")
            return self._download(url, headers=headers, timeout=timeout, cancel_event=cancel_event)

        return _wrapped()
