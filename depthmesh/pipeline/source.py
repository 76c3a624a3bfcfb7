"""Source archive retrieval and unpacking."""

from __future__ import annotations

import io
import re
import threading
import zipfile
from pathlib import Path
from types import TracebackType
from urllib.parse import urlparse
from urllib.request import url2pathname

from depthmesh.common.errors import (
    InvalidSourceNameError,
    RequestCancelledError,
    SourceUnavailableError,
)
from depthmesh.common.http import HttpClient, HttpRequestError
from depthmesh.common.models import SourceDocument

TABLE_SUFFIX = ".txt"


def extract_base_name(identifier: str, pattern: str) -> str:
    match = re.search(pattern, identifier)
    if not match:
        raise InvalidSourceNameError(f"Source name does not match {pattern!r}: {identifier}")
    return match.group(0)


def extract_table(archive: bytes) -> tuple[str, bytes]:
    """Return (member name, raw bytes) of the first text table in ``archive``."""
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        members = [name for name in zf.namelist() if name.lower().endswith(TABLE_SUFFIX)]
        if not members:
            raise SourceUnavailableError("Archive does not contain a text table")
        member = members[0]
        return member, zf.read(member)


def decode_table(raw: bytes) -> str:
    return raw.decode("utf-8-sig", errors="replace")


def _is_http(identifier: str) -> bool:
    return urlparse(identifier).scheme in {"http", "https"}


def _local_path(identifier: str) -> Path:
    parsed = urlparse(identifier)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    return Path(identifier)


class SourceLoader:
    """Loads mesh archives from HTTP(S) URLs, ``file://`` URLs or local paths."""

    def __init__(self, http_client: HttpClient | None = None) -> None:
        self._http_client = http_client
        self._owns_client = http_client is None
        self._lock = threading.Lock()

    @property
    def http_client(self) -> HttpClient:
        with self._lock:
            if self._http_client is None:
                self._http_client = HttpClient()
            return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()

    def __enter__(self) -> "SourceLoader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def fetch_archive(self, identifier: str, *, cancel_event: threading.Event | None = None) -> bytes:
        if _is_http(identifier):
            return self.http_client.get_bytes(identifier, cancel_event=cancel_event)
        return _local_path(identifier).read_bytes()

    def load(self, identifier: str, *, cancel_event: threading.Event | None = None) -> SourceDocument:
        try:
            archive = self.fetch_archive(identifier, cancel_event=cancel_event)
            if cancel_event is not None and cancel_event.is_set():
                raise RequestCancelledError(f"Request cancelled after download: {identifier}")
            member, raw = extract_table(archive)
        except (RequestCancelledError, SourceUnavailableError):
            raise
        except (HttpRequestError, OSError, zipfile.BadZipFile) as exc:
            raise SourceUnavailableError(f"Failed to load source archive {identifier}: {exc}") from exc
        return SourceDocument(identifier=identifier, member_name=member, raw=raw, text=decode_table(raw))
