"""Session-scoped cache of pipeline results."""

from __future__ import annotations

import threading

from depthmesh.common.models import PipelineRequest, PipelineResult

CacheKey = tuple[str, str, str]


class ResultCache:
    """Unbounded result cache keyed by request fingerprint.

    Identical keys always map to interchangeable results, so concurrent
    inserts for one key resolve as last writer wins.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, PipelineResult] = {}
        self.lock = threading.Lock()

    def get(self, request: PipelineRequest) -> PipelineResult | None:
        key = request.cache_key()
        with self.lock:
            return self._entries.get(key)

    def put(self, request: PipelineRequest, result: PipelineResult) -> None:
        with self.lock:
            self._entries[request.cache_key()] = result

    def clear(self) -> None:
        with self.lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self.lock:
            return len(self._entries)

    def __contains__(self, request: object) -> bool:
        if not isinstance(request, PipelineRequest):
            return False
        with self.lock:
            return request.cache_key() in self._entries
