"""Session and request identifier helpers."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

_REQUEST_COUNTER = itertools.count(1)


def generate_session_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("session-%Y%m%dT%H%M%S%fZ")


def generate_request_id(kind: str) -> str:
    # next() on itertools.count is atomic under the GIL.
    return f"req-{next(_REQUEST_COUNTER):05d}-{kind}"
