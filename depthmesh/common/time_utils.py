"""UTC and local date helpers for log records and attribution text."""

from __future__ import annotations

import time
from datetime import date, datetime, timezone


def local_today() -> date:
    return date.today()


def format_citation_date(value: date | None = None) -> str:
    value = value or local_today()
    return f"{value.year}/{value.month}/{value.day}"


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)
