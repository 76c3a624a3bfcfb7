"""Fixed-width sexagesimal text rendering."""

from __future__ import annotations

from typing import Iterable

from depthmesh.common.models import SexagesimalRecord


def _angle(degrees: int, minutes: int, seconds: float) -> str:
    return f"{degrees}°{minutes:02d}'{seconds:06.3f}\""


def render_line(record: SexagesimalRecord) -> str:
    # Latitude is written before longitude, matching the source column order.
    latitude = _angle(record.lat_deg, record.lat_min, record.lat_sec)
    longitude = _angle(record.lon_deg, record.lon_min, record.lon_sec)
    return f"{record.type_code}  {latitude} {longitude} {record.depth}"


def render_text(records: Iterable[SexagesimalRecord]) -> str:
    return "\n".join(render_line(record) for record in records)
