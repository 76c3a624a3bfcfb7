"""Minutes-only bounding filter over sexagesimal records."""

from __future__ import annotations

from typing import Iterable

from depthmesh.common.errors import EmptyFilterResultError
from depthmesh.common.models import BoundingFilter, SexagesimalRecord


def _within(value: int, lower: int | None, upper: int | None) -> bool:
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


def filter_records(records: Iterable[SexagesimalRecord], bounds: BoundingFilter) -> list[SexagesimalRecord]:
    """Keep records whose longitude and latitude minutes sit inside ``bounds``.

    Only the minutes field is compared; degrees and seconds are ignored.
    """
    return [
        record
        for record in records
        if _within(record.lon_min, bounds.lon_min, bounds.lon_max)
        and _within(record.lat_min, bounds.lat_min, bounds.lat_max)
    ]


def select_records(records: Iterable[SexagesimalRecord], bounds: BoundingFilter) -> list[SexagesimalRecord]:
    selected = filter_records(records, bounds)
    if not selected:
        raise EmptyFilterResultError("No records match the requested minute bounds")
    return selected
