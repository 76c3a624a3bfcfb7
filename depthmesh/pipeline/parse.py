"""Parse fixed-width depth sounding tables into typed records."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from depthmesh.common.logging import get_logger, log_debug_event
from depthmesh.common.models import DecimalRecord, SexagesimalRecord
from depthmesh.pipeline.angles import to_dms

MIN_COLUMNS = 4


@dataclass(frozen=True)
class ParsedTable:
    decimal: list[DecimalRecord] = field(default_factory=list)
    sexagesimal: list[SexagesimalRecord] = field(default_factory=list)
    skipped_lines: int = 0

    def __len__(self) -> int:
        return len(self.decimal)


def _parse_finite_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"non-finite coordinate: {token}")
    return value


def parse_line(line: str) -> DecimalRecord | None:
    """Return the record for one table line, or None when the line is unusable.

    Columns are type code, latitude, longitude, depth; anything after the
    fourth column is ignored.
    """
    parts = line.split()
    if len(parts) < MIN_COLUMNS:
        return None
    try:
        type_code = int(parts[0])
        latitude = _parse_finite_float(parts[1])
        longitude = _parse_finite_float(parts[2])
        depth = int(parts[3])
    except ValueError:
        return None
    return DecimalRecord(type_code=type_code, longitude=longitude, latitude=latitude, depth=depth)


def to_sexagesimal(record: DecimalRecord) -> SexagesimalRecord:
    lon_deg, lon_min, lon_sec = to_dms(record.longitude)
    lat_deg, lat_min, lat_sec = to_dms(record.latitude)
    return SexagesimalRecord(
        type_code=record.type_code,
        lon_deg=lon_deg,
        lon_min=lon_min,
        lon_sec=lon_sec,
        lat_deg=lat_deg,
        lat_min=lat_min,
        lat_sec=lat_sec,
        depth=record.depth,
    )


def parse_records(raw_text: str, *, logger: logging.Logger | None = None) -> ParsedTable:
    logger = logger or get_logger("parse")
    decimal: list[DecimalRecord] = []
    sexagesimal: list[SexagesimalRecord] = []
    skipped = 0

    for line_no, line in enumerate(raw_text.splitlines(), start=1):
        trimmed = line.strip()
        if not trimmed:
            continue

        record = parse_line(trimmed)
        if record is None:
            skipped += 1
            log_debug_event(
                logger,
                f"skipped malformed line {line_no}: {trimmed[:80]!r}",
                stage="parse",
                event="LINE_SKIPPED",
                status="skipped",
            )
            continue

        decimal.append(record)
        sexagesimal.append(to_sexagesimal(record))

    return ParsedTable(decimal=decimal, sexagesimal=sexagesimal, skipped_lines=skipped)
