"""Data models used across the pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from depthmesh.common.constants import OUTPUT_EXTENSIONS
from depthmesh.common.errors import InvalidFilterError


class ConversionKind(str, Enum):
    DECIMAL_PASSTHROUGH = "base10"
    SEXAGESIMAL_TEXT = "base60"
    SEXAGESIMAL_FILTERED = "search60"
    GEOJSON = "geojson"

    @property
    def extension(self) -> str:
        return OUTPUT_EXTENSIONS[self.value]

    def output_filename(self, base_name: str) -> str:
        return f"{base_name}_{self.value}.{self.extension}"


class PipelineState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PARSING = "parsing"
    TRANSFORMING = "transforming"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class DecimalRecord:
    type_code: int
    longitude: float
    latitude: float
    depth: int


@dataclass(frozen=True)
class SexagesimalRecord:
    type_code: int
    lon_deg: int
    lon_min: int
    lon_sec: float
    lat_deg: int
    lat_min: int
    lat_sec: float
    depth: int


@dataclass(frozen=True)
class BoundingFilter:
    """Inclusive bounds on the minutes component of longitude and latitude.

    ``None`` leaves that side unbounded.
    """

    lon_min: int | None = None
    lon_max: int | None = None
    lat_min: int | None = None
    lat_max: int | None = None

    @classmethod
    def from_sequence(cls, values: Sequence[int | None]) -> "BoundingFilter":
        if len(values) != 4:
            raise InvalidFilterError(f"Expected 4 bound values, got {len(values)}")
        lon_min, lon_max, lat_min, lat_max = (None if v is None else int(v) for v in values)
        return cls(lon_min=lon_min, lon_max=lon_max, lat_min=lat_min, lat_max=lat_max)

    @property
    def is_unbounded(self) -> bool:
        return all(v is None for v in self.as_list())

    def as_list(self) -> list[int | None]:
        return [self.lon_min, self.lon_max, self.lat_min, self.lat_max]

    def serialize(self) -> str:
        return json.dumps(self.as_list())

    def validate(self) -> "BoundingFilter":
        if self.lon_min is not None and self.lon_max is not None and self.lon_min > self.lon_max:
            raise InvalidFilterError(
                f"Longitude minutes minimum {self.lon_min} exceeds maximum {self.lon_max}"
            )
        if self.lat_min is not None and self.lat_max is not None and self.lat_min > self.lat_max:
            raise InvalidFilterError(
                f"Latitude minutes minimum {self.lat_min} exceeds maximum {self.lat_max}"
            )
        return self


@dataclass(frozen=True)
class GeoFeature:
    longitude: float
    latitude: float
    label: str
    color_hex: str

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [self.longitude, self.latitude]},
            "properties": {
                "name": self.label,
                "marker-color": self.color_hex,
                "marker-size": "medium",
                "marker-symbol": "",
            },
        }


@dataclass(frozen=True)
class FeatureCollection:
    features: list[GeoFeature] = field(default_factory=list)
    depth_min: int | None = None
    depth_max: int | None = None

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in self.features],
        }


@dataclass(frozen=True)
class PipelineRequest:
    source_identifier: str
    kind: ConversionKind
    bounds: BoundingFilter | None = None

    def cache_key(self) -> tuple[str, str, str]:
        if self.bounds is None or self.bounds.is_unbounded:
            serialized = "[]"
        else:
            serialized = self.bounds.serialize()
        return (self.source_identifier, self.kind.value, serialized)


@dataclass(frozen=True)
class PipelineResult:
    payload: str | bytes
    filename: str
    kind: ConversionKind
    record_count: int


@dataclass(frozen=True)
class SourceDocument:
    identifier: str
    member_name: str
    raw: bytes
    text: str


@dataclass(frozen=True)
class ProgressEvent:
    request_id: str
    percent: int
    message: str
    state: PipelineState


@dataclass(frozen=True)
class ErrorEvent:
    request_id: str
    message: str
    error_code: str
