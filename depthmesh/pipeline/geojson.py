"""GeoJSON projection with depth-derived marker colours."""

from __future__ import annotations

import json
import math
from functools import lru_cache
from typing import Sequence

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError

from depthmesh.common.constants import WGS84_EPSG
from depthmesh.common.errors import ConfigError
from depthmesh.common.models import DecimalRecord, FeatureCollection, GeoFeature


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@lru_cache(maxsize=8)
def _transformer_to_wgs84(source_epsg: int) -> Transformer:
    try:
        return Transformer.from_crs(CRS.from_epsg(source_epsg), CRS.from_epsg(WGS84_EPSG), always_xy=True)
    except CRSError as exc:
        raise ConfigError(f"Unsupported source EPSG code {source_epsg}: {exc}") from exc


def depth_color(depth: int, depth_min: int, depth_range: int) -> str:
    """Shallow points are cyan (#00ffff), the deepest point is blue (#0000ff)."""
    green = 255 - _round_half_up(((depth - depth_min) / depth_range) * 255)
    return f"#00{green:02x}ff"


def project_features(records: Sequence[DecimalRecord], *, source_epsg: int = WGS84_EPSG) -> FeatureCollection:
    if not records:
        return FeatureCollection()

    depth_min = min(record.depth for record in records)
    depth_max = max(record.depth for record in records)
    depth_range = 1 if depth_max == depth_min else depth_max - depth_min

    transformer = None if source_epsg == WGS84_EPSG else _transformer_to_wgs84(source_epsg)

    features: list[GeoFeature] = []
    for record in records:
        longitude, latitude = record.longitude, record.latitude
        if transformer is not None:
            longitude, latitude = transformer.transform(longitude, latitude)
        features.append(
            GeoFeature(
                longitude=longitude,
                latitude=latitude,
                label=str(record.depth),
                color_hex=depth_color(record.depth, depth_min, depth_range),
            )
        )

    return FeatureCollection(features=features, depth_min=depth_min, depth_max=depth_max)


def render_geojson(collection: FeatureCollection) -> str:
    return json.dumps(collection.to_geojson(), ensure_ascii=False, indent=2)
