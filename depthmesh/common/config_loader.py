"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from depthmesh.common.constants import SOURCE_NAME_PATTERN, WGS84_EPSG
from depthmesh.common.errors import ConfigError
from depthmesh.common.fs import read_yaml
from depthmesh.common.http import DEFAULT_CHUNK_SIZE, RetryConfig, TimeoutConfig
from depthmesh.common.schema import validate_settings_config

SETTINGS_FILENAME = "settings.yml"


@dataclass(frozen=True)
class Settings:
    source_name_pattern: str
    timeout: TimeoutConfig
    retry: RetryConfig
    rate_per_sec: float
    chunk_size: int
    geojson_source_epsg: int
    bundle_output: bool
    citation_filename: str
    citation_text: str
    max_workers: int


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing settings file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def settings_from_mapping(cfg: dict) -> Settings:
    http = cfg["http"]
    return Settings(
        source_name_pattern=cfg["source"]["name_pattern"],
        timeout=TimeoutConfig(connect=float(http["connect_timeout"]), read=float(http["read_timeout"])),
        retry=RetryConfig(
            max_attempts=int(http["max_attempts"]),
            multiplier=float(http["backoff_multiplier"]),
            max_wait=float(http["max_wait"]),
        ),
        rate_per_sec=float(http["rate_per_sec"]),
        chunk_size=int(http["chunk_size"]),
        geojson_source_epsg=int(cfg["geojson"]["source_epsg"]),
        bundle_output=bool(cfg["output"]["bundle"]),
        citation_filename=str(cfg["output"]["citation_filename"]),
        citation_text=str(cfg["output"]["citation_text"]),
        max_workers=int(cfg["pipeline"]["max_workers"]),
    )


def load_settings(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> Settings:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / SETTINGS_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / SETTINGS_FILENAME, overlay_path)
    return settings_from_mapping(validate_settings_config(cfg, allow_unknown=allow_unknown))


def default_settings() -> Settings:
    return Settings(
        source_name_pattern=SOURCE_NAME_PATTERN,
        timeout=TimeoutConfig(),
        retry=RetryConfig(),
        rate_per_sec=2.0,
        chunk_size=DEFAULT_CHUNK_SIZE,
        geojson_source_epsg=WGS84_EPSG,
        bundle_output=True,
        citation_filename="citation.txt",
        citation_text="Source: JODC 500m mesh bathymetry data (https://www.jodc.go.jp/vpage/depth500_file_j.html), accessed {date}",
        max_workers=4,
    )
