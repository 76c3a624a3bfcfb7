"""Minimal strict schemas for YAML settings validation."""

from __future__ import annotations

import re

from depthmesh.common.errors import ConfigError

SETTINGS_SECTIONS = {
    "source": {"name_pattern"},
    "http": {
        "connect_timeout",
        "read_timeout",
        "max_attempts",
        "backoff_multiplier",
        "max_wait",
        "rate_per_sec",
        "chunk_size",
    },
    "geojson": {"source_epsg"},
    "output": {"bundle", "citation_filename", "citation_text"},
    "pipeline": {"max_workers"},
}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value: object, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number, got {value!r}")


def validate_settings_config(cfg: dict | None, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("settings must be a mapping")

    _assert_required_keys(cfg, set(SETTINGS_SECTIONS), "settings")
    _assert_no_unknown_keys(cfg, set(SETTINGS_SECTIONS), "settings", allow_unknown)

    for section, keys in SETTINGS_SECTIONS.items():
        if not isinstance(cfg[section], dict):
            raise ConfigError(f"settings.{section} must be a mapping")
        _assert_required_keys(cfg[section], keys, section)
        _assert_no_unknown_keys(cfg[section], keys, section, allow_unknown)

    try:
        re.compile(cfg["source"]["name_pattern"])
    except (re.error, TypeError) as exc:
        raise ConfigError(f"source.name_pattern is not a valid regex: {exc}") from exc

    for key in SETTINGS_SECTIONS["http"]:
        _assert_positive(cfg["http"][key], f"http.{key}")
    _assert_positive(cfg["pipeline"]["max_workers"], "pipeline.max_workers")

    if not isinstance(cfg["geojson"]["source_epsg"], int):
        raise ConfigError("geojson.source_epsg must be an integer EPSG code")

    return cfg
