"""Filesystem helpers."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Mapping


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path):
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_payload(path: Path, payload: str | bytes) -> None:
    ensure_dir(path.parent)
    if isinstance(payload, bytes):
        path.write_bytes(payload)
    else:
        path.write_text(payload, encoding="utf-8")


def write_zip(path: Path, members: Mapping[str, str | bytes]) -> None:
    ensure_dir(path.parent)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in members.items():
            archive.writestr(name, content)
