"""Write pipeline results to disk, optionally bundled with attribution."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from depthmesh.common.fs import write_payload, write_zip
from depthmesh.common.models import PipelineResult
from depthmesh.common.time_utils import format_citation_date


def render_citation(template: str, access_date: date | None = None) -> str:
    return template.replace("{date}", format_citation_date(access_date))


def bundle_filename(result: PipelineResult) -> str:
    return f"{Path(result.filename).stem}.zip"


def write_result(
    result: PipelineResult,
    out_dir: Path,
    *,
    bundle: bool = True,
    citation_filename: str | None = None,
    citation_text: str | None = None,
    access_date: date | None = None,
) -> Path:
    if not bundle:
        out_path = out_dir / result.filename
        write_payload(out_path, result.payload)
        return out_path

    members: dict[str, str | bytes] = {result.filename: result.payload}
    if citation_filename and citation_text:
        members[citation_filename] = render_citation(citation_text, access_date)

    out_path = out_dir / bundle_filename(result)
    write_zip(out_path, members)
    return out_path
