import zipfile
from datetime import date
from pathlib import Path

from depthmesh.common.models import ConversionKind, PipelineResult
from depthmesh.pipeline.export import bundle_filename, render_citation, write_result


def _result() -> PipelineResult:
    return PipelineResult(
        payload="1  35°30'00.000\" 139°30'00.000\" 100",
        filename="mesh500_35_139_base60.txt",
        kind=ConversionKind.SEXAGESIMAL_TEXT,
        record_count=1,
    )


def test_render_citation_substitutes_access_date():
    assert render_citation("accessed {date}", date(2026, 10, 1)) == "accessed 2026/10/1"


def test_write_result_plain_file(tmp_path: Path):
    out_path = write_result(_result(), tmp_path, bundle=False)

    assert out_path == tmp_path / "mesh500_35_139_base60.txt"
    assert out_path.read_text(encoding="utf-8") == _result().payload


def test_write_result_bundle_contains_payload_and_citation(tmp_path: Path):
    out_path = write_result(
        _result(),
        tmp_path,
        citation_filename="出典.txt",
        citation_text="accessed {date}",
        access_date=date(2026, 10, 1),
    )

    assert out_path.name == bundle_filename(_result()) == "mesh500_35_139_base60.zip"
    with zipfile.ZipFile(out_path) as zf:
        assert sorted(zf.namelist()) == sorted(["mesh500_35_139_base60.txt", "出典.txt"])
        assert zf.read("mesh500_35_139_base60.txt").decode("utf-8") == _result().payload
        assert zf.read("出典.txt").decode("utf-8") == "accessed 2026/10/1"
