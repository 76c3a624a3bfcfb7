from __future__ import annotations

import json

import pytest

from depthmesh.common.models import BoundingFilter, ConversionKind, PipelineRequest, SourceDocument
from depthmesh.pipeline.orchestrator import PipelineOrchestrator

SOURCE = "mesh500_35_139.zip"
TABLE = "\n".join(
    [
        "1   35.504167  139.754167    12",
        "1   35.504167  139.762500    18",
        "2   35.495833  139.770833    25",
        "2   35.487500  139.779167    31",
    ]
)

EXPECTED_BASE60 = "\n".join(
    [
        "1  35°30'15.001\" 139°45'15.001\" 12",
        "1  35°30'15.001\" 139°45'45.000\" 18",
        "2  35°29'44.999\" 139°46'14.999\" 25",
        "2  35°29'15.000\" 139°46'45.001\" 31",
    ]
)


class FixtureLoader:
    def load(self, identifier: str, *, cancel_event=None) -> SourceDocument:
        return SourceDocument(
            identifier=identifier,
            member_name="mesh500_35_139.txt",
            raw=TABLE.encode("utf-8"),
            text=TABLE,
        )


@pytest.mark.regression
def test_base60_snapshot_is_stable():
    result = PipelineOrchestrator(FixtureLoader()).run(PipelineRequest(SOURCE, ConversionKind.SEXAGESIMAL_TEXT))

    assert result.payload == EXPECTED_BASE60


@pytest.mark.regression
def test_search60_snapshot_is_subset_of_base60():
    result = PipelineOrchestrator(FixtureLoader()).run(
        PipelineRequest(SOURCE, ConversionKind.SEXAGESIMAL_FILTERED, BoundingFilter(lon_min=46, lat_max=29))
    )

    assert result.payload == "\n".join(EXPECTED_BASE60.splitlines()[2:])


@pytest.mark.regression
def test_geojson_snapshot_colors_are_stable():
    result = PipelineOrchestrator(FixtureLoader()).run(PipelineRequest(SOURCE, ConversionKind.GEOJSON))

    payload = json.loads(result.payload)
    assert [f["properties"]["marker-color"] for f in payload["features"]] == [
        "#00ffff",
        "#00aeff",
        "#0051ff",
        "#0000ff",
    ]
    assert [f["properties"]["name"] for f in payload["features"]] == ["12", "18", "25", "31"]


@pytest.mark.regression
def test_outputs_are_byte_stable_across_orchestrators():
    first = PipelineOrchestrator(FixtureLoader()).run(PipelineRequest(SOURCE, ConversionKind.GEOJSON))
    second = PipelineOrchestrator(FixtureLoader()).run(PipelineRequest(SOURCE, ConversionKind.GEOJSON))

    assert first.payload.encode("utf-8") == second.payload.encode("utf-8")
