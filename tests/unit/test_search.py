import pytest

from depthmesh.common.errors import EmptyFilterResultError
from depthmesh.common.models import BoundingFilter, SexagesimalRecord
from depthmesh.pipeline.render import render_text
from depthmesh.pipeline.search import filter_records, select_records


def _record(lon_deg: int, lon_min: int, lat_deg: int, lat_min: int, depth: int = 100) -> SexagesimalRecord:
    return SexagesimalRecord(
        type_code=1,
        lon_deg=lon_deg,
        lon_min=lon_min,
        lon_sec=0.0,
        lat_deg=lat_deg,
        lat_min=lat_min,
        lat_sec=12.5,
        depth=depth,
    )


RECORDS = [
    _record(139, 29, 35, 10, depth=1),
    _record(139, 30, 35, 20, depth=2),
    _record(140, 35, 36, 30, depth=3),
    _record(138, 40, 34, 40, depth=4),
    _record(139, 41, 35, 50, depth=5),
]


def test_filter_by_longitude_minutes_is_inclusive_and_degree_agnostic():
    kept = filter_records(RECORDS, BoundingFilter(lon_min=30, lon_max=40))

    assert [r.depth for r in kept] == [2, 3, 4]


def test_filter_by_latitude_bounds_only_one_side():
    assert [r.depth for r in filter_records(RECORDS, BoundingFilter(lat_min=30))] == [3, 4, 5]
    assert [r.depth for r in filter_records(RECORDS, BoundingFilter(lat_max=20))] == [1, 2]


def test_unbounded_filter_is_identity_for_rendering():
    assert render_text(filter_records(RECORDS, BoundingFilter())) == render_text(RECORDS)


def test_filter_preserves_input_order():
    shuffled = [RECORDS[3], RECORDS[0], RECORDS[2]]
    kept = filter_records(shuffled, BoundingFilter(lon_min=0, lon_max=59))

    assert kept == shuffled


def test_tightening_a_bound_never_grows_the_result():
    previous = len(RECORDS)
    for lower in range(0, 60, 5):
        size = len(filter_records(RECORDS, BoundingFilter(lon_min=lower)))
        assert size <= previous
        previous = size


def test_filter_does_not_mutate_input():
    snapshot = list(RECORDS)
    filter_records(RECORDS, BoundingFilter(lon_min=35, lat_max=40))
    assert RECORDS == snapshot


def test_select_records_raises_on_empty_result():
    with pytest.raises(EmptyFilterResultError):
        select_records(RECORDS, BoundingFilter(lon_min=50, lon_max=55))


def test_select_records_raises_on_empty_input():
    with pytest.raises(EmptyFilterResultError):
        select_records([], BoundingFilter())
