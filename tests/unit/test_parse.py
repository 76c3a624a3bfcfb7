from depthmesh.common.models import DecimalRecord
from depthmesh.pipeline.parse import parse_line, parse_records


def test_parse_example_line_keeps_latitude_and_longitude_apart():
    table = parse_records("1 35.5 139.5 100")

    assert table.decimal == [DecimalRecord(type_code=1, longitude=139.5, latitude=35.5, depth=100)]
    record = table.sexagesimal[0]
    assert (record.lon_deg, record.lon_min, record.lon_sec) == (139, 30, 0.0)
    assert (record.lat_deg, record.lat_min, record.lat_sec) == (35, 30, 0.0)


def test_parse_outputs_are_index_aligned():
    text = "\n".join(
        [
            "1 35.5 139.5 100",
            "2 34.25 138.75 2500",
            "3 33.1 137.9 4100",
        ]
    )

    table = parse_records(text)

    assert len(table.decimal) == len(table.sexagesimal) == 3
    for decimal, sexagesimal in zip(table.decimal, table.sexagesimal):
        assert decimal.depth == sexagesimal.depth
        assert decimal.type_code == sexagesimal.type_code
    assert [r.depth for r in table.decimal] == [100, 2500, 4100]


def test_parse_skips_blank_short_and_non_numeric_lines():
    text = "\n".join(
        [
            "",
            "   ",
            "1 35.5 139.5",
            "x 35.5 139.5 100",
            "1 north 139.5 100",
            "1 35.5 139.5 deep",
            "1 35.5 139.5 10.5",
            "1 nan 139.5 100",
            "  2   34.0   138.0   250  ",
        ]
    )

    table = parse_records(text)

    assert table.decimal == [DecimalRecord(type_code=2, longitude=138.0, latitude=34.0, depth=250)]
    assert table.skipped_lines == 6


def test_parse_ignores_extra_columns_and_crlf():
    table = parse_records("1 35.5 139.5 100 extra\r\n2 35.0 139.0 50\r\n")

    assert [r.depth for r in table.decimal] == [100, 50]


def test_parse_empty_text_returns_empty_sequences():
    table = parse_records("")

    assert table.decimal == []
    assert table.sexagesimal == []
    assert len(table) == 0


def test_parse_line_returns_none_for_short_line():
    assert parse_line("1 2 3") is None
