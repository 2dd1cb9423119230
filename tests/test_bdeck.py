from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from cyclone_viewer.processing import bdeck
from cyclone_viewer.processing.bdeck import (
    looks_like_bdeck,
    parse_bdeck,
    parse_date,
    parse_r34_quadrant,
    parse_tenths,
)
from cyclone_viewer.processing.records import KNOTS_TO_MS, SkipReason

from .conftest import ADECK_LINES, BDECK_LINES


def test_best_lines_grouped_per_storm(bdeck_content):
    result = parse_bdeck(bdeck_content)

    assert result.is_bdeck
    assert [t.id for t in result.storms] == ["AL092022", "AL102022"]
    assert [len(t.points) for t in result.storms] == [3, 1]
    assert all(t.is_best_track and t.model == "BEST" for t in result.storms)


def test_non_best_lines_are_skipped(bdeck_content):
    result = parse_bdeck(bdeck_content)

    assert [(s.line_number, s.reason) for s in result.skipped] == [(3, SkipReason.NOT_BEST_TRACK)]


def test_storm_name_filled_from_later_line(bdeck_content):
    storms = parse_bdeck(bdeck_content).storms

    assert storms[0].name == "IAN"
    assert storms[1].name == "INVEST"
    assert storms[0].cyclone_id == "aal092022"


def test_point_values(bdeck_content):
    point = parse_bdeck(bdeck_content).storms[0].points[0]

    assert point.latitude == pytest.approx(13.4)
    assert point.longitude == pytest.approx(-68.9)
    assert point.wind_speed == pytest.approx(30 * KNOTS_TO_MS)
    assert point.mslp == 1006
    assert point.rmw == 40 * 1852
    assert point.storm_type == "TD"
    assert point.model == "BEST"
    assert (point.year_utc, point.month_utc, point.day_utc, point.hour_utc) == (2022, 9, 23, 12)


def test_r34_radii_use_nan_for_missing_quadrants(bdeck_content):
    points = parse_bdeck(bdeck_content).storms[0].points

    assert all(math.isnan(getattr(points[0], q)) for q in ("r34_ne", "r34_se", "r34_sw", "r34_nw"))

    second = points[1]
    assert second.r34_ne == 60 * 1852
    assert second.r34_se == 40 * 1852
    assert math.isnan(second.r34_sw)
    assert second.r34_nw == 30 * 1852


def test_json_safe_output_replaces_nan(bdeck_content):
    data = parse_bdeck(bdeck_content).to_dict(json_safe=True)

    assert data["isBdeck"] is True
    assert data["count"] == 2
    assert data["storms"][0]["points"][0]["r34_ne"] is None


def test_short_line_is_skipped():
    short = ",".join(BDECK_LINES[0].split(",")[:15])
    result = parse_bdeck(short + "\n" + BDECK_LINES[1] + "\n")

    assert result.skipped[0].reason == SkipReason.INSUFFICIENT_COLUMNS
    assert result.count == 1
    assert result.point_count == 1


def test_returning_storm_starts_new_track():
    content = "\n".join([BDECK_LINES[0], BDECK_LINES[4], BDECK_LINES[1]])
    result = parse_bdeck(content)

    assert [t.id for t in result.storms] == ["AL092022", "AL102022", "AL092022"]


def test_invalid_coordinates_are_skipped():
    parts = BDECK_LINES[0].split(",")
    parts[6] = " "
    result = parse_bdeck(",".join(parts))

    assert result.skipped[0].reason == SkipReason.INVALID_COORDINATES
    assert result.point_count == 0


@pytest.mark.parametrize("bad_date", ["20220924", "2022092xx0", "2022023100"])
def test_bad_date_skips_only_that_line(bad_date):
    content = "\n".join([
        BDECK_LINES[0],
        BDECK_LINES[1],
        BDECK_LINES[3].replace("2022092400", bad_date),
    ])
    result = parse_bdeck(content)

    assert result.count == 1
    assert result.storms[0].name == "IAN"
    assert result.point_count == 2
    assert [(s.line_number, s.reason) for s in result.skipped] == [(3, SkipReason.INVALID_TIMESTAMP)]


def test_unexpected_error_discards_whole_file(bdeck_content, monkeypatch):
    def explode(parts, when):
        raise RuntimeError("boom")

    monkeypatch.setattr(bdeck, "_line_to_point", explode)
    result = parse_bdeck(bdeck_content)

    assert result.storms == []
    assert result.is_bdeck
    assert result.skipped[0].reason == SkipReason.UNEXPECTED_ERROR
    assert result.skipped[0].detail == "boom"
    assert result.to_dict() == {"storms": [], "isBdeck": True, "count": 0}


def test_parse_date():
    assert parse_date("2022092318") == datetime(2022, 9, 23, 18, tzinfo=timezone.utc)
    assert parse_date("20220923") is None
    assert parse_date("2022023100") is None
    assert parse_date("") is None


def test_empty_content():
    result = parse_bdeck("")

    assert result.storms == []
    assert result.is_bdeck


def test_parse_tenths():
    assert parse_tenths("285N", "S") == pytest.approx(28.5)
    assert parse_tenths("285S", "S") == pytest.approx(-28.5)
    assert parse_tenths("1755W", "W") == pytest.approx(-175.5)
    assert parse_tenths("", "W") is None


def test_parse_r34_quadrant():
    assert parse_r34_quadrant("50") == 50 * 1852
    assert math.isnan(parse_r34_quadrant("0"))
    assert math.isnan(parse_r34_quadrant(""))


def test_looks_like_bdeck(bdeck_content):
    assert looks_like_bdeck(bdeck_content)
    assert not looks_like_bdeck("\n".join(ADECK_LINES))
