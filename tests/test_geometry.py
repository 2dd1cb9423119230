from __future__ import annotations

import pytest

from cyclone_viewer.processing.bdeck import parse_bdeck
from cyclone_viewer.processing.geometry import (
    nm_to_degrees,
    r34_wedges,
    start_perpendicular,
    track_line,
    wedge_points,
)
from cyclone_viewer.processing.intensity import get_category, get_scale, scale_to_dict
from cyclone_viewer.processing.tracks import StormPoint, StormTrack


def make_point(lat: float, lon: float, tau: int = 0) -> StormPoint:
    return StormPoint(
        latitude=lat, longitude=lon, tau=tau, forecast_lead=tau,
        year_utc=2023, month_utc=9, day_utc=1, hour_utc=0, minute_utc=0,
        model="OFCL",
    )


def make_track(*positions) -> StormTrack:
    track = StormTrack(
        id="t", storm_id="AL162023", name="t", basin="AL", number="16", year=2023,
        model="OFCL", init_time="2023090100", cyclone_id="aal162023", cyclone_name="t",
    )
    track.points = [make_point(lat, lon, i * 6) for i, (lat, lon) in enumerate(positions)]
    return track


def test_nm_to_degrees():
    dlat, dlon = nm_to_degrees(60, 0)
    assert dlat == pytest.approx(1.0)
    assert dlon == pytest.approx(1.0)

    _, dlon = nm_to_degrees(60, 60)
    assert dlon == pytest.approx(2.0)


def test_wedge_is_closed_at_center():
    points = wedge_points(0.0, 0.0, 60, 0, 90, steps=4)

    assert len(points) == 7
    assert points[0] == points[-1] == [0.0, 0.0]
    assert points[1] == pytest.approx([0.0, 1.0])
    assert points[5] == pytest.approx([1.0, 0.0], abs=1e-9)


def test_r34_wedges_skip_missing_quadrants(bdeck_content):
    points = parse_bdeck(bdeck_content).storms[0].points

    assert r34_wedges(points[0]) == {}
    assert sorted(r34_wedges(points[1])) == ["r34_ne", "r34_nw", "r34_se"]


def test_start_perpendicular_for_eastward_motion():
    line = start_perpendicular(make_track((0.0, 0.0), (0.0, 1.0)))

    assert line["start"]["lat"] == pytest.approx(-1.0)
    assert line["end"]["lat"] == pytest.approx(1.0)
    assert line["start"]["lng"] == pytest.approx(0.0)
    assert line["end"]["lng"] == pytest.approx(0.0)


def test_start_perpendicular_needs_motion():
    assert start_perpendicular(make_track((10.0, 20.0))) is None
    assert start_perpendicular(make_track((10.0, 20.0), (10.0, 20.0))) is None


def test_track_line():
    assert track_line(make_track((10.0, 20.0), (11.0, 21.0))) == [[10.0, 20.0], [11.0, 21.0]]


@pytest.mark.parametrize("wind, scale, expected", [
    (None, "saffir-simpson", "Tropical Depression"),
    (0, "saffir-simpson", "Tropical Depression"),
    (20.0, "saffir-simpson", "Tropical Storm"),
    (33.4, "saffir-simpson", "Category 1"),
    (80.0, "saffir-simpson", "Category 5"),
    (20.0, "bom", "Category 1"),
    (60.0, "bom", "Category 5"),
])
def test_intensity_category(wind, scale, expected):
    assert get_category(wind, scale).name == expected


def test_unknown_scale():
    with pytest.raises(ValueError):
        get_scale("fujita")


def test_scale_to_dict_opens_top_category():
    scale = scale_to_dict("bom")

    assert scale[0]["name"] == "Low"
    assert scale[-1]["max_wind"] is None
