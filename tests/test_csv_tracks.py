from __future__ import annotations

import csv
import io

import pytest

from cyclone_viewer.processing.bdeck import parse_bdeck
from cyclone_viewer.processing.csv_tracks import (
    EXPORT_COLUMNS,
    TrackCsvError,
    find_column,
    parse_track_csv,
    parse_track_csv_file,
    to_long_name,
    to_short_name,
    tracks_to_csv,
)

TRACK_CSV = (
    "lat,lon,wind_speed,mslp,rmw\n"
    "28.5,-80.0,33.4,985,46300\n"
    "95,10,,,\n"
    "29.0,-81.0,,,\n"
)


def test_field_name_mapping():
    assert to_short_name("radius_of_34_kt_winds_ne_m") == "r34_ne"
    assert to_long_name("rmw") == "radius_of_maximum_winds_m"
    assert to_short_name("latitude") == "latitude"


def test_find_column_prefers_earlier_options():
    columns = ["Storm", "Longitude", "LAT"]

    assert find_column(columns, ["latitude", "lat"]) == "LAT"
    assert find_column(columns, ["longitude", "lon"]) == "Longitude"
    assert find_column(columns, ["pressure"]) is None


def test_parse_track_csv_standardizes_rows():
    rows = parse_track_csv(TRACK_CSV)

    assert len(rows) == 2
    first, second = rows
    assert (first["latitude"], first["longitude"]) == (28.5, -80.0)
    assert "lat" not in first and "lon" not in first
    assert first["wind_speed"] == pytest.approx(33.4)
    assert first["mslp"] == 985
    assert first["rmw"] == 46300
    assert first["r34_ne"] is None
    assert second["id"] == 2
    assert second["wind_speed"] is None


@pytest.mark.parametrize("content, message", [
    ("", "No data"),
    ("a,b\n1,2\n", "latitude and longitude"),
    ("lat,lon\n100,200\n", "No valid coordinates"),
])
def test_parse_track_csv_errors(content, message):
    with pytest.raises(TrackCsvError, match=message):
        parse_track_csv(content)


def test_csv_file_becomes_single_track():
    result = parse_track_csv_file(TRACK_CSV, name="my-track")

    assert result.count == 1
    track = result.storms[0]
    assert track.name == "my-track"
    assert track.model == "CSV"
    assert [p.latitude for p in track.points] == [28.5, 29.0]
    assert track.points[0].valid_time is None


def test_csv_time_columns():
    content = "latitude,longitude,year_utc,month_utc,day_utc,hour_utc,forecast_lead\n10,20,2023,9,1,6,12\n"
    point = parse_track_csv_file(content).storms[0].points[0]

    assert (point.year_utc, point.month_utc, point.day_utc, point.hour_utc) == (2023, 9, 1, 6)
    assert point.forecast_lead == 12


def test_export_blanks_missing_radii(bdeck_content):
    exported = tracks_to_csv(parse_bdeck(bdeck_content).storms)
    rows = list(csv.DictReader(io.StringIO(exported)))

    assert exported.splitlines()[0] == ",".join(EXPORT_COLUMNS)
    assert len(rows) == 4
    assert rows[0]["track_id"] == "AL092022"
    assert rows[0]["model"] == "BEST"
    assert rows[0]["init_time"] == "2022092312"
    assert rows[0]["radius_of_34_kt_winds_ne_m"] == ""
    assert float(rows[1]["radius_of_34_kt_winds_ne_m"]) == 60 * 1852
    assert rows[1]["radius_of_34_kt_winds_sw_m"] == ""
    assert float(rows[0]["radius_of_maximum_winds_m"]) == 40 * 1852


def test_exported_csv_can_be_imported(bdeck_content):
    exported = tracks_to_csv(parse_bdeck(bdeck_content).storms)
    rows = parse_track_csv(exported)

    assert len(rows) == 4
    assert rows[0]["latitude"] == pytest.approx(13.4)
    assert rows[0]["rmw"] == 40 * 1852
