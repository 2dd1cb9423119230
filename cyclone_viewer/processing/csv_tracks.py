"""
Track CSV Module

Imports single-track CSV files with loosely named columns and exports parsed
tracks back to CSV using the long radius field names.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional
import csv
import io
import logging
import math

from .records import parse_number
from .tracks import StormFileResult, StormPoint, StormTrack

logger = logging.getLogger(__name__)

# Long CSV column names -> short attribute names
FIELD_MAPPINGS = {
    'radius_of_maximum_winds_m': 'rmw',
    'radius_of_34_kt_winds_ne_m': 'r34_ne',
    'radius_of_34_kt_winds_se_m': 'r34_se',
    'radius_of_34_kt_winds_sw_m': 'r34_sw',
    'radius_of_34_kt_winds_nw_m': 'r34_nw',
    'radius_of_outer_closed_isobar_m': 'roci',
}
REVERSE_FIELD_MAPPINGS = {short: long for long, short in FIELD_MAPPINGS.items()}

LAT_OPTIONS = ['latitude', 'lat', 'y']
LON_OPTIONS = ['longitude', 'lon', 'long', 'x']
WIND_OPTIONS = ['wind', 'max_wind', 'maxwind', 'wind_speed', 'speed']
PRESSURE_OPTIONS = ['mslp', 'min_pressure', 'pressure', 'central_pressure', 'min_slp']
ATTRIBUTE_OPTIONS = {
    'rmw': ['rmw', 'radius_maximum_wind', 'radius_of_maximum_winds_m'],
    'r34_ne': ['r34_ne', 'radius_34kt_ne', 'radius34_ne', 'radius_of_34_kt_winds_ne_m'],
    'r34_se': ['r34_se', 'radius_34kt_se', 'radius34_se', 'radius_of_34_kt_winds_se_m'],
    'r34_sw': ['r34_sw', 'radius_34kt_sw', 'radius34_sw', 'radius_of_34_kt_winds_sw_m'],
    'r34_nw': ['r34_nw', 'radius_34kt_nw', 'radius34_nw', 'radius_of_34_kt_winds_nw_m'],
    'roci': ['roci', 'radius_outermost_isobar', 'radius_of_outer_closed_isobar_m'],
}
TIME_FIELDS = ['year_utc', 'month_utc', 'day_utc', 'hour_utc', 'minute_utc']

EXPORT_COLUMNS = [
    'track_id', 'model', 'init_time', 'latitude', 'longitude', 'forecast_lead',
    'year_utc', 'month_utc', 'day_utc', 'hour_utc', 'minute_utc',
    'wind_speed', 'mslp', 'type',
    'radius_of_maximum_winds_m',
    'radius_of_34_kt_winds_ne_m', 'radius_of_34_kt_winds_se_m',
    'radius_of_34_kt_winds_sw_m', 'radius_of_34_kt_winds_nw_m',
]


class TrackCsvError(ValueError):
    """Raised when a CSV file cannot be read as a track"""


def to_short_name(name: str) -> str:
    return FIELD_MAPPINGS.get(name, name)


def to_long_name(name: str) -> str:
    return REVERSE_FIELD_MAPPINGS.get(name, name)


def convert_to_short_names(data: Dict) -> Dict:
    return {to_short_name(key): value for key, value in data.items()}


def convert_to_long_names(data: Dict) -> Dict:
    return {to_long_name(key): value for key, value in data.items()}


def find_column(columns: List[str], options: List[str]) -> Optional[str]:
    """
    First column whose lowercase name contains one of *options*.

    Options are tried in order, so earlier options take priority.
    """
    lowered = {col.lower(): col for col in columns}
    for option in options:
        for name, original in lowered.items():
            if option in name:
                return original
    return None


def _number(row: Dict[str, str], column: Optional[str]) -> Optional[float]:
    if column is None:
        return None
    return parse_number(row.get(column))


def parse_track_csv(content: str) -> List[Dict]:
    """
    Read a track CSV into rows with standardized column names.

    Args:
        content: CSV text with a header row

    Returns:
        Rows with ``latitude``, ``longitude``, ``id``, ``wind_speed``,
        ``mslp`` and radius attributes added; rows with invalid
        coordinates are dropped

    Raises:
        TrackCsvError: No data, no coordinate columns, or no valid rows
    """
    reader = csv.DictReader(io.StringIO(content))
    raw_rows = [row for row in reader if any((v or '').strip() for v in row.values())]
    if not raw_rows:
        raise TrackCsvError("No data found in CSV file.")

    columns = list(reader.fieldnames or [])
    lat_column = find_column(columns, LAT_OPTIONS)
    lon_column = find_column(columns, LON_OPTIONS)
    logger.info(f"Found columns: lat={lat_column}, lon={lon_column}")
    if not lat_column or not lon_column:
        raise TrackCsvError("Could not identify latitude and longitude columns in the CSV file.")

    attribute_columns = {}
    for key, options in ATTRIBUTE_OPTIONS.items():
        column = find_column(columns, options)
        if column:
            attribute_columns[key] = column
    wind_column = find_column(columns, WIND_OPTIONS)
    pressure_column = find_column(columns, PRESSURE_OPTIONS)

    processed = []
    for index, row in enumerate(raw_rows):
        lat = _number(row, lat_column)
        lon = _number(row, lon_column)
        if lat is None or lon is None or not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
            continue

        new_row = dict(row)
        for original in (lat_column, lon_column):
            if original not in ('latitude', 'longitude'):
                new_row.pop(original, None)
        new_row.update({
            'latitude': lat,
            'longitude': lon,
            'id': index,
            'wind_speed': _number(row, wind_column),
            'mslp': _number(row, pressure_column),
        })
        for key in ATTRIBUTE_OPTIONS:
            new_row[key] = _number(row, attribute_columns.get(key))
        processed.append(new_row)

    if not processed:
        raise TrackCsvError("No valid coordinates found in the file.")
    return processed


def _time_parts(row: Dict) -> List[int]:
    parts = [parse_number(str(row.get(name) or '')) for name in TIME_FIELDS]
    if all(p is not None for p in parts[:4]):
        return [int(p or 0) for p in parts]

    stamp = row.get('time') or row.get('datetime') or row.get('iso_time')
    if stamp:
        try:
            dt = datetime.fromisoformat(str(stamp).strip().replace(' ', 'T'))
            return [dt.year, dt.month, dt.day, dt.hour, dt.minute]
        except ValueError:
            logger.warning(f"Unparsable timestamp {stamp!r}")
    return [0, 0, 0, 0, 0]


def rows_to_track(rows: List[Dict], name: str = 'CSV track') -> StormTrack:
    """Single track from rows returned by parse_track_csv"""
    track = StormTrack(
        id=name,
        storm_id=name,
        name=name,
        basin='',
        number='',
        year=0,
        model='CSV',
        init_time='',
        cyclone_id='',
        cyclone_name=name,
    )
    for row in rows:
        year, month, day, hour, minute = _time_parts(row)
        lead = parse_number(str(row.get('forecast_lead') or row.get('tau') or ''))
        track.points.append(StormPoint(
            latitude=row['latitude'],
            longitude=row['longitude'],
            tau=int(lead or 0),
            forecast_lead=int(lead or 0),
            year_utc=year,
            month_utc=month,
            day_utc=day,
            hour_utc=hour,
            minute_utc=minute,
            model='CSV',
            wind_speed=row.get('wind_speed'),
            mslp=row.get('mslp'),
            rmw=row.get('rmw'),
            r34_ne=row.get('r34_ne'),
            r34_se=row.get('r34_se'),
            r34_sw=row.get('r34_sw'),
            r34_nw=row.get('r34_nw'),
        ))
    if track.points and track.points[0].year_utc:
        track.year = track.points[0].year_utc
    return track


def parse_track_csv_file(content: str, name: str = 'CSV track') -> StormFileResult:
    """CSV text to a one-track StormFileResult"""
    return StormFileResult(storms=[rows_to_track(parse_track_csv(content), name)])


def _export_value(value):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ''
    return value


def tracks_to_csv(tracks: Iterable[StormTrack]) -> str:
    """Export every point of *tracks* as CSV text"""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator='\n')
    writer.writeheader()
    for track in tracks:
        for point in track.points:
            row = convert_to_long_names(point.to_dict())
            row['track_id'] = track.id
            row['init_time'] = point.init_time or track.init_time
            writer.writerow({col: _export_value(row.get(col)) for col in EXPORT_COLUMNS})
    return buffer.getvalue()
