"""
BDECK Parser

Reads best-track ("BEST") lines of a BDECK file in their fixed ATCF column
layout and groups consecutive lines of the same storm into one track.
"""

from datetime import datetime, timezone
from typing import List, Optional
import logging

from .records import (
    KNOTS_TO_MS,
    NM_TO_M,
    SkipReason,
    parse_integer,
    parse_number,
    parse_radius_nm,
)
from .tracks import (
    SkippedLine,
    StormFileResult,
    StormPoint,
    StormTrack,
    format_cyclone_id,
    format_cyclone_name,
)

logger = logging.getLogger(__name__)

MIN_FIELDS = 20
BEST_TRACK_MARKER = 'BEST'
R34_MARKER = '34'

# Fixed ATCF column positions
COL_BASIN = 0
COL_NUMBER = 1
COL_DATE = 2
COL_TECH = 4
COL_TAU = 5
COL_LAT = 6
COL_LON = 7
COL_VMAX = 8
COL_MSLP = 9
COL_TYPE = 10
COL_RAD = 11
COL_R34 = (13, 14, 15, 16)  # NE, SE, SW, NW
COL_RMW = 19
COL_NAME = 27


def parse_tenths(text: str, negative: str) -> Optional[float]:
    """'285N' -> 28.5, '800W' -> -80.0"""
    value = parse_number(text)
    if value is None:
        return None
    value = value / 10.0
    return -value if text.endswith(negative) else value


def parse_r34_quadrant(text: str) -> float:
    """Meters from a quadrant radius in nm; zero or unparsable gives NaN"""
    value = parse_integer(text)
    if not value:
        return float('nan')
    return float(value * NM_TO_M)


def parse_date(text: str) -> Optional[datetime]:
    """YYYYMMDDHH to a UTC datetime, or None when it is not a valid date"""
    if len(text) < 10:
        return None
    fields = [parse_integer(text[i:j]) for i, j in ((0, 4), (4, 6), (6, 8), (8, 10))]
    if any(value is None for value in fields):
        return None
    try:
        return datetime(*fields, tzinfo=timezone.utc)
    except ValueError:
        return None


def _line_to_point(parts: List[str], when: datetime) -> Optional[StormPoint]:
    latitude = parse_tenths(parts[COL_LAT], 'S')
    longitude = parse_tenths(parts[COL_LON], 'W')
    if latitude is None or longitude is None:
        return None

    vmax = parse_number(parts[COL_VMAX])
    if parts[COL_RAD] == R34_MARKER:
        radii = [parse_r34_quadrant(parts[i]) for i in COL_R34]
    else:
        radii = [float('nan')] * 4

    return StormPoint(
        latitude=latitude,
        longitude=longitude,
        tau=parse_integer(parts[COL_TAU]) or 0,
        forecast_lead=parse_integer(parts[COL_TAU]) or 0,
        year_utc=when.year,
        month_utc=when.month,
        day_utc=when.day,
        hour_utc=when.hour,
        minute_utc=when.minute,
        model=BEST_TRACK_MARKER,
        init_time=parts[COL_DATE],
        wind_speed=vmax * KNOTS_TO_MS if vmax is not None else None,
        mslp=parse_number(parts[COL_MSLP]),
        rmw=parse_radius_nm(parts[COL_RMW]),
        r34_ne=radii[0],
        r34_se=radii[1],
        r34_sw=radii[2],
        r34_nw=radii[3],
        storm_type=parts[COL_TYPE] or None,
    )


def _parse_lines(content: str) -> StormFileResult:
    storms: List[StormTrack] = []
    skipped: List[SkippedLine] = []
    current: Optional[StormTrack] = None
    current_key = None

    for line_number, line in enumerate(content.split('\n'), start=1):
        if not line.strip():
            continue

        parts = [part.strip() for part in line.split(',')]
        if len(parts) < MIN_FIELDS:
            logger.warning(f"Skipping line {line_number}: only {len(parts)} fields")
            skipped.append(SkippedLine(line_number, SkipReason.INSUFFICIENT_COLUMNS,
                                       f"{len(parts)} fields"))
            continue

        if parts[COL_TECH] != BEST_TRACK_MARKER:
            skipped.append(SkippedLine(line_number, SkipReason.NOT_BEST_TRACK, parts[COL_TECH]))
            continue

        basin = parts[COL_BASIN]
        number = parts[COL_NUMBER]
        when = parse_date(parts[COL_DATE])
        if when is None:
            logger.warning(f"Skipping line {line_number}: invalid date {parts[COL_DATE]!r}")
            skipped.append(SkippedLine(line_number, SkipReason.INVALID_TIMESTAMP, parts[COL_DATE]))
            continue

        year = str(when.year)
        name = parts[COL_NAME] if len(parts) > COL_NAME else ''

        key = (basin, number, year)
        if current is None or key != current_key:
            storm_id = f"{basin}{number}{year}"
            current = StormTrack(
                id=storm_id,
                storm_id=storm_id,
                name=name,
                basin=basin,
                number=number,
                year=when.year,
                model=BEST_TRACK_MARKER,
                init_time=parts[COL_DATE],
                cyclone_id=format_cyclone_id(basin, number, year),
                cyclone_name=format_cyclone_name(basin, number, year),
                is_best_track=True,
            )
            current_key = key
            storms.append(current)
        elif not current.name and name:
            current.name = name

        point = _line_to_point(parts, when)
        if point is None:
            logger.warning(f"Skipping line {line_number}: invalid coordinates")
            skipped.append(SkippedLine(line_number, SkipReason.INVALID_COORDINATES,
                                       f"{parts[COL_LAT]},{parts[COL_LON]}"))
            continue
        current.points.append(point)

    return StormFileResult(storms=storms, is_bdeck=True, skipped=skipped)


def parse_bdeck(content: str) -> StormFileResult:
    """
    Parse BDECK file content into best tracks.

    Any unexpected error aborts the whole file and yields an empty result.

    Args:
        content: Full text of the file

    Returns:
        StormFileResult flagged as BDECK
    """
    logger.info("Parsing BDECK file...")
    try:
        result = _parse_lines(content)
    except Exception as e:
        logger.error(f"Error parsing BDECK file: {e}")
        return StormFileResult(
            storms=[],
            is_bdeck=True,
            skipped=[SkippedLine(0, SkipReason.UNEXPECTED_ERROR, str(e))],
        )

    logger.info(f"Parsed {result.count} best tracks with {result.point_count} points from BDECK file")
    return result


def looks_like_bdeck(content: str) -> bool:
    """True when any line carries a BEST record type"""
    for line in content.splitlines():
        parts = [part.strip() for part in line.split(',')]
        if len(parts) > COL_TECH and parts[COL_TECH] == BEST_TRACK_MARKER:
            return True
    return False


__all__ = ['looks_like_bdeck', 'parse_bdeck', 'parse_date', 'parse_r34_quadrant', 'parse_tenths']
