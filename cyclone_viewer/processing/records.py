"""
Record Extraction Module

Turns one split ADECK line into a typed RawRecord, normalizing coordinate
encodings (tenths of a degree, hemisphere letters, basin sign conventions)
and units (knots to m/s, nautical miles to meters).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
import logging
import math
import re

from .columns import ColumnMap

logger = logging.getLogger(__name__)

KNOTS_TO_MS = 0.514444
NM_TO_M = 1852

# Basins that some feeds report as positive degrees meaning west
WEST_POSITIVE_BASINS = ('AL', 'EP', 'CP')

MISSING_BASIN = 'XX'
MISSING_NUMBER = '00'
MISSING_INIT_TIME = '0000000000'
MISSING_MODEL = 'UNKN'

_FLOAT_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_INT_PREFIX = re.compile(r'^\s*([+-]?\d+)')


class SkipReason(str, Enum):
    """Why a line did not produce a point"""
    INSUFFICIENT_COLUMNS = "insufficient_columns"
    ZERO_COORDINATES = "zero_coordinates"
    MISSING_CRITICAL_FIELD = "missing_critical_field"
    INVALID_COORDINATES = "invalid_coordinates"
    INVALID_TIMESTAMP = "invalid_timestamp"
    NOT_BEST_TRACK = "not_best_track"
    UNEXPECTED_ERROR = "unexpected_error"


def parse_number(text: Optional[str]) -> Optional[float]:
    """
    Parse the leading numeric part of *text*.

    Returns None for blank or unparsable text, never NaN.
    """
    if not text:
        return None
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return None
    value = float(match.group(1))
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_integer(text: Optional[str]) -> Optional[int]:
    """Parse the leading integer part of *text*, or None"""
    if not text:
        return None
    match = _INT_PREFIX.match(text)
    if not match:
        return None
    return int(match.group(1))


def _format_degrees(value: float, positive: str, negative: str) -> str:
    return f"{abs(value):.1f}°{positive if value >= 0 else negative}"


def parse_latitude(text: Optional[str]) -> Optional[float]:
    """
    Decimal degrees from an ADECK latitude field.

    "285N" -> 28.5, "28.5S" -> -28.5, "285" -> 28.5, "28.5" -> 28.5
    """
    if not text:
        return None
    if 'N' in text or 'S' in text:
        numeric = text.replace('N', '').replace('S', '')
        value = parse_number(numeric)
        if value is None:
            return None
        if '.' not in numeric:
            value = value / 10.0
        return -value if 'S' in text else value

    value = parse_number(text)
    if value is None:
        return None
    if abs(value) > 90:
        value = value / 10.0
    return value


def parse_longitude(text: Optional[str], basin: str = '') -> Optional[float]:
    """
    Decimal degrees from an ADECK longitude field.

    Lettered values follow the hemisphere letter. Unlettered values are
    scaled when their magnitude exceeds 180 and, for Atlantic and
    East/Central Pacific basins, positive values are taken as west.
    """
    if not text:
        return None
    if 'E' in text or 'W' in text:
        numeric = text.replace('E', '').replace('W', '')
        value = parse_number(numeric)
        if value is None:
            return None
        if '.' not in numeric:
            value = value / 10.0
        return -value if 'W' in text else value

    value = parse_number(text)
    if value is None:
        return None
    if abs(value) > 180:
        value = value / 10.0
    if basin in WEST_POSITIVE_BASINS and value > 0:
        return -value
    return value


def parse_radius_nm(text: Optional[str]) -> Optional[float]:
    """Meters from a positive integer nautical-mile field, else None"""
    value = parse_integer(text)
    if value is None or value <= 0:
        return None
    return float(value * NM_TO_M)


def knots_to_ms(knots: Optional[float]) -> Optional[float]:
    """m/s from knots; zero knots means unknown"""
    if knots is None or knots == 0:
        return None
    return knots * KNOTS_TO_MS


@dataclass
class RawRecord:
    """One extracted ADECK line"""
    basin: str
    number: str
    init_time: str
    model: str
    tau: int
    forecast_lead: int
    year: int
    month: int
    day: int
    hour: int
    minute: int = 0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    max_wind_kt: Optional[float] = None
    wind_speed: Optional[float] = None  # m/s
    mslp: Optional[float] = None  # hPa
    rmw: Optional[float] = None  # meters
    storm_type: Optional[str] = None
    model_raw: Optional[str] = None

    @property
    def latitude_formatted(self) -> Optional[str]:
        if self.latitude is None:
            return None
        return _format_degrees(self.latitude, 'N', 'S')

    @property
    def longitude_formatted(self) -> Optional[str]:
        if self.longitude is None:
            return None
        return _format_degrees(self.longitude, 'E', 'W')


def _field(parts: List[str], index: int) -> str:
    if 0 <= index < len(parts):
        return parts[index]
    return ''


def rejection_reason(parts: List[str], columns: ColumnMap) -> Optional[SkipReason]:
    """Why a line yields no record, or None when it yields one"""
    if len(parts) <= max(columns.lat, columns.lon):
        return SkipReason.INSUFFICIENT_COLUMNS
    basin = _field(parts, columns.basin) or MISSING_BASIN
    latitude = parse_latitude(_field(parts, columns.lat))
    longitude = parse_longitude(_field(parts, columns.lon), basin)
    if latitude == 0 and longitude == 0:
        return SkipReason.ZERO_COORDINATES
    return None


def extract_record(parts: List[str], columns: ColumnMap) -> Optional[RawRecord]:
    """
    Extract a RawRecord from a pre-split, trimmed line.

    Args:
        parts: Trimmed comma-separated fields
        columns: Resolved column positions

    Returns:
        RawRecord, or None when the line is too short or its position is
        the (0, 0) missing-data sentinel; rejection_reason tells which
    """
    reason = rejection_reason(parts, columns)
    if reason is not None:
        logger.warning(f"Line rejected: {reason.value}")
        return None

    basin = _field(parts, columns.basin) or MISSING_BASIN
    number = _field(parts, columns.cycloneNum) or MISSING_NUMBER
    init_time = _field(parts, columns.initTime) or MISSING_INIT_TIME
    model = _field(parts, columns.model) or MISSING_MODEL

    lead_text = _field(parts, columns.forecast_lead)
    if columns.is_explicit('forecast_lead') and lead_text.strip():
        lead = parse_integer(lead_text) or 0
    else:
        lead = parse_integer(_field(parts, columns.tau)) or 0

    if len(init_time) >= 10:
        year = parse_integer(init_time[0:4])
        month = parse_integer(init_time[4:6])
        day = parse_integer(init_time[6:8])
        hour = parse_integer(init_time[8:10])
    else:
        now = datetime.now(timezone.utc)
        year, month, day, hour = now.year, now.month, now.day, now.hour

    latitude = parse_latitude(_field(parts, columns.lat))
    longitude = parse_longitude(_field(parts, columns.lon), basin)

    record = RawRecord(
        basin=basin,
        number=number,
        init_time=init_time,
        model=model,
        tau=lead,
        forecast_lead=lead,
        year=year if year is not None else 0,
        month=month if month is not None else 0,
        day=day if day is not None else 0,
        hour=hour if hour is not None else 0,
        latitude=latitude,
        longitude=longitude,
    )

    vmax = parse_number(_field(parts, columns.vmax))
    if vmax is not None:
        record.max_wind_kt = vmax if vmax != 0 else None
        record.wind_speed = knots_to_ms(vmax)

    # Zero pressure means unknown
    record.mslp = parse_number(_field(parts, columns.mslp)) or None
    record.rmw = parse_radius_nm(_field(parts, columns.rmw))
    record.storm_type = _field(parts, columns.stormType) or None
    record.model_raw = _field(parts, columns.model) or None

    return record


__all__ = [
    'KNOTS_TO_MS',
    'NM_TO_M',
    'RawRecord',
    'SkipReason',
    'extract_record',
    'rejection_reason',
    'knots_to_ms',
    'parse_integer',
    'parse_latitude',
    'parse_longitude',
    'parse_number',
    'parse_radius_nm',
]
