"""
Storm Track Data Model

Points, tracks and whole-file parse results shared by the ADECK and BDECK
aggregators, plus the display formatting used to label them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import math

from .records import SkipReason

BASIN_NAMES = {
    'AL': 'Atlantic',
    'EP': 'Eastern Pacific',
    'CP': 'Central Pacific',
    'WP': 'Western Pacific',
    'IO': 'Indian Ocean',
    'SH': 'Southern Hemisphere',
    'BB': 'Bay of Bengal',
    'AS': 'Arabian Sea',
    'SL': 'South Atlantic',
}


def get_basin_name(basin: str) -> str:
    """Full basin name; unknown codes pass through unchanged"""
    return BASIN_NAMES.get(basin, basin)


def format_date_time(yyyymmddhh: Optional[str]) -> str:
    """'2023090100' -> '2023-09-01 00Z'"""
    if not yyyymmddhh or len(yyyymmddhh) < 10:
        return 'Unknown'
    return f"{yyyymmddhh[0:4]}-{yyyymmddhh[4:6]}-{yyyymmddhh[6:8]} {yyyymmddhh[8:10]}Z"


def format_cyclone_id(basin: str, number: str, year: str) -> str:
    """Official lowercase identifier, e.g. 'aal162004'"""
    return f"a{basin.lower()}{number}{year}"


def format_cyclone_name(basin: str, number: str, year: str) -> str:
    """Human readable name, e.g. 'Atlantic - Cyclone 16 (2004)'"""
    return f"{get_basin_name(basin)} - Cyclone {number} ({year})"


def _json_number(value: Optional[float]) -> Optional[float]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return value


@dataclass
class StormPoint:
    """A forecast position or best-track fix"""
    latitude: float
    longitude: float
    tau: int
    forecast_lead: int
    year_utc: int
    month_utc: int
    day_utc: int
    hour_utc: int
    minute_utc: int
    model: str
    init_time: Optional[str] = None
    wind_speed: Optional[float] = None  # m/s
    mslp: Optional[float] = None  # hPa
    rmw: Optional[float] = None  # meters
    # 34kt wind radii (meters); NaN marks a BDECK quadrant without data
    r34_ne: Optional[float] = None
    r34_se: Optional[float] = None
    r34_sw: Optional[float] = None
    r34_nw: Optional[float] = None
    storm_type: Optional[str] = None
    latitude_formatted: Optional[str] = None
    longitude_formatted: Optional[str] = None
    model_raw: Optional[str] = None

    @property
    def valid_time(self) -> Optional[datetime]:
        try:
            return datetime(self.year_utc, self.month_utc, self.day_utc,
                            self.hour_utc, self.minute_utc, tzinfo=timezone.utc)
        except ValueError:
            return None

    def to_dict(self, json_safe: bool = False) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Args:
            json_safe: Replace NaN radii with None so the result is valid JSON
        """
        result = {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'forecast_lead': self.forecast_lead,
            'tau': self.tau,
            'year_utc': self.year_utc,
            'month_utc': self.month_utc,
            'day_utc': self.day_utc,
            'hour_utc': self.hour_utc,
            'minute_utc': self.minute_utc,
            'init_time': self.init_time,
            'wind_speed': self.wind_speed,
            'mslp': self.mslp,
            'rmw': self.rmw,
            'r34_ne': self.r34_ne,
            'r34_se': self.r34_se,
            'r34_sw': self.r34_sw,
            'r34_nw': self.r34_nw,
            'model': self.model,
            'type': self.storm_type,
            'latitudeFormatted': self.latitude_formatted,
            'longitudeFormatted': self.longitude_formatted,
            'modelRaw': self.model_raw or self.model,
        }
        if json_safe:
            for key in ('r34_ne', 'r34_se', 'r34_sw', 'r34_nw'):
                result[key] = _json_number(result[key])
        return result


@dataclass
class StormTrack:
    """One forecast run (ADECK) or one best-track history (BDECK)"""
    id: str
    storm_id: str
    name: str
    basin: str
    number: str
    year: int
    model: str
    init_time: str
    cyclone_id: str
    cyclone_name: str
    points: List[StormPoint] = field(default_factory=list)
    is_best_track: bool = False

    def to_dict(self, json_safe: bool = False) -> Dict[str, Any]:
        return {
            'id': self.id,
            'stormId': self.storm_id,
            'name': self.name,
            'basin': self.basin,
            'year': self.year,
            'number': self.number,
            'model': self.model,
            'initTime': self.init_time,
            'cycloneId': self.cyclone_id,
            'cycloneName': self.cyclone_name,
            'points': [p.to_dict(json_safe=json_safe) for p in self.points],
        }


@dataclass(frozen=True)
class SkippedLine:
    """A line that produced no point, with the reason"""
    line_number: int
    reason: SkipReason
    detail: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'line': self.line_number, 'reason': self.reason.value, 'detail': self.detail}


@dataclass(frozen=True)
class StormFileResult:
    """Parsed tracks of one file"""
    storms: List[StormTrack]
    is_bdeck: bool = False
    skipped: List[SkippedLine] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.storms)

    @property
    def point_count(self) -> int:
        return sum(len(track.points) for track in self.storms)

    def to_dict(self, json_safe: bool = False) -> Dict[str, Any]:
        result: Dict[str, Any] = {'storms': [t.to_dict(json_safe=json_safe) for t in self.storms]}
        if self.is_bdeck:
            result['isBdeck'] = True
        result['count'] = self.count
        return result


__all__ = [
    'BASIN_NAMES',
    'SkippedLine',
    'StormFileResult',
    'StormPoint',
    'StormTrack',
    'format_cyclone_id',
    'format_cyclone_name',
    'format_date_time',
    'get_basin_name',
]
