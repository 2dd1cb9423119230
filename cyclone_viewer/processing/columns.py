"""
Column Layout Module

Works out which comma-separated column of an ADECK file holds each semantic
field, either from a header row or from the conventional ATCF layout.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


# Semantic field name -> zero-based column index for headerless files
DEFAULT_COLUMNS: Dict[str, int] = {
    'basin': 0,          # BASIN
    'cycloneNum': 1,     # CYCLONE_NUM
    'initTime': 2,       # YYYYMMDDHH
    'tau': 3,            # TAU (technique number in raw ATCF)
    'model': 4,          # MODEL / TECH
    'forecast_lead': 5,  # forecast hour
    'lat': 6,
    'lon': 7,
    'vmax': 8,
    'mslp': 9,
    'stormType': 10,     # TY
    'rmw': 19,           # radius of max wind, nm
}


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column positions for one file"""
    basin: int = DEFAULT_COLUMNS['basin']
    cycloneNum: int = DEFAULT_COLUMNS['cycloneNum']
    initTime: int = DEFAULT_COLUMNS['initTime']
    tau: int = DEFAULT_COLUMNS['tau']
    model: int = DEFAULT_COLUMNS['model']
    forecast_lead: int = DEFAULT_COLUMNS['forecast_lead']
    lat: int = DEFAULT_COLUMNS['lat']
    lon: int = DEFAULT_COLUMNS['lon']
    vmax: int = DEFAULT_COLUMNS['vmax']
    mslp: int = DEFAULT_COLUMNS['mslp']
    stormType: int = DEFAULT_COLUMNS['stormType']
    rmw: int = DEFAULT_COLUMNS['rmw']
    from_header: bool = False
    # Fields a detected header did not name
    defaulted: FrozenSet[str] = field(default_factory=frozenset)

    def is_explicit(self, name: str) -> bool:
        """True when the column for *name* was not a fallback under a header"""
        return name not in self.defaulted

    def required_width(self) -> int:
        """Minimum number of fields a line needs for lat/lon/model"""
        return max(self.lat, self.lon, self.model) + 1

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in DEFAULT_COLUMNS}


DEFAULT_COLUMN_MAP = ColumnMap()


def _match_exact(*names: str):
    return lambda token: token in names


def _match_contains(*parts: str):
    return lambda token: any(part in token for part in parts)


# Ordered (field, predicates) rules; the first rule that accepts a token wins
HEADER_RULES: List[Tuple[str, tuple]] = [
    ('basin', (_match_exact('BASIN'),)),
    ('cycloneNum', (
        _match_exact('CY', 'CYCLONE', 'CYCLONE_NUM'),
        lambda token: 'CY' in token and 'NUM' in token,
    )),
    # LEAD_TIME must be claimed before the generic TIME rule
    ('forecast_lead', (_match_exact('FORECAST_LEAD', 'LEAD', 'LEAD_TIME'),)),
    ('initTime', (_match_exact('YYYYMMDDHH'), _match_contains('DATE', 'TIME'))),
    ('model', (_match_exact('MODEL'), _match_contains('TECH'))),
    ('tau', (_match_exact('TAU'), _match_contains('HOUR'))),
    ('lat', (_match_exact('LAT', 'LATITUDE'),)),
    ('lon', (_match_exact('LON', 'LONGITUDE'),)),
    ('rmw', (_match_exact('RMW'), _match_contains('RADMAX', 'MAX_WIND_RAD'))),
    ('vmax', (_match_exact('VMAX'), _match_contains('WIND'))),
    ('mslp', (_match_exact('MSLP'), _match_contains('PRES'))),
    ('stormType', (_match_exact('TY'), _match_contains('TYPE'))),
]


def _split_header(line: str) -> List[str]:
    return [part.strip().upper() for part in line.split(',')]


def is_header_row(line: str) -> bool:
    """
    Decide whether a line is an ADECK header row.

    A header must mention basin, cyclone number, latitude and longitude.
    """
    upper = line.strip().upper()
    tokens = _split_header(upper)
    has_cyclone = 'CYCLONE' in upper or 'CY' in tokens
    return 'BASIN' in upper and has_cyclone and 'LAT' in upper and 'LON' in upper


def _field_for_token(token: str) -> Optional[str]:
    for name, predicates in HEADER_RULES:
        if any(predicate(token) for predicate in predicates):
            return name
    return None


def parse_header_row(line: str) -> ColumnMap:
    """
    Build a column map from a header row.

    Args:
        line: Raw header line

    Returns:
        Complete ColumnMap; fields missing from the header keep their
        default positions and are listed in ``defaulted``
    """
    found: Dict[str, int] = {}
    for index, token in enumerate(_split_header(line)):
        name = _field_for_token(token)
        if name is not None and name not in found:
            found[name] = index

    defaulted = []
    for name, position in DEFAULT_COLUMNS.items():
        if name not in found:
            defaulted.append(name)
            logger.debug(f"Header missing {name}, using default position {position}")

    return replace(DEFAULT_COLUMN_MAP, from_header=True, defaulted=frozenset(defaulted), **found)


def resolve_column_map(first_line: str) -> ColumnMap:
    """Column map for a file whose first retained line is *first_line*"""
    if is_header_row(first_line):
        logger.info(f"Found header row: {first_line.strip()}")
        return parse_header_row(first_line)
    return DEFAULT_COLUMN_MAP


__all__ = [
    'ColumnMap',
    'DEFAULT_COLUMNS',
    'DEFAULT_COLUMN_MAP',
    'is_header_row',
    'parse_header_row',
    'resolve_column_map',
]
