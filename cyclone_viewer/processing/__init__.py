"""
Cyclone Viewer Processing Module

Parsers for ADECK/BDECK forecast and best-track files, the storm/track/point
data model and the model classification tables.
"""

from .adeck import parse_adeck
from .bdeck import looks_like_bdeck, parse_bdeck
from .columns import ColumnMap, DEFAULT_COLUMN_MAP, resolve_column_map
from .models import classify_model, is_default_model, select_tracks_for_display
from .records import RawRecord, SkipReason, extract_record
from .tracks import SkippedLine, StormFileResult, StormPoint, StormTrack

__all__ = [
    "ColumnMap",
    "DEFAULT_COLUMN_MAP",
    "RawRecord",
    "SkipReason",
    "SkippedLine",
    "StormFileResult",
    "StormPoint",
    "StormTrack",
    "classify_model",
    "extract_record",
    "is_default_model",
    "looks_like_bdeck",
    "parse_adeck",
    "parse_bdeck",
    "resolve_column_map",
    "select_tracks_for_display",
]
