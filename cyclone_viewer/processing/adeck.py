"""
ADECK Parser

Groups forecast lines of an ADECK file into one track per
(storm, model, initialization time) and orders each track by lead time.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
import logging

from .columns import resolve_column_map
from .records import RawRecord, SkipReason, extract_record, rejection_reason
from .tracks import (
    SkippedLine,
    StormFileResult,
    StormPoint,
    StormTrack,
    format_cyclone_id,
    format_cyclone_name,
    format_date_time,
)

logger = logging.getLogger(__name__)

COMMENT_MARKER = '#'

TrackKey = Tuple[str, str, str, str, str]


def utc_from_fields(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """
    UTC datetime from calendar fields, rolling out-of-range values over.

    Years 0-99 count from 1900, month 0 is December of the previous year and
    day 0 is the last day of the previous month, so the '0000000000'
    placeholder init time still yields a timestamp.

    Raises:
        ValueError, OverflowError: Result outside the datetime range
    """
    if 0 <= year <= 99:
        year += 1900
    extra_years, month_index = divmod(month - 1, 12)
    start = datetime(year + extra_years, month_index + 1, 1, tzinfo=timezone.utc)
    return start + timedelta(days=day - 1, hours=hour, minutes=minute)


def record_to_point(record: RawRecord) -> Optional[StormPoint]:
    """
    Convert an extracted record into a point at init time + lead hours.

    Returns None only when the position is missing. An init time beyond the
    datetime range keeps the record's own calendar fields.
    """
    if record.latitude is None or record.longitude is None:
        return None

    lead = record.forecast_lead
    try:
        valid = utc_from_fields(record.year, record.month, record.day,
                                record.hour, record.minute) + timedelta(hours=lead)
        fields = (valid.year, valid.month, valid.day, valid.hour, valid.minute)
    except (ValueError, OverflowError):
        logger.warning(f"Init time {record.init_time!r} out of range, keeping raw fields")
        fields = (record.year, record.month, record.day, record.hour, record.minute)

    return StormPoint(
        latitude=record.latitude,
        longitude=record.longitude,
        tau=lead,
        forecast_lead=lead,
        year_utc=fields[0],
        month_utc=fields[1],
        day_utc=fields[2],
        hour_utc=fields[3],
        minute_utc=fields[4],
        model=record.model or 'UNKNOWN',
        init_time=record.init_time,
        wind_speed=record.wind_speed,
        mslp=record.mslp,
        rmw=record.rmw,
        storm_type=record.storm_type,
        latitude_formatted=record.latitude_formatted,
        longitude_formatted=record.longitude_formatted,
        model_raw=record.model_raw,
    )


def _data_lines(content: str) -> List[Tuple[int, str]]:
    lines = []
    for number, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if stripped and not stripped.startswith(COMMENT_MARKER):
            lines.append((number, stripped))
    return lines


def _new_track(record: RawRecord, storm_id: str, year: str) -> StormTrack:
    track_id = f"{storm_id}_{record.model}_{record.init_time}"
    return StormTrack(
        id=track_id,
        storm_id=storm_id,
        name=f"{record.model} [{format_date_time(record.init_time)}]",
        basin=record.basin,
        number=record.number,
        year=int(year) if year.isdigit() else 0,
        model=record.model,
        init_time=record.init_time,
        cyclone_id=format_cyclone_id(record.basin, record.number, year),
        cyclone_name=format_cyclone_name(record.basin, record.number, year),
    )


def parse_adeck(content: str) -> StormFileResult:
    """
    Parse ADECK file content into forecast tracks.

    Args:
        content: Full text of the file

    Returns:
        StormFileResult with one track per storm/model/init time, points
        sorted by lead time, and the lines that were skipped
    """
    logger.info("Parsing ADECK file...")
    lines = _data_lines(content)
    if not lines:
        logger.warning("ADECK file is empty or contains only comments")
        return StormFileResult(storms=[])

    columns = resolve_column_map(lines[0][1])
    if columns.from_header:
        lines = lines[1:]
    logger.debug(f"Using column mapping: {columns.to_dict()}")

    tracks: Dict[TrackKey, StormTrack] = {}
    skipped: List[SkippedLine] = []
    processed = 0

    def skip(line_number: int, reason: SkipReason, detail: str) -> None:
        logger.warning(f"Skipping line {line_number}: {detail}")
        skipped.append(SkippedLine(line_number, reason, detail))

    for line_number, line in lines:
        parts = [part.strip() for part in line.split(',')]

        if len(parts) < columns.required_width():
            skip(line_number, SkipReason.INSUFFICIENT_COLUMNS,
                 f"insufficient data ({len(parts)} columns)")
            continue

        reason = rejection_reason(parts, columns)
        if reason is not None:
            skip(line_number, reason, "no usable position")
            continue

        record = extract_record(parts, columns)
        if (not record.basin or not record.number or not record.init_time
                or not record.model or record.latitude is None or record.longitude is None):
            skip(line_number, SkipReason.MISSING_CRITICAL_FIELD, "missing critical data")
            continue

        year = record.init_time[0:4]
        storm_id = f"{record.basin}{record.number}{year}"
        key = (record.basin, record.number, year, record.model, record.init_time)

        if key not in tracks:
            tracks[key] = _new_track(record, storm_id, year)
        tracks[key].points.append(record_to_point(record))
        processed += 1

    storms = list(tracks.values())
    for track in storms:
        track.points.sort(key=lambda p: p.tau)

    logger.info(f"Parsed {len(storms)} forecast tracks with {processed} valid points from ADECK file")
    return StormFileResult(storms=storms, skipped=skipped)


__all__ = ['parse_adeck', 'record_to_point', 'utc_from_fields']
