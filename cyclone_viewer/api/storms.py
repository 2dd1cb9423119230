"""
Storm File Module
Keeps parsed ADECK/BDECK/CSV track files in memory and serves their tracks

Files are parsed once on upload; hidden-track flags are kept per file.
"""

import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set

from ..processing.adeck import parse_adeck
from ..processing.bdeck import looks_like_bdeck, parse_bdeck
from ..processing.csv_tracks import parse_track_csv_file, tracks_to_csv
from ..processing.geometry import r34_wedges, start_perpendicular, track_line
from ..processing.intensity import get_category
from ..processing.models import (
    classify_model,
    group_tracks_by_init_and_model,
    list_init_times,
    select_tracks_for_display,
)
from ..processing.tracks import StormFileResult, StormTrack

logger = logging.getLogger(__name__)

FILE_FORMATS = ("adeck", "bdeck", "csv", "auto")


@dataclass
class StoredFile:
    """A parsed file and its viewer state"""
    id: str
    filename: str
    format: str
    uploaded_at: str
    result: StormFileResult
    hidden_tracks: Set[str] = field(default_factory=set)


def detect_format(content: str, filename: Optional[str] = None) -> str:
    """Guess the format of an uploaded file"""
    if looks_like_bdeck(content):
        return "bdeck"
    if filename and filename.lower().endswith(".csv"):
        first = content.lstrip().split("\n", 1)[0].lower()
        if "basin" not in first and ("lat" in first or "lon" in first):
            return "csv"
    return "adeck"


class StormFileManager:
    """Manages uploaded track files"""

    def __init__(self, max_files: int = 50):
        self.files: "OrderedDict[str, StoredFile]" = OrderedDict()
        self.max_files = max_files

    def load_text(self, content: str, filename: Optional[str] = None, fmt: str = "auto") -> StoredFile:
        """
        Parse file content and store the result.

        Args:
            content: Full text of the file
            filename: Original file name, used for display and detection
            fmt: One of adeck, bdeck, csv or auto

        Raises:
            ValueError: Unknown format, or a CSV that is not a track
        """
        if fmt not in FILE_FORMATS:
            raise ValueError(f"Invalid format '{fmt}'. Valid options: {', '.join(FILE_FORMATS)}")
        if fmt == "auto":
            fmt = detect_format(content, filename)

        name = filename or f"{fmt}-upload"
        if fmt == "bdeck":
            result = parse_bdeck(content)
        elif fmt == "csv":
            result = parse_track_csv_file(content, name=Path(name).stem)
        else:
            result = parse_adeck(content)

        file_id = hashlib.sha1(f"{fmt}:{content}".encode("utf-8")).hexdigest()[:12]
        stored = StoredFile(
            id=file_id,
            filename=name,
            format=fmt,
            uploaded_at=datetime.now(timezone.utc).isoformat(),
            result=result,
        )

        self.files.pop(file_id, None)
        self.files[file_id] = stored
        while len(self.files) > self.max_files:
            evicted, _ = self.files.popitem(last=False)
            logger.info(f"Evicted file {evicted}")

        logger.info(f"Loaded {name} as {fmt}: {result.count} tracks, {len(result.skipped)} skipped lines")
        return stored

    def load_path(self, path: Path, fmt: str = "auto") -> StoredFile:
        """Read a file from disk and load it"""
        content = Path(path).read_text(encoding="utf-8", errors="replace")
        return self.load_text(content, filename=Path(path).name, fmt=fmt)

    def get_file(self, file_id: str) -> Optional[StoredFile]:
        return self.files.get(file_id)

    def delete_file(self, file_id: str) -> bool:
        return self.files.pop(file_id, None) is not None

    def list_files(self) -> List[Dict]:
        return [self._file_to_dict(f) for f in self.files.values()]

    def get_file_summary(self, file_id: str) -> Optional[Dict]:
        stored = self.files.get(file_id)
        if stored:
            return self._file_to_dict(stored)
        return None

    def get_tracks(
        self,
        file_id: str,
        init_time: Optional[str] = None,
        default_models_only: bool = False,
        category: Optional[str] = None,
        include_hidden: bool = True,
    ) -> Optional[List[Dict]]:
        """
        Tracks of a file, filtered like the viewer's selection dialog.

        ``init_time`` of "latest" picks the most recent init time; "all" or
        None keeps every init time.
        """
        stored = self.files.get(file_id)
        if not stored:
            return None

        tracks = stored.result.storms
        if init_time == "latest":
            init_times = list_init_times(tracks)
            init_time = init_times[0] if init_times else None
        if init_time and init_time != "all":
            tracks = [t for t in tracks if t.init_time == init_time]

        if default_models_only or category:
            tracks = select_tracks_for_display(tracks, default_models_only, category)

        if not include_hidden:
            tracks = [t for t in tracks if t.id not in stored.hidden_tracks]

        return [self._track_to_dict(t, stored) for t in tracks]

    def get_track(self, file_id: str, track_id: str, with_geometry: bool = True) -> Optional[Dict]:
        stored = self.files.get(file_id)
        if not stored:
            return None
        track = self._find_track(stored, track_id)
        if not track:
            return None
        return self._track_to_dict(track, stored, with_geometry=with_geometry)

    def get_init_times(self, file_id: str) -> Optional[Dict]:
        stored = self.files.get(file_id)
        if not stored:
            return None
        grouped = group_tracks_by_init_and_model(stored.result.storms)
        return {
            "init_times": list_init_times(stored.result.storms),
            "models_by_init_time": {k: sorted(v.keys()) for k, v in grouped.items()},
        }

    def get_skipped_lines(self, file_id: str) -> Optional[List[Dict]]:
        stored = self.files.get(file_id)
        if not stored:
            return None
        return [s.to_dict() for s in stored.result.skipped]

    def toggle_track_visibility(self, file_id: str, track_id: str) -> Optional[bool]:
        """
        Flip the hidden flag of a track.

        Returns:
            New visibility (True = visible), or None if not found
        """
        stored = self.files.get(file_id)
        if not stored or not self._find_track(stored, track_id):
            return None
        if track_id in stored.hidden_tracks:
            stored.hidden_tracks.discard(track_id)
            return True
        stored.hidden_tracks.add(track_id)
        return False

    def export_csv(self, file_id: str) -> Optional[str]:
        stored = self.files.get(file_id)
        if not stored:
            return None
        return tracks_to_csv(stored.result.storms)

    def _find_track(self, stored: StoredFile, track_id: str) -> Optional[StormTrack]:
        for track in stored.result.storms:
            if track.id == track_id:
                return track
        return None

    def _file_to_dict(self, stored: StoredFile) -> Dict:
        result = stored.result
        return {
            "id": stored.id,
            "filename": stored.filename,
            "format": stored.format,
            "uploaded_at": stored.uploaded_at,
            "isBdeck": result.is_bdeck,
            "count": result.count,
            "point_count": result.point_count,
            "skipped_count": len(result.skipped),
            "init_times": list_init_times(result.storms),
            "models": sorted({t.model for t in result.storms}),
            "hidden_tracks": sorted(stored.hidden_tracks),
        }

    def _track_to_dict(self, track: StormTrack, stored: StoredFile, with_geometry: bool = False) -> Dict:
        """Convert track to dictionary for JSON response"""
        model = classify_model(track.model)
        data = track.to_dict(json_safe=True)
        data["isBestTrack"] = track.is_best_track
        data["hidden"] = track.id in stored.hidden_tracks
        data["modelInfo"] = model.to_dict()
        data["pointCount"] = len(track.points)
        for point_dict, point in zip(data["points"], track.points):
            point_dict["category"] = get_category(point.wind_speed).name

        if with_geometry:
            perpendicular = None if track.is_best_track else start_perpendicular(track)
            if perpendicular:
                perpendicular["color"] = model.color
            data["geometry"] = {
                "line": track_line(track),
                "start_perpendicular": perpendicular,
                "r34_wedges": [r34_wedges(p) for p in track.points],
            }
        return data


# Global instance
storm_manager = StormFileManager()
