#!/usr/bin/env python3
"""
Convert Deck Script for the Cyclone Viewer

Parses an ADECK forecast file or a BDECK best-track file and writes the
tracks as CSV and/or JSON for the viewer.

Usage:
    python convert_deck.py INPUT [--format auto|adeck|bdeck] [--csv OUT] [--json OUT]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cyclone_viewer.processing.adeck import parse_adeck
from cyclone_viewer.processing.bdeck import looks_like_bdeck, parse_bdeck
from cyclone_viewer.processing.csv_tracks import tracks_to_csv
from cyclone_viewer.processing.tracks import StormFileResult

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_deck(content: str, fmt: str = "auto") -> StormFileResult:
    """Parse deck text in the requested (or detected) format"""
    if fmt == "auto":
        fmt = "bdeck" if looks_like_bdeck(content) else "adeck"
    logger.info(f"Format: {fmt}")
    return parse_bdeck(content) if fmt == "bdeck" else parse_adeck(content)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert ADECK/BDECK files to CSV or JSON"
    )
    parser.add_argument(
        "input",
        type=Path,
        help="ADECK or BDECK text file"
    )
    parser.add_argument(
        "--format",
        choices=["auto", "adeck", "bdeck"],
        default="auto",
        help="Input format (default: detect BEST records)"
    )
    parser.add_argument(
        "--csv",
        dest="csv_out",
        type=Path,
        help="Output CSV path"
    )
    parser.add_argument(
        "--json",
        dest="json_out",
        type=Path,
        help="Output JSON path"
    )

    args = parser.parse_args(argv)

    if not args.input.exists():
        logger.error(f"Input file not found: {args.input}")
        return 1

    content = args.input.read_text(encoding="utf-8", errors="replace")
    result = parse_deck(content, args.format)

    logger.info(f"Tracks: {result.count}, points: {result.point_count}, skipped lines: {len(result.skipped)}")
    for track in result.storms:
        logger.info(f"  - {track.id}: {track.name} ({len(track.points)} points)")

    if args.csv_out:
        args.csv_out.parent.mkdir(parents=True, exist_ok=True)
        args.csv_out.write_text(tracks_to_csv(result.storms), encoding="utf-8")
        logger.info(f"Saved CSV: {args.csv_out}")

    if args.json_out:
        args.json_out.parent.mkdir(parents=True, exist_ok=True)
        with open(args.json_out, 'w') as f:
            json.dump(result.to_dict(json_safe=True), f, indent=2)
        logger.info(f"Saved JSON: {args.json_out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
