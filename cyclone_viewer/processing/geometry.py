"""
Track Geometry Module

Flat-earth approximations used to draw wind-radii wedges and the start
marker of forecast tracks. Good enough for display, not for navigation.
"""

from typing import Dict, List, Optional, Tuple
import math
import numpy as np

from .records import NM_TO_M
from .tracks import StormPoint, StormTrack

NM_PER_DEGREE = 60.0

# Quadrant attribute -> (start angle, end angle) in degrees
R34_QUADRANTS: Dict[str, Tuple[float, float]] = {
    'r34_ne': (0.0, 90.0),
    'r34_se': (90.0, 180.0),
    'r34_sw': (180.0, 270.0),
    'r34_nw': (270.0, 360.0),
}


def nm_to_degrees(nm: float, latitude: float) -> Tuple[float, float]:
    """
    Approximate degree offsets for a distance in nautical miles.

    Returns:
        (degrees latitude, degrees longitude)
    """
    lat_correction = math.cos(math.radians(abs(latitude)))
    return nm / NM_PER_DEGREE, nm / (NM_PER_DEGREE * lat_correction)


def wedge_points(
    lat: float,
    lon: float,
    radius_nm: float,
    start_angle: float,
    end_angle: float,
    steps: int = 32,
) -> List[List[float]]:
    """
    Closed polygon (center, arc, center) as [lat, lon] pairs.

    Args:
        lat, lon: Center position in degrees
        radius_nm: Wedge radius in nautical miles
        start_angle, end_angle: Arc bounds in degrees
        steps: Number of arc segments
    """
    deg_lat, deg_lon = nm_to_degrees(radius_nm, lat)
    angles = np.radians(np.linspace(start_angle, end_angle, steps + 1))

    arc = np.column_stack((
        lat + deg_lat * np.sin(angles),
        lon + deg_lon * np.cos(angles),
    ))
    center = np.array([[lat, lon]])
    return np.vstack((center, arc, center)).tolist()


def r34_wedges(point: StormPoint, steps: int = 32) -> Dict[str, List[List[float]]]:
    """Wedge polygons for each quadrant with a usable 34kt radius"""
    wedges = {}
    for attr, (start, end) in R34_QUADRANTS.items():
        radius = getattr(point, attr)
        if radius is None or math.isnan(radius):
            continue
        wedges[attr] = wedge_points(point.latitude, point.longitude, radius / NM_TO_M,
                                    start, end, steps)
    return wedges


def start_perpendicular(track: StormTrack, length: float = 1.0) -> Optional[Dict[str, Dict[str, float]]]:
    """
    Short line across the first point, perpendicular to the initial motion.

    Returns None when the track has fewer than two points or does not move
    between them.
    """
    if len(track.points) < 2:
        return None

    p1, p2 = track.points[0], track.points[1]
    direction = np.array([p2.longitude - p1.longitude, p2.latitude - p1.latitude])
    norm = np.linalg.norm(direction)
    if norm == 0:
        return None

    perp_dx, perp_dy = -direction[1] / norm, direction[0] / norm
    return {
        'start': {
            'lat': float(p1.latitude - perp_dy * length),
            'lng': float(p1.longitude - perp_dx * length),
        },
        'end': {
            'lat': float(p1.latitude + perp_dy * length),
            'lng': float(p1.longitude + perp_dx * length),
        },
    }


def track_line(track: StormTrack) -> List[List[float]]:
    """[lat, lon] pairs of a track in point order"""
    return [[p.latitude, p.longitude] for p in track.points]
