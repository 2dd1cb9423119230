"""
Intensity Scales

Saffir-Simpson and Australian BoM category scales over wind speed in m/s.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional
import math


@dataclass(frozen=True)
class IntensityCategory:
    name: str
    max_wind: float  # m/s, inclusive upper bound
    color: str
    radius: int  # marker radius, px


SAFFIR_SIMPSON_SCALE = [
    IntensityCategory("Tropical Depression", 17.5, "#5BA4FF", 6),
    IntensityCategory("Tropical Storm", 32.5, "#00FAF4", 7),
    IntensityCategory("Category 1", 42.5, "#FFE135", 8),
    IntensityCategory("Category 2", 49, "#FFD37F", 9),
    IntensityCategory("Category 3", 58, "#FFA600", 10),
    IntensityCategory("Category 4", 70, "#FF6C00", 11),
    IntensityCategory("Category 5", math.inf, "#FF0000", 12),
]

BOM_SCALE = [
    IntensityCategory("Low", 17, "#80B1D3", 6),
    IntensityCategory("Category 1", 24.5, "#72CCFF", 7),
    IntensityCategory("Category 2", 33, "#FFE135", 8),
    IntensityCategory("Category 3", 44, "#FFD37F", 9),
    IntensityCategory("Category 4", 55, "#FFA600", 10),
    IntensityCategory("Category 5", math.inf, "#FF0000", 11),
]

SCALES: Dict[str, List[IntensityCategory]] = {
    "saffir-simpson": SAFFIR_SIMPSON_SCALE,
    "bom": BOM_SCALE,
}


def get_scale(name: str = "saffir-simpson") -> List[IntensityCategory]:
    if name not in SCALES:
        raise ValueError(f"Unknown intensity scale '{name}'. Valid options: {', '.join(SCALES)}")
    return SCALES[name]


def get_category(wind_speed: Optional[float], scale: str = "saffir-simpson") -> IntensityCategory:
    """
    Category for a wind speed in m/s.

    Unknown or zero wind falls into the lowest category.
    """
    categories = get_scale(scale)
    if not wind_speed or math.isnan(wind_speed):
        return categories[0]
    for category in categories:
        if wind_speed <= category.max_wind:
            return category
    return categories[-1]


def scale_to_dict(name: str) -> List[Dict]:
    """JSON-friendly scale; the open upper bound becomes None"""
    result = []
    for category in get_scale(name):
        entry = asdict(category)
        if math.isinf(entry["max_wind"]):
            entry["max_wind"] = None
        result.append(entry)
    return result
