"""
Farm area estimation.

Spherical Shoelace approximation over WGS84 coordinates. Accurate enough for
farm-sized plots; not a geodesic-exact calculation.
"""

import math
from typing import Iterable, List, Optional, Tuple

EARTH_RADIUS_METERS = 6378137
SQUARE_METERS_PER_HECTARE = 10000


def _point_to_lng_lat(point) -> Optional[Tuple[float, float]]:
    """
    Read one point as (lng, lat).

    Accepts {latitude, longitude}, {lat, lng} and [lng, lat] forms.
    """
    try:
        if isinstance(point, dict):
            if 'latitude' in point and 'longitude' in point:
                return float(point['longitude']), float(point['latitude'])
            if 'lat' in point and 'lng' in point:
                return float(point['lng']), float(point['lat'])
            return None
        if isinstance(point, (list, tuple)) and len(point) >= 2:
            return float(point[0]), float(point[1])
    except (TypeError, ValueError):
        return None
    return None


def calculate_polygon_area(points: Iterable) -> float:
    """
    Area of a polygon in square meters, or 0 for fewer than 3 usable points.
    """
    coords: List[Tuple[float, float]] = []
    for point in points or []:
        lng_lat = _point_to_lng_lat(point)
        if lng_lat is not None:
            coords.append(lng_lat)

    if len(coords) < 3:
        return 0.0

    if coords[0] != coords[-1]:
        coords.append(coords[0])

    total = 0.0
    for (lng1, lat1), (lng2, lat2) in zip(coords, coords[1:]):
        total += math.radians(lng2 - lng1) * (
            2 + math.sin(math.radians(lat1)) + math.sin(math.radians(lat2))
        )

    return abs(total * EARTH_RADIUS_METERS * EARTH_RADIUS_METERS / 2)


def square_meters_to_hectares(square_meters: float) -> float:
    return round(square_meters / SQUARE_METERS_PER_HECTARE, 2)


def calculate_polygon_hectares(points: Iterable) -> float:
    return square_meters_to_hectares(calculate_polygon_area(points))
