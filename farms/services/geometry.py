"""
Farm Geometry Normalization

Stored farm boundaries come in several shapes:
- a JSON-encoded string
- a flat list of [lng, lat] pairs or {latitude, longitude} / {lat, lng} points
- a list of rings (only the first ring is used)
- a GeoJSON-like object with ``coordinates`` or ``geometry.coordinates``

Raw values are first classified into one explicit variant, then normalized into
a closed ring of [lng, lat] pairs. Axis order is auto-corrected against the
configured bounding box (FARM_BOUNDING_BOX).
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from django.conf import settings

logger = logging.getLogger(__name__)

FALLBACK_SQUARE_OFFSET = 0.001
MIN_RING_POINTS = 3

DEFAULT_BOUNDING_BOX = {'lat_min': 3.0, 'lat_max': 15.0, 'lng_min': 2.0, 'lng_max': 15.5}


# =============================================================================
# RAW GEOMETRY VARIANTS
# =============================================================================

@dataclass(frozen=True)
class RawString:
    """Text that could not be decoded as JSON."""
    text: str


@dataclass(frozen=True)
class FlatRing:
    points: List[Any]


@dataclass(frozen=True)
class NestedRings:
    rings: List[Any]


@dataclass(frozen=True)
class GeoJsonLike:
    coordinates: Any


RawGeometry = Union[RawString, FlatRing, NestedRings, GeoJsonLike]


class GeometryParseError(ValueError):
    """Raised when a stored geometry cannot be read as a ring."""


def _is_nested(value) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and isinstance(value[0], list)
        and len(value[0]) > 0
        and isinstance(value[0][0], list)
    )


def classify_geometry(raw) -> Optional[RawGeometry]:
    """
    Decode a stored geometry value into one of the raw variants.

    Returns None for values that carry no geometry at all.
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            decoded = json.loads(text)
        except ValueError:
            return RawString(text)
        if isinstance(decoded, str):
            return RawString(text)
        return classify_geometry(decoded)

    if isinstance(raw, dict):
        coordinates = raw.get('coordinates')
        if coordinates is None and isinstance(raw.get('geometry'), dict):
            coordinates = raw['geometry'].get('coordinates')
        if coordinates is None:
            return None
        return GeoJsonLike(coordinates)

    if isinstance(raw, (list, tuple)):
        raw = list(raw)
        if _is_nested(raw):
            return NestedRings(raw)
        return FlatRing(raw)

    return None


def extract_points(geometry: Optional[RawGeometry]) -> List[Any]:
    """
    Return the raw point list of a classified geometry.

    Raises:
        GeometryParseError: for undecodable text or malformed GeoJSON
    """
    if geometry is None:
        return []

    if isinstance(geometry, RawString):
        raise GeometryParseError(f"Geometry is not valid JSON: {geometry.text[:40]!r}")

    if isinstance(geometry, FlatRing):
        return geometry.points

    if isinstance(geometry, NestedRings):
        return geometry.rings[0]

    if isinstance(geometry, GeoJsonLike):
        coordinates = geometry.coordinates
        if not isinstance(coordinates, (list, tuple)):
            raise GeometryParseError("GeoJSON coordinates must be an array")
        coordinates = list(coordinates)
        return coordinates[0] if _is_nested(coordinates) else coordinates

    raise GeometryParseError(f"Unsupported geometry variant: {type(geometry).__name__}")


# =============================================================================
# NORMALIZATION
# =============================================================================

def _to_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_lng_lat_pair(point) -> Optional[List[float]]:
    """Coerce one stored point to [lng, lat]; None when it is not a point."""
    if isinstance(point, dict):
        if 'latitude' in point and 'longitude' in point:
            lat, lng = _to_number(point['latitude']), _to_number(point['longitude'])
        elif 'lat' in point and 'lng' in point:
            lat, lng = _to_number(point['lat']), _to_number(point['lng'])
        else:
            return None
    elif isinstance(point, (list, tuple)) and len(point) >= 2:
        lng, lat = _to_number(point[0]), _to_number(point[1])
    else:
        return None

    if lng is None or lat is None:
        return None
    return [lng, lat]


def ensure_closed(ring: List[List[float]]) -> List[List[float]]:
    if not ring:
        return ring
    if ring[0] == ring[-1]:
        return ring
    return ring + [list(ring[0])]


def fallback_square(latitude: float, longitude: float, offset: float = FALLBACK_SQUARE_OFFSET):
    """Closed 5-point square around a single point, in [lng, lat] order."""
    return [
        [longitude - offset, latitude - offset],
        [longitude + offset, latitude - offset],
        [longitude + offset, latitude + offset],
        [longitude - offset, latitude + offset],
        [longitude - offset, latitude - offset],
    ]


def get_bounding_box() -> Dict[str, float]:
    return getattr(settings, 'FARM_BOUNDING_BOX', None) or DEFAULT_BOUNDING_BOX


def count_in_box(ring: List[List[float]], bbox: Dict[str, float]) -> int:
    return sum(
        1 for lng, lat in ring
        if bbox['lat_min'] <= lat <= bbox['lat_max'] and bbox['lng_min'] <= lng <= bbox['lng_max']
    )


@dataclass
class NormalizedRing:
    """A closed ring in [lng, lat] order plus its [lat, lng] twin."""
    coordinates: List[List[float]] = field(default_factory=list)
    coordinates_lat_lng: List[List[float]] = field(default_factory=list)
    swapped: bool = False
    used_fallback: bool = False

    @property
    def is_valid(self) -> bool:
        return len(self.coordinates) >= MIN_RING_POINTS

    @property
    def point_count(self) -> int:
        return len(self.coordinates)


def normalize_ring(raw, latitude=None, longitude=None, bbox=None, label=None) -> NormalizedRing:
    """
    Normalize a stored geometry value into a closed [lng, lat] ring.

    Args:
        raw: the stored geometry (string, list, or GeoJSON-like dict)
        latitude, longitude: optional single point used when no ring survives
        bbox: bounding box for axis disambiguation (defaults to settings)
        label: identifier used in log messages

    A geometry that cannot be parsed is logged and treated as empty.
    """
    bbox = bbox or get_bounding_box()

    try:
        raw_points = extract_points(classify_geometry(raw))
    except GeometryParseError as exc:
        logger.warning(f"Failed to parse coordinates for farm {label or '?'}: {exc}")
        raw_points = []

    ring = [pair for pair in (to_lng_lat_pair(point) for point in raw_points) if pair is not None]

    used_fallback = False
    if not ring:
        lat, lng = _to_number(latitude), _to_number(longitude)
        if lat is not None and lng is not None:
            ring = fallback_square(lat, lng)
            used_fallback = True

    ring = ensure_closed(ring)

    swapped_ring = ensure_closed([[lat, lng] for lng, lat in ring])
    swapped = count_in_box(swapped_ring, bbox) > count_in_box(ring, bbox)
    if swapped:
        ring = swapped_ring

    return NormalizedRing(
        coordinates=ring,
        coordinates_lat_lng=[[lat, lng] for lng, lat in ring],
        swapped=swapped,
        used_fallback=used_fallback,
    )


def normalize_farm_geometry(farm, bbox=None) -> NormalizedRing:
    """
    Normalize a farm's boundary, preferring ``farm_coordinates`` over
    ``farm_polygon`` and falling back to its single GPS point.
    """
    raw = farm.farm_coordinates
    if raw is None or raw == '':
        raw = farm.farm_polygon

    return normalize_ring(
        raw,
        latitude=farm.farm_latitude,
        longitude=farm.farm_longitude,
        bbox=bbox,
        label=farm.pk,
    )
