"""
Farm Services

Geometry normalization, area estimation and map (GeoJSON) assembly.
"""

from .area import calculate_polygon_area, calculate_polygon_hectares, square_meters_to_hectares
from .geometry import normalize_farm_geometry, normalize_ring
from .geojson import build_farm_geojson

__all__ = [
    'calculate_polygon_area',
    'calculate_polygon_hectares',
    'square_meters_to_hectares',
    'normalize_farm_geometry',
    'normalize_ring',
    'build_farm_geojson',
]
