"""
Farm map data.

Runs every farm through geometry normalization and assembles the
FeatureCollection plus summary statistics used by the GIS map.
"""

import logging
from collections import Counter

from django.utils import timezone

from .geometry import normalize_farm_geometry

logger = logging.getLogger(__name__)


def _farmer_name(farmer):
    if farmer is None:
        return 'Unknown'
    return ' '.join(
        part for part in (farmer.first_name, farmer.middle_name, farmer.last_name) if part
    ).strip()


def _isoformat(value):
    return value.isoformat() if value else None


def transform_farm(farm, bbox=None):
    """Flatten one farm (with its farmer) into the map representation."""
    ring = normalize_farm_geometry(farm, bbox=bbox)
    farmer = farm.farmer

    area = farm.farm_size if farm.farm_size is not None else farm.farm_area
    farmer_status = (farmer.status or '').lower() if farmer else ''

    return {
        'id': str(farm.pk),
        'name': f"{farmer.first_name if farmer else 'Unknown'}'s Farm",
        'farmerName': _farmer_name(farmer),
        'farmerId': str(farm.farmer_id),
        'crop': farm.primary_crop,
        'area': area,
        'coordinates': ring.coordinates,
        'coordinatesLatLng': ring.coordinates_lat_lng,
        'status': 'verified' if farmer_status == 'verified' else 'pending',
        'state': farm.farm_state or (farmer.state if farmer else '') or '',
        'lga': farm.farm_local_government or (farmer.lga if farmer else '') or '',
        'ward': farm.farm_ward or (farmer.ward if farmer else '') or '',
        'createdAt': _isoformat(farm.created_at),
        'updatedAt': _isoformat(farm.updated_at),
        'secondaryCrop': farm.secondary_crop,
        'soilType': farm.soil_type,
        'farmingExperience': farm.farming_experience,
        'coordinatesCount': ring.point_count,
        'hasValidCoordinates': ring.is_valid,
    }


def to_feature(item):
    return {
        'type': 'Feature',
        'properties': {
            key: item[key]
            for key in (
                'id', 'name', 'farmerName', 'farmerId', 'crop', 'area', 'status',
                'state', 'lga', 'ward', 'createdAt', 'updatedAt',
            )
        },
        'geometry': {
            'type': 'Polygon',
            'coordinates': [item['coordinates']],
        },
    }


def build_farm_geojson(farms, bbox=None):
    """
    Build the map payload for an iterable of farms.

    Farms whose ring has fewer than 3 points are left out of the features but
    counted under ``invalidCoordinates``.
    """
    transformed = [transform_farm(farm, bbox=bbox) for farm in farms]

    valid = [item for item in transformed if item['hasValidCoordinates']]
    invalid_count = len(transformed) - len(valid)

    total_area = 0.0
    for item in valid:
        try:
            total_area += float(item['area'] or 0)
        except (TypeError, ValueError):
            continue

    crop_stats = Counter(item['crop'] or 'Unknown' for item in valid)

    logger.info(f"Farm map built: {len(valid)} valid, {invalid_count} invalid of {len(transformed)}")

    return {
        'success': True,
        'farms': valid,
        'geoJson': {
            'type': 'FeatureCollection',
            'features': [to_feature(item) for item in valid],
        },
        'statistics': {
            'total': len(valid),
            'verified': sum(1 for item in valid if item['status'] == 'verified'),
            'pending': sum(1 for item in valid if item['status'] == 'pending'),
            'totalArea': total_area,
            'cropStats': dict(crop_stats),
            'invalidCoordinates': invalid_count,
        },
        'metadata': {
            'timestamp': timezone.now().isoformat(),
            'totalFarmsInDb': len(transformed),
            'farmsWithValidCoordinates': len(valid),
            'farmsWithInvalidCoordinates': invalid_count,
        },
    }
