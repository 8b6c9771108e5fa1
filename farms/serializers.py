from rest_framework import serializers

from .models import Farm
from .services.area import calculate_polygon_hectares

MIN_POLYGON_POINTS = 3


class PolygonPointSerializer(serializers.Serializer):
    """One captured boundary point."""
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    timestamp = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    accuracy = serializers.FloatField(required=False, allow_null=True)


class FarmPolygonField(serializers.ListField):
    """
    Farm boundary as a list of ``{latitude, longitude, timestamp?, accuracy?}``
    points; at least three points are required.
    """
    child = PolygonPointSerializer()

    def __init__(self, **kwargs):
        kwargs.setdefault('min_length', MIN_POLYGON_POINTS)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        points = super().to_internal_value(data)
        # Drop optional keys that were not sent
        return [{key: value for key, value in point.items() if value is not None} for point in points]

    def to_representation(self, value):
        # Older records hold strings, [lng, lat] pairs, rings or GeoJSON; echo them as stored
        return value


def derive_farm_size(validated_data):
    """Fill ``farm_size`` from the polygon area in hectares when it was omitted."""
    polygon = validated_data.get('farm_polygon')
    if validated_data.get('farm_size') in (None, '') and polygon:
        validated_data['farm_size'] = calculate_polygon_hectares(polygon)
    return validated_data


class FarmSerializer(serializers.ModelSerializer):
    """
    Farm details with the owner's name.
    """
    farmer_id = serializers.UUIDField(read_only=True)
    farmer_name = serializers.CharField(source='farmer.full_name', read_only=True)
    farm_polygon = FarmPolygonField(required=False, allow_null=True)
    secondary_crop = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=True), required=False
    )

    class Meta:
        model = Farm
        fields = (
            'id', 'farmer_id', 'farmer_name',
            'primary_crop', 'secondary_crop', 'produce_category',
            'farm_size', 'farm_area', 'farm_elevation',
            'farm_ownership', 'farming_season', 'farming_experience',
            'farm_state', 'farm_local_government', 'farm_ward', 'farm_polling_unit',
            'farm_latitude', 'farm_longitude', 'farm_polygon', 'farm_coordinates',
            'coordinate_system',
            'soil_type', 'soil_ph', 'soil_fertility',
            'year', 'yield_season', 'crop', 'quantity',
            'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'farmer_id', 'farmer_name', 'created_at', 'updated_at')

    def validate_secondary_crop(self, value):
        return [crop.strip() for crop in value if crop and crop.strip()]

    def create(self, validated_data):
        return super().create(derive_farm_size(validated_data))

    def update(self, instance, validated_data):
        if 'farm_polygon' in validated_data and 'farm_size' not in validated_data:
            validated_data['farm_size'] = None
        return super().update(instance, derive_farm_size(validated_data))


class FarmCreateSerializer(FarmSerializer):
    """New farm for an existing farmer; a boundary polygon is required."""
    farmer_id = serializers.UUIDField()
    farm_polygon = FarmPolygonField()


class InlineFarmSerializer(serializers.Serializer):
    """First farm captured together with a new farmer."""
    farm_size = serializers.FloatField(required=False, allow_null=True, min_value=0)
    primary_crop = serializers.CharField(max_length=100, required=False, allow_blank=True)
    secondary_crop = serializers.CharField(max_length=100, required=False, allow_blank=True)
    farming_experience = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    farm_latitude = serializers.FloatField(required=False, allow_null=True)
    farm_longitude = serializers.FloatField(required=False, allow_null=True)
    farm_polygon = FarmPolygonField(required=False, allow_null=True)

    def to_farm_data(self):
        data = dict(self.validated_data)
        secondary = data.pop('secondary_crop', '')
        data['secondary_crop'] = [secondary] if secondary else []
        return derive_farm_size(data)
