"""
Farm Models

A farm is one cultivated plot owned by a registered farmer. Boundaries are
stored as captured by the field app (JSON point lists); they are normalized
on read by farms.services.geometry.
"""

from django.core.validators import MinValueValidator
from django.db import models
import uuid


class Farm(models.Model):
    """
    One cultivated plot.

    ``farm_polygon`` holds the captured boundary as
    [{latitude, longitude, timestamp?, accuracy?}, ...], though older records may
    hold any legacy shape; ``farm_coordinates`` holds imported geometry and takes
    precedence on maps.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farmer = models.ForeignKey(
        'farmers.Farmer',
        on_delete=models.CASCADE,
        related_name='farms'
    )

    # Crops
    primary_crop = models.CharField(max_length=100, blank=True, db_index=True)
    secondary_crop = models.JSONField(
        default=list,
        blank=True,
        help_text="List of secondary crops"
    )
    produce_category = models.CharField(max_length=100, blank=True)

    # Size (hectares)
    farm_size = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Farm size in hectares"
    )
    farm_area = models.FloatField(
        null=True,
        blank=True,
        help_text="Surveyed area in hectares"
    )
    farm_elevation = models.FloatField(null=True, blank=True)

    farm_ownership = models.CharField(max_length=50, blank=True)
    farming_season = models.CharField(max_length=50, blank=True)
    farming_experience = models.PositiveIntegerField(null=True, blank=True)

    # Administrative location
    farm_state = models.CharField(max_length=100, blank=True, db_index=True)
    farm_local_government = models.CharField(max_length=100, blank=True)
    farm_ward = models.CharField(max_length=100, blank=True)
    farm_polling_unit = models.CharField(max_length=200, blank=True)

    # Geometry
    farm_latitude = models.FloatField(null=True, blank=True)
    farm_longitude = models.FloatField(null=True, blank=True)
    farm_polygon = models.JSONField(null=True, blank=True)
    farm_coordinates = models.JSONField(null=True, blank=True)
    coordinate_system = models.CharField(max_length=20, default='WGS84')

    # Soil
    soil_type = models.CharField(max_length=100, blank=True)
    soil_ph = models.FloatField(null=True, blank=True)
    soil_fertility = models.CharField(max_length=100, blank=True)

    # Yield
    year = models.PositiveIntegerField(null=True, blank=True)
    yield_season = models.CharField(max_length=50, blank=True)
    crop = models.CharField(max_length=100, blank=True)
    quantity = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'farms'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.primary_crop or 'Farm'} - {self.farmer_id}"
