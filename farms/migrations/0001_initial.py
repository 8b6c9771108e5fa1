# Generated manually for the farms app

import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('farmers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Farm',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('primary_crop', models.CharField(blank=True, db_index=True, max_length=100)),
                ('secondary_crop', models.JSONField(blank=True, default=list, help_text='List of secondary crops')),
                ('produce_category', models.CharField(blank=True, max_length=100)),
                ('farm_size', models.FloatField(blank=True, help_text='Farm size in hectares', null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('farm_area', models.FloatField(blank=True, help_text='Surveyed area in hectares', null=True)),
                ('farm_elevation', models.FloatField(blank=True, null=True)),
                ('farm_ownership', models.CharField(blank=True, max_length=50)),
                ('farming_season', models.CharField(blank=True, max_length=50)),
                ('farming_experience', models.PositiveIntegerField(blank=True, null=True)),
                ('farm_state', models.CharField(blank=True, db_index=True, max_length=100)),
                ('farm_local_government', models.CharField(blank=True, max_length=100)),
                ('farm_ward', models.CharField(blank=True, max_length=100)),
                ('farm_polling_unit', models.CharField(blank=True, max_length=200)),
                ('farm_latitude', models.FloatField(blank=True, null=True)),
                ('farm_longitude', models.FloatField(blank=True, null=True)),
                ('farm_polygon', models.JSONField(blank=True, null=True)),
                ('farm_coordinates', models.JSONField(blank=True, null=True)),
                ('coordinate_system', models.CharField(default='WGS84', max_length=20)),
                ('soil_type', models.CharField(blank=True, max_length=100)),
                ('soil_ph', models.FloatField(blank=True, null=True)),
                ('soil_fertility', models.CharField(blank=True, max_length=100)),
                ('year', models.PositiveIntegerField(blank=True, null=True)),
                ('yield_season', models.CharField(blank=True, max_length=50)),
                ('crop', models.CharField(blank=True, max_length=100)),
                ('quantity', models.FloatField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('farmer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='farms', to='farmers.farmer')),
            ],
            options={
                'db_table': 'farms',
                'ordering': ['-created_at'],
            },
        ),
    ]
