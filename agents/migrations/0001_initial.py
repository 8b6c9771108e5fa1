# Generated manually for the agents app

import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Agent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('first_name', models.CharField(max_length=100)),
                ('middle_name', models.CharField(blank=True, max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=20)),
                ('nin', models.CharField(blank=True, max_length=11, null=True, unique=True)),
                ('bvn', models.CharField(blank=True, max_length=11)),
                ('gender', models.CharField(blank=True, max_length=10)),
                ('marital_status', models.CharField(blank=True, max_length=20)),
                ('employment_status', models.CharField(blank=True, max_length=50)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('address', models.TextField(blank=True)),
                ('bank_name', models.CharField(blank=True, max_length=100)),
                ('account_number', models.CharField(blank=True, max_length=10)),
                ('account_name', models.CharField(blank=True, max_length=200)),
                ('state', models.CharField(blank=True, db_index=True, max_length=100)),
                ('local_government', models.CharField(blank=True, max_length=100)),
                ('ward', models.CharField(blank=True, max_length=100)),
                ('polling_unit', models.CharField(blank=True, max_length=200)),
                ('assigned_state', models.CharField(blank=True, max_length=100)),
                ('assigned_lga', models.CharField(blank=True, max_length=100)),
                ('assigned_wards', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('Applied', 'Applied'), ('CallForInterview', 'Call for Interview'), ('Accepted', 'Accepted'), ('Rejected', 'Rejected'), ('Enrolled', 'Enrolled'), ('active', 'Active'), ('inactive', 'Inactive')], db_index=True, default='Applied', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='agents_created', to=settings.AUTH_USER_MODEL)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='agent_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'agents',
                'ordering': ['-created_at'],
            },
        ),
    ]
