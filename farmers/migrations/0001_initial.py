# Generated manually for the farmers app

import django.core.validators
import django.db.models.deletion
import phonenumber_field.modelfields
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
            name='Cluster',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200, unique=True)),
                ('description', models.TextField(blank=True)),
                ('cluster_lead_first_name', models.CharField(max_length=100)),
                ('cluster_lead_last_name', models.CharField(max_length=100)),
                ('cluster_lead_email', models.EmailField(max_length=254)),
                ('cluster_lead_phone', models.CharField(max_length=20)),
                ('cluster_lead_nin', models.CharField(blank=True, max_length=11)),
                ('cluster_lead_state', models.CharField(blank=True, max_length=100)),
                ('cluster_lead_lga', models.CharField(blank=True, max_length=100)),
                ('cluster_lead_position', models.CharField(blank=True, max_length=100)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'clusters',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Farmer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('nin', models.CharField(help_text='National Identification Number (11 digits)', max_length=11, unique=True, validators=[django.core.validators.RegexValidator(message='NIN must be exactly 11 digits', regex='^\\d{11}$')])),
                ('first_name', models.CharField(max_length=100)),
                ('middle_name', models.CharField(blank=True, max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('gender', models.CharField(blank=True, choices=[('Male', 'Male'), ('Female', 'Female')], max_length=10)),
                ('marital_status', models.CharField(blank=True, choices=[('Single', 'Single'), ('Married', 'Married'), ('Divorced', 'Divorced'), ('Widowed', 'Widowed')], max_length=20)),
                ('employment_status', models.CharField(blank=True, max_length=50)),
                ('photo_url', models.URLField(blank=True)),
                ('phone', phonenumber_field.modelfields.PhoneNumberField(max_length=128, region='NG', unique=True)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('whatsapp_number', models.CharField(blank=True, max_length=20)),
                ('address', models.TextField(blank=True)),
                ('state', models.CharField(blank=True, db_index=True, max_length=100)),
                ('lga', models.CharField(blank=True, max_length=100)),
                ('ward', models.CharField(blank=True, max_length=100)),
                ('polling_unit', models.CharField(blank=True, max_length=200)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('bank_name', models.CharField(blank=True, max_length=100)),
                ('account_name', models.CharField(blank=True, max_length=200)),
                ('account_number', models.CharField(blank=True, max_length=10, validators=[django.core.validators.RegexValidator('^\\d{10}$', 'Account number must be exactly 10 digits')])),
                ('bvn', models.CharField(blank=True, max_length=11, validators=[django.core.validators.RegexValidator('^\\d{11}$', 'BVN must be exactly 11 digits')])),
                ('status', models.CharField(choices=[('Enrolled', 'Enrolled'), ('FarmCaptured', 'Farm Captured'), ('Validated', 'Validated'), ('Verified', 'Verified')], db_index=True, default='Enrolled', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('agent', models.ForeignKey(blank=True, help_text='User who registered this farmer', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='registered_farmers', to=settings.AUTH_USER_MODEL)),
                ('cluster', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='farmers', to='farmers.cluster')),
            ],
            options={
                'db_table': 'farmers',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Certificate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('certificate_id', models.CharField(help_text='Format: CCSA-YYYY-XXXXXX', max_length=50, unique=True)),
                ('issued_date', models.DateTimeField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('revoked', 'Revoked')], default='active', max_length=20)),
                ('qr_code', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('farmer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='certificates', to='farmers.farmer')),
            ],
            options={
                'db_table': 'certificates',
                'ordering': ['-issued_date'],
            },
        ),
    ]
