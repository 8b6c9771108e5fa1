"""
Farmer Registry Models

- Cluster: a group of farmers led by a cluster lead
- Farmer: an enrolled person with identity, demographic and location details
- Certificate: a registration certificate issued to a farmer
"""

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from phonenumber_field.modelfields import PhoneNumberField
import uuid


nin_validator = RegexValidator(
    regex=r'^\d{11}$',
    message='NIN must be exactly 11 digits'
)


# =============================================================================
# CLUSTER
# =============================================================================

class Cluster(models.Model):
    """
    A farmer cluster. Its lead signs the farmers' registration certificates.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)

    # Cluster Lead
    cluster_lead_first_name = models.CharField(max_length=100)
    cluster_lead_last_name = models.CharField(max_length=100)
    cluster_lead_email = models.EmailField()
    cluster_lead_phone = models.CharField(max_length=20)
    cluster_lead_nin = models.CharField(max_length=11, blank=True)
    cluster_lead_state = models.CharField(max_length=100, blank=True)
    cluster_lead_lga = models.CharField(max_length=100, blank=True)
    cluster_lead_position = models.CharField(max_length=100, blank=True)

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clusters'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def cluster_lead_name(self):
        return f"{self.cluster_lead_first_name} {self.cluster_lead_last_name}".strip()


# =============================================================================
# FARMER
# =============================================================================

class Farmer(models.Model):
    """
    An enrolled farmer.

    Status moves Enrolled -> FarmCaptured automatically when the first farm is
    captured; Validated and Verified are set manually and never overwritten.
    """

    class Status(models.TextChoices):
        ENROLLED = 'Enrolled', 'Enrolled'
        FARM_CAPTURED = 'FarmCaptured', 'Farm Captured'
        VALIDATED = 'Validated', 'Validated'
        VERIFIED = 'Verified', 'Verified'

    class Gender(models.TextChoices):
        MALE = 'Male', 'Male'
        FEMALE = 'Female', 'Female'

    class MaritalStatus(models.TextChoices):
        SINGLE = 'Single', 'Single'
        MARRIED = 'Married', 'Married'
        DIVORCED = 'Divorced', 'Divorced'
        WIDOWED = 'Widowed', 'Widowed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Identity
    nin = models.CharField(
        max_length=11,
        unique=True,
        validators=[nin_validator],
        help_text="National Identification Number (11 digits)"
    )
    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True)
    marital_status = models.CharField(max_length=20, choices=MaritalStatus.choices, blank=True)
    employment_status = models.CharField(max_length=50, blank=True)
    photo_url = models.URLField(blank=True)

    # Contact
    phone = PhoneNumberField(region='NG', unique=True)
    email = models.EmailField(blank=True)
    whatsapp_number = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)

    # Administrative location
    state = models.CharField(max_length=100, blank=True, db_index=True)
    lga = models.CharField(max_length=100, blank=True)
    ward = models.CharField(max_length=100, blank=True)
    polling_unit = models.CharField(max_length=200, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    # Banking
    bank_name = models.CharField(max_length=100, blank=True)
    account_name = models.CharField(max_length=200, blank=True)
    account_number = models.CharField(
        max_length=10,
        blank=True,
        validators=[RegexValidator(r'^\d{10}$', 'Account number must be exactly 10 digits')]
    )
    bvn = models.CharField(
        max_length=11,
        blank=True,
        validators=[RegexValidator(r'^\d{11}$', 'BVN must be exactly 11 digits')]
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ENROLLED,
        db_index=True
    )

    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='registered_farmers',
        help_text="User who registered this farmer"
    )
    cluster = models.ForeignKey(
        Cluster,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='farmers'
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'farmers'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.full_name} ({self.nin})"

    @property
    def full_name(self):
        parts = [self.first_name, self.middle_name, self.last_name]
        return ' '.join(part for part in parts if part)


# =============================================================================
# CERTIFICATE
# =============================================================================

class Certificate(models.Model):
    """
    Registration certificate. One per farmer per year; regenerating refreshes it.
    """

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('revoked', 'Revoked'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    certificate_id = models.CharField(
        max_length=50,
        unique=True,
        help_text="Format: CCSA-YYYY-XXXXXX"
    )
    farmer = models.ForeignKey(
        Farmer,
        on_delete=models.CASCADE,
        related_name='certificates'
    )
    issued_date = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    qr_code = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'certificates'
        ordering = ['-issued_date']

    def __str__(self):
        return self.certificate_id
