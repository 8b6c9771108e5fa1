"""
Field Agent Models

An Agent is the recruitment/enrollment profile of a field agent. It is
linked one-to-one to the user account the agent signs in with and has its own
pipeline status, independent of the farmer lifecycle.
"""

from django.conf import settings
from django.db import models
import uuid


class Agent(models.Model):
    """
    Field agent profile.

    Pipeline: Applied -> CallForInterview -> Accepted / Rejected -> Enrolled.
    Agents created directly by an administrator start as ``active``.
    """

    class Status(models.TextChoices):
        APPLIED = 'Applied', 'Applied'
        CALL_FOR_INTERVIEW = 'CallForInterview', 'Call for Interview'
        ACCEPTED = 'Accepted', 'Accepted'
        REJECTED = 'Rejected', 'Rejected'
        ENROLLED = 'Enrolled', 'Enrolled'
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'

    PIPELINE_STATUSES = ['Applied', 'CallForInterview', 'Accepted', 'Rejected', 'Enrolled']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='agent_profile'
    )

    # Personal
    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    nin = models.CharField(max_length=11, unique=True, null=True, blank=True)
    bvn = models.CharField(max_length=11, blank=True)
    gender = models.CharField(max_length=10, blank=True)
    marital_status = models.CharField(max_length=20, blank=True)
    employment_status = models.CharField(max_length=50, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    address = models.TextField(blank=True)

    # Banking
    bank_name = models.CharField(max_length=100, blank=True)
    account_number = models.CharField(max_length=10, blank=True)
    account_name = models.CharField(max_length=200, blank=True)

    # Residence
    state = models.CharField(max_length=100, blank=True, db_index=True)
    local_government = models.CharField(max_length=100, blank=True)
    ward = models.CharField(max_length=100, blank=True)
    polling_unit = models.CharField(max_length=200, blank=True)

    # Assignment
    assigned_state = models.CharField(max_length=100, blank=True)
    assigned_lga = models.CharField(max_length=100, blank=True)
    assigned_wards = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.APPLIED,
        db_index=True
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='agents_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'agents'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.status})"

    @property
    def full_name(self):
        return ' '.join(part for part in (self.first_name, self.middle_name, self.last_name) if part)
