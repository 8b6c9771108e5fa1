from django.contrib.auth.models import AbstractUser
from django.db import models
from django.conf import settings
from phonenumber_field.modelfields import PhoneNumberField
import uuid


class Role(models.Model):
    """
    A named bundle of permission strings (e.g. 'farmers.read').

    Users receive the union of the permissions of every role assigned to them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Role name (e.g., 'Field Agent', 'State Coordinator')"
    )
    description = models.TextField(blank=True)
    permissions = models.JSONField(
        default=list,
        blank=True,
        help_text="List of permission strings granted by this role"
    )
    is_system = models.BooleanField(
        default=False,
        help_text="System roles cannot be deleted"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'roles'
        ordering = ['name']

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Custom User model for dashboard staff and field agents.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        SUPER_ADMIN = 'SUPER_ADMIN', 'Super Administrator'
        ADMIN = 'ADMIN', 'Administrator'
        SUPERVISOR = 'SUPERVISOR', 'Supervisor'
        AGENT = 'AGENT', 'Field Agent'
        VIEWER = 'VIEWER', 'Viewer'

    role = models.CharField(
        max_length=50,
        choices=UserRole.choices,
        default=UserRole.VIEWER,
        db_index=True,
        help_text="User's primary role in the system"
    )

    phone = PhoneNumberField(
        region='NG',
        unique=True,
        null=True,
        blank=True,
        help_text="Phone number (Nigeria format: +234XXXXXXXXXX)"
    )
    phone_verified = models.BooleanField(
        default=False,
        help_text="Whether the phone number has been verified by OTP"
    )

    password_reset_token = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    password_reset_token_expires = models.DateTimeField(null=True, blank=True)

    roles = models.ManyToManyField(
        Role,
        through='UserRoleAssignment',
        through_fields=('user', 'role'),
        related_name='users',
        blank=True
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        ordering = ['-date_joined']

    def __str__(self):
        return self.get_full_name() or self.email or self.username

    @property
    def display_name(self):
        return self.get_full_name() or self.username


class UserRoleAssignment(models.Model):
    """
    Assigns roles to users.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='role_assignments'
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='role_assignments_made',
        help_text="User who assigned this role"
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'user_roles'
        unique_together = [['user', 'role']]

    def __str__(self):
        return f"{self.user} → {self.role}"
