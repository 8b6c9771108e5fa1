from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Agent

User = get_user_model()

PROFILE_FIELDS = (
    'first_name', 'middle_name', 'last_name', 'email', 'phone', 'nin', 'bvn',
    'gender', 'marital_status', 'employment_status', 'date_of_birth', 'address',
    'bank_name', 'account_number', 'account_name',
    'state', 'local_government', 'ward', 'polling_unit',
    'assigned_state', 'assigned_lga', 'assigned_wards',
)


class AgentSerializer(serializers.ModelSerializer):
    """
    Agent profile with its login account summary and registration count.
    """
    user_id = serializers.UUIDField(source='user.id', read_only=True)
    display_name = serializers.SerializerMethodField()
    last_login = serializers.DateTimeField(source='user.last_login', read_only=True)
    registrations_count = serializers.SerializerMethodField()

    class Meta:
        model = Agent
        fields = ('id', 'user_id', 'display_name') + PROFILE_FIELDS + (
            'status', 'registrations_count', 'last_login', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'user_id', 'created_at', 'updated_at')

    def get_display_name(self, obj):
        return obj.user.get_full_name() or obj.full_name

    def get_registrations_count(self, obj):
        annotated = getattr(obj, 'registrations_count', None)
        if annotated is not None:
            return annotated
        return obj.user.registered_farmers.count()

    def validate_nin(self, value):
        if value in ('', None):
            return None
        if not (value.isdigit() and len(value) == 11):
            raise serializers.ValidationError("NIN must be exactly 11 digits.")
        return value

    def validate_assigned_wards(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Assigned wards must be a list.")
        return value


class AgentCreateSerializer(AgentSerializer):
    """
    Creates the login account and the agent profile together.
    """
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta(AgentSerializer.Meta):
        fields = AgentSerializer.Meta.fields + ('password',)


class AgentApplicationSerializer(serializers.Serializer):
    """Public field agent application."""
    first_name = serializers.CharField(max_length=100)
    middle_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20)
    state = serializers.CharField(max_length=100)
    local_government = serializers.CharField(max_length=100, required=False, allow_blank=True)
    ward = serializers.CharField(max_length=100, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    gender = serializers.CharField(max_length=10, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    employment_status = serializers.CharField(max_length=50, required=False, allow_blank=True)
    nin = serializers.RegexField(r'^\d{11}$', required=False, allow_blank=True)
