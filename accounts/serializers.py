import re

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.utils import timezone
from phonenumber_field.serializerfields import PhoneNumberField
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .authorization import get_user_permissions
from .models import Role, UserRoleAssignment
from .permissions_config import is_known_permission

User = get_user_model()


class RoleSerializer(serializers.ModelSerializer):
    """
    Serializer for roles.
    Permission strings are validated against the known permission list.
    """
    user_count = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = (
            'id', 'name', 'description', 'permissions', 'is_system',
            'user_count', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'is_system', 'user_count', 'created_at', 'updated_at')

    def get_user_count(self, obj):
        return obj.users.count()

    def validate_permissions(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Permissions must be a list of strings.")
        unknown = [codename for codename in value if not is_known_permission(codename)]
        if unknown:
            raise serializers.ValidationError(f"Unknown permissions: {', '.join(unknown)}")
        # Preserve order, drop duplicates
        return list(dict.fromkeys(value))


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for user details.
    Used for retrieving and updating the user's own profile.
    """
    full_name = serializers.CharField(source='get_full_name', read_only=True)
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    phone = PhoneNumberField(region='NG', required=False, allow_null=True)
    roles = serializers.SlugRelatedField(many=True, read_only=True, slug_field='name')
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'phone', 'phone_verified', 'first_name',
            'last_name', 'full_name', 'role', 'role_display', 'roles',
            'permissions', 'is_active', 'date_joined', 'last_login'
        )
        read_only_fields = (
            'id', 'username', 'full_name', 'role', 'role_display', 'roles',
            'phone_verified', 'permissions', 'is_active', 'date_joined', 'last_login'
        )

    def get_permissions(self, obj):
        return sorted(get_user_permissions(obj))

    def update(self, instance, validated_data):
        # A changed phone number has to be verified again
        if 'phone' in validated_data and validated_data['phone'] != instance.phone:
            instance.phone_verified = False
        return super().update(instance, validated_data)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer that also returns the user and their permissions.
    """
    def validate(self, attrs):
        data = super().validate(attrs)

        data['user'] = {
            'id': str(self.user.id),
            'username': self.user.username,
            'email': self.user.email,
            'phone': str(self.user.phone) if self.user.phone else None,
            'role': self.user.role,
            'full_name': self.user.get_full_name(),
            'permissions': sorted(get_user_permissions(self.user)),
        }

        self.user.last_login = timezone.now()
        self.user.save(update_fields=['last_login'])

        return data


class SendVerificationSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)


class VerifyCodeSerializer(serializers.Serializer):
    verification_id = serializers.CharField(max_length=100)
    code = serializers.RegexField(r'^\d{6}$', error_messages={'invalid': 'Code must be 6 digits.'})
    phone_number = serializers.CharField(max_length=20, required=False)


# =============================================================================
# USER ADMINISTRATION
# =============================================================================

STRONG_PASSWORD = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*(),.?":{}|<>])')


def validate_strong_password(value):
    if not STRONG_PASSWORD.match(value):
        raise serializers.ValidationError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character."
        )
    return value


class RoleSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ('id', 'name', 'description', 'permissions', 'is_system')


class AdminUserSerializer(serializers.ModelSerializer):
    """User as seen by administrators: assigned roles and resolved permissions."""
    name = serializers.SerializerMethodField()
    phone = PhoneNumberField(region='NG', read_only=True)
    roles = RoleSummarySerializer(many=True, read_only=True)
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'name', 'first_name', 'last_name', 'phone',
            'role', 'roles', 'permissions', 'is_active', 'last_login',
            'date_joined', 'updated_at'
        )
        read_only_fields = fields

    def get_name(self, obj):
        return obj.display_name

    def get_permissions(self, obj):
        return sorted(get_user_permissions(obj))


class AdminUserWriteSerializer(serializers.ModelSerializer):
    """
    Create or update a user account.

    ``role_id`` replaces the user's role assignments with that single role.
    The username defaults to the email address on create.
    """
    username = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone = PhoneNumberField(region='NG', required=False, allow_null=True)
    password = serializers.CharField(write_only=True, validators=[validate_password])
    role_id = serializers.PrimaryKeyRelatedField(
        queryset=Role.objects.all(), source='assigned_role', required=False, allow_null=True, write_only=True
    )

    class Meta:
        model = User
        fields = (
            'username', 'email', 'first_name', 'last_name', 'phone',
            'password', 'role', 'role_id', 'is_active'
        )

    def validate_email(self, value):
        others = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            others = others.exclude(pk=self.instance.pk)
        if others.exists():
            raise serializers.ValidationError("Email already taken by another user.")
        return value.lower()

    def validate_username(self, value):
        others = User.objects.filter(username__iexact=value)
        if self.instance is not None:
            others = others.exclude(pk=self.instance.pk)
        if others.exists():
            raise serializers.ValidationError("A user with that username already exists.")
        return value

    def validate_phone(self, value):
        if value:
            others = User.objects.filter(phone=value)
            if self.instance is not None:
                others = others.exclude(pk=self.instance.pk)
            if others.exists():
                raise serializers.ValidationError("Phone number already registered to another user.")
        return value

    def _assign_role(self, user, role):
        user.role_assignments.all().delete()
        if role is not None:
            UserRoleAssignment.objects.create(user=user, role=role, assigned_by=self.context.get('assigned_by'))

    def create(self, validated_data):
        role = validated_data.pop('assigned_role', None)
        password = validated_data.pop('password')
        validated_data.setdefault('username', validated_data['email'])

        user = User(**validated_data)
        user.set_password(password)
        user.save()

        if role is not None:
            self._assign_role(user, role)
        return user

    def update(self, instance, validated_data):
        has_role = 'assigned_role' in validated_data
        role = validated_data.pop('assigned_role', None)
        password = validated_data.pop('password', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()

        if has_role:
            self._assign_role(instance, role)
        return instance


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for the password change endpoint."""
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password, validate_strong_password])

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError("Invalid current password.")
        return value


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=100)
    new_password = serializers.CharField(write_only=True, validators=[validate_password, validate_strong_password])
