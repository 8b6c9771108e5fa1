import logging

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from core.sms_service import (
    SMSDeliveryError,
    format_nigerian_phone_number,
    get_sms_service,
    is_valid_nigerian_phone_number,
)
from .authorization import HasRegistryPermission
from .models import Role
from .permissions_config import PERMISSIONS
from .serializers import (
    CustomTokenObtainPairSerializer,
    RoleSerializer,
    SendVerificationSerializer,
    UserSerializer,
    VerifyCodeSerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    JWT token obtain view returning the user and their permissions.
    """
    serializer_class = CustomTokenObtainPairSerializer


class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    API endpoint for retrieving and updating the current user's profile.
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ['get', 'patch', 'head', 'options']

    def get_object(self):
        return self.request.user


class RoleListView(APIView):
    """
    GET: list roles
    POST: create a custom role
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['ROLES_READ']],
        'POST': [PERMISSIONS['ROLES_CREATE']],
    }

    def get(self, request):
        roles = Role.objects.prefetch_related('users').all()
        return Response({'roles': RoleSerializer(roles, many=True).data})

    def post(self, request):
        serializer = RoleSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid role data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        if Role.objects.filter(name__iexact=serializer.validated_data['name']).exists():
            return Response(
                {'error': 'A role with this name already exists'},
                status=status.HTTP_409_CONFLICT
            )

        role = serializer.save()
        logger.info(f"Role '{role.name}' created by {request.user.email}")
        return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)


class RoleDetailView(APIView):
    """
    GET / PATCH / DELETE a single role. System roles cannot be deleted.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['ROLES_READ']],
        'PATCH': [PERMISSIONS['ROLES_UPDATE']],
        'DELETE': [PERMISSIONS['ROLES_DELETE']],
    }

    def get(self, request, role_id):
        role = get_object_or_404(Role, pk=role_id)
        return Response(RoleSerializer(role).data)

    def patch(self, request, role_id):
        role = get_object_or_404(Role, pk=role_id)
        serializer = RoleSerializer(role, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid role data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )
        role = serializer.save()
        return Response(RoleSerializer(role).data)

    def delete(self, request, role_id):
        role = get_object_or_404(Role, pk=role_id)
        if role.is_system:
            return Response(
                {'error': 'System roles cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        name = role.name
        role.delete()
        logger.info(f"Role '{name}' deleted by {request.user.email}")
        return Response({'message': 'Role deleted successfully'})


class PermissionListView(APIView):
    """List every permission string that can be granted to a role."""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['ROLES_READ']]}

    def get(self, request):
        return Response({
            'permissions': [
                {'key': key, 'codename': codename, 'resource': codename.split('.')[0]}
                for key, codename in PERMISSIONS.items()
            ]
        })


class SendVerificationCodeView(APIView):
    """
    Send a 6-digit verification code to a Nigerian phone number.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SendVerificationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Phone number is required', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        phone_number = format_nigerian_phone_number(serializer.validated_data['phone_number'])
        if not is_valid_nigerian_phone_number(phone_number):
            return Response(
                {'error': 'Invalid Nigerian phone number format'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            result = get_sms_service().send_verification_code(phone_number)
        except SMSDeliveryError as exc:
            return Response(
                {'error': 'Failed to send verification code', 'details': str(exc)},
                status=status.HTTP_502_BAD_GATEWAY
            )

        return Response({
            'success': True,
            'message': 'Verification code sent successfully',
            'verificationId': result['verification_id'],
            'phoneNumber': phone_number,
            'service': result['service'],
        })


class VerifyCodeView(APIView):
    """
    Verify a previously sent code.

    When the caller is authenticated and the number is their own, the
    profile phone is marked as verified.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = VerifyCodeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Verification ID and a 6-digit code are required', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        data = serializer.validated_data
        phone_number = data.get('phone_number')
        if phone_number:
            phone_number = format_nigerian_phone_number(phone_number)

        verified = get_sms_service().verify_code(data['verification_id'], data['code'], phone_number)
        if not verified:
            return Response(
                {'success': False, 'verified': False, 'error': 'Invalid or expired verification code'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = request.user
        if user.is_authenticated and phone_number and user.phone and str(user.phone) == phone_number:
            user.phone_verified = True
            user.save(update_fields=['phone_verified', 'updated_at'])

        return Response({'success': True, 'verified': True, 'message': 'Phone number verified successfully'})
