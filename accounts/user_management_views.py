"""
User Management Views

Administrative endpoints for:
- Listing, creating, updating and deleting user accounts
- Changing the signed-in user's password
- Forgot / reset password by emailed token
- System statistics for the settings page
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import RegistryPagination
from .authorization import HasRegistryPermission
from .permissions_config import PERMISSIONS
from .serializers import (
    AdminUserSerializer,
    AdminUserWriteSerializer,
    ChangePasswordSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
)
from .services import PasswordResetService

logger = logging.getLogger(__name__)
User = get_user_model()

RESET_REQUESTED_MESSAGE = "If an account with that email exists, we've sent password reset instructions."


class UserListView(APIView):
    """
    GET /api/users/?search=&role=&page=&limit=
    POST /api/users/

    ``role`` filters by assigned role name.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['USERS_READ']],
        'POST': [PERMISSIONS['USERS_CREATE']],
    }

    def get(self, request):
        queryset = User.objects.prefetch_related('roles')

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(email__icontains=search)
                | Q(username__icontains=search)
            )

        role = request.query_params.get('role', '').strip()
        if role:
            queryset = queryset.filter(roles__name__iexact=role).distinct()

        paginator = RegistryPagination()
        page = paginator.paginate_queryset(queryset.order_by('-date_joined'), request, view=self)
        data = AdminUserSerializer(page, many=True).data
        return Response(paginator.get_paginated_response_data(data, 'users'))

    def post(self, request):
        serializer = AdminUserWriteSerializer(data=request.data, context={'assigned_by': request.user})
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid user data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = serializer.save()
        logger.info(f"User {user.email} created by {request.user.email}")
        return Response(AdminUserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(APIView):
    """
    GET / PATCH / PUT / DELETE /api/users/{user_id}/

    Users cannot delete their own account.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['USERS_READ']],
        'PATCH': [PERMISSIONS['USERS_UPDATE']],
        'PUT': [PERMISSIONS['USERS_UPDATE']],
        'DELETE': [PERMISSIONS['USERS_DELETE']],
    }

    def get(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        return Response(AdminUserSerializer(user).data)

    def patch(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        serializer = AdminUserWriteSerializer(
            user, data=request.data, partial=True, context={'assigned_by': request.user}
        )
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid user data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = serializer.save()
        logger.info(f"User {user.email} updated by {request.user.email}")
        return Response(AdminUserSerializer(user).data)

    put = patch

    def delete(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        if user.pk == request.user.pk:
            return Response(
                {'error': 'Cannot delete your own account'},
                status=status.HTTP_400_BAD_REQUEST
            )

        email = user.email
        user.delete()
        logger.info(f"User {email} deleted by {request.user.email}")
        return Response({'message': 'User deleted successfully'})


class ChangePasswordView(APIView):
    """
    PUT /api/users/password/

    Requires the current password. The new password must contain upper
    and lower case letters, a digit and a special character.
    """
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid password data', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = request.user
        user.set_password(serializer.validated_data['new_password'])
        user.save()
        logger.info(f"Password changed for {user.email}")
        return Response({'message': 'Password updated successfully'})

    post = put


class PasswordResetRequestView(APIView):
    """
    POST /api/auth/forgot-password/

    Always answers with the same message so account existence is not revealed.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid input', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = User.objects.filter(email__iexact=serializer.validated_data['email'], is_active=True).first()
        if user is not None:
            PasswordResetService.send_password_reset_email(user)

        return Response({'message': RESET_REQUESTED_MESSAGE})


class PasswordResetConfirmView(APIView):
    """POST /api/auth/reset-password/ with ``token`` and ``new_password``."""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Invalid input', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        success, error = PasswordResetService.reset_password(
            serializer.validated_data['token'],
            serializer.validated_data['new_password'],
        )
        if not success:
            return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Password reset successfully'})


class SystemStatsView(APIView):
    """
    GET /api/settings/stats/

    Record totals plus counts created in the last 7 days.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['SETTINGS_READ']]}

    def get(self, request):
        from farmers.models import Certificate, Farmer
        from farms.models import Farm

        since = timezone.now() - timedelta(days=7)

        return Response({
            'users': {
                'total': User.objects.count(),
                'agents': User.objects.filter(role=User.UserRole.AGENT).count(),
                'recent': User.objects.filter(date_joined__gte=since).count(),
            },
            'farmers': {
                'total': Farmer.objects.count(),
            },
            'farms': {
                'total': Farm.objects.count(),
                'recent': Farm.objects.filter(created_at__gte=since).count(),
            },
            'certificates': {
                'total': Certificate.objects.count(),
                'recent': Certificate.objects.filter(created_at__gte=since).count(),
            },
            'system': {
                'status': 'healthy',
                'version': settings.REGISTRY_VERSION,
            },
        })
