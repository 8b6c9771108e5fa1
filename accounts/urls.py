from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .user_management_views import (
    ChangePasswordView,
    PasswordResetConfirmView,
    PasswordResetRequestView,
    SystemStatsView,
    UserDetailView,
    UserListView,
)
from .views import (
    CustomTokenObtainPairView,
    PermissionListView,
    RoleDetailView,
    RoleListView,
    SendVerificationCodeView,
    UserProfileView,
    VerifyCodeView,
)

app_name = 'accounts'

urlpatterns = [
    # Authentication endpoints
    path('login/', CustomTokenObtainPairView.as_view(), name='login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('forgot-password/', PasswordResetRequestView.as_view(), name='forgot_password'),
    path('reset-password/', PasswordResetConfirmView.as_view(), name='reset_password'),

    # User profile endpoints
    path('profile/', UserProfileView.as_view(), name='profile'),

    # Roles & permissions
    path('roles/', RoleListView.as_view(), name='role_list'),
    path('roles/<uuid:role_id>/', RoleDetailView.as_view(), name='role_detail'),
    path('permissions/', PermissionListView.as_view(), name='permission_list'),
]

user_urlpatterns = [
    path('', UserListView.as_view(), name='user_list'),
    path('password/', ChangePasswordView.as_view(), name='change_password'),
    path('<uuid:user_id>/', UserDetailView.as_view(), name='user_detail'),
]

settings_urlpatterns = [
    path('stats/', SystemStatsView.as_view(), name='stats'),
]

sms_urlpatterns = [
    path('send-verification/', SendVerificationCodeView.as_view(), name='send_verification'),
    path('verify-code/', VerifyCodeView.as_view(), name='verify_code'),
]
