"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

from accounts.urls import settings_urlpatterns, sms_urlpatterns, user_urlpatterns
from agents.urls import public_urlpatterns as agent_public_urls
from dashboards.urls import dashboard_urlpatterns, farmer_urlpatterns as farmer_analytics_urls
from farmers.urls import certificate_urlpatterns, cluster_urlpatterns, nin_urlpatterns

from .views import HealthCheckView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/sms/', include((sms_urlpatterns, 'sms'))),  # OTP verification
    path('api/users/', include((user_urlpatterns, 'users'))),
    path('api/settings/', include((settings_urlpatterns, 'settings'))),
    path('api/farmers/analytics/', include((farmer_analytics_urls, 'farmer_analytics'))),  # Before farmer detail routes
    path('api/farmers/', include('farmers.urls')),
    path('api/clusters/', include((cluster_urlpatterns, 'clusters'))),
    path('api/certificates/', include((certificate_urlpatterns, 'certificates'))),  # verify/ is public
    path('api/nin/', include((nin_urlpatterns, 'nin'))),
    path('api/farms/', include('farms.urls')),
    path('api/agents/', include('agents.urls')),
    path('api/public/', include((agent_public_urls, 'public'))),  # Agent applications (no auth)
    path('api/analytics/', include('dashboards.urls')),
    path('api/dashboard/analytics/', include((dashboard_urlpatterns, 'dashboard'))),
    path('api/health/', HealthCheckView.as_view(), name='health'),
]
