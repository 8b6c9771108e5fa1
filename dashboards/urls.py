"""
Dashboard URL Configuration

Each list is mounted under its own prefix in core.urls.
"""

from django.urls import path
from .views import (
    ChartAnalyticsView,
    DashboardAnalyticsView,
    FarmerAnalyticsView,
)

app_name = 'dashboards'

urlpatterns = [
    path('', ChartAnalyticsView.as_view(), name='chart_analytics'),
]

dashboard_urlpatterns = [
    path('', DashboardAnalyticsView.as_view(), name='dashboard_analytics'),
]

farmer_urlpatterns = [
    path('', FarmerAnalyticsView.as_view(), name='farmer_analytics'),
]
