"""
Dashboard Views

Analytics endpoints backing the registry dashboards.

Access Control:
- /api/analytics/            analytics.read or dashboard.access
- /api/dashboard/analytics/  dashboard.access
- /api/farmers/analytics/    dashboard.access or farmers.read
"""

import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authorization import HasRegistryPermission, require_permissions
from accounts.permissions_config import PERMISSIONS
from .services import RegistryAnalyticsService

logger = logging.getLogger(__name__)


class ChartAnalyticsView(APIView):
    """
    GET /api/analytics/

    Summary totals and chart series. With ``?state=`` only the LGA
    breakdown for that state is returned.
    """
    permission_classes = [
        permissions.IsAuthenticated,
        require_permissions(PERMISSIONS['ANALYTICS_READ'], PERMISSIONS['DASHBOARD_ACCESS']),
    ]

    def get(self, request):
        state = request.query_params.get('state', '').strip() or None
        data = RegistryAnalyticsService().get_chart_analytics(state=state)
        return Response(data, status=status.HTTP_200_OK)


class DashboardAnalyticsView(APIView):
    """
    GET /api/dashboard/analytics/

    Registration goal progress, geography, demographics, crops,
    clusters and the monthly trend.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['DASHBOARD_ACCESS']]}

    def get(self, request):
        refresh = request.query_params.get('refresh', '').lower() in ('1', 'true')
        if refresh:
            logger.info(f"Dashboard analytics refresh requested by {request.user.email}")
        data = RegistryAnalyticsService(use_cache=not refresh).get_dashboard_overview()
        return Response(data, status=status.HTTP_200_OK)


class FarmerAnalyticsView(APIView):
    """GET /api/farmers/analytics/"""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['DASHBOARD_ACCESS'], PERMISSIONS['FARMERS_READ']],
    }

    def get(self, request):
        return Response(RegistryAnalyticsService().get_farmer_analytics(), status=status.HTTP_200_OK)
