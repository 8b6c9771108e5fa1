"""
Core views: service health.
"""

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .tasks import check_system_health


class HealthCheckView(APIView):
    """
    GET /api/health/

    Database and cache status. Returns 503 when any check fails.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        report = check_system_health()
        code = status.HTTP_200_OK if report['status'] == 'healthy' else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(report, status=code)
