"""
Farm Views

Farm CRUD, the GIS map payload and farm analytics.
"""

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authorization import HasRegistryPermission
from accounts.permissions_config import PERMISSIONS
from core.pagination import RegistryPagination
from dashboards.services import RegistryAnalyticsService
from farmers.models import Farmer
from .models import Farm
from .serializers import FarmCreateSerializer, FarmSerializer
from .services.geojson import build_farm_geojson

logger = logging.getLogger(__name__)


class FarmListView(APIView):
    """
    GET: paginated farm list (filters: farmerId, state, search)
    POST: capture a farm for an existing farmer
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['FARMS_READ']],
        'POST': [PERMISSIONS['FARMS_CREATE']],
    }

    def get(self, request):
        queryset = Farm.objects.select_related('farmer')

        farmer_id = request.query_params.get('farmerId', '').strip()
        if farmer_id:
            queryset = queryset.filter(farmer_id=farmer_id)

        state = request.query_params.get('state', '').strip()
        if state:
            queryset = queryset.filter(farm_state__icontains=state)

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(farmer__first_name__icontains=search)
                | Q(farmer__last_name__icontains=search)
                | Q(farmer__nin__icontains=search)
            )

        paginator = RegistryPagination()
        page = paginator.paginate_queryset(queryset.order_by('-created_at'), request, view=self)
        data = FarmSerializer(page, many=True).data
        return Response(paginator.get_paginated_response_data(data, 'farms'))

    def post(self, request):
        serializer = FarmCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Validation failed', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        farmer_id = serializer.validated_data.pop('farmer_id')
        farmer = Farmer.objects.filter(pk=farmer_id).first()
        if farmer is None:
            return Response({'error': 'Farmer not found'}, status=status.HTTP_404_NOT_FOUND)

        farm = serializer.save(farmer=farmer)
        logger.info(f"Farm {farm.id} captured for farmer {farmer.id} by {request.user.email}")
        return Response(FarmSerializer(farm).data, status=status.HTTP_201_CREATED)


class FarmDetailView(APIView):
    """GET / PATCH / DELETE a farm."""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['FARMS_READ']],
        'PATCH': [PERMISSIONS['FARMS_UPDATE']],
        'DELETE': [PERMISSIONS['FARMS_DELETE']],
    }

    def get(self, request, farm_id):
        farm = get_object_or_404(Farm.objects.select_related('farmer'), pk=farm_id)
        return Response(FarmSerializer(farm).data)

    def patch(self, request, farm_id):
        farm = get_object_or_404(Farm.objects.select_related('farmer'), pk=farm_id)
        serializer = FarmSerializer(farm, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {'error': 'Validation failed', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )
        farm = serializer.save()
        return Response(FarmSerializer(farm).data)

    def delete(self, request, farm_id):
        farm = get_object_or_404(Farm, pk=farm_id)
        farm.delete()
        logger.info(f"Farm {farm_id} deleted by {request.user.email}")
        return Response({'message': 'Farm deleted successfully'})


class FarmGeoJSONView(APIView):
    """
    Every farm as a normalized polygon for the GIS map.

    Optional ``state`` narrows the farms by farm state.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['GIS_VIEW'], PERMISSIONS['FARMS_READ']]}

    def get(self, request):
        farms = Farm.objects.select_related('farmer').order_by('-created_at')

        state = request.query_params.get('state', '').strip()
        if state:
            farms = farms.filter(farm_state__icontains=state)

        return Response(build_farm_geojson(farms.iterator()))


class FarmAnalyticsView(APIView):
    """Farm totals, average size and top states / crops."""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['ANALYTICS_READ'], PERMISSIONS['FARMS_READ']]}

    def get(self, request):
        return Response(RegistryAnalyticsService().get_farm_analytics())
