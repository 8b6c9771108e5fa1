"""
Farmer Registry Views

Farmers, clusters, registration certificates and NIN lookup.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authorization import HasRegistryPermission
from accounts.permissions_config import PERMISSIONS
from core.pagination import RegistryPagination
from farms.models import Farm
from farms.serializers import InlineFarmSerializer
from .filters import FarmerFilter, search_farmers
from .models import Certificate, Cluster, Farmer
from .serializers import (
    CertificateFarmerSerializer,
    CertificateGenerateSerializer,
    CertificateSerializer,
    ClusterSerializer,
    FarmerDetailSerializer,
    FarmerSerializer,
    NINLookupSerializer,
)
from .services.certificate_service import (
    CertificateGenerator,
    certificate_filename,
    issue_certificate,
)
from .services.nin_service import (
    NINLookupError,
    NINLookupService,
    NINNotFoundError,
    NINServiceUnavailable,
    is_valid_nin,
    mask_nin,
)
from .services.status import update_farmer_status_by_farms

logger = logging.getLogger(__name__)

INLINE_FARM_FIELDS = (
    'farm_size', 'primary_crop', 'secondary_crop', 'farming_experience',
    'farm_latitude', 'farm_longitude', 'farm_polygon',
)


def _farmer_queryset():
    return (
        Farmer.objects.select_related('cluster', 'agent')
        .prefetch_related('farms', 'certificates')
    )


def _duplicate_farmer_error(nin=None, phone=None, exclude=None):
    """Conflict message for a NIN or phone number that is already registered."""
    queryset = Farmer.objects.all()
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude.pk)
    if nin and queryset.filter(nin=nin).exists():
        return 'A farmer with this NIN already exists'
    if phone and queryset.filter(phone=phone).exists():
        return 'A farmer with this phone number already exists'
    return None


# =============================================================================
# FARMERS
# =============================================================================

class FarmerListView(APIView):
    """
    GET: paginated, filterable farmer list
    POST: register a farmer, optionally with their first farm
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['FARMERS_READ']],
        'POST': [PERMISSIONS['FARMERS_CREATE']],
    }

    def get(self, request):
        filterset = FarmerFilter(request.query_params, queryset=_farmer_queryset())
        if not filterset.is_valid():
            return Response(
                {'error': 'Invalid filters', 'details': filterset.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        paginator = RegistryPagination()
        page = paginator.paginate_queryset(filterset.qs.order_by('-created_at'), request, view=self)
        data = FarmerSerializer(page, many=True).data
        return Response(paginator.get_paginated_response_data(data, 'farmers'))

    def post(self, request):
        serializer = FarmerSerializer(data=request.data)
        farm_serializer = InlineFarmSerializer(data={
            key: request.data[key] for key in INLINE_FARM_FIELDS if key in request.data
        })
        farmer_valid = serializer.is_valid()
        farm_valid = farm_serializer.is_valid()
        if not (farmer_valid and farm_valid):
            return Response(
                {'error': 'Validation failed', 'details': {**serializer.errors, **farm_serializer.errors}},
                status=status.HTTP_400_BAD_REQUEST
            )

        conflict = _duplicate_farmer_error(
            nin=serializer.validated_data['nin'],
            phone=serializer.validated_data['phone'],
        )
        if conflict:
            return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

        farm_data = farm_serializer.to_farm_data()
        has_farm = any(value not in (None, '', []) for value in farm_data.values())

        with transaction.atomic():
            farmer = serializer.save(agent=request.user, status=Farmer.Status.ENROLLED)
            if has_farm:
                Farm.objects.create(
                    farmer=farmer,
                    farm_state=farmer.state,
                    farm_local_government=farmer.lga,
                    farm_ward=farmer.ward,
                    **farm_data
                )

        logger.info(f"Farmer created: {farmer.id} by {request.user.email}")
        farmer = _farmer_queryset().get(pk=farmer.pk)
        return Response(FarmerDetailSerializer(farmer).data, status=status.HTTP_201_CREATED)


class FarmerDetailView(APIView):
    """
    GET / PATCH / DELETE a farmer.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['FARMERS_READ']],
        'PATCH': [PERMISSIONS['FARMERS_UPDATE']],
        'DELETE': [PERMISSIONS['FARMERS_DELETE']],
    }

    def get(self, request, farmer_id):
        farmer = get_object_or_404(_farmer_queryset(), pk=farmer_id)
        return Response(FarmerDetailSerializer(farmer).data)

    def patch(self, request, farmer_id):
        farmer = get_object_or_404(Farmer, pk=farmer_id)
        serializer = FarmerSerializer(farmer, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {'error': 'Validation failed', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        conflict = _duplicate_farmer_error(
            nin=serializer.validated_data.get('nin'),
            phone=serializer.validated_data.get('phone'),
            exclude=farmer,
        )
        if conflict:
            return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

        farmer = serializer.save()
        update_farmer_status_by_farms(farmer)

        logger.info(f"Farmer updated: {farmer.id} by {request.user.email}")
        return Response(FarmerDetailSerializer(_farmer_queryset().get(pk=farmer.pk)).data)

    def delete(self, request, farmer_id):
        farmer = get_object_or_404(Farmer, pk=farmer_id)
        farmer.delete()
        logger.info(f"Farmer deleted: {farmer_id} by {request.user.email}")
        return Response({'message': 'Farmer deleted successfully'})


# =============================================================================
# CLUSTERS
# =============================================================================

class ClusterListView(APIView):
    """
    GET: clusters with farmer counts, global stats and the top five clusters
    POST: create a cluster (titles are unique, case-insensitive)
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['CLUSTERS_READ']],
        'POST': [PERMISSIONS['CLUSTERS_CREATE']],
    }

    def get(self, request):
        queryset = Cluster.objects.annotate(farmers_count=Count('farmers'))

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search)
                | Q(description__icontains=search)
                | Q(cluster_lead_first_name__icontains=search)
                | Q(cluster_lead_last_name__icontains=search)
                | Q(cluster_lead_email__icontains=search)
            )

        paginator = RegistryPagination()
        page = paginator.paginate_queryset(queryset.order_by('-created_at'), request, view=self)
        data = paginator.get_paginated_response_data(ClusterSerializer(page, many=True).data, 'clusters')

        top_clusters = Cluster.objects.annotate(farmers_count=Count('farmers')).order_by('-farmers_count', 'title')[:5]
        data['stats'] = {
            'totalClusters': Cluster.objects.count(),
            'activeClusters': Cluster.objects.filter(is_active=True).count(),
            'totalFarmers': Farmer.objects.filter(cluster__isnull=False).count(),
            'totalFarms': Farm.objects.filter(farmer__cluster__isnull=False).count(),
        }
        data['topClusters'] = [{'name': c.title, 'value': c.farmers_count} for c in top_clusters]
        return Response(data)

    def post(self, request):
        serializer = ClusterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Validation failed', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        if Cluster.objects.filter(title__iexact=serializer.validated_data['title']).exists():
            return Response(
                {'error': 'Cluster with this title already exists'},
                status=status.HTTP_409_CONFLICT
            )

        cluster = serializer.save()
        logger.info(f"Cluster '{cluster.title}' created by {request.user.email}")
        return Response(ClusterSerializer(cluster).data, status=status.HTTP_201_CREATED)


class ClusterDetailView(APIView):
    """GET / PATCH / DELETE a cluster. Deleting a cluster unassigns its farmers."""
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {
        'GET': [PERMISSIONS['CLUSTERS_READ']],
        'PATCH': [PERMISSIONS['CLUSTERS_UPDATE']],
        'DELETE': [PERMISSIONS['CLUSTERS_DELETE']],
    }

    def _get_cluster(self, cluster_id):
        return get_object_or_404(Cluster.objects.annotate(farmers_count=Count('farmers')), pk=cluster_id)

    def get(self, request, cluster_id):
        return Response(ClusterSerializer(self._get_cluster(cluster_id)).data)

    def patch(self, request, cluster_id):
        cluster = self._get_cluster(cluster_id)
        serializer = ClusterSerializer(cluster, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {'error': 'Validation failed', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        title = serializer.validated_data.get('title')
        if title and Cluster.objects.filter(title__iexact=title).exclude(pk=cluster.pk).exists():
            return Response(
                {'error': 'Cluster with this title already exists'},
                status=status.HTTP_409_CONFLICT
            )

        serializer.save()
        return Response(ClusterSerializer(self._get_cluster(cluster_id)).data)

    def delete(self, request, cluster_id):
        cluster = get_object_or_404(Cluster, pk=cluster_id)
        cluster.delete()
        logger.info(f"Cluster {cluster_id} deleted by {request.user.email}")
        return Response({'message': 'Cluster deleted successfully'})


# =============================================================================
# CERTIFICATES
# =============================================================================

class CertificateListView(APIView):
    """
    Farmers with their latest certificate.

    ``status``: all (default), generated (has a certificate), pending (none yet)
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'GET': [PERMISSIONS['CERTIFICATES_READ']]}

    def get(self, request):
        queryset = search_farmers(
            Farmer.objects.prefetch_related('certificates', 'farms'),
            request.query_params.get('search', ''),
        )

        certificate_status = request.query_params.get('status', 'all')
        if certificate_status == 'generated':
            queryset = queryset.filter(certificates__isnull=False).distinct()
        elif certificate_status == 'pending':
            queryset = queryset.filter(certificates__isnull=True)

        paginator = RegistryPagination()
        page = paginator.paginate_queryset(queryset.order_by('-created_at'), request, view=self)
        data = CertificateFarmerSerializer(page, many=True).data
        return Response(paginator.get_paginated_response_data(data, 'farmers'))


class CertificateGenerateView(APIView):
    """
    Generate (or regenerate) a farmer's registration certificate and return the PDF.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'POST': [PERMISSIONS['CERTIFICATES_CREATE']]}

    def post(self, request):
        serializer = CertificateGenerateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Farmer ID is required', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        farmer = get_object_or_404(
            Farmer.objects.select_related('cluster').prefetch_related('farms'),
            pk=serializer.validated_data['farmer_id']
        )

        pdf = CertificateGenerator().generate(farmer)
        issue_certificate(farmer)

        response = HttpResponse(pdf, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{certificate_filename(farmer)}"'
        return response


class CertificateVerifyView(APIView):
    """Public certificate verification by certificate id."""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, certificate_id):
        certificate = (
            Certificate.objects.select_related('farmer', 'farmer__cluster')
            .filter(certificate_id__iexact=certificate_id)
            .first()
        )
        if certificate is None:
            return Response(
                {'valid': False, 'error': 'Certificate not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        farmer = certificate.farmer
        return Response({
            'valid': certificate.status == 'active',
            'certificate': CertificateSerializer(certificate).data,
            'farmer': {
                'first_name': farmer.first_name,
                'middle_name': farmer.middle_name,
                'last_name': farmer.last_name,
                'gender': farmer.gender,
                'nin': mask_nin(farmer.nin),
                'state': farmer.state,
                'lga': farmer.lga,
                'ward': farmer.ward,
                'farms_count': farmer.farms.count(),
                'cluster': farmer.cluster.title if farmer.cluster else None,
            },
        })


# =============================================================================
# NIN LOOKUP
# =============================================================================

class NINLookupView(APIView):
    """
    Look up a NIN with the identity API.

    Also reports whether the NIN is already registered to a farmer.
    """
    permission_classes = [permissions.IsAuthenticated, HasRegistryPermission]
    required_permissions = {'POST': [PERMISSIONS['FARMERS_CREATE'], PERMISSIONS['FARMERS_READ']]}

    def post(self, request):
        serializer = NINLookupSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'NIN is required'}, status=status.HTTP_400_BAD_REQUEST)

        nin = serializer.validated_data['nin'].strip()
        if not is_valid_nin(nin):
            return Response(
                {'error': 'NIN must be exactly 11 digits'},
                status=status.HTTP_400_BAD_REQUEST
            )

        already_registered = Farmer.objects.filter(nin=nin).exists()

        try:
            record = NINLookupService().lookup(nin)
        except NINServiceUnavailable as exc:
            if settings.DEBUG:
                return Response({
                    'success': True,
                    'data': {'firstname': 'Test', 'lastname': 'User', 'nin': nin},
                    'alreadyRegistered': already_registered,
                })
            return Response({'error': exc.message}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except NINNotFoundError as exc:
            return Response({'error': exc.message, 'code': exc.code}, status=status.HTTP_404_NOT_FOUND)
        except NINLookupError as exc:
            logger.error(f"NIN lookup failed for {mask_nin(nin)}: {exc.message}")
            return Response({'error': exc.message, 'code': exc.code}, status=status.HTTP_502_BAD_GATEWAY)

        return Response({'success': True, 'data': record, 'alreadyRegistered': already_registered})
