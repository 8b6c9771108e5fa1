"""
Registry Analytics Service

Dashboard analytics for the farmer registry:
- Chart analytics (summary + chart series) with state -> LGA drill-down
- Dashboard overview (goal progress, geography, crops, clusters, trends)
- Farmer analytics (states, statuses, gender, recent registrations)
- Farm analytics (area totals, top states and crops)

Performance Optimization:
- Grouped counts are computed in the database, normalization in Python
- The dashboard overview is cached for ANALYTICS_CACHE_TTL seconds
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.cache import cache
from django.db.models import Avg, Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from . import aggregation

logger = logging.getLogger(__name__)

CACHE_PREFIX = 'registry_analytics'


class RegistryAnalyticsService:
    """
    Analytics over farmers, farms, clusters and agents.
    """

    def __init__(self, use_cache: bool = True):
        self.use_cache = use_cache
        self.now = timezone.now()
        self.today = timezone.localdate()

    def _get_cache_key(self, prefix: str, *args) -> str:
        """Generate consistent cache key."""
        parts = [prefix] + [str(a) for a in args if a]
        return f"{CACHE_PREFIX}:{':'.join(parts)}"

    def _get_from_cache(self, key: str) -> Optional[Any]:
        if self.use_cache:
            return cache.get(key)
        return None

    def _set_cache(self, key: str, data: Any):
        cache.set(key, data, timeout=getattr(settings, 'ANALYTICS_CACHE_TTL', 600))

    # =========================================================================
    # CHART ANALYTICS
    # =========================================================================

    def get_chart_analytics(self, state: Optional[str] = None) -> Dict[str, Any]:
        """
        Summary totals and chart series.

        With ``state`` only the LGA breakdown for that state is computed and
        ``summary`` is returned empty.
        """
        if state:
            return {
                'summary': {},
                'charts': {'lgas': self.get_lga_breakdown(state)},
            }

        from agents.models import Agent
        from farmers.models import Cluster, Farmer
        from farms.models import Farm

        total_area = Farm.objects.aggregate(total=Sum('farm_size'))['total'] or 0

        gender_rows = Farmer.objects.values_list('gender').annotate(count=Count('id'))
        crop_rows = (
            Farm.objects.exclude(primary_crop='')
            .values_list('primary_crop').annotate(count=Count('id'))
        )
        state_rows = (
            Farmer.objects.exclude(state='')
            .values_list('state').annotate(count=Count('id'))
            .order_by('-count')
        )
        dob_rows = (
            Farmer.objects.filter(date_of_birth__isnull=False)
            .values_list('date_of_birth').annotate(count=Count('id'))
        )
        month_rows = (
            Farmer.objects.annotate(month=TruncMonth('created_at'))
            .values_list('month').annotate(count=Count('id'))
        )
        size_rows = Farm.objects.values_list('farm_size').annotate(count=Count('id'))

        return {
            'summary': {
                'totalFarmers': Farmer.objects.count(),
                'totalFarms': Farm.objects.count(),
                'totalAgents': Agent.objects.count(),
                'totalClusters': Cluster.objects.count(),
                'totalArea': total_area,
            },
            'charts': {
                'gender': aggregation.aggregate_counts(gender_rows, aggregation.normalize_gender),
                'crops': aggregation.top_n(
                    aggregation.aggregate_counts(crop_rows, aggregation.normalize_crop),
                    aggregation.TOP_CROPS,
                ),
                'states': aggregation.top_n(
                    aggregation.aggregate_counts(state_rows, aggregation.normalize_state),
                    aggregation.TOP_STATES,
                ),
                'age': aggregation.age_distribution(dob_rows, self.today),
                'registrations': aggregation.monthly_registrations(month_rows),
                'farmSizes': aggregation.farm_size_distribution(size_rows),
                'lgas': [],
            },
        }

    def get_lga_breakdown(self, state: str):
        """LGA counts for farmers whose state contains ``state`` (case-insensitive, " State" suffix ignored)."""
        from farmers.models import Farmer

        state = aggregation.STATE_SUFFIX.sub('', state.strip()).strip()
        if not state:
            return []

        rows = (
            Farmer.objects.filter(state__icontains=state)
            .exclude(lga='')
            .values_list('lga').annotate(count=Count('id'))
            .order_by('-count')
        )
        return aggregation.aggregate_counts(rows, aggregation.normalize_lga)

    # =========================================================================
    # DASHBOARD OVERVIEW
    # =========================================================================

    def get_dashboard_overview(self) -> Dict[str, Any]:
        cache_key = self._get_cache_key('dashboard_overview')
        cached = self._get_from_cache(cache_key)
        if cached:
            return cached

        data = self._build_dashboard_overview()
        self._set_cache(cache_key, data)
        logger.info(f"Dashboard analytics computed: {data['overview']['totalFarmers']} farmers")
        return data

    def _build_dashboard_overview(self) -> Dict[str, Any]:
        from agents.models import Agent
        from farmers.models import Cluster, Farmer
        from farms.models import Farm

        goal = getattr(settings, 'FARMER_REGISTRATION_GOAL', 2000000)

        total_farmers = Farmer.objects.count()
        total_hectares = Farm.objects.aggregate(total=Sum('farm_size'))['total'] or 0
        recent = Farmer.objects.filter(created_at__gte=self.now - timedelta(days=30)).count()

        # Geography
        state_rows = Farmer.objects.exclude(state='').values_list('state').annotate(count=Count('id'))
        by_state = [
            {'state': item['name'], 'count': item['value']}
            for item in aggregation.aggregate_counts(state_rows, aggregation.normalize_state)
        ]
        lga_rows = (
            Farmer.objects.exclude(lga='')
            .values('state', 'lga').annotate(count=Count('id'))
            .order_by('-count')[:20]
        )
        by_lga = [
            {
                'state': row['state'],
                'lga': row['lga'],
                'count': row['count'],
                'label': f"{row['lga']}, {row['state']}",
            }
            for row in lga_rows
        ]

        # Demographics
        gender_rows = Farmer.objects.values_list('gender').annotate(count=Count('id'))
        gender_counts = {
            item['name']: item['value']
            for item in aggregation.aggregate_counts(gender_rows, aggregation.normalize_gender)
        }
        by_gender = [
            {'gender': gender, 'count': gender_counts.get(gender, 0)}
            for gender in ('Male', 'Female')
        ]

        # Crops
        primary_rows = (
            Farm.objects.exclude(primary_crop='')
            .values_list('primary_crop').annotate(count=Count('id'))
        )
        secondary_lists = Farm.objects.values_list('secondary_crop', flat=True)
        crops = aggregation.merge_crop_counts(primary_rows, secondary_lists)

        # Clusters
        clusters = Cluster.objects.annotate(farmers_count=Count('farmers')).order_by('-farmers_count')
        by_clusters = [
            {
                'clusterId': str(cluster.id),
                'clusterTitle': cluster.title,
                'clusterDescription': cluster.description,
                'clusterLeadName': cluster.cluster_lead_name,
                'farmersCount': cluster.farmers_count,
                'progressPercentage': aggregation.percentage(cluster.farmers_count, total_farmers),
                'isActive': cluster.is_active,
            }
            for cluster in clusters
        ]

        return {
            'overview': {
                'totalFarmers': total_farmers,
                'totalAgents': Agent.objects.count(),
                'totalClusters': len(by_clusters),
                'totalFarms': Farm.objects.count(),
                'totalHectares': total_hectares,
                'recentRegistrations': recent,
                'goal': goal,
                'progressPercentage': aggregation.percentage(total_farmers, goal),
                'remaining': goal - total_farmers,
            },
            'geography': {
                'byState': by_state,
                'byLGA': by_lga,
            },
            'demographics': {
                'byGender': by_gender,
            },
            'crops': crops,
            'clusters': {
                'byClusters': by_clusters,
                'distribution': [c for c in by_clusters if c['farmersCount'] > 0],
                'totalClusters': len(by_clusters),
                'activeClusters': sum(1 for c in by_clusters if c['isActive']),
            },
            'trends': {
                'monthly': self._monthly_trend(),
            },
            'lastUpdated': self.now.isoformat(),
        }

    def _monthly_trend(self, months: int = 12):
        """Registrations per calendar month for the last ``months`` months."""
        from farmers.models import Farmer

        current_month = timezone.localtime(self.now).replace(
            day=1, hour=0, minute=0, second=0, microsecond=0
        )
        first_month = current_month - relativedelta(months=months - 1)

        counts = {}
        rows = (
            Farmer.objects.filter(created_at__gte=first_month)
            .annotate(month=TruncMonth('created_at'))
            .values_list('month').annotate(count=Count('id'))
        )
        for month, count in rows:
            counts[month.strftime('%Y-%m')] = count

        trend = []
        for offset in range(months):
            start = first_month + relativedelta(months=offset)
            trend.append({
                'month': start.strftime('%b %Y'),
                'date': start.isoformat(),
                'count': counts.get(start.strftime('%Y-%m'), 0),
            })
        return trend

    # =========================================================================
    # FARMER ANALYTICS
    # =========================================================================

    def get_farmer_analytics(self) -> Dict[str, Any]:
        from farmers.models import Farmer

        state_rows = Farmer.objects.values_list('state').annotate(count=Count('id'))
        by_state = [
            {'state': item['name'], 'count': item['value']}
            for item in aggregation.top_n(
                aggregation.aggregate_counts(state_rows, aggregation.normalize_state),
                aggregation.TOP_STATES,
            )
        ]

        by_status = {}
        for status_value, count in Farmer.objects.values_list('status').annotate(count=Count('id')):
            label = status_value or Farmer.Status.ENROLLED
            by_status[label] = by_status.get(label, 0) + count

        gender_rows = Farmer.objects.values_list('gender').annotate(count=Count('id'))
        by_gender = [
            {'gender': item['name'], 'count': item['value']}
            for item in aggregation.aggregate_counts(gender_rows, aggregation.normalize_gender)
        ]

        recent = [
            {
                'id': str(row['id']),
                'firstName': row['first_name'],
                'lastName': row['last_name'],
                'state': row['state'],
                'registrationDate': row['created_at'].isoformat(),
            }
            for row in Farmer.objects.order_by('-created_at').values(
                'id', 'first_name', 'last_name', 'state', 'created_at'
            )[:5]
        ]

        return {
            'totalFarmers': Farmer.objects.count(),
            'farmersByState': by_state,
            'farmersByStatus': by_status,
            'farmersByGender': by_gender,
            'recentRegistrations': recent,
        }

    # =========================================================================
    # FARM ANALYTICS
    # =========================================================================

    def get_farm_analytics(self) -> Dict[str, Any]:
        from farms.models import Farm

        totals = Farm.objects.aggregate(total=Sum('farm_size'), average=Avg('farm_size'))

        state_rows = Farm.objects.exclude(farm_state='').values_list('farm_state').annotate(count=Count('id'))
        crop_rows = Farm.objects.exclude(primary_crop='').values_list('primary_crop').annotate(count=Count('id'))

        return {
            'totalFarms': Farm.objects.count(),
            'totalArea': totals['total'] or 0,
            'avgSize': round(totals['average'] or 0, 2),
            'farmsByState': aggregation.top_n(
                aggregation.aggregate_counts(state_rows, aggregation.normalize_state),
                aggregation.TOP_STATES,
            ),
            'farmsByCrop': aggregation.top_n(
                aggregation.aggregate_counts(crop_rows, aggregation.normalize_crop),
                aggregation.TOP_CROPS,
            ),
        }
