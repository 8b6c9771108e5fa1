"""
Query filters for the farmer list endpoints.
"""

from django.db.models import Q
import django_filters

from .models import Farmer


def search_farmers(queryset, value):
    """
    Free-text farmer search.

    A single term matches first name, last name, phone or NIN. Several terms
    must each match the first or last name; the full string is still tried
    against phone and NIN.
    """
    value = (value or '').strip()
    if not value:
        return queryset

    terms = value.split()
    if len(terms) > 1:
        name_match = Q()
        for term in terms:
            name_match &= Q(first_name__icontains=term) | Q(last_name__icontains=term)
        return queryset.filter(name_match | Q(phone__icontains=value) | Q(nin__icontains=value))

    return queryset.filter(
        Q(first_name__icontains=value)
        | Q(last_name__icontains=value)
        | Q(phone__icontains=value)
        | Q(nin__icontains=value)
    )


class FarmerFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    state = django_filters.CharFilter(field_name='state', lookup_expr='icontains')
    cluster = django_filters.UUIDFilter(field_name='cluster_id')
    status = django_filters.CharFilter(method='filter_status')
    startDate = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    endDate = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Farmer
        fields = ['search', 'state', 'cluster', 'status', 'startDate', 'endDate']

    def filter_search(self, queryset, name, value):
        return search_farmers(queryset, value)

    def filter_status(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        return queryset.filter(status=value)
