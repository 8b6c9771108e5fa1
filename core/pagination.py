"""
Pagination shared by the registry list endpoints.
"""

import math

from rest_framework.pagination import PageNumberPagination


class RegistryPagination(PageNumberPagination):
    """
    Page/limit pagination.

    Lists are returned as ``{<key>: [...], 'pagination': {page, limit, total, pages}}``
    so dashboards can render page controls without a second request.
    """
    page_size = 50
    page_query_param = 'page'
    page_size_query_param = 'limit'
    max_page_size = 200

    def get_paginated_response_data(self, data, key='results'):
        """Return pagination metadata along with results."""
        limit = self.get_page_size(self.request)
        total = self.page.paginator.count
        return {
            key: data,
            'pagination': {
                'page': self.page.number,
                'limit': limit,
                'total': total,
                'pages': math.ceil(total / limit) if limit else 0,
            },
        }
