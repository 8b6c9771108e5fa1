"""
Dashboard services module
"""

from .registry_analytics import RegistryAnalyticsService

__all__ = [
    'RegistryAnalyticsService',
]
