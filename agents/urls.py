from django.urls import path

from .views import (
    AgentAnalyticsView,
    AgentApplicationView,
    AgentDetailView,
    AgentExportView,
    AgentListView,
)

app_name = 'agents'

urlpatterns = [
    path('', AgentListView.as_view(), name='agent_list'),
    path('analytics/', AgentAnalyticsView.as_view(), name='agent_analytics'),
    path('export/', AgentExportView.as_view(), name='agent_export'),
    path('<uuid:agent_id>/', AgentDetailView.as_view(), name='agent_detail'),
]

public_urlpatterns = [
    path('apply/', AgentApplicationView.as_view(), name='agent_apply'),
]
