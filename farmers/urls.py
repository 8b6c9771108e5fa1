from django.urls import path

from .views import (
    CertificateGenerateView,
    CertificateListView,
    CertificateVerifyView,
    ClusterDetailView,
    ClusterListView,
    FarmerDetailView,
    FarmerListView,
    NINLookupView,
)

app_name = 'farmers'

urlpatterns = [
    path('', FarmerListView.as_view(), name='farmer_list'),
    path('<uuid:farmer_id>/', FarmerDetailView.as_view(), name='farmer_detail'),
]

cluster_urlpatterns = [
    path('', ClusterListView.as_view(), name='cluster_list'),
    path('<uuid:cluster_id>/', ClusterDetailView.as_view(), name='cluster_detail'),
]

certificate_urlpatterns = [
    path('', CertificateListView.as_view(), name='certificate_list'),
    path('generate/', CertificateGenerateView.as_view(), name='certificate_generate'),
    path('verify/<str:certificate_id>/', CertificateVerifyView.as_view(), name='certificate_verify'),
]

nin_urlpatterns = [
    path('lookup/', NINLookupView.as_view(), name='nin_lookup'),
]
