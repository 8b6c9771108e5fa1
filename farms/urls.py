from django.urls import path

from .views import FarmAnalyticsView, FarmDetailView, FarmGeoJSONView, FarmListView

app_name = 'farms'

urlpatterns = [
    path('', FarmListView.as_view(), name='farm_list'),
    path('geojson/', FarmGeoJSONView.as_view(), name='farm_geojson'),
    path('analytics/', FarmAnalyticsView.as_view(), name='farm_analytics'),
    path('<uuid:farm_id>/', FarmDetailView.as_view(), name='farm_detail'),
]
