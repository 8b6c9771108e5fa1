from django.contrib import admin

from .models import Certificate, Cluster, Farmer


class CertificateInline(admin.TabularInline):
    model = Certificate
    extra = 0
    readonly_fields = ('certificate_id', 'issued_date', 'status', 'qr_code')


@admin.register(Farmer)
class FarmerAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'nin', 'phone', 'state', 'lga', 'status', 'cluster', 'created_at')
    list_filter = ('status', 'gender', 'state', 'cluster')
    search_fields = ('first_name', 'last_name', 'nin', 'phone')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('agent',)
    inlines = [CertificateInline]


@admin.register(Cluster)
class ClusterAdmin(admin.ModelAdmin):
    list_display = ('title', 'cluster_lead_first_name', 'cluster_lead_last_name', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('title', 'cluster_lead_first_name', 'cluster_lead_last_name', 'cluster_lead_email')


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ('certificate_id', 'farmer', 'issued_date', 'status')
    list_filter = ('status',)
    search_fields = ('certificate_id', 'farmer__first_name', 'farmer__last_name', 'farmer__nin')
    raw_id_fields = ('farmer',)
