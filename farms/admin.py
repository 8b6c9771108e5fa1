from django.contrib import admin

from .models import Farm


@admin.register(Farm)
class FarmAdmin(admin.ModelAdmin):
    list_display = ('farmer', 'primary_crop', 'farm_size', 'farm_state', 'farm_local_government', 'created_at')
    list_filter = ('farm_state', 'primary_crop', 'soil_type')
    search_fields = ('farmer__first_name', 'farmer__last_name', 'farmer__nin', 'primary_crop')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('farmer',)
