from django.contrib import admin

from .models import Agent


@admin.register(Agent)
class AgentAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'email', 'phone', 'status', 'assigned_state', 'created_at')
    list_filter = ('status', 'assigned_state', 'gender')
    search_fields = ('first_name', 'last_name', 'email', 'phone', 'nin')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('user', 'created_by')
