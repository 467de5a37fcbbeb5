"""
Admin configuration for RSE compliance models.

The audit log is exposed read-only; records are append-only.
"""

from django.contrib import admin
from .models import ComplianceAuditLog, DriverActivity


@admin.register(DriverActivity)
class DriverActivityAdmin(admin.ModelAdmin):
    list_display = ['driver', 'date', 'regulatory_category', 'driving_minutes', 'amplitude_minutes', 'status']
    list_filter = ['regulatory_category', 'status', 'date']
    search_fields = ['mission_id', 'quote_id', 'driver__last_name']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(ComplianceAuditLog)
class ComplianceAuditLogAdmin(admin.ModelAdmin):
    list_display = ['timestamp', 'driver', 'regulatory_category', 'decision', 'mission_id']
    list_filter = ['decision', 'regulatory_category']
    search_fields = ['mission_id', 'quote_id', 'reason']
    ordering = ['-timestamp']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
