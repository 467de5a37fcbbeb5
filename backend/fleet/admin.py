"""
Admin configuration for fleet models.

Reference data (license rules, vehicle categories, drivers) is maintained
here rather than through dedicated API endpoints.
"""

from django.contrib import admin
from .models import (
    Organization,
    OrganizationPricingSettings,
    LicenseCategory,
    OrganizationLicenseRule,
    VehicleCategory,
    Driver,
)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'created_at']
    search_fields = ['name', 'slug']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(OrganizationPricingSettings)
class OrganizationPricingSettingsAdmin(admin.ModelAdmin):
    list_display = ['organization', 'driver_hourly_cost', 'hotel_cost_per_night', 'meal_allowance_per_day']


@admin.register(LicenseCategory)
class LicenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'organization']
    list_filter = ['organization']
    search_fields = ['code', 'name']


@admin.register(OrganizationLicenseRule)
class OrganizationLicenseRuleAdmin(admin.ModelAdmin):
    list_display = [
        'license_category',
        'organization',
        'max_daily_driving_hours',
        'max_daily_amplitude_hours',
        'break_minutes_per_driving_block',
        'driving_block_hours_for_break',
        'capped_average_speed_kmh',
    ]
    list_filter = ['organization']


@admin.register(VehicleCategory)
class VehicleCategoryAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'regulatory_category', 'organization']
    list_filter = ['regulatory_category', 'organization']
    search_fields = ['code', 'name']


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['last_name', 'first_name', 'organization', 'employment_status', 'is_active']
    list_filter = ['is_active', 'employment_status', 'organization']
    search_fields = ['first_name', 'last_name', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']
