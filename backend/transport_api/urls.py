"""
URL configuration for the transport_api project.

Mounts the admin and the RSE compliance API. Reference data (organizations,
license rules, drivers) is maintained through the admin.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def api_root(request):
    """API root endpoint with available endpoints."""
    return JsonResponse({
        'message': 'Transport Operations API',
        'version': '1.0',
        'endpoints': {
            'compliance': '/api/compliance/',
            'admin': '/admin/',
        },
        'documentation': {
            'compliance': {
                'description': 'RSE driving-time / amplitude compliance for heavy-vehicle missions',
                'endpoints': {
                    'validate': 'POST /api/compliance/validate/ - Validate a trip against RSE rules',
                    'alternatives': 'POST /api/compliance/alternatives/ - Staffing alternatives for a non-compliant trip',
                    'check_cumulative': 'POST /api/compliance/check-cumulative/ - Check a driver\'s daily counters before assignment',
                    'rules': 'GET /api/compliance/rules/ - List configured RSE rules',
                    'rules_for_license': 'GET /api/compliance/rules/<license_category_id>/ - Rules for a license category',
                    'rules_for_vehicle': 'GET /api/compliance/rules/vehicle/<vehicle_category_id>/ - Rules for a vehicle category',
                    'snapshot': 'GET /api/compliance/drivers/<driver_id>/snapshot/ - Driver daily counters',
                    'audit_logs': 'GET /api/compliance/drivers/<driver_id>/audit-logs/ - Driver compliance decisions',
                }
            },
        }
    })


urlpatterns = [
    # Admin interface
    path("admin/", admin.site.urls),

    # API root
    path("api/", api_root, name='api-root'),

    # RSE Compliance API
    path("api/compliance/", include("rse_compliance.urls")),
]
