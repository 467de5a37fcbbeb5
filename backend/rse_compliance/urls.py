"""
URL configuration for RSE Compliance API endpoints.

Mounted under /api/compliance/.
"""

from django.urls import path
from .views import (
    ComplianceValidationViewSet,
    RSERulesViewSet,
    CumulativeComplianceViewSet,
    DriverComplianceViewSet,
)

urlpatterns = [
    # Single-trip validation
    path('validate/',
         ComplianceValidationViewSet.as_view({'post': 'validate'}),
         name='compliance-validate'),
    path('alternatives/',
         ComplianceValidationViewSet.as_view({'post': 'alternatives'}),
         name='compliance-alternatives'),

    # Rule lookup
    path('rules/',
         RSERulesViewSet.as_view({'get': 'list'}),
         name='compliance-rules-list'),
    path('rules/vehicle/<str:vehicle_category_id>/',
         RSERulesViewSet.as_view({'get': 'by_vehicle'}),
         name='compliance-rules-by-vehicle'),
    path('rules/<str:license_category_id>/',
         RSERulesViewSet.as_view({'get': 'retrieve'}),
         name='compliance-rules-detail'),

    # Cumulative driver checks
    path('check-cumulative/',
         CumulativeComplianceViewSet.as_view({'post': 'check'}),
         name='compliance-check-cumulative'),
    path('drivers/<str:driver_id>/snapshot/',
         DriverComplianceViewSet.as_view({'get': 'snapshot'}),
         name='compliance-driver-snapshot'),
    path('drivers/<str:driver_id>/audit-logs/',
         DriverComplianceViewSet.as_view({'get': 'audit_logs'}),
         name='compliance-driver-audit-logs'),
]

# API Documentation - Available Endpoints:
"""
GET Endpoints:
- /api/compliance/rules/?vehicle_category_id=<id> - List configured RSE rules
- /api/compliance/rules/<license_category_id>/ - Rules of a license category
- /api/compliance/rules/vehicle/<vehicle_category_id>/ - Rules applicable to a vehicle category
- /api/compliance/drivers/<driver_id>/snapshot/?date=YYYY-MM-DD - Daily counters and status
- /api/compliance/drivers/<driver_id>/audit-logs/?limit=<n> - Recent compliance decisions

POST Endpoints:
- /api/compliance/validate/ - Validate a trip against RSE rules
- /api/compliance/alternatives/ - Staffing alternatives for a non-compliant trip
- /api/compliance/check-cumulative/ - Cumulative check before assigning a driver

All endpoints require the X-Organization-Id header.
"""
