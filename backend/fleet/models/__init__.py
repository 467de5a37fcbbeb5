"""
Fleet models package.

This package contains the tenant-scoped reference data consumed by the
RSE compliance engine, split into separate files for better modularity.
"""

from .organization import Organization, OrganizationPricingSettings
from .license import LicenseCategory, OrganizationLicenseRule
from .vehicle import RegulatoryCategory, VehicleCategory
from .driver import Driver

__all__ = [
    'Organization',
    'OrganizationPricingSettings',
    'LicenseCategory',
    'OrganizationLicenseRule',
    'RegulatoryCategory',
    'VehicleCategory',
    'Driver',
]
