"""
Rule Repository.

Loads tenant-scoped RSE rules and alternative cost parameters from the fleet
models and converts them into the plain types consumed by the pure services.

Heavy-vehicle rule resolution keeps the existing convention: when no license
category is given, the rule set of a HEAVY vehicle category is the first
organization rule (by license code) that carries a capped average speed.
"""

import logging
import uuid
from typing import Dict, List, Optional

from django.db import DatabaseError

from fleet.models import (
    LicenseCategory,
    OrganizationLicenseRule,
    OrganizationPricingSettings,
    VehicleCategory,
)
from ..conf import get_setting
from .types import AlternativeCostParameters, RegulatoryCategory, RSERules

logger = logging.getLogger(__name__)


def rule_to_rse_rules(rule: OrganizationLicenseRule) -> RSERules:
    """Convert a stored rule (Decimal columns) into an RSERules value."""
    return RSERules(
        license_category_id=str(rule.license_category_id),
        license_category_code=rule.license_category.code,
        max_daily_driving_hours=float(rule.max_daily_driving_hours),
        max_daily_amplitude_hours=float(rule.max_daily_amplitude_hours),
        break_minutes_per_driving_block=int(rule.break_minutes_per_driving_block),
        driving_block_hours_for_break=float(rule.driving_block_hours_for_break),
        capped_average_speed_kmh=(
            float(rule.capped_average_speed_kmh)
            if rule.capped_average_speed_kmh is not None
            else None
        ),
    )


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class RuleRepository:
    """
    Read access to one organization's RSE configuration.

    Missing configuration is never an error: lookups return None and the
    caller reports ``has_rules: false``.
    """

    def __init__(self, organization, using: str = "default"):
        """``organization`` may be an Organization instance or its id."""
        self.organization = organization
        self.organization_id = getattr(organization, "pk", organization)
        self.using = using
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _rules(self):
        return (
            OrganizationLicenseRule.objects.using(self.using)
            .select_related("license_category")
            .filter(organization_id=self.organization_id)
        )

    def get_rules_for_license_category(self, license_category_id) -> Optional[RSERules]:
        """Exact rule for a license category, or None."""
        if not _is_uuid(license_category_id):
            return None
        try:
            rule = self._rules().filter(license_category_id=license_category_id).first()
        except DatabaseError as e:
            self.logger.error(f"Failed to load rules for license category {license_category_id}: {str(e)}")
            raise RuleResolutionError(f"Failed to load RSE rules: {str(e)}") from e
        return rule_to_rse_rules(rule) if rule else None

    def get_heavy_vehicle_rules(self) -> Optional[RSERules]:
        """First organization rule with a capped speed (by license code)."""
        try:
            rule = (
                self._rules()
                .filter(capped_average_speed_kmh__isnull=False)
                .order_by("license_category__code")
                .first()
            )
        except DatabaseError as e:
            self.logger.error(f"Failed to load heavy-vehicle rules: {str(e)}")
            raise RuleResolutionError(f"Failed to load RSE rules: {str(e)}") from e
        return rule_to_rse_rules(rule) if rule else None

    def get_rules_for_regulatory_category(
        self, regulatory_category, license_category_id=None
    ) -> Optional[RSERules]:
        """
        Rules for a regulatory regime.

        LIGHT never has rules. HEAVY uses the explicit license category when
        it has a rule, otherwise the heavy-vehicle shortcut.
        """
        if regulatory_category != RegulatoryCategory.HEAVY:
            return None
        if license_category_id:
            rules = self.get_rules_for_license_category(license_category_id)
            if rules is not None:
                return rules
            self.logger.debug(
                f"No rule for license category {license_category_id}; using heavy-vehicle rules"
            )
        return self.get_heavy_vehicle_rules()

    def get_license_category(self, license_category_id) -> Optional[LicenseCategory]:
        if not _is_uuid(license_category_id):
            return None
        return (
            LicenseCategory.objects.using(self.using)
            .filter(id=license_category_id, organization_id=self.organization_id)
            .first()
        )

    def get_vehicle_category(self, vehicle_category_id) -> Optional[VehicleCategory]:
        if not _is_uuid(vehicle_category_id):
            return None
        return (
            VehicleCategory.objects.using(self.using)
            .filter(id=vehicle_category_id, organization_id=self.organization_id)
            .first()
        )

    def get_rules_for_vehicle_category(self, vehicle_category_id) -> Optional[Dict]:
        """
        Resolve a vehicle category and its applicable rules.

        Returns:
            None when the vehicle category is not the tenant's, otherwise a
            dict with ``vehicle_category`` (model) and ``rules`` (RSERules or None)
        """
        vehicle_category = self.get_vehicle_category(vehicle_category_id)
        if vehicle_category is None:
            return None

        rules = self.get_rules_for_regulatory_category(vehicle_category.regulatory_category)
        if rules is None and vehicle_category.is_heavy:
            self.logger.warning(
                f"HEAVY vehicle category {vehicle_category.code} of organization "
                f"{self.organization_id} has no RSE rules configured"
            )
        return {"vehicle_category": vehicle_category, "rules": rules}

    def list_rules(self, vehicle_category_id=None) -> Optional[List[RSERules]]:
        """
        All configured rules for the organization.

        With a vehicle category filter, HEAVY keeps only capped-speed rules
        and LIGHT returns everything. Returns None for an unknown vehicle
        category.
        """
        rules = self._rules().order_by("license_category__code")
        if vehicle_category_id:
            vehicle_category = self.get_vehicle_category(vehicle_category_id)
            if vehicle_category is None:
                return None
            if vehicle_category.is_heavy:
                rules = rules.filter(capped_average_speed_kmh__isnull=False)
        return [rule_to_rse_rules(rule) for rule in rules]

    def get_cost_parameters(self) -> AlternativeCostParameters:
        """Organization pricing settings, with per-field fallback to defaults."""
        defaults = get_setting("DEFAULT_COST_PARAMETERS")
        pricing = (
            OrganizationPricingSettings.objects.using(self.using)
            .filter(organization_id=self.organization_id)
            .first()
        )

        def _value(name):
            stored = getattr(pricing, name, None) if pricing else None
            return float(stored) if stored is not None else float(defaults[name])

        return AlternativeCostParameters(
            driver_hourly_cost=_value("driver_hourly_cost"),
            hotel_cost_per_night=_value("hotel_cost_per_night"),
            meal_allowance_per_day=_value("meal_allowance_per_day"),
        )


class RuleResolutionError(Exception):
    """Exception raised when RSE rules cannot be loaded."""

    pass


class CategoryNotFoundError(Exception):
    """Exception raised when a referenced category does not belong to the organization."""

    pass
