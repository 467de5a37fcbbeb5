"""
Tests for tenant resolution and fleet reference data helpers.
"""

import uuid

import pytest
from django.core.exceptions import ValidationError
from django.test import RequestFactory

from common.validators import validate_daily_hours, validate_speed_kmh
from fleet.models import Driver, OrganizationLicenseRule
from fleet.tenancy import (
    OrganizationResolutionError,
    get_request_organization,
    get_tenant_object,
)
from rse_compliance.tests.factories import create_driver, create_license_rule, create_organization


@pytest.mark.django_db
class TestGetRequestOrganization:

    def setup_method(self):
        self.factory = RequestFactory()

    def test_resolves_organization_from_header(self, organization):
        request = self.factory.get('/', HTTP_X_ORGANIZATION_ID=str(organization.id))

        assert get_request_organization(request) == organization

    def test_missing_header(self):
        with pytest.raises(OrganizationResolutionError) as excinfo:
            get_request_organization(self.factory.get('/'))

        assert excinfo.value.status_code == 400

    def test_invalid_header(self):
        request = self.factory.get('/', HTTP_X_ORGANIZATION_ID='acme')
        with pytest.raises(OrganizationResolutionError) as excinfo:
            get_request_organization(request)

        assert excinfo.value.status_code == 400

    def test_unknown_organization(self):
        request = self.factory.get('/', HTTP_X_ORGANIZATION_ID=str(uuid.uuid4()))
        with pytest.raises(OrganizationResolutionError) as excinfo:
            get_request_organization(request)

        assert excinfo.value.status_code == 404


@pytest.mark.django_db
class TestGetTenantObject:

    def test_returns_own_object(self, organization, driver):
        assert get_tenant_object(Driver.objects.all(), organization, driver.id) == driver

    def test_hides_other_tenant_object(self, organization):
        other_driver = create_driver(create_organization("Other"))

        assert get_tenant_object(Driver.objects.all(), organization, other_driver.id) is None

    def test_malformed_id(self, organization):
        assert get_tenant_object(Driver.objects.all(), organization, 'driver-1') is None


@pytest.mark.django_db
class TestLicenseRules:

    def test_heavy_rule_flag(self, organization):
        capped = create_license_rule(organization, code="D", capped_average_speed_kmh=80)
        uncapped = create_license_rule(organization, code="B")

        assert capped.is_heavy_vehicle_rule
        assert not uncapped.is_heavy_vehicle_rule

    def test_rules_ordered_by_licence_code(self, organization):
        create_license_rule(organization, code="D")
        create_license_rule(organization, code="C")

        codes = [rule.license_category.code for rule in OrganizationLicenseRule.objects.all()]
        assert codes == ["C", "D"]


class TestValidators:

    def test_daily_hours_bounds(self):
        validate_daily_hours(0)
        validate_daily_hours(24)
        with pytest.raises(ValidationError):
            validate_daily_hours(25)
        with pytest.raises(ValidationError):
            validate_daily_hours(-1)

    def test_speed_bounds(self):
        validate_speed_kmh(80)
        with pytest.raises(ValidationError):
            validate_speed_kmh(0)
        with pytest.raises(ValidationError):
            validate_speed_kmh(200)
