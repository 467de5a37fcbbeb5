"""
Shared pytest fixtures.
"""

import pytest

from rse_compliance.tests.factories import (
    create_driver,
    create_license_rule,
    create_organization,
    create_vehicle_category,
)


@pytest.fixture
def organization(db):
    return create_organization()


@pytest.fixture
def heavy_rule(organization):
    """D licence: 9h driving, 12h amplitude, 80 km/h cap."""
    return create_license_rule(organization, code="D", capped_average_speed_kmh=80)


@pytest.fixture
def driver(organization):
    return create_driver(organization)


@pytest.fixture
def heavy_vehicle(organization):
    return create_vehicle_category(organization)
