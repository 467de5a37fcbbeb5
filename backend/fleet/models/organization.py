"""
Organization models for the fleet app.

Contains the tenant entity and its per-organization pricing settings.
Every other fleet record belongs to exactly one organization.
"""

import uuid
from django.db import models
from django.core.validators import MinValueValidator


class Organization(models.Model):
    """
    A tenant of the transport ERP.

    Attributes:
        id: UUID primary key
        name: Display name of the organization
        slug: URL-safe identifier
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the organization"
    )

    name = models.CharField(
        max_length=150,
        help_text="Organization display name"
    )

    slug = models.SlugField(
        max_length=80,
        unique=True,
        help_text="URL-safe organization identifier"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fleet_organization'
        ordering = ['name']
        verbose_name = 'Organization'
        verbose_name_plural = 'Organizations'

    def __str__(self):
        return self.name


class OrganizationPricingSettings(models.Model):
    """
    Cost parameters used when pricing staffing alternatives.

    Any field left empty falls back to the configured default
    (see RSE_COMPLIANCE['DEFAULT_COST_PARAMETERS']).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.OneToOneField(
        Organization,
        on_delete=models.CASCADE,
        related_name='pricing_settings',
        help_text="Organization these settings belong to"
    )

    driver_hourly_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Driver cost per hour (EUR)"
    )

    hotel_cost_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Overnight accommodation cost (EUR)"
    )

    meal_allowance_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Driver meal allowance per day (EUR)"
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fleet_organization_pricing_settings'
        verbose_name = 'Organization Pricing Settings'
        verbose_name_plural = 'Organization Pricing Settings'

    def __str__(self):
        return f"Pricing settings for {self.organization}"
