"""
License models for the fleet app.

Contains LicenseCategory (driving licence classes such as B, C, D) and
OrganizationLicenseRule, the per-organization RSE thresholds attached to
a license category.
"""

import uuid
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator

from common.validators import validate_daily_hours, validate_speed_kmh


class LicenseCategory(models.Model):
    """
    A driving licence category configured by an organization.

    Attributes:
        id: UUID primary key
        organization: Owning tenant
        code: Short licence code (e.g. 'B', 'D')
        name: Display name
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the license category"
    )

    organization = models.ForeignKey(
        'fleet.Organization',
        on_delete=models.CASCADE,
        related_name='license_categories',
    )

    code = models.CharField(
        max_length=10,
        help_text="Licence code (e.g. 'B', 'C', 'D')"
    )

    name = models.CharField(max_length=100)

    description = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fleet_license_category'
        ordering = ['code']
        verbose_name = 'License Category'
        verbose_name_plural = 'License Categories'
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'code'],
                name='unique_license_code_per_organization',
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"


class OrganizationLicenseRule(models.Model):
    """
    RSE driving-time and rest-time thresholds for one license category.

    All thresholds are organization-specific; nothing is hard-coded in the
    compliance engine. A capped average speed is normally only configured
    for heavy-vehicle licences.

    Attributes:
        max_daily_driving_hours: Ceiling on cumulative driving in a duty day
        max_daily_amplitude_hours: Ceiling on duty start-to-end span
        break_minutes_per_driving_block: Mandatory break length
        driving_block_hours_for_break: Continuous driving that triggers a break
        capped_average_speed_kmh: Conservative average speed, optional
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the license rule"
    )

    organization = models.ForeignKey(
        'fleet.Organization',
        on_delete=models.CASCADE,
        related_name='license_rules',
    )

    license_category = models.ForeignKey(
        LicenseCategory,
        on_delete=models.PROTECT,
        related_name='rules',
    )

    max_daily_driving_hours = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        validators=[validate_daily_hours],
        help_text="Maximum daily driving time (hours)"
    )

    max_daily_amplitude_hours = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        validators=[validate_daily_hours],
        help_text="Maximum daily amplitude, duty start to duty end (hours)"
    )

    break_minutes_per_driving_block = models.PositiveIntegerField(
        default=45,
        help_text="Mandatory break length (minutes)"
    )

    driving_block_hours_for_break = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('4.5'),
        validators=[MinValueValidator(Decimal('0.25'))],
        help_text="Driving time that triggers a mandatory break (hours)"
    )

    capped_average_speed_kmh = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[validate_speed_kmh],
        help_text="Capped average speed for duration estimates (km/h)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fleet_organization_license_rule'
        ordering = ['license_category__code']
        verbose_name = 'Organization License Rule'
        verbose_name_plural = 'Organization License Rules'
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'license_category'],
                name='unique_rule_per_license_category',
            ),
        ]
        indexes = [
            models.Index(fields=['organization'], name='fleet_rule_org_idx'),
        ]

    def __str__(self):
        return (
            f"{self.license_category.code}: {self.max_daily_driving_hours}h driving / "
            f"{self.max_daily_amplitude_hours}h amplitude"
        )

    @property
    def is_heavy_vehicle_rule(self):
        """Heavy-vehicle rules are the ones carrying a speed cap."""
        return self.capped_average_speed_kmh is not None
