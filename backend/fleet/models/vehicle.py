"""
Vehicle category model for the fleet app.

Vehicle categories carry the regulatory category (LIGHT or HEAVY) that
decides whether RSE driving-time rules apply to a mission.
"""

import uuid
from django.db import models


class RegulatoryCategory(models.TextChoices):
    """Regulatory regime of a vehicle. RSE rules only apply to HEAVY."""
    LIGHT = 'LIGHT', 'Light vehicle'
    HEAVY = 'HEAVY', 'Heavy vehicle'


class VehicleCategory(models.Model):
    """
    A category of vehicles offered by an organization (sedan, van, coach...).

    Attributes:
        id: UUID primary key
        organization: Owning tenant
        code: Short category code
        name: Display name
        regulatory_category: LIGHT or HEAVY
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the vehicle category"
    )

    organization = models.ForeignKey(
        'fleet.Organization',
        on_delete=models.CASCADE,
        related_name='vehicle_categories',
    )

    code = models.CharField(max_length=20)

    name = models.CharField(max_length=100)

    regulatory_category = models.CharField(
        max_length=10,
        choices=RegulatoryCategory.choices,
        default=RegulatoryCategory.LIGHT,
        help_text="Regulatory regime (RSE applies to HEAVY only)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fleet_vehicle_category'
        ordering = ['code']
        verbose_name = 'Vehicle Category'
        verbose_name_plural = 'Vehicle Categories'

    def __str__(self):
        return f"{self.name} ({self.get_regulatory_category_display()})"

    @property
    def is_heavy(self):
        return self.regulatory_category == RegulatoryCategory.HEAVY

    def to_summary(self):
        """Compact representation used in API responses."""
        return {
            'id': str(self.id),
            'name': self.name,
            'code': self.code,
            'regulatory_category': self.regulatory_category,
        }
