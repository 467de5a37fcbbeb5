"""
Driver activity model for RSE cumulative counters.

Each row is one mission's contribution to a driver's duty day. Daily
counters are always aggregated from these rows on read, never stored as a
running total.
"""

import uuid
from django.db import models
from django.db.models import Count, Max, Min, Sum
from django.core.validators import MinValueValidator

from fleet.models import RegulatoryCategory


class DriverActivityQuerySet(models.QuerySet):
    """Query helpers for counter aggregation."""

    def counted(self):
        """Activities that count toward a driver's daily counters."""
        return self.filter(status__in=DriverActivity.COUNTED_STATUSES)

    def for_driver_day(self, organization_id, driver_id, date, regulatory_category=None):
        queryset = self.filter(
            organization_id=organization_id,
            driver_id=driver_id,
            date=date,
        )
        if regulatory_category is not None:
            queryset = queryset.filter(regulatory_category=regulatory_category)
        return queryset

    def totals(self):
        return self.aggregate(
            driving_minutes=Sum('driving_minutes'),
            amplitude_minutes=Sum('amplitude_minutes'),
            break_minutes=Sum('break_minutes'),
            activity_count=Count('id'),
            work_start_time=Min('work_start_time'),
            work_end_time=Max('work_end_time'),
        )


class DriverActivity(models.Model):
    """
    A driving activity attributed to a driver on a business date.

    Attributes:
        date: Business date (Europe/Paris calendar day)
        regulatory_category: Regime the activity counts under
        driving_minutes: Driving time contributed
        amplitude_minutes: Duty span contributed
        status: Only COMMITTED and COMPLETED count toward counters
    """

    class Status(models.TextChoices):
        PLANNED = 'PLANNED', 'Planned'
        COMMITTED = 'COMMITTED', 'Committed'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'

    COUNTED_STATUSES = [Status.COMMITTED, Status.COMPLETED]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the activity"
    )

    organization = models.ForeignKey(
        'fleet.Organization',
        on_delete=models.CASCADE,
        related_name='driver_activities',
    )

    driver = models.ForeignKey(
        'fleet.Driver',
        on_delete=models.CASCADE,
        related_name='activities',
    )

    date = models.DateField(help_text="Business date the activity counts toward")

    regulatory_category = models.CharField(
        max_length=10,
        choices=RegulatoryCategory.choices,
    )

    license_category = models.ForeignKey(
        'fleet.LicenseCategory',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='driver_activities',
    )

    mission_id = models.CharField(max_length=64, blank=True, null=True)
    quote_id = models.CharField(max_length=64, blank=True, null=True)

    driving_minutes = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )

    amplitude_minutes = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )

    break_minutes = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )

    work_start_time = models.DateTimeField(null=True, blank=True)
    work_end_time = models.DateTimeField(null=True, blank=True)

    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.COMMITTED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DriverActivityQuerySet.as_manager()

    class Meta:
        db_table = 'rse_driver_activity'
        ordering = ['date', 'work_start_time', 'created_at']
        verbose_name = 'Driver Activity'
        verbose_name_plural = 'Driver Activities'
        indexes = [
            models.Index(
                fields=['organization', 'driver', 'date', 'regulatory_category'],
                name='rse_activity_driver_day_idx',
            ),
        ]

    def __str__(self):
        return (
            f"{self.driver_id} {self.date} [{self.regulatory_category}] "
            f"{self.driving_minutes} min driving ({self.status})"
        )
