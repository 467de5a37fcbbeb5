"""
Driver model for the fleet app.
"""

import uuid
from django.db import models
from django.core.validators import MinValueValidator


class Driver(models.Model):
    """
    A driver employed or contracted by an organization.

    The driver row doubles as the lock target when a cumulative compliance
    check must be serialized against concurrent assignments.

    Attributes:
        id: UUID primary key
        organization: Owning tenant
        first_name / last_name: Driver identity
        hourly_cost: Optional individual cost per hour
        is_active: Whether the driver can be assigned missions
    """

    class EmploymentStatus(models.TextChoices):
        EMPLOYEE = 'EMPLOYEE', 'Employee'
        CONTRACTOR = 'CONTRACTOR', 'Contractor'
        FREELANCE = 'FREELANCE', 'Freelance'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the driver"
    )

    organization = models.ForeignKey(
        'fleet.Organization',
        on_delete=models.CASCADE,
        related_name='drivers',
    )

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)

    email = models.EmailField(blank=True)

    employment_status = models.CharField(
        max_length=20,
        choices=EmploymentStatus.choices,
        default=EmploymentStatus.EMPLOYEE,
    )

    hourly_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Individual hourly cost (EUR), optional"
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fleet_driver'
        ordering = ['last_name', 'first_name']
        verbose_name = 'Driver'
        verbose_name_plural = 'Drivers'
        indexes = [
            models.Index(fields=['organization', 'is_active'], name='fleet_driver_org_active_idx'),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
