"""
Compliance audit log model.

Append-only record of every compliance decision taken for a driver
assignment. Rows are inserted once and never updated or deleted through
the ORM.
"""

import uuid
from django.db import models

from fleet.models import RegulatoryCategory


class ComplianceDecision(models.TextChoices):
    APPROVED = 'APPROVED', 'Approved'
    WARNING = 'WARNING', 'Approved with warnings'
    BLOCKED = 'BLOCKED', 'Blocked'


class AppendOnlyError(Exception):
    """Raised on an attempt to modify or delete an audit record."""
    pass


class ComplianceAuditLogQuerySet(models.QuerySet):

    def update(self, **kwargs):
        raise AppendOnlyError("Compliance audit logs cannot be updated")

    def delete(self):
        raise AppendOnlyError("Compliance audit logs cannot be deleted")


class ComplianceAuditLog(models.Model):
    """
    One compliance decision for a driver.

    Attributes:
        decision: APPROVED, WARNING or BLOCKED
        violations / warnings: Serialized findings at decision time
        counters_snapshot: Current and projected counters at decision time
        reason: Human-readable explanation
        timestamp: When the decision was taken
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the audit record"
    )

    organization = models.ForeignKey(
        'fleet.Organization',
        on_delete=models.CASCADE,
        related_name='compliance_audit_logs',
    )

    driver = models.ForeignKey(
        'fleet.Driver',
        on_delete=models.CASCADE,
        related_name='compliance_audit_logs',
    )

    quote_id = models.CharField(max_length=64, blank=True, null=True)
    mission_id = models.CharField(max_length=64, blank=True, null=True)
    vehicle_category_id = models.CharField(max_length=64, blank=True, null=True)

    regulatory_category = models.CharField(
        max_length=10,
        choices=RegulatoryCategory.choices,
    )

    decision = models.CharField(
        max_length=10,
        choices=ComplianceDecision.choices,
        db_index=True,
    )

    violations = models.JSONField(default=list, blank=True)
    warnings = models.JSONField(default=list, blank=True)
    reason = models.TextField()
    counters_snapshot = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = ComplianceAuditLogQuerySet.as_manager()

    class Meta:
        db_table = 'rse_compliance_audit_log'
        ordering = ['-timestamp']
        verbose_name = 'Compliance Audit Log'
        verbose_name_plural = 'Compliance Audit Logs'
        indexes = [
            models.Index(fields=['organization', 'driver', '-timestamp'], name='rse_audit_driver_time_idx'),
        ]

    def __str__(self):
        return f"{self.decision} for driver {self.driver_id} at {self.timestamp}"

    def save(self, *args, **kwargs):
        """Insert only; an existing record is never rewritten."""
        if not self._state.adding:
            raise AppendOnlyError("Compliance audit logs cannot be updated")
        kwargs['force_insert'] = True
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError("Compliance audit logs cannot be deleted")
