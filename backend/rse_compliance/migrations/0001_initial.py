import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("fleet", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DriverActivity",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the activity",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("date", models.DateField(help_text="Business date the activity counts toward")),
                (
                    "regulatory_category",
                    models.CharField(
                        choices=[("LIGHT", "Light vehicle"), ("HEAVY", "Heavy vehicle")],
                        max_length=10,
                    ),
                ),
                ("mission_id", models.CharField(blank=True, max_length=64, null=True)),
                ("quote_id", models.CharField(blank=True, max_length=64, null=True)),
                (
                    "driving_minutes",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "amplitude_minutes",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "break_minutes",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=8,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("work_start_time", models.DateTimeField(blank=True, null=True)),
                ("work_end_time", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PLANNED", "Planned"),
                            ("COMMITTED", "Committed"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="COMMITTED",
                        max_length=12,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "driver",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activities",
                        to="fleet.driver",
                    ),
                ),
                (
                    "license_category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="driver_activities",
                        to="fleet.licensecategory",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="driver_activities",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Driver Activity",
                "verbose_name_plural": "Driver Activities",
                "db_table": "rse_driver_activity",
                "ordering": ["date", "work_start_time", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["organization", "driver", "date", "regulatory_category"],
                        name="rse_activity_driver_day_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplianceAuditLog",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the audit record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("quote_id", models.CharField(blank=True, max_length=64, null=True)),
                ("mission_id", models.CharField(blank=True, max_length=64, null=True)),
                ("vehicle_category_id", models.CharField(blank=True, max_length=64, null=True)),
                (
                    "regulatory_category",
                    models.CharField(
                        choices=[("LIGHT", "Light vehicle"), ("HEAVY", "Heavy vehicle")],
                        max_length=10,
                    ),
                ),
                (
                    "decision",
                    models.CharField(
                        choices=[
                            ("APPROVED", "Approved"),
                            ("WARNING", "Approved with warnings"),
                            ("BLOCKED", "Blocked"),
                        ],
                        db_index=True,
                        max_length=10,
                    ),
                ),
                ("violations", models.JSONField(blank=True, default=list)),
                ("warnings", models.JSONField(blank=True, default=list)),
                ("reason", models.TextField()),
                ("counters_snapshot", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "driver",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="compliance_audit_logs",
                        to="fleet.driver",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="compliance_audit_logs",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Compliance Audit Log",
                "verbose_name_plural": "Compliance Audit Logs",
                "db_table": "rse_compliance_audit_log",
                "ordering": ["-timestamp"],
                "indexes": [
                    models.Index(
                        fields=["organization", "driver", "-timestamp"],
                        name="rse_audit_driver_time_idx",
                    ),
                ],
            },
        ),
    ]
