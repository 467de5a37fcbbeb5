import uuid
from decimal import Decimal

import common.validators
import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the organization",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(help_text="Organization display name", max_length=150)),
                (
                    "slug",
                    models.SlugField(
                        help_text="URL-safe organization identifier",
                        max_length=80,
                        unique=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Organization",
                "verbose_name_plural": "Organizations",
                "db_table": "fleet_organization",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="LicenseCategory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the license category",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(help_text="Licence code (e.g. 'B', 'C', 'D')", max_length=10)),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="license_categories",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "License Category",
                "verbose_name_plural": "License Categories",
                "db_table": "fleet_license_category",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="VehicleCategory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the vehicle category",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=100)),
                (
                    "regulatory_category",
                    models.CharField(
                        choices=[("LIGHT", "Light vehicle"), ("HEAVY", "Heavy vehicle")],
                        default="LIGHT",
                        help_text="Regulatory regime (RSE applies to HEAVY only)",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vehicle_categories",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Vehicle Category",
                "verbose_name_plural": "Vehicle Categories",
                "db_table": "fleet_vehicle_category",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Driver",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the driver",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                (
                    "employment_status",
                    models.CharField(
                        choices=[
                            ("EMPLOYEE", "Employee"),
                            ("CONTRACTOR", "Contractor"),
                            ("FREELANCE", "Freelance"),
                        ],
                        default="EMPLOYEE",
                        max_length=20,
                    ),
                ),
                (
                    "hourly_cost",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Individual hourly cost (EUR), optional",
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="drivers",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Driver",
                "verbose_name_plural": "Drivers",
                "db_table": "fleet_driver",
                "ordering": ["last_name", "first_name"],
                "indexes": [
                    models.Index(fields=["organization", "is_active"], name="fleet_driver_org_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrganizationPricingSettings",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                (
                    "driver_hourly_cost",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Driver cost per hour (EUR)",
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "hotel_cost_per_night",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Overnight accommodation cost (EUR)",
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "meal_allowance_per_day",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Driver meal allowance per day (EUR)",
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.OneToOneField(
                        help_text="Organization these settings belong to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pricing_settings",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Organization Pricing Settings",
                "verbose_name_plural": "Organization Pricing Settings",
                "db_table": "fleet_organization_pricing_settings",
            },
        ),
        migrations.CreateModel(
            name="OrganizationLicenseRule",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the license rule",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "max_daily_driving_hours",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Maximum daily driving time (hours)",
                        max_digits=4,
                        validators=[common.validators.validate_daily_hours],
                    ),
                ),
                (
                    "max_daily_amplitude_hours",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Maximum daily amplitude, duty start to duty end (hours)",
                        max_digits=4,
                        validators=[common.validators.validate_daily_hours],
                    ),
                ),
                (
                    "break_minutes_per_driving_block",
                    models.PositiveIntegerField(default=45, help_text="Mandatory break length (minutes)"),
                ),
                (
                    "driving_block_hours_for_break",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("4.5"),
                        help_text="Driving time that triggers a mandatory break (hours)",
                        max_digits=4,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.25"))],
                    ),
                ),
                (
                    "capped_average_speed_kmh",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Capped average speed for duration estimates (km/h)",
                        null=True,
                        validators=[common.validators.validate_speed_kmh],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "license_category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rules",
                        to="fleet.licensecategory",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="license_rules",
                        to="fleet.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Organization License Rule",
                "verbose_name_plural": "Organization License Rules",
                "db_table": "fleet_organization_license_rule",
                "ordering": ["license_category__code"],
                "indexes": [
                    models.Index(fields=["organization"], name="fleet_rule_org_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="licensecategory",
            constraint=models.UniqueConstraint(
                fields=("organization", "code"),
                name="unique_license_code_per_organization",
            ),
        ),
        migrations.AddConstraint(
            model_name="organizationlicenserule",
            constraint=models.UniqueConstraint(
                fields=("organization", "license_category"),
                name="unique_rule_per_license_category",
            ),
        ),
    ]
