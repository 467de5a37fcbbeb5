"""
RSE Compliance API Serializers.

Provides input validation for the compliance API endpoints. Requests that
fail validation are answered with 400 before any service is called;
responses are produced by the services' ``to_dict()`` methods.
"""

from rest_framework import serializers

from fleet.models import RegulatoryCategory
from .models import ComplianceAuditLog
from .services.types import ComplianceValidationInput, TripAnalysis


class TripSegmentSerializer(serializers.Serializer):
    """One trip segment: duration and optional distance."""

    duration_minutes = serializers.FloatField(
        min_value=0,
        help_text="Segment duration in minutes"
    )

    distance_km = serializers.FloatField(
        min_value=0,
        required=False,
        allow_null=True,
        help_text="Segment distance in kilometres"
    )


class TripSegmentsSerializer(serializers.Serializer):
    """
    Approach / service / return segments.

    ``return`` is a Python keyword, so that field is added in get_fields().
    """

    approach = TripSegmentSerializer(required=False, allow_null=True)
    service = TripSegmentSerializer()

    def get_fields(self):
        fields = super().get_fields()
        fields['return'] = TripSegmentSerializer(required=False, allow_null=True)
        return fields


class TripAnalysisSerializer(serializers.Serializer):
    segments = TripSegmentsSerializer()

    total_duration_minutes = serializers.FloatField(
        min_value=0,
        required=False,
        allow_null=True,
    )


class ValidateComplianceSerializer(serializers.Serializer):
    """
    Request body for /validate/ and /alternatives/.

    The calling organization comes from the X-Organization-Id header.
    """

    vehicle_category_id = serializers.CharField(max_length=64)

    regulatory_category = serializers.ChoiceField(
        choices=RegulatoryCategory.choices,
        help_text="LIGHT or HEAVY"
    )

    license_category_id = serializers.CharField(
        max_length=64,
        required=False,
        allow_null=True,
        allow_blank=True,
    )

    trip_analysis = TripAnalysisSerializer()

    pickup_at = serializers.DateTimeField()

    estimated_dropoff_at = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, data):
        """Dropoff cannot precede pickup."""
        dropoff = data.get('estimated_dropoff_at')
        if dropoff is not None and dropoff < data['pickup_at']:
            raise serializers.ValidationError({
                'estimated_dropoff_at': 'Estimated dropoff cannot be before pickup'
            })
        return data

    def to_validation_input(self, organization_id):
        """Build the service input from validated data."""
        data = self.validated_data
        return ComplianceValidationInput(
            organization_id=str(organization_id),
            vehicle_category_id=data['vehicle_category_id'],
            regulatory_category=data['regulatory_category'],
            license_category_id=data.get('license_category_id') or None,
            trip_analysis=TripAnalysis.from_dict(data['trip_analysis']),
            pickup_at=data['pickup_at'],
            estimated_dropoff_at=data.get('estimated_dropoff_at'),
        )


class CheckCumulativeSerializer(serializers.Serializer):
    """
    Request body for /check-cumulative/.

    ``additional_amplitude_minutes`` defaults to the driving minutes and
    ``date`` to today's business date.
    """

    driver_id = serializers.UUIDField()

    date = serializers.DateField(required=False, allow_null=True)

    regulatory_category = serializers.ChoiceField(choices=RegulatoryCategory.choices)

    license_category_id = serializers.CharField(
        max_length=64,
        required=False,
        allow_null=True,
        allow_blank=True,
    )

    additional_driving_minutes = serializers.FloatField(min_value=0)

    additional_amplitude_minutes = serializers.FloatField(
        min_value=0,
        required=False,
        allow_null=True,
    )

    quote_id = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)
    mission_id = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)
    vehicle_category_id = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)

    log_decision = serializers.BooleanField(default=False)

    reserve = serializers.BooleanField(
        default=False,
        help_text="Record the activity atomically unless the decision is BLOCKED"
    )

    def validate(self, data):
        if data.get('additional_amplitude_minutes') is None:
            data['additional_amplitude_minutes'] = data['additional_driving_minutes']
        return data


class ComplianceAuditLogSerializer(serializers.ModelSerializer):
    """Read-only representation of an audit record."""

    driver_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ComplianceAuditLog
        fields = [
            'id',
            'driver_id',
            'quote_id',
            'mission_id',
            'vehicle_category_id',
            'regulatory_category',
            'decision',
            'violations',
            'warnings',
            'reason',
            'counters_snapshot',
            'timestamp',
        ]
        read_only_fields = fields
