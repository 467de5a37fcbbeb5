"""
Tests for the RSE Compliance Validator Service.

Covers speed capping, daily driving/amplitude limits, break warnings and
the presentation summary.
"""

import pytest
from datetime import timedelta

from rse_compliance.services.compliance_validator import (
    ComplianceValidationError,
    ComplianceValidatorService,
    calculate_required_breaks,
    get_compliance_summary,
    is_trip_compliant,
    recalculate_with_capped_speed,
)
from rse_compliance.services.types import Segment, ViolationKind, WarningKind
from rse_compliance.tests.factories import PICKUP_AT, make_input, make_rules, make_trip


class TestExemptions:
    """LIGHT vehicles and missing rules never produce violations."""

    def setup_method(self):
        self.validator = ComplianceValidatorService(warning_threshold=0.9)

    def test_light_vehicle_always_compliant(self):
        """LIGHT trips pass whatever their length."""
        for minutes in (0, 60, 600, 1440, 5000):
            result = self.validator.validate(
                make_input(make_trip(minutes, 2000), regulatory_category="LIGHT"),
                make_rules(capped_average_speed_kmh=80),
            )

            assert result.is_compliant
            assert result.violations == []
            assert result.warnings == []
            assert result.adjusted_trip_analysis.service.duration_minutes == minutes

    def test_heavy_without_rules_is_compliant(self):
        """A HEAVY trip with no configured rules passes untouched."""
        trip = make_trip(1200, 1500)
        result = self.validator.validate(make_input(trip), None)

        assert result.is_compliant
        assert result.adjusted_trip_analysis == trip
        assert result.rules_used is None
        assert result.rules_applied == []

    def test_zero_duration_trip_compliant(self):
        result = self.validator.validate(make_input(make_trip(0)), make_rules())

        assert result.is_compliant
        assert result.warnings == []
        assert result.adjusted_durations.total_driving_minutes == 0


class TestDailyLimits:
    """Driving and amplitude ceilings."""

    def setup_method(self):
        self.validator = ComplianceValidatorService(warning_threshold=0.9)
        self.rules = make_rules(max_daily_driving_hours=9, max_daily_amplitude_hours=12)

    def test_driving_limit_exceeded(self):
        """10h of driving against a 9h limit is a single driving violation."""
        result = self.validator.validate(make_input(make_trip(600)), self.rules)

        assert not result.is_compliant
        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.kind == ViolationKind.DAILY_DRIVING_EXCEEDED
        assert violation.actual == 10.0
        assert violation.limit == 9
        assert violation.unit == "hours"

    def test_amplitude_from_dropoff_window(self):
        """Amplitude uses pickup to dropoff when a dropoff time is given."""
        result = self.validator.validate(
            make_input(make_trip(300), estimated_dropoff_at=PICKUP_AT + timedelta(hours=13)),
            self.rules,
        )

        kinds = [v.kind for v in result.violations]
        assert kinds == [ViolationKind.DAILY_AMPLITUDE_EXCEEDED]
        assert result.adjusted_durations.total_amplitude_minutes == 780
        assert result.violations[0].actual == 13.0

    def test_amplitude_defaults_to_driving_without_dropoff(self):
        result = self.validator.validate(make_input(make_trip(300)), self.rules)

        assert result.adjusted_durations.total_amplitude_minutes == 300

    def test_segments_are_summed(self):
        """Approach, service and return all count as driving."""
        trip = make_trip(300, approach=(150, None), return_=(120, None))
        result = self.validator.validate(make_input(trip), self.rules)

        assert result.adjusted_durations.total_driving_minutes == 570
        assert [v.kind for v in result.violations] == [ViolationKind.DAILY_DRIVING_EXCEEDED]

    def test_exactly_at_limit_is_compliant(self):
        result = self.validator.validate(make_input(make_trip(540)), self.rules)

        assert result.is_compliant
        kinds = [w.kind for w in result.warnings]
        assert WarningKind.APPROACHING_DRIVING_LIMIT in kinds

    def test_approaching_driving_limit_warning(self):
        """500 minutes is 93% of 9h."""
        result = self.validator.validate(make_input(make_trip(500)), self.rules)

        assert result.is_compliant
        approaching = [w for w in result.warnings if w.kind == WarningKind.APPROACHING_DRIVING_LIMIT]
        assert len(approaching) == 1
        assert approaching[0].percent_of_limit == 93

    def test_monotonic_in_driving_time(self):
        """Adding driving minutes never removes a violation."""
        previous = set()
        for minutes in range(0, 1500, 30):
            result = self.validator.validate(make_input(make_trip(minutes)), self.rules)
            kinds = {v.kind for v in result.violations}
            assert previous <= kinds
            previous = kinds


class TestBreakRequirement:
    """Mandatory breaks are advisory warnings."""

    def setup_method(self):
        self.validator = ComplianceValidatorService(warning_threshold=0.9)
        self.rules = make_rules()

    def test_break_required_above_block(self):
        result = self.validator.validate(make_input(make_trip(300)), self.rules)

        breaks = [w for w in result.warnings if w.kind == WarningKind.BREAK_REQUIRED]
        assert len(breaks) == 1
        assert breaks[0].required_break_minutes == 45
        assert result.is_compliant

    def test_no_break_at_exactly_one_block(self):
        result = self.validator.validate(make_input(make_trip(270)), self.rules)

        assert not [w for w in result.warnings if w.kind == WarningKind.BREAK_REQUIRED]

    def test_required_break_count(self):
        assert calculate_required_breaks(270, 4.5) == 0
        assert calculate_required_breaks(300, 4.5) == 1
        assert calculate_required_breaks(540, 4.5) == 1
        assert calculate_required_breaks(600, 4.5) == 2


class TestSpeedCap:
    """Capped average speed only ever lengthens segments."""

    def setup_method(self):
        self.validator = ComplianceValidatorService(warning_threshold=0.9)

    def test_fast_trip_is_stretched_and_stays_compliant(self):
        """500 km in 300 min (100 km/h) at an 80 km/h cap becomes 375 min."""
        rules = make_rules(capped_average_speed_kmh=80)
        result = self.validator.validate(make_input(make_trip(300, 500)), rules)

        assert result.adjusted_trip_analysis.service.duration_minutes == 375
        assert result.adjusted_durations.total_driving_minutes == 375
        assert result.adjusted_durations.original_driving_minutes == 300
        assert result.adjusted_durations.capped_speed_applied
        assert result.is_compliant
        assert [w.kind for w in result.warnings] == [WarningKind.BREAK_REQUIRED]

    def test_capped_duration_rounds_up(self):
        """100 km at 70 km/h is 85.7 min, counted as 86."""
        segment, capped = recalculate_with_capped_speed(Segment(60, 100), 70)

        assert capped
        assert segment.duration_minutes == 86

    def test_slow_segment_unchanged(self):
        segment = Segment(120, 100)
        adjusted, capped = recalculate_with_capped_speed(segment, 80)

        assert not capped
        assert adjusted is segment

    def test_zero_distance_or_duration_never_capped(self):
        for segment in (Segment(60, 0), Segment(0, 100), Segment(60, None)):
            adjusted, capped = recalculate_with_capped_speed(segment, 80)
            assert not capped
            assert adjusted == segment

    def test_cap_never_decreases_duration(self):
        for cap in (50, 70, 80, 90, 110):
            for distance in (0, 10, 95, 250, 800):
                for minutes in (1, 30, 60, 200, 600):
                    adjusted, _ = recalculate_with_capped_speed(Segment(minutes, distance), cap)
                    assert adjusted.duration_minutes >= minutes

    def test_cap_disabled_when_none(self):
        result = self.validator.validate(make_input(make_trip(300, 500)), make_rules())

        assert result.adjusted_trip_analysis.service.duration_minutes == 300
        assert not result.adjusted_durations.capped_speed_applied

    def test_cap_can_turn_trip_non_compliant(self):
        """800 km in 480 min is 100 km/h; at 80 km/h it takes 10h."""
        rules = make_rules(capped_average_speed_kmh=80)
        result = self.validator.validate(make_input(make_trip(480, 800)), rules)

        assert result.adjusted_durations.total_driving_minutes == 600
        assert [v.kind for v in result.violations] == [ViolationKind.DAILY_DRIVING_EXCEEDED]


class TestSummary:

    def setup_method(self):
        self.validator = ComplianceValidatorService(warning_threshold=0.9)

    def test_summary_with_violations_and_warning(self):
        result = self.validator.validate(
            make_input(make_trip(660), estimated_dropoff_at=PICKUP_AT + timedelta(hours=13)),
            make_rules(),
        )
        summary = get_compliance_summary(result)

        assert summary["status"] == "VIOLATION"
        assert summary["message"] == "2 violations, 1 warning"
        assert summary["violation_count"] == 2
        assert summary["warning_count"] == 1

    def test_summary_compliant(self):
        result = self.validator.validate(make_input(make_trip(60)), make_rules())
        summary = get_compliance_summary(result)

        assert summary["status"] == "OK"
        assert summary["message"] == "Compliant"

    def test_summary_warning_only(self):
        result = self.validator.validate(make_input(make_trip(300)), make_rules())

        assert get_compliance_summary(result)["status"] == "WARNING"

    def test_is_trip_compliant(self):
        assert is_trip_compliant(make_input(make_trip(120)), make_rules())
        assert not is_trip_compliant(make_input(make_trip(700)), make_rules())

    def test_result_serialization(self):
        result = self.validator.validate(make_input(make_trip(600)), make_rules())
        data = result.to_dict()

        assert data["is_compliant"] is False
        assert data["violations"][0]["kind"] == "DAILY_DRIVING_EXCEEDED"
        assert data["violations"][0]["severity"] == "BLOCKING"
        assert data["adjusted_trip_analysis"]["segments"]["return"] is None
        assert data["rules_used"]["max_daily_driving_hours"] == 9.0


class TestValidationErrors:

    def test_non_numeric_duration_raises(self):
        trip = make_trip("ten hours")
        with pytest.raises(ComplianceValidationError):
            ComplianceValidatorService(warning_threshold=0.9).validate(make_input(trip), make_rules())
