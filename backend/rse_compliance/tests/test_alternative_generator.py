"""
Tests for the Alternative Generator Service.
"""

from rse_compliance.services.alternative_generator import (
    AlternativeGeneratorService,
    generate_alternatives,
)
from rse_compliance.services.compliance_validator import ComplianceValidatorService
from rse_compliance.services.types import (
    AdjustedDurations,
    AlternativeCostParameters,
    AlternativeType,
    ComplianceValidationResult,
    RegulatoryCategory,
    Violation,
    ViolationKind,
)
from rse_compliance.tests.factories import make_input, make_rules, make_trip

DEFAULT_COSTS = AlternativeCostParameters(
    driver_hourly_cost=25,
    hotel_cost_per_night=100,
    meal_allowance_per_day=30,
)


class TestAlternativeGenerator:
    """Test alternative generation for violating HEAVY trips."""

    def setup_method(self):
        self.validator = ComplianceValidatorService(warning_threshold=0.9)
        self.generator = AlternativeGeneratorService(
            double_crew_amplitude_hours=18,
            max_multi_day_days=3,
            min_daily_rest_hours=11,
        )
        self.rules = make_rules(max_daily_driving_hours=9, max_daily_amplitude_hours=12)

    def _validate(self, minutes):
        return self.validator.validate(make_input(make_trip(minutes)), self.rules)

    def test_compliant_trip_has_no_alternatives(self):
        """Whatever the costs, a compliant result yields nothing."""
        result = self._validate(300)
        for costs in (
            DEFAULT_COSTS,
            AlternativeCostParameters(0, 0, 0),
            AlternativeCostParameters(80, 250, 60),
        ):
            alternatives = self.generator.generate_alternatives(result, costs, self.rules)

            assert not alternatives.has_alternatives
            assert alternatives.alternatives == []
            assert alternatives.original_violations == []

    def test_light_result_has_no_alternatives(self):
        violation = Violation(
            kind=ViolationKind.DAILY_DRIVING_EXCEEDED,
            message="Too long",
            actual=10,
            limit=9,
        )
        result = ComplianceValidationResult(
            regulatory_category=RegulatoryCategory.LIGHT,
            adjusted_trip_analysis=make_trip(600),
            adjusted_durations=AdjustedDurations(600, 600, 600, 600),
            violations=[violation],
        )
        alternatives = self.generator.generate_alternatives(result, DEFAULT_COSTS, self.rules)

        assert not alternatives.has_alternatives
        assert alternatives.original_violations == [violation]

    def test_all_three_alternatives_in_fixed_order(self):
        alternatives = self.generator.generate_alternatives(self._validate(600), DEFAULT_COSTS, self.rules)

        assert alternatives.has_alternatives
        assert [a.type for a in alternatives.alternatives] == [
            AlternativeType.DOUBLE_CREW,
            AlternativeType.RELAY_DRIVER,
            AlternativeType.MULTI_DAY_SPLIT,
        ]
        assert len(alternatives.original_violations) == 1

    def test_costs_for_driving_violation(self):
        """10h driving / 10h amplitude against 9h / 12h limits."""
        double_crew, relay, multi_day = self.generator.generate_alternatives(
            self._validate(600), DEFAULT_COSTS, self.rules
        ).alternatives

        # Second driver for the full 10h duty
        assert double_crew.cost_delta == 250.0
        assert double_crew.is_feasible
        assert double_crew.would_be_compliant
        assert double_crew.adjusted_schedule.drivers_required == 2

        # Relay covers the 1h overrun only
        assert relay.cost_delta == 25.0
        assert relay.is_feasible

        # Driving-only violation still needs one night
        assert multi_day.adjusted_schedule.days_required == 2
        assert multi_day.adjusted_schedule.hotel_nights_required == 1
        assert multi_day.cost_breakdown.hotel_cost == 100
        assert multi_day.cost_breakdown.meal_allowance == 30
        assert multi_day.cost_delta == 130.0
        assert multi_day.is_feasible

    def test_long_mission_limits_feasibility(self):
        """25h of driving: only a 3-day split remains feasible."""
        double_crew, relay, multi_day = self.generator.generate_alternatives(
            self._validate(1500), DEFAULT_COSTS, self.rules
        ).alternatives

        assert not double_crew.is_feasible
        assert double_crew.feasibility_reason
        assert double_crew.remaining_violations
        assert not relay.is_feasible
        assert multi_day.is_feasible
        assert multi_day.adjusted_schedule.days_required == 3
        assert multi_day.cost_delta == 260.0

    def test_multi_day_beyond_max_days_infeasible(self):
        alternatives = self.generator.generate_alternatives(
            self._validate(2000), DEFAULT_COSTS, self.rules
        ).alternatives
        multi_day = alternatives[2]

        assert multi_day.adjusted_schedule.days_required == 4
        assert not multi_day.is_feasible
        assert not multi_day.would_be_compliant
        assert "exceeding maximum 3 days" in multi_day.feasibility_reason

    def test_cost_deltas_never_negative(self):
        for minutes in (560, 600, 780, 1000, 1500, 2500):
            for costs in (DEFAULT_COSTS, AlternativeCostParameters(0, 0, 0), AlternativeCostParameters(42.5, 89, 17)):
                result = self.generator.generate_alternatives(self._validate(minutes), costs, self.rules)
                assert all(a.cost_delta >= 0 for a in result.alternatives)

    def test_organization_costs_are_used(self):
        costs = AlternativeCostParameters(driver_hourly_cost=40, hotel_cost_per_night=120, meal_allowance_per_day=25)
        double_crew, relay, multi_day = self.generator.generate_alternatives(
            self._validate(600), costs, self.rules
        ).alternatives

        assert double_crew.cost_delta == 400.0
        assert relay.cost_delta == 40.0
        assert multi_day.cost_delta == 145.0

    def test_rules_default_to_result_rules(self):
        result = generate_alternatives(self._validate(600), DEFAULT_COSTS)

        assert result.has_alternatives
        assert len(result.alternatives) == 3

    def test_serialization(self):
        data = self.generator.generate_alternatives(self._validate(600), DEFAULT_COSTS, self.rules).to_dict()

        first = data["alternatives"][0]
        assert first["type"] == "DOUBLE_CREW"
        assert first["currency"] == "EUR"
        assert first["cost_breakdown"]["extra_driver_cost"] == 250.0
        assert data["original_violations"][0]["kind"] == "DAILY_DRIVING_EXCEEDED"
