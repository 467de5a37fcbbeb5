"""
Alternative Generator Service.

Proposes staffing/scheduling alternatives for HEAVY missions that violate
RSE rules, each with an estimated extra cost:
- DOUBLE_CREW: a second driver on board for the whole duty span
- RELAY_DRIVER: a relay driver takes over for the excess only
- MULTI_DAY_SPLIT: the mission is split over several days with hotel stops

All three options are always returned, in that order, together with their
feasibility; choosing between them is left to the caller.
"""

import logging
import math
from typing import List, Optional

from common.validators import minutes_to_hours
from ..conf import get_setting
from .types import (
    AdjustedSchedule,
    Alternative,
    AlternativeCostParameters,
    AlternativesResult,
    AlternativeType,
    ComplianceValidationResult,
    CostBreakdown,
    RegulatoryCategory,
    RSERules,
    Violation,
    ViolationKind,
)

logger = logging.getLogger(__name__)


class AlternativeGeneratorService:
    """
    Service for generating compliant alternatives for a violating trip.

    Pure: works only from the validation result, the cost parameters and
    the rules that produced the result.
    """

    def __init__(
        self,
        double_crew_amplitude_hours: Optional[float] = None,
        max_multi_day_days: Optional[int] = None,
        min_daily_rest_hours: Optional[float] = None,
    ):
        """Initialize generator with the alternative-specific ceilings."""
        self.double_crew_amplitude_hours = float(
            double_crew_amplitude_hours
            if double_crew_amplitude_hours is not None
            else get_setting("DOUBLE_CREW_AMPLITUDE_HOURS")
        )
        self.max_multi_day_days = int(
            max_multi_day_days if max_multi_day_days is not None else get_setting("MAX_MULTI_DAY_DAYS")
        )
        self.min_daily_rest_hours = (
            min_daily_rest_hours if min_daily_rest_hours is not None else get_setting("MIN_DAILY_REST_HOURS")
        )
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def generate_alternatives(
        self,
        compliance_result: ComplianceValidationResult,
        cost_parameters: AlternativeCostParameters,
        rules: Optional[RSERules] = None,
    ) -> AlternativesResult:
        """
        Generate alternatives for a validation result.

        Args:
            compliance_result: Output of the compliance validator
            cost_parameters: Organization cost parameters (EUR)
            rules: Rules used for validation; defaults to the result's own

        Returns:
            AlternativesResult; empty when the trip is compliant or not HEAVY
        """
        if compliance_result.is_compliant:
            return AlternativesResult(
                has_alternatives=False,
                alternatives=[],
                original_violations=[],
                message="Mission is compliant, no alternatives needed",
            )

        if compliance_result.regulatory_category != RegulatoryCategory.HEAVY:
            return AlternativesResult(
                has_alternatives=False,
                alternatives=[],
                original_violations=list(compliance_result.violations),
                message="Alternatives only available for heavy vehicles",
            )

        rules = rules or compliance_result.rules_used
        if rules is None:
            self.logger.warning("Violating result without rules; cannot size alternatives")
            return AlternativesResult(
                has_alternatives=False,
                alternatives=[],
                original_violations=list(compliance_result.violations),
                message="No RSE rules available to evaluate alternatives",
            )

        try:
            alternatives = [
                self.build_double_crew(compliance_result, cost_parameters, rules),
                self.build_relay_driver(compliance_result, cost_parameters, rules),
                self.build_multi_day_split(compliance_result, cost_parameters, rules),
            ]
        except (TypeError, ValueError, ArithmeticError) as e:
            self.logger.error(f"Alternative generation failed: {str(e)}")
            raise AlternativeGenerationError(f"Failed to generate alternatives: {str(e)}") from e

        for alternative in alternatives:
            self.logger.debug(describe_cost(alternative))

        feasible = sum(1 for a in alternatives if a.is_feasible)
        self.logger.info(
            f"Generated {len(alternatives)} alternatives ({feasible} feasible) for "
            f"{len(compliance_result.violations)} violation(s)"
        )

        return AlternativesResult(
            has_alternatives=True,
            alternatives=alternatives,
            original_violations=list(compliance_result.violations),
            message=f"{len(alternatives)} alternatives available, {feasible} feasible",
        )

    def build_double_crew(
        self,
        compliance_result: ComplianceValidationResult,
        cost_parameters: AlternativeCostParameters,
        rules: RSERules,
    ) -> Alternative:
        """Second driver for the whole amplitude; driving is shared evenly."""
        durations = compliance_result.adjusted_durations
        amplitude_hours = durations.total_amplitude_minutes / 60
        driving_per_driver_hours = durations.total_driving_minutes / 2 / 60
        ceiling = self.double_crew_amplitude_hours

        remaining: List[Violation] = []
        if amplitude_hours > ceiling:
            remaining.append(
                Violation(
                    kind=ViolationKind.DAILY_AMPLITUDE_EXCEEDED,
                    message=f"Amplitude ({round(amplitude_hours, 2)}h) exceeds double crew limit ({ceiling}h)",
                    actual=round(amplitude_hours, 2),
                    limit=ceiling,
                )
            )
        if driving_per_driver_hours > rules.max_daily_driving_hours:
            remaining.append(
                Violation(
                    kind=ViolationKind.DAILY_DRIVING_EXCEEDED,
                    message=(
                        f"Driving per driver ({round(driving_per_driver_hours, 2)}h) still exceeds "
                        f"limit ({rules.max_daily_driving_hours}h)"
                    ),
                    actual=round(driving_per_driver_hours, 2),
                    limit=rules.max_daily_driving_hours,
                )
            )

        is_feasible = not remaining
        return Alternative(
            type=AlternativeType.DOUBLE_CREW,
            title="Double Crew",
            description=(
                f"Add a second driver for the full {round(amplitude_hours, 2)}h duty, extending the "
                f"amplitude limit from {rules.max_daily_amplitude_hours}h to {ceiling}h"
            ),
            cost_breakdown=CostBreakdown(
                extra_driver_cost=round(cost_parameters.driver_hourly_cost * amplitude_hours, 2),
            ),
            adjusted_schedule=AdjustedSchedule(
                total_driving_minutes=durations.total_driving_minutes,
                total_amplitude_minutes=durations.total_amplitude_minutes,
                days_required=1,
                drivers_required=2,
                hotel_nights_required=0,
            ),
            is_feasible=is_feasible,
            remaining_violations=remaining,
            feasibility_reason=None if is_feasible else remaining[0].message,
        )

    def build_relay_driver(
        self,
        compliance_result: ComplianceValidationResult,
        cost_parameters: AlternativeCostParameters,
        rules: RSERules,
    ) -> Alternative:
        """Relay driver paid only for the largest overrun beyond either limit."""
        durations = compliance_result.adjusted_durations
        driving_hours = durations.total_driving_minutes / 60
        amplitude_hours = durations.total_amplitude_minutes / 60
        excess_hours = max(
            0.0,
            driving_hours - rules.max_daily_driving_hours,
            amplitude_hours - rules.max_daily_amplitude_hours,
        )

        remaining: List[Violation] = []
        if excess_hours > rules.max_daily_driving_hours:
            remaining.append(
                Violation(
                    kind=ViolationKind.DAILY_DRIVING_EXCEEDED,
                    message=(
                        f"Relay share ({round(excess_hours, 2)}h) exceeds driving limit "
                        f"({rules.max_daily_driving_hours}h)"
                    ),
                    actual=round(excess_hours, 2),
                    limit=rules.max_daily_driving_hours,
                )
            )
        if excess_hours > rules.max_daily_amplitude_hours:
            remaining.append(
                Violation(
                    kind=ViolationKind.DAILY_AMPLITUDE_EXCEEDED,
                    message=(
                        f"Relay share ({round(excess_hours, 2)}h) exceeds amplitude limit "
                        f"({rules.max_daily_amplitude_hours}h)"
                    ),
                    actual=round(excess_hours, 2),
                    limit=rules.max_daily_amplitude_hours,
                )
            )

        is_feasible = not remaining
        return Alternative(
            type=AlternativeType.RELAY_DRIVER,
            title="Relay Driver",
            description=(
                f"Hand over to a relay driver for the {round(excess_hours, 2)}h beyond the daily limits"
            ),
            cost_breakdown=CostBreakdown(
                extra_driver_cost=round(cost_parameters.driver_hourly_cost * excess_hours, 2),
            ),
            adjusted_schedule=AdjustedSchedule(
                total_driving_minutes=durations.total_driving_minutes,
                total_amplitude_minutes=durations.total_amplitude_minutes,
                days_required=1,
                drivers_required=2,
                hotel_nights_required=0,
            ),
            is_feasible=is_feasible,
            remaining_violations=remaining,
            feasibility_reason=None if is_feasible else remaining[0].message,
        )

    def build_multi_day_split(
        self,
        compliance_result: ComplianceValidationResult,
        cost_parameters: AlternativeCostParameters,
        rules: RSERules,
    ) -> Alternative:
        """
        Overnight split. The day count covers both limits, so a driving-only
        violation still yields at least one hotel night.
        """
        durations = compliance_result.adjusted_durations
        days_required = max(
            2,
            _days_needed(durations.total_amplitude_minutes, rules.max_daily_amplitude_minutes),
            _days_needed(durations.total_driving_minutes, rules.max_daily_driving_minutes),
        )
        extra_nights = days_required - 1
        is_feasible = days_required <= self.max_multi_day_days

        remaining: List[Violation] = []
        if not is_feasible:
            remaining.append(
                Violation(
                    kind=ViolationKind.DAILY_AMPLITUDE_EXCEEDED,
                    message=(
                        f"Mission requires {days_required} days, exceeding maximum "
                        f"{self.max_multi_day_days} days"
                    ),
                    actual=days_required,
                    limit=self.max_multi_day_days,
                    unit="days",
                )
            )

        return Alternative(
            type=AlternativeType.MULTI_DAY_SPLIT,
            title="Multi-Day Mission",
            description=(
                f"Convert to {days_required}-day mission with {extra_nights} overnight "
                f"stop{'s' if extra_nights > 1 else ''} and {self.min_daily_rest_hours}h daily rest"
            ),
            cost_breakdown=CostBreakdown(
                hotel_cost=round(extra_nights * cost_parameters.hotel_cost_per_night, 2),
                meal_allowance=round(extra_nights * cost_parameters.meal_allowance_per_day, 2),
            ),
            adjusted_schedule=AdjustedSchedule(
                total_driving_minutes=durations.total_driving_minutes,
                total_amplitude_minutes=durations.total_amplitude_minutes,
                days_required=days_required,
                drivers_required=1,
                hotel_nights_required=extra_nights,
            ),
            is_feasible=is_feasible,
            remaining_violations=remaining,
            feasibility_reason=None if is_feasible else remaining[0].message,
        )


def _days_needed(total_minutes: float, daily_limit_minutes: float) -> int:
    if daily_limit_minutes <= 0:
        return 1
    return max(1, math.ceil(round(total_minutes / daily_limit_minutes, 6)))


def generate_alternatives(
    compliance_result: ComplianceValidationResult,
    cost_parameters: AlternativeCostParameters,
    rules: Optional[RSERules] = None,
) -> AlternativesResult:
    """Generate alternatives with the configured ceilings."""
    return AlternativeGeneratorService().generate_alternatives(compliance_result, cost_parameters, rules)


def describe_cost(alternative: Alternative) -> str:
    """One-line label used in logs and admin displays."""
    return (
        f"{alternative.title}: {alternative.cost_delta:.2f} EUR "
        f"({'feasible' if alternative.is_feasible else 'not feasible'}, "
        f"{minutes_to_hours(alternative.adjusted_schedule.total_amplitude_minutes)}h duty)"
    )


class AlternativeGenerationError(Exception):
    """Exception raised when alternatives cannot be generated."""

    pass
