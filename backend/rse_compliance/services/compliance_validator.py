"""
Compliance Validator Service.

Validates heavy-vehicle missions against RSE (Réglementation Sociale
Européenne) driving-time rules:
- Maximum daily driving time
- Maximum daily amplitude (duty start to duty end)
- Mandatory breaks per continuous driving block
- Capped average speed (duration estimates are inflated, never reduced)

All thresholds come from the organization's license rules; the validator
itself is pure and performs no I/O. LIGHT vehicles are exempt, and a HEAVY
vehicle with no configured rule set passes (permissive default; callers
report ``has_rules`` separately so operators can tell the two apart).

Single Responsibility: single-trip RSE validation only.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from common.validators import ceil_minutes, hours_to_minutes, minutes_to_hours
from ..conf import get_setting
from .types import (
    AdjustedDurations,
    AppliedRule,
    ComplianceValidationInput,
    ComplianceValidationResult,
    ComplianceWarning,
    RSERules,
    RegulatoryCategory,
    RuleResult,
    Segment,
    TripAnalysis,
    Violation,
    ViolationKind,
    WarningKind,
)

logger = logging.getLogger(__name__)


def calculate_total_driving_minutes(trip_analysis: TripAnalysis) -> float:
    """Driving time = approach + service + return (present segments only)."""
    total = sum(s.duration_minutes for s in trip_analysis.present_segments())
    return round(total, 2)


def calculate_amplitude_minutes(driving_minutes: float, pickup_at, estimated_dropoff_at=None) -> float:
    """
    Duty span in minutes.

    Uses the explicit pickup-to-dropoff window when a dropoff time is known,
    otherwise falls back to the driving time.
    """
    if estimated_dropoff_at is not None:
        span = (estimated_dropoff_at - pickup_at).total_seconds() / 60
        return round(max(0.0, span), 2)
    return driving_minutes


def calculate_required_breaks(driving_minutes: float, driving_block_hours: float) -> int:
    """Number of mandatory breaks between consecutive driving blocks."""
    block_minutes = float(driving_block_hours) * 60
    if block_minutes <= 0 or driving_minutes <= block_minutes:
        return 0
    return math.ceil(driving_minutes / block_minutes) - 1


def recalculate_with_capped_speed(segment: Segment, capped_speed_kmh: float) -> Tuple[Segment, bool]:
    """
    Stretch a segment's duration so its average speed does not exceed the cap.

    The new duration is rounded up to the next whole minute. Segments without
    a distance, or with zero distance or duration, are left untouched.
    """
    distance = segment.distance_km
    if not distance or distance <= 0 or segment.duration_minutes <= 0:
        return segment, False

    implied_speed_kmh = distance / (segment.duration_minutes / 60)
    if implied_speed_kmh <= capped_speed_kmh:
        return segment, False

    capped_minutes = ceil_minutes(distance * 60 / capped_speed_kmh)
    if capped_minutes <= segment.duration_minutes:
        return segment, False

    return Segment(duration_minutes=capped_minutes, distance_km=distance), True


def apply_speed_cap(trip_analysis: TripAnalysis, capped_speed_kmh: float) -> Tuple[TripAnalysis, bool]:
    """Apply the speed cap to every present segment."""
    adjusted = {}
    any_capped = False

    for name in ("approach", "service", "return_"):
        segment = getattr(trip_analysis, name)
        if segment is None:
            adjusted[name] = None
            continue
        new_segment, was_capped = recalculate_with_capped_speed(segment, capped_speed_kmh)
        adjusted[name] = new_segment
        any_capped = any_capped or was_capped

    if not any_capped:
        return trip_analysis, False

    return (
        trip_analysis.with_segments(adjusted["approach"], adjusted["service"], adjusted["return_"]),
        True,
    )


class ComplianceValidatorService:
    """
    Service for validating a single trip against RSE rules.

    Stateless apart from the warning threshold; safe to share between
    threads.
    """

    def __init__(self, warning_threshold: Optional[float] = None):
        """Initialize validator with the approaching-limit threshold."""
        if warning_threshold is None:
            warning_threshold = get_setting("WARNING_THRESHOLD")
        self.warning_threshold = float(warning_threshold)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def validate(
        self, validation_input: ComplianceValidationInput, rules: Optional[RSERules]
    ) -> ComplianceValidationResult:
        """
        Validate a trip against the given rule set.

        Args:
            validation_input: Trip analysis plus pickup/dropoff timing
            rules: Applicable RSE rules, or None when none are configured

        Returns:
            ComplianceValidationResult with adjusted durations, violations,
            warnings and the list of rules that were checked

        Raises:
            ComplianceValidationError: when the input carries values that
                cannot be computed on (e.g. non-numeric durations)
        """
        try:
            return self._validate(validation_input, rules)
        except (TypeError, ValueError, ArithmeticError) as e:
            self.logger.error(f"RSE compliance validation failed: {str(e)}")
            raise ComplianceValidationError(
                f"Failed to validate trip compliance: {str(e)}"
            ) from e

    def _validate(
        self, validation_input: ComplianceValidationInput, rules: Optional[RSERules]
    ) -> ComplianceValidationResult:
        trip = validation_input.trip_analysis
        original_driving = calculate_total_driving_minutes(trip)
        original_amplitude = calculate_amplitude_minutes(
            original_driving, validation_input.pickup_at, validation_input.estimated_dropoff_at
        )

        if validation_input.regulatory_category != RegulatoryCategory.HEAVY or rules is None:
            if validation_input.regulatory_category == RegulatoryCategory.HEAVY:
                self.logger.warning(
                    f"No RSE rules configured for HEAVY vehicle category "
                    f"{validation_input.vehicle_category_id}; treating trip as compliant"
                )
            return ComplianceValidationResult(
                regulatory_category=RegulatoryCategory(validation_input.regulatory_category),
                adjusted_trip_analysis=trip,
                adjusted_durations=AdjustedDurations(
                    total_driving_minutes=original_driving,
                    total_amplitude_minutes=original_amplitude,
                    original_driving_minutes=original_driving,
                    original_amplitude_minutes=original_amplitude,
                ),
            )

        violations: List[Violation] = []
        warnings: List[ComplianceWarning] = []
        rules_applied: List[AppliedRule] = []

        # Step 1: speed cap
        adjusted_trip = trip
        capped_speed_applied = False
        if rules.capped_average_speed_kmh:
            adjusted_trip, capped_speed_applied = apply_speed_cap(trip, rules.capped_average_speed_kmh)
            rules_applied.append(
                AppliedRule(
                    rule_id=f"speed-cap-{rules.license_category_id}",
                    rule_name="Capped Average Speed",
                    threshold=rules.capped_average_speed_kmh,
                    unit="km/h",
                    result=RuleResult.PASS,
                    actual_value=rules.capped_average_speed_kmh if capped_speed_applied else None,
                )
            )

        # Step 2: totals on adjusted durations
        driving_minutes = calculate_total_driving_minutes(adjusted_trip)
        amplitude_minutes = calculate_amplitude_minutes(
            driving_minutes, validation_input.pickup_at, validation_input.estimated_dropoff_at
        )

        # Step 3: daily driving limit
        rules_applied.append(
            self._check_limit(
                value_minutes=driving_minutes,
                limit_hours=rules.max_daily_driving_hours,
                violation_kind=ViolationKind.DAILY_DRIVING_EXCEEDED,
                warning_kind=WarningKind.APPROACHING_DRIVING_LIMIT,
                label="driving time",
                rule_id=f"driving-time-{rules.license_category_id}",
                rule_name="Maximum Daily Driving Time",
                violations=violations,
                warnings=warnings,
            )
        )

        # Step 4: daily amplitude limit
        rules_applied.append(
            self._check_limit(
                value_minutes=amplitude_minutes,
                limit_hours=rules.max_daily_amplitude_hours,
                violation_kind=ViolationKind.DAILY_AMPLITUDE_EXCEEDED,
                warning_kind=WarningKind.APPROACHING_AMPLITUDE_LIMIT,
                label="work amplitude",
                rule_id=f"amplitude-{rules.license_category_id}",
                rule_name="Maximum Daily Amplitude",
                violations=violations,
                warnings=warnings,
            )
        )

        # Step 5: mandatory breaks (advisory only)
        break_warning = self._check_break_requirement(driving_minutes, rules)
        if break_warning:
            warnings.append(break_warning)
            rules_applied.append(
                AppliedRule(
                    rule_id=f"breaks-{rules.license_category_id}",
                    rule_name="Mandatory Breaks",
                    threshold=rules.driving_block_hours_for_break,
                    unit="hours per block",
                    result=RuleResult.WARNING,
                    actual_value=minutes_to_hours(driving_minutes),
                )
            )

        result = ComplianceValidationResult(
            regulatory_category=RegulatoryCategory.HEAVY,
            adjusted_trip_analysis=adjusted_trip,
            adjusted_durations=AdjustedDurations(
                total_driving_minutes=driving_minutes,
                total_amplitude_minutes=amplitude_minutes,
                original_driving_minutes=original_driving,
                original_amplitude_minutes=original_amplitude,
                capped_speed_applied=capped_speed_applied,
            ),
            violations=violations,
            warnings=warnings,
            rules_applied=rules_applied,
            rules_used=rules,
        )

        self.logger.debug(
            f"RSE validation for vehicle category {validation_input.vehicle_category_id}: "
            f"{'COMPLIANT' if result.is_compliant else 'NON-COMPLIANT'} "
            f"({len(violations)} violations, {len(warnings)} warnings)"
        )
        return result

    def is_trip_compliant(
        self, validation_input: ComplianceValidationInput, rules: Optional[RSERules]
    ) -> bool:
        """Quick boolean check for list views and filtering."""
        return self.validate(validation_input, rules).is_compliant

    def _check_limit(
        self,
        value_minutes: float,
        limit_hours: float,
        violation_kind: ViolationKind,
        warning_kind: WarningKind,
        label: str,
        rule_id: str,
        rule_name: str,
        violations: List[Violation],
        warnings: List[ComplianceWarning],
    ) -> AppliedRule:
        """Compare a duration against a ceiling, appending a violation or warning."""
        limit_minutes = hours_to_minutes(limit_hours)
        actual_hours = minutes_to_hours(value_minutes)

        if value_minutes > limit_minutes:
            violations.append(
                Violation(
                    kind=violation_kind,
                    message=(
                        f"Total {label} ({actual_hours}h) exceeds maximum allowed ({limit_hours}h)"
                    ),
                    actual=actual_hours,
                    limit=limit_hours,
                )
            )
            result = RuleResult.FAIL
        elif limit_minutes > 0 and value_minutes / limit_minutes >= self.warning_threshold:
            percent = round(value_minutes / limit_minutes * 100)
            warnings.append(
                ComplianceWarning(
                    kind=warning_kind,
                    message=(
                        f"{label.capitalize()} ({actual_hours}h) is approaching the limit ({limit_hours}h)"
                    ),
                    actual=actual_hours,
                    limit=limit_hours,
                    percent_of_limit=percent,
                )
            )
            result = RuleResult.WARNING
        else:
            result = RuleResult.PASS

        return AppliedRule(
            rule_id=rule_id,
            rule_name=rule_name,
            threshold=limit_hours,
            unit="hours",
            result=result,
            actual_value=actual_hours,
        )

    def _check_break_requirement(
        self, driving_minutes: float, rules: RSERules
    ) -> Optional[ComplianceWarning]:
        """
        Continuous driving is approximated by total driving, since intra-trip
        breaks are not modelled.
        """
        block_minutes = hours_to_minutes(rules.driving_block_hours_for_break)
        if driving_minutes <= block_minutes:
            return None

        break_count = calculate_required_breaks(driving_minutes, rules.driving_block_hours_for_break)
        return ComplianceWarning(
            kind=WarningKind.BREAK_REQUIRED,
            message=(
                f"{break_count} break(s) of {rules.break_minutes_per_driving_block} min required: "
                f"{minutes_to_hours(driving_minutes)}h driving exceeds the "
                f"{rules.driving_block_hours_for_break}h driving block"
            ),
            actual=minutes_to_hours(driving_minutes),
            limit=rules.driving_block_hours_for_break,
            required_break_minutes=rules.break_minutes_per_driving_block,
        )


def _pluralize(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def get_compliance_summary(result) -> Dict:
    """
    Short presentation summary of a validation (or cumulative) result.

    Returns:
        Dict with status (OK / WARNING / VIOLATION), message such as
        "2 violations, 1 warning" or "Compliant", and the counts
    """
    violation_count = len(result.violations)
    warning_count = len(result.warnings)

    if violation_count:
        status = "VIOLATION"
    elif warning_count:
        status = "WARNING"
    else:
        status = "OK"

    parts = []
    if violation_count:
        parts.append(_pluralize(violation_count, "violation"))
    if warning_count:
        parts.append(_pluralize(warning_count, "warning"))

    return {
        "status": status,
        "message": ", ".join(parts) if parts else "Compliant",
        "violation_count": violation_count,
        "warning_count": warning_count,
    }


def validate(
    validation_input: ComplianceValidationInput, rules: Optional[RSERules]
) -> ComplianceValidationResult:
    """Validate a trip with the configured warning threshold."""
    return ComplianceValidatorService().validate(validation_input, rules)


def is_trip_compliant(validation_input: ComplianceValidationInput, rules: Optional[RSERules]) -> bool:
    return ComplianceValidatorService().is_trip_compliant(validation_input, rules)


class ComplianceValidationError(Exception):
    """Exception raised when compliance validation fails."""

    pass
