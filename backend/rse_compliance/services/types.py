"""
Shared types for the RSE compliance services.

Plain dataclasses exchanged between the rule repository, the compliance
validator, the alternative generator and the counter service. None of them
touch the database; the API layer serializes them through ``to_dict()``.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

# Regime and decision choices are shared with the models
from fleet.models import RegulatoryCategory
from ..models.compliance_audit_log import ComplianceDecision


class ViolationKind(str, Enum):
    """Blocking rule breaches."""
    DAILY_DRIVING_EXCEEDED = "DAILY_DRIVING_EXCEEDED"
    DAILY_AMPLITUDE_EXCEEDED = "DAILY_AMPLITUDE_EXCEEDED"
    CUMULATIVE_DRIVING_EXCEEDED = "CUMULATIVE_DRIVING_EXCEEDED"
    CUMULATIVE_AMPLITUDE_EXCEEDED = "CUMULATIVE_AMPLITUDE_EXCEEDED"


class WarningKind(str, Enum):
    """Non-blocking signals."""
    BREAK_REQUIRED = "BREAK_REQUIRED"
    APPROACHING_DRIVING_LIMIT = "APPROACHING_DRIVING_LIMIT"
    APPROACHING_AMPLITUDE_LIMIT = "APPROACHING_AMPLITUDE_LIMIT"


class AlternativeType(str, Enum):
    DOUBLE_CREW = "DOUBLE_CREW"
    RELAY_DRIVER = "RELAY_DRIVER"
    MULTI_DAY_SPLIT = "MULTI_DAY_SPLIT"


class RuleResult(str, Enum):
    PASS = "PASS"
    WARNING = "WARNING"
    FAIL = "FAIL"


@dataclass(frozen=True)
class Segment:
    """One leg of a trip (approach, service or return)."""
    duration_minutes: float
    distance_km: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            "duration_minutes": self.duration_minutes,
            "distance_km": self.distance_km,
        }


@dataclass(frozen=True)
class TripAnalysis:
    """
    Segmented trip produced by the trip segmenter.

    ``approach`` and ``return_`` are None when not applicable to the trip.
    """
    service: Segment
    approach: Optional[Segment] = None
    return_: Optional[Segment] = None
    total_duration_minutes: Optional[float] = None

    def present_segments(self) -> List[Segment]:
        return [s for s in (self.approach, self.service, self.return_) if s is not None]

    @property
    def total_minutes(self) -> float:
        """Declared total, or the sum of present segments when absent."""
        if self.total_duration_minutes is not None:
            return self.total_duration_minutes
        return sum(s.duration_minutes for s in self.present_segments())

    def with_segments(self, approach, service, return_) -> "TripAnalysis":
        total = sum(s.duration_minutes for s in (approach, service, return_) if s is not None)
        return replace(
            self,
            approach=approach,
            service=service,
            return_=return_,
            total_duration_minutes=total,
        )

    @classmethod
    def from_dict(cls, data: Dict) -> "TripAnalysis":
        segments = data.get("segments") or {}

        def _segment(raw):
            if not raw:
                return None
            return Segment(
                duration_minutes=float(raw["duration_minutes"]),
                distance_km=(
                    float(raw["distance_km"]) if raw.get("distance_km") is not None else None
                ),
            )

        total = data.get("total_duration_minutes")
        return cls(
            approach=_segment(segments.get("approach")),
            service=_segment(segments["service"]),
            return_=_segment(segments.get("return")),
            total_duration_minutes=float(total) if total is not None else None,
        )

    def to_dict(self) -> Dict:
        return {
            "segments": {
                "approach": self.approach.to_dict() if self.approach else None,
                "service": self.service.to_dict(),
                "return": self.return_.to_dict() if self.return_ else None,
            },
            "total_duration_minutes": self.total_minutes,
        }


@dataclass(frozen=True)
class RSERules:
    """Driving-time / rest-time thresholds for one license category."""
    license_category_id: str
    license_category_code: str
    max_daily_driving_hours: float
    max_daily_amplitude_hours: float
    break_minutes_per_driving_block: int
    driving_block_hours_for_break: float
    capped_average_speed_kmh: Optional[float] = None

    @property
    def max_daily_driving_minutes(self) -> float:
        return self.max_daily_driving_hours * 60

    @property
    def max_daily_amplitude_minutes(self) -> float:
        return self.max_daily_amplitude_hours * 60

    def to_dict(self) -> Dict:
        return {
            "license_category_id": self.license_category_id,
            "license_category_code": self.license_category_code,
            "max_daily_driving_hours": self.max_daily_driving_hours,
            "max_daily_amplitude_hours": self.max_daily_amplitude_hours,
            "break_minutes_per_driving_block": self.break_minutes_per_driving_block,
            "driving_block_hours_for_break": self.driving_block_hours_for_break,
            "capped_average_speed_kmh": self.capped_average_speed_kmh,
        }


@dataclass(frozen=True)
class ComplianceValidationInput:
    organization_id: str
    vehicle_category_id: str
    regulatory_category: RegulatoryCategory
    trip_analysis: TripAnalysis
    pickup_at: datetime
    license_category_id: Optional[str] = None
    estimated_dropoff_at: Optional[datetime] = None


@dataclass(frozen=True)
class Violation:
    """
    A blocking breach. ``existing`` and ``additional`` are only set for
    cumulative violations, so the audit trail shows both contributions.
    """
    kind: ViolationKind
    message: str
    actual: float
    limit: float
    unit: str = "hours"
    existing: Optional[float] = None
    additional: Optional[float] = None

    def to_dict(self) -> Dict:
        data = {
            "kind": self.kind.value,
            "message": self.message,
            "actual": self.actual,
            "limit": self.limit,
            "unit": self.unit,
            "severity": "BLOCKING",
        }
        if self.existing is not None:
            data["existing"] = self.existing
            data["additional"] = self.additional
        return data


@dataclass(frozen=True)
class ComplianceWarning:
    kind: WarningKind
    message: str
    actual: float
    limit: float
    unit: str = "hours"
    percent_of_limit: Optional[int] = None
    required_break_minutes: Optional[int] = None

    def to_dict(self) -> Dict:
        data = {
            "kind": self.kind.value,
            "message": self.message,
            "actual": self.actual,
            "limit": self.limit,
            "unit": self.unit,
        }
        if self.percent_of_limit is not None:
            data["percent_of_limit"] = self.percent_of_limit
        if self.required_break_minutes is not None:
            data["required_break_minutes"] = self.required_break_minutes
        return data


@dataclass(frozen=True)
class AppliedRule:
    """Transparency record of one threshold that was checked."""
    rule_id: str
    rule_name: str
    threshold: float
    unit: str
    result: RuleResult
    actual_value: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "threshold": self.threshold,
            "unit": self.unit,
            "result": self.result.value,
            "actual_value": self.actual_value,
        }


@dataclass(frozen=True)
class AdjustedDurations:
    total_driving_minutes: float
    total_amplitude_minutes: float
    original_driving_minutes: float
    original_amplitude_minutes: float
    capped_speed_applied: bool = False

    def to_dict(self) -> Dict:
        return {
            "total_driving_minutes": self.total_driving_minutes,
            "total_amplitude_minutes": self.total_amplitude_minutes,
            "original_driving_minutes": self.original_driving_minutes,
            "original_amplitude_minutes": self.original_amplitude_minutes,
            "capped_speed_applied": self.capped_speed_applied,
        }


@dataclass(frozen=True)
class ComplianceValidationResult:
    regulatory_category: RegulatoryCategory
    adjusted_trip_analysis: TripAnalysis
    adjusted_durations: AdjustedDurations
    violations: List[Violation] = field(default_factory=list)
    warnings: List[ComplianceWarning] = field(default_factory=list)
    rules_applied: List[AppliedRule] = field(default_factory=list)
    rules_used: Optional[RSERules] = None

    @property
    def is_compliant(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict:
        return {
            "is_compliant": self.is_compliant,
            "regulatory_category": self.regulatory_category.value,
            "adjusted_trip_analysis": self.adjusted_trip_analysis.to_dict(),
            "adjusted_durations": self.adjusted_durations.to_dict(),
            "violations": [v.to_dict() for v in self.violations],
            "warnings": [w.to_dict() for w in self.warnings],
            "rules_applied": [r.to_dict() for r in self.rules_applied],
            "rules_used": self.rules_used.to_dict() if self.rules_used else None,
        }


@dataclass(frozen=True)
class AlternativeCostParameters:
    driver_hourly_cost: float
    hotel_cost_per_night: float
    meal_allowance_per_day: float

    def to_dict(self) -> Dict:
        return {
            "driver_hourly_cost": self.driver_hourly_cost,
            "hotel_cost_per_night": self.hotel_cost_per_night,
            "meal_allowance_per_day": self.meal_allowance_per_day,
        }


@dataclass(frozen=True)
class AdjustedSchedule:
    total_driving_minutes: float
    total_amplitude_minutes: float
    days_required: int
    drivers_required: int
    hotel_nights_required: int

    def to_dict(self) -> Dict:
        return {
            "total_driving_minutes": self.total_driving_minutes,
            "total_amplitude_minutes": self.total_amplitude_minutes,
            "days_required": self.days_required,
            "drivers_required": self.drivers_required,
            "hotel_nights_required": self.hotel_nights_required,
        }


@dataclass(frozen=True)
class CostBreakdown:
    extra_driver_cost: float = 0.0
    hotel_cost: float = 0.0
    meal_allowance: float = 0.0

    @property
    def total(self) -> float:
        return round(self.extra_driver_cost + self.hotel_cost + self.meal_allowance, 2)

    def to_dict(self) -> Dict:
        return {
            "extra_driver_cost": self.extra_driver_cost,
            "hotel_cost": self.hotel_cost,
            "meal_allowance": self.meal_allowance,
        }


@dataclass(frozen=True)
class Alternative:
    type: AlternativeType
    title: str
    description: str
    cost_breakdown: CostBreakdown
    adjusted_schedule: AdjustedSchedule
    is_feasible: bool
    remaining_violations: List[Violation] = field(default_factory=list)
    feasibility_reason: Optional[str] = None

    @property
    def cost_delta(self) -> float:
        return self.cost_breakdown.total

    @property
    def would_be_compliant(self) -> bool:
        return self.is_feasible and not self.remaining_violations

    def to_dict(self) -> Dict:
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "cost_delta": self.cost_delta,
            "currency": "EUR",
            "cost_breakdown": self.cost_breakdown.to_dict(),
            "adjusted_schedule": self.adjusted_schedule.to_dict(),
            "is_feasible": self.is_feasible,
            "feasibility_reason": self.feasibility_reason,
            "would_be_compliant": self.would_be_compliant,
            "remaining_violations": [v.to_dict() for v in self.remaining_violations],
        }


@dataclass(frozen=True)
class AlternativesResult:
    has_alternatives: bool
    alternatives: List[Alternative]
    original_violations: List[Violation]
    message: str

    def to_dict(self) -> Dict:
        return {
            "has_alternatives": self.has_alternatives,
            "alternatives": [a.to_dict() for a in self.alternatives],
            "original_violations": [v.to_dict() for v in self.original_violations],
            "message": self.message,
        }


@dataclass(frozen=True)
class CounterData:
    """Aggregated minutes for one driver, day and regulatory regime."""
    driving_minutes: float = 0
    amplitude_minutes: float = 0
    break_minutes: float = 0
    activity_count: int = 0
    work_start_time: Optional[datetime] = None
    work_end_time: Optional[datetime] = None

    def plus(self, driving_minutes: float, amplitude_minutes: float) -> "CounterData":
        return replace(
            self,
            driving_minutes=self.driving_minutes + driving_minutes,
            amplitude_minutes=self.amplitude_minutes + amplitude_minutes,
        )

    def to_dict(self) -> Dict:
        return {
            "driving_minutes": self.driving_minutes,
            "amplitude_minutes": self.amplitude_minutes,
            "break_minutes": self.break_minutes,
            "activity_count": self.activity_count,
            "work_start_time": self.work_start_time.isoformat() if self.work_start_time else None,
            "work_end_time": self.work_end_time.isoformat() if self.work_end_time else None,
        }


@dataclass(frozen=True)
class CumulativeComplianceResult:
    regulatory_category: RegulatoryCategory
    current_counters: CounterData
    projected_counters: CounterData
    violations: List[Violation] = field(default_factory=list)
    warnings: List[ComplianceWarning] = field(default_factory=list)
    rules: Optional[RSERules] = None

    @property
    def is_compliant(self) -> bool:
        return not self.violations

    @property
    def has_rules(self) -> bool:
        return self.rules is not None

    def to_dict(self) -> Dict:
        return {
            "is_compliant": self.is_compliant,
            "regulatory_category": self.regulatory_category.value,
            "current_counters": self.current_counters.to_dict(),
            "projected_counters": self.projected_counters.to_dict(),
            "violations": [v.to_dict() for v in self.violations],
            "warnings": [w.to_dict() for w in self.warnings],
            "rules": self.rules.to_dict() if self.rules else None,
            "has_rules": self.has_rules,
        }
