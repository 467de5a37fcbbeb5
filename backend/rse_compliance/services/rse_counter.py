"""
RSE Counter Service.

Tracks cumulative driving time and amplitude per driver, business date and
regulatory regime, and decides whether one more mission can be assigned:
- Counters are aggregated from committed DriverActivity rows on every read
- Projected counters = current + the candidate mission
- Projected values are compared against the organization's RSE rules
- Every decision can be written to the append-only ComplianceAuditLog

A plain check takes no lock, so two concurrent checks for the same driver
can both pass. ``check_and_reserve`` closes that window by locking the
driver row, re-reading the counters and recording the activity in the same
transaction.

Single Responsibility: multi-mission (cumulative) RSE compliance only.
"""

import logging
from typing import Dict, List, Optional, Tuple

from django.db import DatabaseError, transaction

from common.validators import format_duration, get_business_date, hours_to_minutes, minutes_to_hours
from fleet.models import Driver
from ..conf import get_setting
from ..models import ComplianceAuditLog, DriverActivity
from .rule_repository import RuleRepository
from .types import (
    ComplianceDecision,
    ComplianceWarning,
    CounterData,
    CumulativeComplianceResult,
    RegulatoryCategory,
    RSERules,
    Violation,
    ViolationKind,
    WarningKind,
)

logger = logging.getLogger(__name__)


def business_date(value):
    """Calendar date of ``value`` in the configured business time zone."""
    return get_business_date(value, get_setting("BUSINESS_TIME_ZONE"))


def calculate_compliance_status(
    counters: Optional[CounterData], rules: Optional[RSERules], warning_threshold: Optional[float] = None
) -> str:
    """
    Status of a counter against its rules: OK, WARNING or VIOLATION.

    No counters or no rules is always OK.
    """
    if counters is None or rules is None:
        return "OK"
    if warning_threshold is None:
        warning_threshold = float(get_setting("WARNING_THRESHOLD"))

    if counters.driving_minutes > rules.max_daily_driving_minutes:
        return "VIOLATION"
    if counters.amplitude_minutes > rules.max_daily_amplitude_minutes:
        return "VIOLATION"

    if counters.driving_minutes >= rules.max_daily_driving_minutes * warning_threshold:
        return "WARNING"
    if counters.amplitude_minutes >= rules.max_daily_amplitude_minutes * warning_threshold:
        return "WARNING"

    return "OK"


def derive_decision(result: CumulativeComplianceResult) -> ComplianceDecision:
    """BLOCKED on any violation, WARNING on any warning, otherwise APPROVED."""
    if result.violations:
        return ComplianceDecision.BLOCKED
    if result.warnings:
        return ComplianceDecision.WARNING
    return ComplianceDecision.APPROVED


def build_decision_reason(result: CumulativeComplianceResult) -> str:
    """Human-readable reason stored with the audit record."""
    if result.violations:
        return "Blocked: " + "; ".join(v.message for v in result.violations)
    if result.warnings:
        return "Approved with warnings: " + "; ".join(w.message for w in result.warnings)
    if not result.has_rules:
        return "Cumulative compliance check passed (no RSE rules configured)"
    return "Cumulative compliance check passed"


class RSECounterService:
    """
    Service for cumulative (per driver, per day) RSE compliance.

    ``using`` selects the database alias; every query in the service goes
    through it.
    """

    def __init__(self, using: str = "default", warning_threshold: Optional[float] = None):
        """Initialize counter service with the database alias and threshold."""
        self.using = using
        if warning_threshold is None:
            warning_threshold = get_setting("WARNING_THRESHOLD")
        self.warning_threshold = float(warning_threshold)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _activities(self):
        return DriverActivity.objects.using(self.using)

    def get_driver_counter_by_regime(
        self, organization_id, driver_id, date, regulatory_category
    ) -> CounterData:
        """
        Aggregate committed activity minutes for one regime.

        Returns:
            CounterData; all zeros when the driver has no counted activity
        """
        totals = (
            self._activities()
            .counted()
            .for_driver_day(organization_id, driver_id, business_date(date), regulatory_category)
            .totals()
        )

        return CounterData(
            driving_minutes=float(totals["driving_minutes"] or 0),
            amplitude_minutes=float(totals["amplitude_minutes"] or 0),
            break_minutes=float(totals["break_minutes"] or 0),
            activity_count=totals["activity_count"] or 0,
            work_start_time=totals["work_start_time"],
            work_end_time=totals["work_end_time"],
        )

    def get_driver_counters(self, organization_id, driver_id, date) -> Dict[str, CounterData]:
        """Counters for every regime the driver has counted activity in."""
        regimes = (
            self._activities()
            .counted()
            .for_driver_day(organization_id, driver_id, business_date(date))
            .values_list("regulatory_category", flat=True)
            .distinct()
        )
        return {
            regime: self.get_driver_counter_by_regime(organization_id, driver_id, date, regime)
            for regime in sorted(set(regimes))
        }

    def record_driving_activity(
        self,
        organization_id,
        driver_id,
        date,
        regulatory_category,
        driving_minutes: float,
        amplitude_minutes: Optional[float] = None,
        break_minutes: float = 0,
        license_category_id=None,
        mission_id: Optional[str] = None,
        quote_id: Optional[str] = None,
        work_start_time=None,
        work_end_time=None,
        status: str = DriverActivity.Status.COMMITTED,
    ) -> DriverActivity:
        """
        Insert a driving activity. Amplitude defaults to the driving time.

        Raises:
            RSECounterError: when the activity cannot be stored
        """
        if amplitude_minutes is None:
            amplitude_minutes = driving_minutes

        try:
            activity = self._activities().create(
                organization_id=organization_id,
                driver_id=driver_id,
                date=business_date(date),
                regulatory_category=RegulatoryCategory(regulatory_category).value,
                license_category_id=license_category_id,
                mission_id=mission_id,
                quote_id=quote_id,
                driving_minutes=round(float(driving_minutes), 2),
                amplitude_minutes=round(float(amplitude_minutes), 2),
                break_minutes=round(float(break_minutes), 2),
                work_start_time=work_start_time,
                work_end_time=work_end_time,
                status=status,
            )
        except DatabaseError as e:
            self.logger.error(f"Failed to record driving activity for driver {driver_id}: {str(e)}")
            raise RSECounterError(f"Failed to record driving activity: {str(e)}") from e

        self.logger.info(
            f"Recorded {format_duration(driving_minutes)} driving for driver {driver_id} "
            f"on {activity.date} [{activity.regulatory_category}]"
        )
        return activity

    def resolve_rules(self, organization_id, regulatory_category, license_category_id=None) -> Optional[RSERules]:
        """LIGHT has no rules; HEAVY uses the license rule or the heavy shortcut."""
        repository = RuleRepository(organization_id, using=self.using)
        return repository.get_rules_for_regulatory_category(regulatory_category, license_category_id)

    def check_cumulative_compliance(
        self,
        organization_id,
        driver_id,
        date,
        additional_driving_minutes: float,
        additional_amplitude_minutes: float,
        regulatory_category,
        license_category_id=None,
    ) -> CumulativeComplianceResult:
        """
        Check whether adding a mission keeps the driver's day compliant.

        Args:
            organization_id: Tenant
            driver_id: Driver to assign
            date: Mission date (date, or datetime normalized to the business date)
            additional_driving_minutes: Driving time of the candidate mission
            additional_amplitude_minutes: Duty span of the candidate mission
            regulatory_category: LIGHT or HEAVY
            license_category_id: Explicit license category, optional

        Returns:
            CumulativeComplianceResult with current and projected counters
        """
        regulatory_category = RegulatoryCategory(regulatory_category)
        current = self.get_driver_counter_by_regime(
            organization_id, driver_id, date, regulatory_category.value
        )
        additional_driving = float(additional_driving_minutes)
        additional_amplitude = float(additional_amplitude_minutes)
        projected = current.plus(additional_driving, additional_amplitude)

        rules = self.resolve_rules(organization_id, regulatory_category, license_category_id)
        if rules is None:
            if regulatory_category == RegulatoryCategory.HEAVY:
                self.logger.warning(
                    f"No RSE rules for HEAVY check of driver {driver_id}; treating as compliant"
                )
            return CumulativeComplianceResult(
                regulatory_category=regulatory_category,
                current_counters=current,
                projected_counters=projected,
            )

        violations: List[Violation] = []
        warnings: List[ComplianceWarning] = []

        self._check_cumulative_limit(
            label="driving time",
            current_minutes=current.driving_minutes,
            additional_minutes=additional_driving,
            limit_hours=rules.max_daily_driving_hours,
            violation_kind=ViolationKind.CUMULATIVE_DRIVING_EXCEEDED,
            warning_kind=WarningKind.APPROACHING_DRIVING_LIMIT,
            violations=violations,
            warnings=warnings,
        )
        self._check_cumulative_limit(
            label="amplitude",
            current_minutes=current.amplitude_minutes,
            additional_minutes=additional_amplitude,
            limit_hours=rules.max_daily_amplitude_hours,
            violation_kind=ViolationKind.CUMULATIVE_AMPLITUDE_EXCEEDED,
            warning_kind=WarningKind.APPROACHING_AMPLITUDE_LIMIT,
            violations=violations,
            warnings=warnings,
        )

        result = CumulativeComplianceResult(
            regulatory_category=regulatory_category,
            current_counters=current,
            projected_counters=projected,
            violations=violations,
            warnings=warnings,
            rules=rules,
        )

        self.logger.debug(
            f"Cumulative check for driver {driver_id}: projected "
            f"{format_duration(projected.driving_minutes)} driving / "
            f"{format_duration(projected.amplitude_minutes)} amplitude -> {derive_decision(result).value}"
        )
        return result

    def _check_cumulative_limit(
        self,
        label: str,
        current_minutes: float,
        additional_minutes: float,
        limit_hours: float,
        violation_kind: ViolationKind,
        warning_kind: WarningKind,
        violations: List[Violation],
        warnings: List[ComplianceWarning],
    ) -> None:
        projected_minutes = current_minutes + additional_minutes
        limit_minutes = hours_to_minutes(limit_hours)
        projected_hours = minutes_to_hours(projected_minutes)

        if projected_minutes > limit_minutes:
            violations.append(
                Violation(
                    kind=violation_kind,
                    message=(
                        f"Cumulative {label} ({projected_hours}h) would exceed maximum ({limit_hours}h)"
                    ),
                    actual=projected_hours,
                    limit=limit_hours,
                    existing=minutes_to_hours(current_minutes),
                    additional=minutes_to_hours(additional_minutes),
                )
            )
        elif limit_minutes > 0 and projected_minutes >= limit_minutes * self.warning_threshold:
            warnings.append(
                ComplianceWarning(
                    kind=warning_kind,
                    message=f"Cumulative {label} ({projected_hours}h) approaching limit ({limit_hours}h)",
                    actual=projected_hours,
                    limit=limit_hours,
                    percent_of_limit=round(projected_minutes / limit_minutes * 100),
                )
            )

    def check_and_reserve(
        self,
        organization_id,
        driver_id,
        date,
        additional_driving_minutes: float,
        additional_amplitude_minutes: float,
        regulatory_category,
        license_category_id=None,
        mission_id: Optional[str] = None,
        quote_id: Optional[str] = None,
        work_start_time=None,
        work_end_time=None,
    ) -> Tuple[CumulativeComplianceResult, Optional[DriverActivity]]:
        """
        Check and, unless BLOCKED, record the mission atomically.

        The driver row is locked for the duration of the transaction, so
        concurrent reservations for the same driver are decided one after
        the other against up-to-date counters.

        Returns:
            (result, activity) where activity is None when BLOCKED
        """
        try:
            with transaction.atomic(using=self.using):
                locked = list(
                    Driver.objects.using(self.using)
                    .select_for_update()
                    .filter(id=driver_id, organization_id=organization_id)
                )
                if not locked:
                    raise RSECounterError(f"Driver {driver_id} not found for organization {organization_id}")

                result = self.check_cumulative_compliance(
                    organization_id,
                    driver_id,
                    date,
                    additional_driving_minutes,
                    additional_amplitude_minutes,
                    regulatory_category,
                    license_category_id,
                )

                activity = None
                if derive_decision(result) != ComplianceDecision.BLOCKED:
                    activity = self.record_driving_activity(
                        organization_id,
                        driver_id,
                        date,
                        regulatory_category,
                        driving_minutes=additional_driving_minutes,
                        amplitude_minutes=additional_amplitude_minutes,
                        license_category_id=license_category_id,
                        mission_id=mission_id,
                        quote_id=quote_id,
                        work_start_time=work_start_time,
                        work_end_time=work_end_time,
                    )
        except DatabaseError as e:
            self.logger.error(f"Reservation for driver {driver_id} failed: {str(e)}")
            raise RSECounterError(f"Failed to reserve driving time: {str(e)}") from e

        self.logger.info(
            f"Reservation for driver {driver_id}: {derive_decision(result).value}"
            f"{'' if activity else ' (nothing recorded)'}"
        )
        return result, activity

    def log_compliance_decision(
        self,
        organization_id,
        driver_id,
        regulatory_category,
        decision,
        violations: List,
        warnings: List,
        reason: str,
        counters_snapshot: Dict,
        quote_id: Optional[str] = None,
        mission_id: Optional[str] = None,
        vehicle_category_id: Optional[str] = None,
    ) -> ComplianceAuditLog:
        """
        Append one audit record. Existing records are never touched.

        Raises:
            RSECounterError: when the record cannot be written
        """
        try:
            entry = ComplianceAuditLog(
                organization_id=organization_id,
                driver_id=driver_id,
                quote_id=quote_id,
                mission_id=mission_id,
                vehicle_category_id=str(vehicle_category_id) if vehicle_category_id else None,
                regulatory_category=RegulatoryCategory(regulatory_category).value,
                decision=ComplianceDecision(decision).value,
                violations=[_as_dict(v) for v in violations],
                warnings=[_as_dict(w) for w in warnings],
                reason=reason,
                counters_snapshot=counters_snapshot,
            )
            entry.save(using=self.using)
        except DatabaseError as e:
            self.logger.error(f"Failed to log compliance decision for driver {driver_id}: {str(e)}")
            raise RSECounterError(f"Failed to log compliance decision: {str(e)}") from e

        self.logger.info(f"Logged {entry.decision} decision for driver {driver_id}")
        return entry

    def log_cumulative_result(
        self,
        organization_id,
        driver_id,
        result: CumulativeComplianceResult,
        quote_id: Optional[str] = None,
        mission_id: Optional[str] = None,
        vehicle_category_id: Optional[str] = None,
    ) -> ComplianceAuditLog:
        """Audit a cumulative check with its derived decision and reason."""
        return self.log_compliance_decision(
            organization_id,
            driver_id,
            result.regulatory_category,
            derive_decision(result),
            violations=result.violations,
            warnings=result.warnings,
            reason=build_decision_reason(result),
            counters_snapshot={
                "current": result.current_counters.to_dict(),
                "projected": result.projected_counters.to_dict(),
            },
            quote_id=quote_id,
            mission_id=mission_id,
            vehicle_category_id=vehicle_category_id,
        )

    def get_recent_audit_logs(self, organization_id, driver_id, limit: int = 10):
        """Most recent audit records for a driver, newest first."""
        return list(
            ComplianceAuditLog.objects.using(self.using)
            .filter(organization_id=organization_id, driver_id=driver_id)
            .order_by("-timestamp")[:limit]
        )

    def get_compliance_snapshot(self, organization_id, driver_id, date) -> Dict:
        """LIGHT and HEAVY counters, limits and status for a driver's day."""
        light = self.get_driver_counter_by_regime(
            organization_id, driver_id, date, RegulatoryCategory.LIGHT.value
        )
        heavy = self.get_driver_counter_by_regime(
            organization_id, driver_id, date, RegulatoryCategory.HEAVY.value
        )
        heavy_rules = self.resolve_rules(organization_id, RegulatoryCategory.HEAVY)

        return {
            "date": business_date(date).isoformat(),
            "counters": {
                "light": light.to_dict(),
                "heavy": heavy.to_dict(),
            },
            "limits": {
                "light": None,
                "heavy": heavy_rules.to_dict() if heavy_rules else None,
            },
            "status": {
                "light": calculate_compliance_status(light, None, self.warning_threshold),
                "heavy": calculate_compliance_status(heavy, heavy_rules, self.warning_threshold),
            },
        }


def _as_dict(item):
    return item.to_dict() if hasattr(item, "to_dict") else item


class RSECounterError(Exception):
    """Exception raised when counter data cannot be read or written."""

    pass
