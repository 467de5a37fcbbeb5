"""
Tests for the RSE Counter Service.

Database-backed: counters are aggregated from DriverActivity rows and
decisions are written to the append-only audit log.
"""

import uuid

import pytest
from datetime import date, datetime, timezone as dt_timezone

from fleet import models as fleet_models
from rse_compliance import models as rse_models
from rse_compliance.models import AppendOnlyError, ComplianceAuditLog, DriverActivity
from rse_compliance.services.rse_counter import (
    RSECounterError,
    RSECounterService,
    build_decision_reason,
    business_date,
    calculate_compliance_status,
    derive_decision,
)
from rse_compliance.services.types import (
    ComplianceDecision,
    CounterData,
    CumulativeComplianceResult,
    RegulatoryCategory,
    ViolationKind,
    WarningKind,
)
from rse_compliance.tests.factories import (
    create_driver,
    create_license_category,
    create_license_rule,
    create_organization,
    make_rules,
)

MISSION_DATE = date(2025, 6, 1)


@pytest.mark.django_db
class TestCumulativeCompliance:
    """Projected counters against the driver's daily limits."""

    @pytest.fixture(autouse=True)
    def setup(self, organization, heavy_rule, driver):
        self.organization = organization
        self.rule = heavy_rule
        self.driver = driver
        self.service = RSECounterService(warning_threshold=0.9)

    def _record(self, minutes, **kwargs):
        kwargs.setdefault("regulatory_category", "HEAVY")
        return self.service.record_driving_activity(
            self.organization.id,
            self.driver.id,
            kwargs.pop("date", MISSION_DATE),
            driving_minutes=minutes,
            **kwargs,
        )

    def _check(self, additional, regulatory_category="HEAVY", license_category_id="rule"):
        if license_category_id == "rule":
            license_category_id = self.rule.license_category_id
        return self.service.check_cumulative_compliance(
            self.organization.id,
            self.driver.id,
            MISSION_DATE,
            additional,
            additional,
            regulatory_category,
            license_category_id,
        )

    def test_projected_driving_exceeds_limit(self):
        """480 min committed + 90 min against a 540 min limit is blocked."""
        self._record(480)

        result = self._check(90)

        assert not result.is_compliant
        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.kind == ViolationKind.CUMULATIVE_DRIVING_EXCEEDED
        assert violation.existing == 8.0
        assert violation.additional == 1.5
        assert violation.actual == 9.5
        assert violation.limit == 9.0
        assert result.current_counters.driving_minutes == 480
        assert result.projected_counters.driving_minutes == 570
        assert derive_decision(result) == ComplianceDecision.BLOCKED

    def test_approaching_limit_is_warning(self):
        """400 + 90 = 490 min is 91% of 9h."""
        self._record(400)

        result = self._check(90)

        assert result.is_compliant
        assert [w.kind for w in result.warnings] == [WarningKind.APPROACHING_DRIVING_LIMIT]
        assert result.warnings[0].percent_of_limit == 91
        assert derive_decision(result) == ComplianceDecision.WARNING

    def test_well_within_limits_is_approved(self):
        self._record(120)

        result = self._check(60)

        assert result.is_compliant
        assert result.warnings == []
        assert derive_decision(result) == ComplianceDecision.APPROVED

    def test_zero_addition_adds_no_violation(self):
        """Checking zero extra minutes only reflects what is already committed."""
        for committed in (0, 200, 480, 540):
            DriverActivity.objects.all().delete()
            if committed:
                self._record(committed)
            result = self._check(0)
            status = calculate_compliance_status(result.current_counters, result.rules, 0.9)
            assert result.is_compliant == (status != "VIOLATION")

    def test_amplitude_limit(self):
        self._record(300, amplitude_minutes=660)

        result = self._check(90)

        kinds = [v.kind for v in result.violations]
        assert kinds == [ViolationKind.CUMULATIVE_AMPLITUDE_EXCEEDED]

    def test_light_has_no_rules(self):
        self._record(900, regulatory_category="LIGHT")

        result = self._check(300, regulatory_category="LIGHT", license_category_id=None)

        assert result.is_compliant
        assert not result.has_rules
        assert result.current_counters.driving_minutes == 900

    def test_heavy_without_any_rules_is_compliant(self):
        other_org = create_organization("No Rules SARL")
        other_driver = create_driver(other_org)

        result = self.service.check_cumulative_compliance(
            other_org.id, other_driver.id, MISSION_DATE, 2000, 2000, "HEAVY"
        )

        assert result.is_compliant
        assert not result.has_rules

    def test_heavy_rule_shortcut_without_license(self):
        """Without a license category the capped-speed rule applies."""
        create_license_rule(self.organization, code="C", max_daily_driving_hours="4.00")
        self._record(480)

        result = self._check(90, license_category_id=None)

        assert result.rules.license_category_code == "D"
        assert not result.is_compliant

    def test_license_without_rule_falls_back_to_heavy_rules(self):
        """A license category with no rule does not switch the limits off."""
        for license_category_id in (uuid.uuid4(), create_license_category(self.organization, "B").id):
            result = self._check(600, license_category_id=license_category_id)

            assert result.has_rules
            assert result.rules.license_category_code == "D"
            assert derive_decision(result) == ComplianceDecision.BLOCKED

    def test_counters_only_include_committed_activity(self):
        self._record(100)
        self._record(50, status=DriverActivity.Status.COMPLETED)
        self._record(300, status=DriverActivity.Status.PLANNED)
        self._record(300, status=DriverActivity.Status.CANCELLED)

        counters = self.service.get_driver_counter_by_regime(
            self.organization.id, self.driver.id, MISSION_DATE, "HEAVY"
        )

        assert counters.driving_minutes == 150
        assert counters.activity_count == 2

    def test_counters_are_tenant_and_driver_scoped(self):
        other_driver = create_driver(self.organization, first_name="Luc")
        self.service.record_driving_activity(
            self.organization.id, other_driver.id, MISSION_DATE, "HEAVY", driving_minutes=500
        )
        self._record(100)

        result = self._check(0)

        assert result.current_counters.driving_minutes == 100

    def test_counters_are_regime_scoped(self):
        self._record(100)
        self._record(400, regulatory_category="LIGHT")

        counters = self.service.get_driver_counters(self.organization.id, self.driver.id, MISSION_DATE)

        assert set(counters) == {"HEAVY", "LIGHT"}
        assert counters["HEAVY"].driving_minutes == 100
        assert counters["LIGHT"].driving_minutes == 400

    def test_amplitude_defaults_to_driving(self):
        activity = self._record(135)

        assert float(activity.amplitude_minutes) == 135

    def test_datetime_is_normalized_to_business_date(self):
        """23:30 UTC on 1 June is already 2 June in Paris."""
        late_evening = datetime(2025, 6, 1, 23, 30, tzinfo=dt_timezone.utc)
        activity = self._record(60, date=late_evening)

        assert activity.date == date(2025, 6, 2)
        assert business_date(late_evening) == date(2025, 6, 2)

    def test_snapshot(self):
        self._record(500)
        self._record(120, regulatory_category="LIGHT")

        snapshot = self.service.get_compliance_snapshot(self.organization.id, self.driver.id, MISSION_DATE)

        assert snapshot["date"] == "2025-06-01"
        assert snapshot["counters"]["heavy"]["driving_minutes"] == 500
        assert snapshot["counters"]["light"]["driving_minutes"] == 120
        assert snapshot["limits"]["light"] is None
        assert snapshot["limits"]["heavy"]["max_daily_driving_hours"] == 9.0
        assert snapshot["status"]["heavy"] == "WARNING"
        assert snapshot["status"]["light"] == "OK"


@pytest.mark.django_db
class TestReservation:
    """Check-then-record race and its locked counterpart."""

    @pytest.fixture(autouse=True)
    def setup(self, organization, heavy_rule, driver):
        self.organization = organization
        self.rule = heavy_rule
        self.driver = driver
        self.service = RSECounterService(warning_threshold=0.9)
        self.service.record_driving_activity(
            organization.id, driver.id, MISSION_DATE, "HEAVY", driving_minutes=400
        )

    def _args(self, minutes):
        return (
            self.organization.id,
            self.driver.id,
            MISSION_DATE,
            minutes,
            minutes,
            "HEAVY",
            self.rule.license_category_id,
        )

    def test_unlocked_checks_can_both_pass(self):
        """Two checks read the same counters before either mission is recorded."""
        first = self.service.check_cumulative_compliance(*self._args(100))
        second = self.service.check_cumulative_compliance(*self._args(100))

        assert first.is_compliant and second.is_compliant

        for _ in range(2):
            self.service.record_driving_activity(
                self.organization.id, self.driver.id, MISSION_DATE, "HEAVY", driving_minutes=100
            )
        counters = self.service.get_driver_counter_by_regime(
            self.organization.id, self.driver.id, MISSION_DATE, "HEAVY"
        )
        assert counters.driving_minutes > self.rule.max_daily_driving_hours * 60

    def test_reserve_blocks_second_assignment(self):
        first, first_activity = self.service.check_and_reserve(*self._args(100))
        second, second_activity = self.service.check_and_reserve(*self._args(100))

        assert derive_decision(first) == ComplianceDecision.WARNING
        assert first_activity is not None
        assert derive_decision(second) == ComplianceDecision.BLOCKED
        assert second_activity is None
        assert second.current_counters.driving_minutes == 500
        assert DriverActivity.objects.filter(driver=self.driver).count() == 2

    def test_reserve_unknown_driver(self):
        other_org = create_organization("Elsewhere")
        with pytest.raises(RSECounterError):
            self.service.check_and_reserve(
                other_org.id, self.driver.id, MISSION_DATE, 10, 10, "HEAVY"
            )


@pytest.mark.django_db
class TestAuditLog:
    """Decisions are appended, never rewritten."""

    @pytest.fixture(autouse=True)
    def setup(self, organization, heavy_rule, driver):
        self.organization = organization
        self.rule = heavy_rule
        self.driver = driver
        self.service = RSECounterService(warning_threshold=0.9)

    def _log(self, additional=60, mission_id="M-1"):
        result = self.service.check_cumulative_compliance(
            self.organization.id,
            self.driver.id,
            MISSION_DATE,
            additional,
            additional,
            "HEAVY",
            self.rule.license_category_id,
        )
        return self.service.log_cumulative_result(
            self.organization.id, self.driver.id, result, mission_id=mission_id
        )

    def test_each_call_appends_one_row(self):
        """Two decisions for the same driver and date are two records."""
        approved = self._log(additional=60, mission_id="M-1")
        blocked = self._log(additional=600, mission_id="M-1")

        assert approved.decision == "APPROVED"
        assert blocked.decision == "BLOCKED"
        assert approved.id != blocked.id
        entries = ComplianceAuditLog.objects.filter(driver=self.driver)
        assert entries.count() == 2
        assert sorted(entries.values_list("decision", flat=True)) == ["APPROVED", "BLOCKED"]

    def test_blocked_decision_is_recorded(self):
        entry = self._log(additional=600)

        assert entry.decision == "BLOCKED"
        assert entry.reason.startswith("Blocked: ")
        assert entry.violations[0]["kind"] == "CUMULATIVE_DRIVING_EXCEEDED"
        assert entry.counters_snapshot["projected"]["driving_minutes"] == 600

    def test_records_cannot_be_updated(self):
        entry = self._log()
        entry.reason = "rewritten"

        with pytest.raises(AppendOnlyError):
            entry.save()
        with pytest.raises(AppendOnlyError):
            ComplianceAuditLog.objects.filter(id=entry.id).update(reason="rewritten")

        assert ComplianceAuditLog.objects.get(id=entry.id).reason != "rewritten"

    def test_records_cannot_be_deleted(self):
        entry = self._log()

        with pytest.raises(AppendOnlyError):
            entry.delete()
        with pytest.raises(AppendOnlyError):
            ComplianceAuditLog.objects.all().delete()

        assert ComplianceAuditLog.objects.count() == 1

    def test_recent_logs_newest_first_and_limited(self):
        for index in range(4):
            self._log(mission_id=f"M-{index}")

        logs = self.service.get_recent_audit_logs(self.organization.id, self.driver.id, limit=3)

        assert len(logs) == 3
        timestamps = [log.timestamp for log in logs]
        assert timestamps == sorted(timestamps, reverse=True)


class TestDecisionHelpers:
    """Pure helpers; no database needed."""

    def test_compliance_status(self):
        rules = make_rules(max_daily_driving_hours=9, max_daily_amplitude_hours=12)

        assert calculate_compliance_status(None, rules, 0.9) == "OK"
        assert calculate_compliance_status(CounterData(600, 600), None, 0.9) == "OK"
        assert calculate_compliance_status(CounterData(100, 100), rules, 0.9) == "OK"
        assert calculate_compliance_status(CounterData(500, 500), rules, 0.9) == "WARNING"
        assert calculate_compliance_status(CounterData(541, 541), rules, 0.9) == "VIOLATION"
        assert calculate_compliance_status(CounterData(100, 721), rules, 0.9) == "VIOLATION"

    def test_reason_without_rules(self):
        result = CumulativeComplianceResult(
            regulatory_category=RegulatoryCategory.LIGHT,
            current_counters=CounterData(),
            projected_counters=CounterData(60, 60),
        )

        assert derive_decision(result) == ComplianceDecision.APPROVED
        assert "no RSE rules configured" in build_decision_reason(result)

    def test_decisions_and_regimes_match_stored_choices(self):
        decision_field = ComplianceAuditLog._meta.get_field("decision")
        regime_field = DriverActivity._meta.get_field("regulatory_category")

        assert [value for value, _ in decision_field.choices] == [d.value for d in ComplianceDecision]
        assert [value for value, _ in regime_field.choices] == [r.value for r in RegulatoryCategory]
        assert ComplianceDecision is rse_models.ComplianceDecision
        assert RegulatoryCategory is fleet_models.RegulatoryCategory
