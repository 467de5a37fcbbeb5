"""
RSE Compliance Services Package.

This package contains the business logic for RSE (Réglementation Sociale
Européenne) compliance of heavy-vehicle missions.

Services:
- ComplianceValidatorService: Single-trip validation against RSE rules
- AlternativeGeneratorService: Staffing/scheduling alternatives with costs
- RuleRepository: Tenant-scoped rule and cost parameter lookup
- RSECounterService: Cumulative per-driver counters and audit decisions
"""

from .compliance_validator import ComplianceValidatorService, get_compliance_summary
from .alternative_generator import AlternativeGeneratorService
from .rule_repository import RuleRepository
from .rse_counter import RSECounterService, derive_decision

__all__ = [
    'ComplianceValidatorService',
    'AlternativeGeneratorService',
    'RuleRepository',
    'RSECounterService',
    'get_compliance_summary',
    'derive_decision',
]
