"""
RSE compliance models package.

Activity records feeding the cumulative counters, and the append-only
compliance decision log.
"""

from .driver_activity import DriverActivity
from .compliance_audit_log import AppendOnlyError, ComplianceAuditLog, ComplianceDecision

__all__ = [
    'DriverActivity',
    'ComplianceAuditLog',
    'ComplianceDecision',
    'AppendOnlyError',
]
