"""Audit trail module"""

from medledger.audit.audit_log import (
    AuditLog,
    AuditRecord,
    AuditVerificationResult,
    GENESIS_HASH,
    compute_entry_hash,
)

__all__ = [
    "AuditLog",
    "AuditRecord",
    "AuditVerificationResult",
    "GENESIS_HASH",
    "compute_entry_hash",
]
