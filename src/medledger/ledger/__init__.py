"""
Ledger module
Composition of the registries behind the public operation surface
"""

from medledger.ledger.state import LedgerState
from medledger.ledger.device_ledger import (
    MedicalDeviceLedger,
    LedgerSession,
    DeviceTracking,
    AuditLogCallback,
)

__all__ = [
    "LedgerState",
    "MedicalDeviceLedger",
    "LedgerSession",
    "DeviceTracking",
    "AuditLogCallback",
]
