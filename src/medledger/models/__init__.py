"""Models module initialization"""

from medledger.models.identity import Identity, NULL_IDENTITY
from medledger.models.device import (
    DeviceStatus,
    DeviceRecord,
    HistoryEntry,
    HISTORY_CAPACITY,
    MIN_DEVICE_ID,
    MAX_DEVICE_ID,
)
from medledger.models.certification import CertificationType, CertificationRecord

__all__ = [
    "Identity",
    "NULL_IDENTITY",
    "DeviceStatus",
    "DeviceRecord",
    "HistoryEntry",
    "HISTORY_CAPACITY",
    "MIN_DEVICE_ID",
    "MAX_DEVICE_ID",
    "CertificationType",
    "CertificationRecord",
]
