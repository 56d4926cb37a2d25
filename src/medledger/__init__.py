"""
Medical device lifecycle ledger for Python

Main entry point for the package
"""

from medledger.ledger import (
    MedicalDeviceLedger,
    LedgerSession,
    DeviceTracking,
    LedgerState,
)
from medledger.exceptions import (
    LedgerError,
    LedgerErrorCategory,
    ErrorCode,
    OperationError,
    UnauthorizedError,
    InvalidDeviceError,
    StatusUpdateFailedError,
    InvalidStatusError,
    InvalidCertificationError,
    CertificationExistsError,
    ValidationError,
    StorageError,
    AuditIntegrityError,
    CryptoError,
    ConfigError,
)

# Configuration
from medledger.config import (
    LedgerConfig,
    ConfigLoader,
    ConfigValidator,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)

# Models
from medledger.models import (
    Identity,
    NULL_IDENTITY,
    DeviceStatus,
    DeviceRecord,
    HistoryEntry,
    CertificationType,
    CertificationRecord,
)

# Audit trail and persistence
from medledger.audit import AuditLog, AuditRecord, AuditVerificationResult
from medledger.crypto import AuditSigner, AuditSignerOptions
from medledger.storage import StateStore
from medledger.utils import configure_logging

__version__ = "0.1.0"

__all__ = [
    # Ledger
    "MedicalDeviceLedger",
    "LedgerSession",
    "DeviceTracking",
    "LedgerState",
    # Exceptions
    "LedgerError",
    "LedgerErrorCategory",
    "ErrorCode",
    "OperationError",
    "UnauthorizedError",
    "InvalidDeviceError",
    "StatusUpdateFailedError",
    "InvalidStatusError",
    "InvalidCertificationError",
    "CertificationExistsError",
    "ValidationError",
    "StorageError",
    "AuditIntegrityError",
    "CryptoError",
    "ConfigError",
    # Configuration
    "LedgerConfig",
    "ConfigLoader",
    "ConfigValidator",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    # Models
    "Identity",
    "NULL_IDENTITY",
    "DeviceStatus",
    "DeviceRecord",
    "HistoryEntry",
    "CertificationType",
    "CertificationRecord",
    # Audit trail and persistence
    "AuditLog",
    "AuditRecord",
    "AuditVerificationResult",
    "AuditSigner",
    "AuditSignerOptions",
    "StateStore",
    "configure_logging",
]
