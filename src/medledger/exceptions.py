"""Exception classes for the medical device ledger"""

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Dict, Optional


class LedgerErrorCategory(str, Enum):
    """Ledger error category codes"""
    AUTH = "AUTH"
    DEVICE = "DEV"
    CERTIFICATION = "CERT"
    VALIDATION = "VAL"
    STORAGE = "STORE"
    AUDIT = "AUDIT"
    CRYPTO = "CRYPTO"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class ErrorCode(IntEnum):
    """Fixed numeric codes reported by failing ledger operations"""
    UNAUTHORIZED = 1
    INVALID_DEVICE = 2
    STATUS_UPDATE_FAILED = 3
    INVALID_STATUS = 4
    INVALID_CERTIFICATION = 5
    CERTIFICATION_EXISTS = 6


class LedgerError(Exception):
    """
    Base exception for ledger errors

    All errors in the package extend from this class.
    Provides consistent error handling and categorization.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> LedgerErrorCategory:
        """Determine error category from code"""
        if not code:
            return LedgerErrorCategory.UNKNOWN

        for category in LedgerErrorCategory:
            if category is LedgerErrorCategory.UNKNOWN:
                continue
            if code.startswith(category.value):
                return category

        return LedgerErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: LedgerErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        return " ".join(parts)


class OperationError(LedgerError):
    """
    Failure of a public ledger operation

    Every subclass carries one of the fixed numeric error codes.
    The operation that raised it made no state changes.
    """

    error_code: ErrorCode
    default_code: str = ""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=self.default_code, details=details)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["error_code"] = int(self.error_code)
        return data


class UnauthorizedError(OperationError):
    """Caller lacks the required role or ownership"""
    error_code = ErrorCode.UNAUTHORIZED
    default_code = "AUTH01"


class InvalidDeviceError(OperationError):
    """Device id out of range or device record absent"""
    error_code = ErrorCode.INVALID_DEVICE
    default_code = "DEV01"


class StatusUpdateFailedError(OperationError):
    """Device history capacity exhausted"""
    error_code = ErrorCode.STATUS_UPDATE_FAILED
    default_code = "DEV02"


class InvalidStatusError(OperationError):
    """Status is not one of the lifecycle states"""
    error_code = ErrorCode.INVALID_STATUS
    default_code = "DEV03"


class InvalidCertificationError(OperationError):
    """Certification type is not one of the supported types"""
    error_code = ErrorCode.INVALID_CERTIFICATION
    default_code = "CERT01"


class CertificationExistsError(OperationError):
    """Duplicate certification for a device and type"""
    error_code = ErrorCode.CERTIFICATION_EXISTS
    default_code = "CERT02"


class ValidationError(LedgerError):
    """Validation error"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class StorageError(LedgerError):
    """State store read or write failure"""

    def __init__(
        self,
        message: str,
        code: str = "STORE01",
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, details=details)


class AuditIntegrityError(LedgerError):
    """
    Audit chain failed verification

    Raised when a persisted audit trail has a broken hash link,
    a recomputed hash mismatch, or an invalid signature.
    """

    def __init__(
        self,
        message: str,
        broken_at: Optional[int] = None,
        code: str = "AUDIT01",
    ) -> None:
        super().__init__(message, code=code, details={"broken_at": broken_at})
        self.broken_at = broken_at


class CryptoError(LedgerError):
    """Cryptographic operation error"""

    def __init__(
        self,
        message: str,
        code: str = "CRYPTO01",
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, details=details)


class ConfigError(LedgerError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
