"""
Configuration module
"""

from medledger.config.ledger_config import (
    LedgerConfig,
    ENV_VAR_MAPPING,
    ConfigDefaults,
    LOG_LEVELS,
)
from medledger.config.config_loader import ConfigLoader
from medledger.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "LedgerConfig",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "LOG_LEVELS",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
