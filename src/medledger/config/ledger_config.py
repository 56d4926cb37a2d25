"""
Ledger Configuration Types and Schema
Type-safe configuration objects for the medical device ledger
"""

from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator

from medledger.models.identity import NULL_IDENTITY


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigDefaults:
    """Default configuration values"""
    ENABLE_AUDIT_LOG = True
    LOG_LEVEL = "INFO"
    LOG_JSON = False


# Environment variable mapping
ENV_VAR_MAPPING = {
    "MEDLEDGER_OWNER": "owner",
    "MEDLEDGER_STATE_STORE_PATH": "state_store_path",
    "MEDLEDGER_ENABLE_AUDIT_LOG": "enable_audit_log",
    "MEDLEDGER_AUDIT_SIGNING_KEY": "audit_signing_key",
    "MEDLEDGER_AUDIT_SIGNING_KEY_PASSWORD": "audit_signing_key_password",
    "MEDLEDGER_LOG_LEVEL": "log_level",
    "MEDLEDGER_LOG_JSON": "log_json",
}


class LedgerConfig(BaseModel):
    """
    Main ledger configuration class
    Defines all configuration options for the ledger
    """

    # Required - deploying identity
    owner: str = Field(
        ...,
        description="Identity fixed as the contract owner",
        min_length=1
    )

    # Optional - State persistence
    state_store_path: Optional[str] = Field(
        default=None,
        description="Path of the JSON state file; in-memory only when unset"
    )

    # Optional - Audit trail
    enable_audit_log: bool = Field(
        default=ConfigDefaults.ENABLE_AUDIT_LOG,
        description="Deliver committed audit records to the audit callback"
    )
    audit_signing_key: Optional[Union[str, bytes]] = Field(
        default=None,
        description="RSA private key (PEM) for signing audit records - file path or content"
    )
    audit_signing_key_password: Optional[str] = Field(
        default=None,
        description="Password for an encrypted signing key"
    )

    # Optional - Logging
    log_level: str = Field(
        default=ConfigDefaults.LOG_LEVEL,
        description="Logging level"
    )
    log_json: bool = Field(
        default=ConfigDefaults.LOG_JSON,
        description="Emit structured JSON log lines"
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, v: str) -> str:
        """The null identity cannot own a ledger"""
        if v == NULL_IDENTITY.value:
            raise ValueError("owner cannot be the null identity")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("audit_signing_key")
    @classmethod
    def validate_signing_key(
        cls, v: Optional[Union[str, bytes]]
    ) -> Optional[Union[str, bytes]]:
        """Validate key is a file path, PEM content, or bytes"""
        if v is None or isinstance(v, bytes):
            return v

        if "-----BEGIN" in v:
            return v

        if v.lower().endswith((".pem", ".key")):
            return v

        raise ValueError(
            "Must be a valid file path (.pem, .key) or PEM-encoded content"
        )

