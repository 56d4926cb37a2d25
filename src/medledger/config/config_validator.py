"""
Configuration Validator
Validates ledger configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from medledger.config.ledger_config import LOG_LEVELS
from medledger.models.identity import NULL_IDENTITY


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


class ConfigValidator:
    """
    ConfigValidator class
    Provides comprehensive validation for ledger configuration
    """

    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the entire configuration dictionary

        Args:
            config: Configuration dictionary to validate

        Returns:
            ValidationResult with any errors
        """
        self._errors = []

        self._validate_owner(config)
        self._validate_paths(config)
        self._validate_flags(config)
        self._validate_log_level(config)
        self._validate_signing_key(config)

        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )

    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid

        Raises:
            ValidationError: If configuration is invalid
        """
        from medledger.exceptions import ValidationError

        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(
                f"Configuration validation failed: {error_messages}",
                field=result.errors[0].field,
            )

    def _validate_owner(self, config: Dict[str, Any]) -> None:
        """Owner is required, non-empty and not the null identity"""
        owner = config.get("owner")
        if owner is None:
            self._errors.append(ValidationErrorDetail(
                field="owner",
                message="owner is required"
            ))
        elif not isinstance(owner, str):
            self._errors.append(ValidationErrorDetail(
                field="owner",
                message="owner must be a string",
                value=owner
            ))
        elif owner.strip() == "":
            self._errors.append(ValidationErrorDetail(
                field="owner",
                message="owner cannot be empty",
                value=owner
            ))
        elif owner.strip() == NULL_IDENTITY.value:
            self._errors.append(ValidationErrorDetail(
                field="owner",
                message="owner cannot be the null identity",
                value=owner
            ))

    def _validate_paths(self, config: Dict[str, Any]) -> None:
        """Validate path fields"""
        path_value = config.get("state_store_path")
        if path_value is not None and path_value != "":
            if not isinstance(path_value, str):
                self._errors.append(ValidationErrorDetail(
                    field="state_store_path",
                    message="state_store_path must be a string",
                    value=path_value
                ))

    def _validate_flags(self, config: Dict[str, Any]) -> None:
        """Validate boolean switches"""
        for flag in ("enable_audit_log", "log_json"):
            value = config.get(flag)
            if value is not None and not isinstance(value, bool):
                self._errors.append(ValidationErrorDetail(
                    field=flag,
                    message=f"{flag} must be a boolean",
                    value=value
                ))

    def _validate_log_level(self, config: Dict[str, Any]) -> None:
        """Validate log level setting"""
        log_level = config.get("log_level")
        if log_level is not None:
            if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
                self._errors.append(ValidationErrorDetail(
                    field="log_level",
                    message=f"log_level must be one of: {', '.join(LOG_LEVELS)}",
                    value=log_level
                ))

    def _validate_signing_key(self, config: Dict[str, Any]) -> None:
        """Validate audit signing key configuration"""
        valid_key_extensions = (".pem", ".key")

        key = config.get("audit_signing_key")
        if key is not None and isinstance(key, str):
            is_pem = "-----BEGIN" in key
            is_file_path = key.lower().endswith(valid_key_extensions)

            if not is_pem and not is_file_path:
                self._errors.append(ValidationErrorDetail(
                    field="audit_signing_key",
                    message=(
                        "audit_signing_key must be a valid file path "
                        f"({', '.join(valid_key_extensions)}) or PEM-encoded content"
                    ),
                    value="[REDACTED]"
                ))

        password = config.get("audit_signing_key_password")
        if password is not None and key is None:
            self._errors.append(ValidationErrorDetail(
                field="audit_signing_key_password",
                message="audit_signing_key_password is set without audit_signing_key",
                value="[REDACTED]"
            ))
