"""
Usage Examples for the Medical Device Ledger
Demonstrates configuration, device lifecycle and certification flows
"""

from medledger import (
    CertificationType,
    ConfigLoader,
    ConfigValidator,
    DeviceStatus,
    LedgerConfig,
    LedgerError,
    MedicalDeviceLedger,
    OperationError,
    configure_logging,
)


OWNER = "0x1111111111111111111111111111111111111111"
MANUFACTURER = "0x2222222222222222222222222222222222222222"
FDA_REVIEWER = "0x3333333333333333333333333333333333333333"


# =============================================================================
# Example 1: Programmatic Configuration
# =============================================================================

def programmatic_config_example() -> LedgerConfig:
    """Configure the ledger programmatically"""
    loader = ConfigLoader()

    return loader.load(
        env=False,
        config={
            "owner": OWNER,

            # State persistence, omit to keep everything in memory
            "state_store_path": "./data/ledger-state.json",

            # Audit trail signing
            "audit_signing_key": "./keys/audit-signing.pem",

            "log_level": "INFO",
        },
    )


# =============================================================================
# Example 2: Merged Configuration (File + Environment + Programmatic)
# =============================================================================

def merged_config_example() -> LedgerConfig:
    """
    Merge configuration from multiple sources
    Priority: programmatic > environment > file

    export MEDLEDGER_OWNER="0x1111111111111111111111111111111111111111"
    export MEDLEDGER_LOG_JSON="true"
    """
    loader = ConfigLoader()

    return loader.load(
        file="./config/ledger_config.json",
        env=True,
        config={"log_level": "DEBUG"},
    )


# =============================================================================
# Example 3: Device Lifecycle
# =============================================================================

def lifecycle_example() -> None:
    """Register a device, certify it and walk it through its lifecycle"""
    ledger = MedicalDeviceLedger(owner=OWNER)
    ledger.set_audit_log_callback(
        lambda record: print(f"  audit #{record.index}: {record.operation}")
    )

    manufacturer = ledger.session(MANUFACTURER)
    admin = ledger.session(OWNER)
    reviewer = ledger.session(FDA_REVIEWER)

    manufacturer.register_device(42, DeviceStatus.MANUFACTURED)
    manufacturer.update_device_status(42, DeviceStatus.TESTING)

    admin.add_regulatory_body(FDA_REVIEWER, CertificationType.FDA)
    reviewer.add_certification(42, CertificationType.FDA)

    manufacturer.update_device_status(42, DeviceStatus.DEPLOYED)

    for entry in ledger.get_device_history(42):
        print(f"  {entry.sequence_number}: {entry.status.value}")

    print(f"  FDA certified: {ledger.verify_certification(42, CertificationType.FDA)}")

    try:
        reviewer.add_certification(42, CertificationType.FDA)
    except OperationError as e:
        print(f"  rejected with code {int(e.error_code)}: {e}")

    print(f"  audit trail valid: {ledger.verify_audit_trail().valid}")


# =============================================================================
# Example 4: Configuration Validation
# =============================================================================

def validation_example() -> None:
    """Validate configuration before use"""
    validator = ConfigValidator()

    result = validator.validate({"log_level": "VERBOSE"})

    if not result.valid:
        print("Configuration validation failed:")
        for error in result.errors:
            print(f"  - {error.field}: {error.message}")


# =============================================================================
# Run Examples
# =============================================================================

if __name__ == "__main__":
    configure_logging(level="WARNING")

    print("=== Medical Device Ledger Examples ===\n")

    print("1. Configuration Validation:")
    validation_example()
    print()

    print("2. Device Lifecycle:")
    try:
        lifecycle_example()
    except LedgerError as e:
        print(f"  failed: {e.get_description()}")
