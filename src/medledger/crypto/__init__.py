"""Cryptography module initialization

This module provides signing for the audit trail:
- AuditSigner: RSA-SHA256 signatures over audit entry hashes
"""

from medledger.crypto.audit_signer import (
    AuditSigner,
    AuditSignerOptions,
    SignatureResult,
    VerificationResult as SignatureVerificationResult,
    load_key_material,
)

__all__ = [
    "AuditSigner",
    "AuditSignerOptions",
    "SignatureResult",
    "SignatureVerificationResult",
    "load_key_material",
]
