"""
Audit record signing
RSA-SHA256 signatures over audit chain entry hashes

A signed audit trail lets an offline reviewer holding only the public
key or certificate confirm that each record was written by the ledger
that owns the private key.
"""

import base64
import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.x509 import load_pem_x509_certificate

from medledger.exceptions import CryptoError


@dataclass
class SignatureResult:
    """Signature result containing the signature and metadata"""
    signature: str
    data_string: str
    hash: str
    timestamp: datetime
    algorithm: str = "RSA-SHA256"


@dataclass
class VerificationResult:
    """Signature verification result"""
    valid: bool
    error: Optional[str] = None
    data_string: Optional[str] = None


@dataclass
class AuditSignerOptions:
    """
    Audit signer configuration options

    Attributes:
        private_key: Private key in PEM format (str or bytes)
        private_key_password: Password for encrypted private key
        public_key: Public key or certificate for verification (optional)
    """
    private_key: Optional[Union[str, bytes]] = None
    private_key_password: Optional[str] = None
    public_key: Optional[Union[str, bytes]] = None


def load_key_material(value: Union[str, bytes]) -> bytes:
    """
    Resolve PEM key material given either as content or as a file path

    Raises:
        CryptoError: If the path does not exist
    """
    if isinstance(value, bytes):
        return value
    if "-----BEGIN" in value:
        return value.encode("utf-8")

    key_path = Path(value)
    if not key_path.is_file():
        raise CryptoError(f"Key file not found: {key_path}", code="CRYPTO10")
    return key_path.read_bytes()


class AuditSigner:
    """
    Signs and verifies audit entry hashes

    Example:
        >>> signer = AuditSigner(AuditSignerOptions(
        ...     private_key=open('./ledger-key.pem').read(),
        ... ))
        >>> result = signer.sign(record.entry_hash)
        >>> signer.verify(record.entry_hash, result.signature).valid
        True
    """

    def __init__(self, options: AuditSignerOptions):
        """
        Raises:
            CryptoError: If a configured key cannot be loaded
        """
        self._private_key: Optional[RSAPrivateKey] = None
        self._public_key: Optional[RSAPublicKey] = None

        if options.private_key:
            self.load_private_key(options.private_key, options.private_key_password)

        if options.public_key:
            self.load_public_key(options.public_key)

    def load_private_key(
        self,
        key: Union[str, bytes],
        password: Optional[str] = None
    ) -> None:
        """
        Load a private key for signing

        The matching public key is derived for verification.

        Raises:
            CryptoError: If key cannot be loaded or is not an RSA key
        """
        try:
            key_data = key.encode("utf-8") if isinstance(key, str) else key
            password_bytes = password.encode("utf-8") if password else None

            private_key = serialization.load_pem_private_key(
                key_data,
                password=password_bytes,
            )
        except (ValueError, TypeError) as e:
            raise CryptoError(
                f"Failed to load private key: {str(e)}",
                code="CRYPTO11",
                cause=e,
            ) from e

        if not isinstance(private_key, RSAPrivateKey):
            raise CryptoError("Audit signing key must be an RSA key", code="CRYPTO12")

        self._private_key = private_key
        self._public_key = private_key.public_key()

    def load_public_key(self, key: Union[str, bytes]) -> None:
        """
        Load a public key or certificate for verification

        Raises:
            CryptoError: If key cannot be loaded
        """
        try:
            key_data = key.encode("utf-8") if isinstance(key, str) else key

            if b"CERTIFICATE" in key_data:
                public_key = load_pem_x509_certificate(key_data).public_key()
            else:
                public_key = serialization.load_pem_public_key(key_data)
        except ValueError as e:
            raise CryptoError(
                f"Failed to load public key: {str(e)}",
                code="CRYPTO13",
                cause=e,
            ) from e

        if not isinstance(public_key, RSAPublicKey):
            raise CryptoError("Audit verification key must be an RSA key", code="CRYPTO12")

        self._public_key = public_key

    def sign(self, data_string: str) -> SignatureResult:
        """
        Sign a data string

        Returns:
            Signature result with Base64-encoded signature

        Raises:
            CryptoError: If no private key is loaded
        """
        if not self._private_key:
            raise CryptoError("Private key not loaded", code="CRYPTO14")

        signature_bytes = self._private_key.sign(
            data_string.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256()
        )

        return SignatureResult(
            signature=base64.b64encode(signature_bytes).decode("utf-8"),
            data_string=data_string,
            hash=self.get_data_hash(data_string),
            timestamp=datetime.now(timezone.utc),
        )

    def verify(self, data_string: str, signature: str) -> VerificationResult:
        """Verify a Base64 signature against a data string"""
        if not self._public_key:
            return VerificationResult(
                valid=False,
                error="Public key not loaded for verification"
            )

        try:
            self._public_key.verify(
                base64.b64decode(signature),
                data_string.encode("utf-8"),
                padding.PKCS1v15(),
                hashes.SHA256()
            )
        except (InvalidSignature, ValueError) as e:
            return VerificationResult(
                valid=False,
                error=f"Verification failed: {str(e) or type(e).__name__}",
                data_string=data_string
            )

        return VerificationResult(valid=True, data_string=data_string)

    def get_data_hash(self, data_string: str) -> str:
        """SHA-256 hash of a data string in hexadecimal format"""
        return hashlib.sha256(data_string.encode("utf-8")).hexdigest()

    def has_private_key(self) -> bool:
        return self._private_key is not None

    def has_public_key(self) -> bool:
        return self._public_key is not None
