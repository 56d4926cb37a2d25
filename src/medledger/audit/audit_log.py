"""
Tamper-evident audit trail
Append-only hash chain with one record per committed ledger operation

Each record links to its predecessor through previous_hash, and its
entry_hash is SHA-256 over the canonical JSON of every other field:

    entry_hash = SHA-256(canonical_json({
        index, operation, caller, sequence_number, details, previous_hash
    }))

Editing, dropping or reordering any record breaks the chain from that
point on. When a signer is attached, each entry_hash is also signed.
"""

import hashlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from medledger.crypto.audit_signer import AuditSigner
from medledger.exceptions import StorageError


logger = logging.getLogger(__name__)

GENESIS_HASH = "0" * 64


class AuditRecord(BaseModel):
    """Single committed operation in the audit chain"""

    index: int = Field(..., description="Zero-based position in the chain", ge=0)
    operation: str = Field(..., description="Ledger operation name")
    caller: str = Field(..., description="Calling identity")
    sequence_number: Optional[int] = Field(
        None, description="Order marker drawn by the operation, if any"
    )
    details: Dict[str, Any] = Field(default_factory=dict, description="Operation arguments")
    previous_hash: str = Field(..., description="entry_hash of the preceding record")
    entry_hash: str = Field(..., description="SHA-256 of this record's content")
    signature: Optional[str] = Field(None, description="Base64 RSA-SHA256 over entry_hash")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class AuditVerificationResult:
    """
    Result of a full chain verification pass

    Attributes:
        valid: True only when every record links and hashes correctly
        broken_at: Index of the first failing record, or None
        error_message: Description of the first failure, or None
    """
    valid: bool
    broken_at: Optional[int] = None
    error_message: Optional[str] = None


def canonical_json(obj: Any) -> str:
    """Sorted-key compact JSON"""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))


def compute_entry_hash(
    index: int,
    operation: str,
    caller: str,
    sequence_number: Optional[int],
    details: Dict[str, Any],
    previous_hash: str,
) -> str:
    payload = {
        "index": index,
        "operation": operation,
        "caller": caller,
        "sequence_number": sequence_number,
        "details": details,
        "previous_hash": previous_hash,
    }
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


class AuditLog:
    """
    Append-only audit chain

    Example:
        >>> log = AuditLog()
        >>> log.append("register_device", "0xabc", 1, {"device_id": 42})
        >>> log.verify().valid
        True
    """

    def __init__(
        self,
        signer: Optional[AuditSigner] = None,
        genesis_hash: str = GENESIS_HASH,
    ) -> None:
        self._signer = signer
        self._genesis_hash = genesis_hash
        self._records: List[AuditRecord] = []

    def append(
        self,
        operation: str,
        caller: str,
        sequence_number: Optional[int],
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        """
        Append a record for a committed operation

        Returns:
            The new record, linked to the current head
        """
        details = dict(details or {})
        index = len(self._records)
        previous_hash = self.head_hash
        entry_hash = compute_entry_hash(
            index, operation, caller, sequence_number, details, previous_hash
        )

        signature = None
        if self._signer is not None and self._signer.has_private_key():
            signature = self._signer.sign(entry_hash).signature

        record = AuditRecord(
            index=index,
            operation=operation,
            caller=caller,
            sequence_number=sequence_number,
            details=details,
            previous_hash=previous_hash,
            entry_hash=entry_hash,
            signature=signature,
        )
        self._records.append(record)
        return record

    def truncate(self, length: int) -> None:
        """Drop records at positions >= length"""
        if length < 0 or length > len(self._records):
            raise ValueError(
                f"Cannot truncate audit log of {len(self._records)} records to {length}"
            )
        del self._records[length:]

    def verify(
        self,
        signer: Optional[AuditSigner] = None,
        require_signatures: bool = False,
    ) -> AuditVerificationResult:
        """
        Recompute every link and hash in the chain

        Args:
            signer: Verifier holding the public key; defaults to the
                log's own signer
            require_signatures: Treat unsigned records as failures

        Returns:
            Verification result pointing at the first broken record
        """
        verifier = signer or self._signer
        expected_previous = self._genesis_hash

        for position, record in enumerate(self._records):
            if record.index != position:
                return AuditVerificationResult(
                    False, position,
                    f"Record at position {position} claims index {record.index}",
                )
            if record.previous_hash != expected_previous:
                return AuditVerificationResult(
                    False, position, f"Record {position} does not link to its predecessor"
                )

            recomputed = compute_entry_hash(
                record.index,
                record.operation,
                record.caller,
                record.sequence_number,
                record.details,
                record.previous_hash,
            )
            if recomputed != record.entry_hash:
                return AuditVerificationResult(
                    False, position, f"Record {position} content does not match its hash"
                )

            if record.signature is None:
                if require_signatures:
                    return AuditVerificationResult(
                        False, position, f"Record {position} is not signed"
                    )
            elif verifier is not None and verifier.has_public_key():
                result = verifier.verify(record.entry_hash, record.signature)
                if not result.valid:
                    return AuditVerificationResult(
                        False, position, f"Record {position} signature: {result.error}"
                    )

            expected_previous = record.entry_hash

        return AuditVerificationResult(True)

    @property
    def head_hash(self) -> str:
        """entry_hash of the newest record, or the genesis hash"""
        if not self._records:
            return self._genesis_hash
        return self._records[-1].entry_hash

    @property
    def records(self) -> Tuple[AuditRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def copy(self) -> "AuditLog":
        """Independent log over the same (immutable) records"""
        log = AuditLog(signer=self._signer, genesis_hash=self._genesis_hash)
        log._records = list(self._records)
        return log

    def to_dict(self) -> Dict[str, Any]:
        return {
            "genesis_hash": self._genesis_hash,
            "records": [record.model_dump() for record in self._records],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        signer: Optional[AuditSigner] = None,
    ) -> "AuditLog":
        """Rebuild a log from to_dict() output without verifying it"""
        log = cls(signer=signer, genesis_hash=data.get("genesis_hash", GENESIS_HASH))
        log._records = [AuditRecord(**record) for record in data.get("records", [])]
        return log

    def export(self, path: Union[str, Path]) -> None:
        """
        Write the chain to a JSON file for offline review

        Raises:
            StorageError: If the file cannot be written
        """
        export_path = Path(path)
        try:
            export_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = export_path.with_suffix(export_path.suffix + ".tmp")
            temp_path.write_text(json.dumps(self.to_dict(), indent=2), "utf-8")
            os.replace(temp_path, export_path)
        except OSError as e:
            raise StorageError(
                f"Failed to export audit log: {str(e)}",
                code="STORE05",
                cause=e,
            ) from e
        logger.debug(f"Exported {len(self._records)} audit records to {export_path}")

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        signer: Optional[AuditSigner] = None,
    ) -> "AuditLog":
        """
        Read a chain written by export()

        Raises:
            StorageError: If the file is missing or not valid JSON
        """
        file_path = Path(path)
        try:
            data = json.loads(file_path.read_text("utf-8"))
        except FileNotFoundError as e:
            raise StorageError(
                f"Audit log not found: {file_path}", code="STORE06", cause=e
            ) from e
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Failed to read audit log: {file_path}", code="STORE07", cause=e
            ) from e
        return cls.from_dict(data, signer=signer)
