"""
Medical device ledger
Public operation surface composing the registries, the audit chain and
the optional state store

Every mutating operation runs as one serialized transaction: either all
of its writes, its sequence tick and its audit record commit, or none
of them do.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from medledger.audit.audit_log import AuditLog, AuditRecord, AuditVerificationResult
from medledger.config.ledger_config import LedgerConfig
from medledger.crypto.audit_signer import AuditSigner, AuditSignerOptions, load_key_material
from medledger.exceptions import (
    AuditIntegrityError,
    ConfigError,
    OperationError,
    StorageError,
    UnauthorizedError,
)
from medledger.ledger.state import LedgerState
from medledger.models.certification import CertificationRecord
from medledger.models.device import DeviceRecord, HistoryEntry
from medledger.models.identity import Identity
from medledger.services.authorization import AuthorizationPolicy, RegulatoryRegistry
from medledger.services.certification_registry import CertificationRegistry
from medledger.services.device_registry import DeviceRegistry
from medledger.services.transaction import Transaction
from medledger.services.validators import coerce_identity
from medledger.storage.state_store import StateStore
from medledger.utils.logger import configure_logging


logger = logging.getLogger(__name__)

AuditLogCallback = Callable[[AuditRecord], None]


class DeviceTracking(ABC):
    """Public device tracking surface with the caller bound implicitly"""

    @abstractmethod
    def register_device(self, device_id: int, initial_status: Any) -> None:
        ...

    @abstractmethod
    def update_device_status(self, device_id: int, new_status: Any) -> None:
        ...

    @abstractmethod
    def get_device_history(self, device_id: int) -> List[HistoryEntry]:
        ...

    @abstractmethod
    def add_certification(self, device_id: int, cert_type: Any) -> None:
        ...

    @abstractmethod
    def verify_certification(self, device_id: int, cert_type: Any) -> bool:
        ...

    @abstractmethod
    def add_regulatory_body(self, authority: Union[Identity, str], cert_type: Any) -> None:
        ...


class MedicalDeviceLedger:
    """
    Medical device lifecycle and certification ledger

    The identity that creates the ledger becomes the contract owner for
    its whole lifetime.

    Example:
        >>> ledger = MedicalDeviceLedger(owner="0xowner")
        >>> ledger.register_device("0xmaker", 42, DeviceStatus.MANUFACTURED)
        >>> ledger.add_regulatory_body("0xowner", "0xfda", CertificationType.FDA)
        >>> ledger.add_certification("0xfda", 42, CertificationType.FDA)
        >>> ledger.verify_certification(42, CertificationType.FDA)
        True
    """

    def __init__(
        self,
        owner: Union[Identity, str],
        state_store: Optional[StateStore] = None,
        audit_log: Optional[AuditLog] = None,
        state: Optional[LedgerState] = None,
        enable_audit_log: bool = True,
    ) -> None:
        """
        Create a ledger

        Args:
            owner: Deploying identity, fixed as the contract owner
            state_store: Optional store saved after every commit
            audit_log: Audit chain to extend (a new one by default)
            state: Previously committed state to resume from
            enable_audit_log: Deliver committed records to the callback

        Raises:
            ConfigError: If state belongs to a different owner
        """
        owner = Identity.of(owner)
        if state is not None and state.owner != owner:
            raise ConfigError(
                f"Stored ledger belongs to {state.owner}, not {owner}",
                code="CONFIG02",
            )

        self._state = state or LedgerState(owner=owner)
        self._store = state_store
        self._audit = audit_log if audit_log is not None else AuditLog()
        self._enable_audit_log = enable_audit_log
        self._audit_log_callback: Optional[AuditLogCallback] = None
        self._lock = threading.RLock()

        self._policy = AuthorizationPolicy(self._state.owner)
        self._regulators = RegulatoryRegistry(self._state.regulators, self._policy)
        self._devices = DeviceRegistry(self._state.devices, self._policy)
        self._certifications = CertificationRegistry(
            self._state.certifications, self._regulators
        )

    @classmethod
    def from_config(cls, config: LedgerConfig) -> "MedicalDeviceLedger":
        """
        Build a ledger from resolved configuration

        Resumes from the state store when the file already exists.

        Raises:
            ConfigError: If the stored owner differs from config.owner
            StorageError: If the stored state cannot be read
            AuditIntegrityError: If the stored audit chain fails verification
            CryptoError: If the signing key cannot be loaded
        """
        configure_logging(level=config.log_level, json_format=config.log_json)

        signer = None
        if config.audit_signing_key:
            signer = AuditSigner(AuditSignerOptions(
                private_key=load_key_material(config.audit_signing_key),
                private_key_password=config.audit_signing_key_password,
            ))

        store = StateStore(config.state_store_path) if config.state_store_path else None
        state = None
        audit_log = AuditLog(signer=signer)

        stored = store.load() if store is not None else None
        if stored is not None:
            try:
                state = LedgerState.from_dict(stored)
            except (KeyError, ValueError, TypeError) as e:
                raise StorageError(
                    f"Malformed ledger state in {store.path}: {str(e)}",
                    code="STORE03",
                    cause=e,
                ) from e
            audit_log = AuditLog.from_dict(stored.get("audit", {}), signer=signer)

            result = audit_log.verify()
            if not result.valid:
                raise AuditIntegrityError(
                    f"Stored audit trail is broken: {result.error_message}",
                    broken_at=result.broken_at,
                )

            try:
                replayed = LedgerState.from_audit(state.owner, audit_log.records)
            except (KeyError, ValueError, TypeError) as e:
                raise AuditIntegrityError(
                    f"Stored audit trail cannot be replayed: {str(e)}"
                ) from e
            if not replayed.matches(state):
                raise AuditIntegrityError(
                    f"Stored ledger state in {store.path} does not match its audit trail"
                )
            logger.info(
                f"Resumed ledger from {store.path}: {len(state.devices)} devices, "
                f"{len(state.certifications)} certifications, "
                f"sequence {state.sequence.current}"
            )

        return cls(
            owner=config.owner,
            state_store=store,
            audit_log=audit_log,
            state=state,
            enable_audit_log=config.enable_audit_log,
        )

    # ============ Mutating operations ============

    def register_device(
        self, caller: Union[Identity, str], device_id: int, initial_status: Any
    ) -> None:
        """
        Register a device in its initial lifecycle state

        Raises:
            InvalidDeviceError, InvalidStatusError, UnauthorizedError
        """
        with self._transaction("register_device", caller) as (txn, identity):
            self._devices.register_device(txn, identity, device_id, initial_status)

    def update_device_status(
        self, caller: Union[Identity, str], device_id: int, new_status: Any
    ) -> None:
        """
        Move a device to a new lifecycle state

        Raises:
            InvalidDeviceError, InvalidStatusError, UnauthorizedError,
            StatusUpdateFailedError
        """
        with self._transaction("update_device_status", caller) as (txn, identity):
            self._devices.update_device_status(txn, identity, device_id, new_status)

    def add_certification(
        self, caller: Union[Identity, str], device_id: int, cert_type: Any
    ) -> None:
        """
        Certify a device as an approved regulatory body

        Raises:
            InvalidDeviceError, InvalidCertificationError, UnauthorizedError,
            CertificationExistsError
        """
        with self._transaction("add_certification", caller) as (txn, identity):
            self._certifications.add_certification(txn, identity, device_id, cert_type)

    def add_regulatory_body(
        self,
        caller: Union[Identity, str],
        authority: Union[Identity, str],
        cert_type: Any,
    ) -> None:
        """
        Approve an identity to issue one certification type (owner only)

        Raises:
            UnauthorizedError, InvalidCertificationError
        """
        with self._transaction("add_regulatory_body", caller) as (txn, identity):
            self._regulators.add_regulatory_body(txn, identity, authority, cert_type)

    # ============ Read-only operations ============

    def get_device_history(self, device_id: int) -> List[HistoryEntry]:
        """
        Raises:
            InvalidDeviceError: If the device is out of range or unknown
        """
        with self._lock:
            return self._devices.get_device_history(device_id)

    def get_device(self, device_id: int) -> DeviceRecord:
        """
        Raises:
            InvalidDeviceError: If the device is out of range or unknown
        """
        with self._lock:
            return self._devices.get_device(device_id)

    def verify_certification(self, device_id: int, cert_type: Any) -> bool:
        with self._lock:
            return self._certifications.verify_certification(device_id, cert_type)

    def get_certification(
        self, device_id: int, cert_type: Any
    ) -> Optional[CertificationRecord]:
        """
        Raises:
            InvalidDeviceError, InvalidCertificationError: For malformed input
        """
        with self._lock:
            return self._certifications.get_certification(device_id, cert_type)

    def is_regulatory_body(self, authority: Union[Identity, str], cert_type: Any) -> bool:
        with self._lock:
            return self._regulators.is_regulatory_body(authority, cert_type)

    def is_contract_owner(self, identity: Union[Identity, str]) -> bool:
        try:
            return self._policy.is_contract_owner(identity)
        except ValueError:
            return False

    def session(self, caller: Union[Identity, str]) -> "LedgerSession":
        """Bind a caller identity to the public operation surface"""
        return LedgerSession(self, Identity.of(caller))

    # ============ Audit trail ============

    @property
    def owner(self) -> Identity:
        return self._state.owner

    @property
    def sequence_number(self) -> int:
        """Last sequence number handed out"""
        with self._lock:
            return self._state.sequence.current

    @property
    def audit_log(self) -> AuditLog:
        """Detached copy of the committed audit chain"""
        with self._lock:
            return self._audit.copy()

    def verify_audit_trail(self) -> AuditVerificationResult:
        with self._lock:
            return self._audit.verify()

    def set_audit_log_callback(self, callback: Optional[AuditLogCallback]) -> None:
        """Set the callback receiving each committed audit record"""
        self._audit_log_callback = callback

    def snapshot(self) -> Dict[str, Any]:
        """Committed state plus audit chain as plain data"""
        with self._lock:
            return {**self._state.to_dict(), "audit": self._audit.to_dict()}

    # ============ Private Helper Methods ============

    @contextmanager
    def _transaction(
        self, operation: str, caller: Union[Identity, str]
    ) -> Iterator[tuple]:
        """
        Run one operation atomically under the ledger lock

        Commits the audit record and the persisted state after the
        operation body; any failure rolls everything back and re-raises.
        """
        with self._lock:
            txn = Transaction(self._state.sequence)
            try:
                identity = coerce_identity(caller)
                yield txn, identity

                record = self._audit.append(
                    operation=operation,
                    caller=str(identity),
                    sequence_number=txn.sequence_number,
                    details=txn.details,
                )
                txn.on_rollback(lambda: self._audit.truncate(record.index))
                self._persist()
            except OperationError as e:
                txn.rollback()
                level = logging.WARNING if isinstance(e, UnauthorizedError) else logging.INFO
                logger.log(level, f"{operation} rejected: {e.get_description()}")
                raise
            except BaseException:
                txn.rollback()
                logger.exception(f"{operation} failed and was rolled back")
                raise

        logger.info(
            f"{operation} committed by {identity} "
            f"(sequence {record.sequence_number}, audit #{record.index})"
        )
        self._publish(record)

    def _persist(self) -> None:
        if self._store is None:
            return
        self._store.save({**self._state.to_dict(), "audit": self._audit.to_dict()})

    def _publish(self, record: AuditRecord) -> None:
        """Deliver a committed record; callback failures cannot undo the commit"""
        if not self._enable_audit_log or self._audit_log_callback is None:
            return
        try:
            self._audit_log_callback(record)
        except Exception:
            logger.exception(
                f"Audit log callback failed for {record.operation} (audit #{record.index})"
            )


class LedgerSession(DeviceTracking):
    """
    Ledger view acting as one caller

    Example:
        >>> maker = ledger.session("0xmaker")
        >>> maker.register_device(42, "Manufactured")
    """

    def __init__(self, ledger: MedicalDeviceLedger, caller: Identity) -> None:
        self._ledger = ledger
        self._caller = caller

    @property
    def caller(self) -> Identity:
        return self._caller

    def register_device(self, device_id: int, initial_status: Any) -> None:
        self._ledger.register_device(self._caller, device_id, initial_status)

    def update_device_status(self, device_id: int, new_status: Any) -> None:
        self._ledger.update_device_status(self._caller, device_id, new_status)

    def get_device_history(self, device_id: int) -> List[HistoryEntry]:
        return self._ledger.get_device_history(device_id)

    def add_certification(self, device_id: int, cert_type: Any) -> None:
        self._ledger.add_certification(self._caller, device_id, cert_type)

    def verify_certification(self, device_id: int, cert_type: Any) -> bool:
        return self._ledger.verify_certification(device_id, cert_type)

    def add_regulatory_body(self, authority: Union[Identity, str], cert_type: Any) -> None:
        self._ledger.add_regulatory_body(self._caller, authority, cert_type)
