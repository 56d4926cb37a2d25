"""
Certification registry
Per-device, per-type certification records issued by approved regulators
"""

import logging
from typing import Any, Dict, Optional, Tuple

from medledger.exceptions import (
    CertificationExistsError,
    InvalidCertificationError,
    InvalidDeviceError,
    UnauthorizedError,
)
from medledger.models.certification import CertificationRecord, CertificationType
from medledger.models.identity import Identity
from medledger.services.authorization import RegulatoryRegistry
from medledger.services.transaction import Transaction
from medledger.services.validators import parse_cert_type, validate_device_id


logger = logging.getLogger(__name__)

CertificationKey = Tuple[int, CertificationType]


class CertificationRegistry:
    """
    Certification store keyed by (device_id, cert_type)

    A record is created once and never updated or revoked. The device
    itself does not have to be registered to be certified.
    """

    def __init__(
        self,
        table: Dict[CertificationKey, CertificationRecord],
        regulators: RegulatoryRegistry,
    ) -> None:
        self._table = table
        self._regulators = regulators

    def add_certification(
        self,
        txn: Transaction,
        caller: Identity,
        device_id: Any,
        cert_type: Any,
    ) -> CertificationRecord:
        """
        Issue a certification

        Args:
            txn: Active transaction
            caller: Calling identity, must be approved for cert_type
            device_id: Device id in 1..1_000_000
            cert_type: Certification type

        Returns:
            The new certification record

        Raises:
            InvalidDeviceError: If device_id is out of range
            InvalidCertificationError: If cert_type is not supported
            UnauthorizedError: If caller is not a regulator for cert_type
            CertificationExistsError: If the pair is already certified
        """
        device_id = validate_device_id(device_id)
        cert = parse_cert_type(cert_type)

        if not self._regulators.is_regulatory_body(caller, cert):
            raise UnauthorizedError(
                f"Caller is not an approved {cert.value} regulatory body",
                details={"caller": str(caller), "cert_type": cert.value},
            )

        key = (device_id, cert)
        if key in self._table:
            raise CertificationExistsError(
                f"Device {device_id} already holds a {cert.value} certification",
                details={"device_id": device_id, "cert_type": cert.value},
            )

        record = CertificationRecord(
            device_id=device_id,
            cert_type=cert,
            issuer=caller,
            sequence_number=txn.tick(),
        )
        txn.put(self._table, key, record)
        txn.record(device_id=device_id, cert_type=cert.value)
        return record

    def verify_certification(self, device_id: Any, cert_type: Any) -> bool:
        """Report whether the pair holds a valid certification"""
        try:
            record = self.get_certification(device_id, cert_type)
        except (InvalidDeviceError, InvalidCertificationError):
            return False
        return record is not None and record.valid

    def get_certification(
        self, device_id: Any, cert_type: Any
    ) -> Optional[CertificationRecord]:
        """
        Look up a certification record

        Raises:
            InvalidDeviceError: If device_id is out of range
            InvalidCertificationError: If cert_type is not supported
        """
        key = (validate_device_id(device_id), parse_cert_type(cert_type))
        return self._table.get(key)

    def __len__(self) -> int:
        return len(self._table)
