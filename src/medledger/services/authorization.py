"""
Identity and authorization policy
Decides who may register, update and certify devices, and keeps the
registry of approved regulatory bodies
"""

import logging
from typing import Any, Dict, Tuple, Union

from medledger.exceptions import InvalidCertificationError, UnauthorizedError
from medledger.models.certification import CertificationType
from medledger.models.device import DeviceRecord, DeviceStatus
from medledger.models.identity import Identity, NULL_IDENTITY
from medledger.services.transaction import Transaction
from medledger.services.validators import coerce_identity, parse_cert_type


logger = logging.getLogger(__name__)

RegulatorKey = Tuple[Identity, CertificationType]


class AuthorizationPolicy:
    """
    Role checks for ledger operations

    The contract owner is fixed when the policy is created and has no
    setter. All comparisons are identity equality.
    """

    def __init__(self, owner: Identity) -> None:
        self._owner = owner

    @property
    def owner(self) -> Identity:
        return self._owner

    def is_contract_owner(self, identity: Union[Identity, str]) -> bool:
        """Check whether identity is the contract owner"""
        return Identity.of(identity) == self._owner

    def can_register(self, caller: Identity, initial_status: DeviceStatus) -> bool:
        """
        Anyone may register a freshly manufactured device;
        any other initial status needs the owner
        """
        return (
            self.is_contract_owner(caller)
            or initial_status == DeviceStatus.MANUFACTURED
        )

    def can_update(self, caller: Identity, device: DeviceRecord) -> bool:
        """Only the owner or the device's registrant may change its status"""
        return self.is_contract_owner(caller) or caller == device.owner

    def is_valid_authority(self, caller: Identity, authority: Identity) -> bool:
        """
        Check a proposed regulatory body

        Rejects the contract owner, the calling identity and the
        reserved null identity.
        """
        return (
            authority != self._owner
            and authority != caller
            and authority != NULL_IDENTITY
        )

    def require_owner(self, caller: Identity, action: str) -> None:
        """
        Raises:
            UnauthorizedError: If caller is not the contract owner
        """
        if not self.is_contract_owner(caller):
            raise UnauthorizedError(
                f"{action} requires the contract owner",
                details={"caller": str(caller)},
            )


class RegulatoryRegistry:
    """
    Registry of identities approved to issue each certification type

    Approvals are only ever added; there is no revocation.
    """

    def __init__(
        self,
        table: Dict[RegulatorKey, bool],
        policy: AuthorizationPolicy,
    ) -> None:
        self._table = table
        self._policy = policy

    def add_regulatory_body(
        self,
        txn: Transaction,
        caller: Identity,
        authority: Union[Identity, str],
        cert_type: Any,
    ) -> None:
        """
        Approve authority as an issuer of cert_type

        Args:
            txn: Active transaction
            caller: Calling identity, must be the contract owner
            authority: Identity to approve
            cert_type: Certification type

        Raises:
            UnauthorizedError: If caller is not the owner or authority is
                the owner, the caller, or the null identity
            InvalidCertificationError: If cert_type is not supported
        """
        self._policy.require_owner(caller, "add_regulatory_body")
        cert = parse_cert_type(cert_type)
        authority = coerce_identity(authority)

        if not self._policy.is_valid_authority(caller, authority):
            raise UnauthorizedError(
                f"{authority} cannot be approved as a regulatory body",
                details={"authority": str(authority), "cert_type": cert.value},
            )

        txn.put(self._table, (authority, cert), True)
        txn.record(authority=str(authority), cert_type=cert.value)
        logger.debug(f"Approved {authority} for {cert.value} certifications")

    def is_regulatory_body(self, authority: Union[Identity, str], cert_type: Any) -> bool:
        """Check whether authority may issue cert_type; absence means False"""
        try:
            cert = parse_cert_type(cert_type)
            authority = coerce_identity(authority)
        except (InvalidCertificationError, UnauthorizedError):
            return False
        return self._table.get((authority, cert), False)
