"""
Input validators
Normalize raw operation arguments or raise the matching operation error
"""

from typing import Any

from medledger.exceptions import (
    InvalidCertificationError,
    InvalidDeviceError,
    InvalidStatusError,
    UnauthorizedError,
)
from medledger.models.certification import CertificationType
from medledger.models.device import DeviceStatus, MAX_DEVICE_ID, MIN_DEVICE_ID
from medledger.models.identity import Identity


def is_valid_device_id(device_id: Any) -> bool:
    """Check device_id is an integer within the accepted range"""
    if isinstance(device_id, bool) or not isinstance(device_id, int):
        return False
    return MIN_DEVICE_ID <= device_id <= MAX_DEVICE_ID


def validate_device_id(device_id: Any) -> int:
    """
    Validate a device id

    Raises:
        InvalidDeviceError: If device_id is not an integer in range
    """
    if not is_valid_device_id(device_id):
        raise InvalidDeviceError(
            f"device_id must be an integer between {MIN_DEVICE_ID} "
            f"and {MAX_DEVICE_ID}, got {device_id!r}",
            details={"device_id": device_id},
        )
    return device_id


def parse_status(status: Any) -> DeviceStatus:
    """
    Parse a device status from a member, its value, or its ordinal

    Raises:
        InvalidStatusError: If status is not a lifecycle state
    """
    if isinstance(status, DeviceStatus):
        return status
    if isinstance(status, str):
        try:
            return DeviceStatus(status)
        except ValueError:
            pass
    elif isinstance(status, int) and not isinstance(status, bool):
        members = list(DeviceStatus)
        if 0 <= status < len(members):
            return members[status]

    valid = ", ".join(s.value for s in DeviceStatus)
    raise InvalidStatusError(
        f"status must be one of: {valid}, got {status!r}",
        details={"status": status},
    )


def parse_cert_type(cert_type: Any) -> CertificationType:
    """
    Parse a certification type from a member, its value, or its ordinal

    Raises:
        InvalidCertificationError: If cert_type is not supported
    """
    if isinstance(cert_type, CertificationType):
        return cert_type
    if isinstance(cert_type, str):
        try:
            return CertificationType(cert_type)
        except ValueError:
            pass
    elif isinstance(cert_type, int) and not isinstance(cert_type, bool):
        members = list(CertificationType)
        if 0 <= cert_type < len(members):
            return members[cert_type]

    valid = ", ".join(c.value for c in CertificationType)
    raise InvalidCertificationError(
        f"cert_type must be one of: {valid}, got {cert_type!r}",
        details={"cert_type": cert_type},
    )


def coerce_identity(value: Any) -> Identity:
    """
    Coerce a raw identity, treating malformed values as unauthorized

    Raises:
        UnauthorizedError: If value is not a usable identity
    """
    try:
        return Identity.of(value)
    except ValueError as e:
        raise UnauthorizedError(
            f"Invalid identity: {value!r}",
            details={"identity": repr(value)},
        ) from e
