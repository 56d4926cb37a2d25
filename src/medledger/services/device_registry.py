"""
Device registry
Owns device records, their lifecycle status and bounded history
"""

import logging
from typing import Any, Dict, List

from medledger.exceptions import InvalidDeviceError, UnauthorizedError
from medledger.models.device import DeviceRecord, HistoryEntry
from medledger.models.identity import Identity
from medledger.services.authorization import AuthorizationPolicy
from medledger.services.transaction import Transaction
from medledger.services.validators import parse_status, validate_device_id


logger = logging.getLogger(__name__)


class DeviceRegistry:
    """
    Device lifecycle state machine

    Each device keeps at most HISTORY_CAPACITY history entries. Once
    full, further status updates fail and the device can no longer
    change state.

    Example:
        >>> registry = DeviceRegistry({}, AuthorizationPolicy(owner))
        >>> registry.register_device(txn, caller, 42, DeviceStatus.MANUFACTURED)
        >>> registry.get_device_history(42)
    """

    def __init__(
        self,
        table: Dict[int, DeviceRecord],
        policy: AuthorizationPolicy,
    ) -> None:
        self._table = table
        self._policy = policy

    def register_device(
        self,
        txn: Transaction,
        caller: Identity,
        device_id: Any,
        initial_status: Any,
    ) -> DeviceRecord:
        """
        Register a device with its first history entry

        An existing record at the same id is overwritten.

        Args:
            txn: Active transaction
            caller: Calling identity, becomes the device owner
            device_id: Device id in 1..1_000_000
            initial_status: Initial lifecycle status

        Returns:
            The new device record

        Raises:
            InvalidDeviceError: If device_id is out of range
            InvalidStatusError: If initial_status is not a lifecycle state
            UnauthorizedError: If a non-owner registers a device in any
                state other than Manufactured
        """
        device_id = validate_device_id(device_id)
        status = parse_status(initial_status)

        if not self._policy.can_register(caller, status):
            raise UnauthorizedError(
                f"Only the contract owner may register a device as {status.value}",
                details={"caller": str(caller), "device_id": device_id},
            )

        if device_id in self._table:
            logger.debug(f"Device {device_id} is being re-registered")

        record = DeviceRecord(
            device_id=device_id,
            owner=caller,
            history=(HistoryEntry(status=status, sequence_number=txn.tick()),),
        )
        txn.put(self._table, device_id, record)
        txn.record(device_id=device_id, status=status.value)
        return record

    def update_device_status(
        self,
        txn: Transaction,
        caller: Identity,
        device_id: Any,
        new_status: Any,
    ) -> DeviceRecord:
        """
        Append a status transition to a device's history

        Args:
            txn: Active transaction
            caller: Calling identity
            device_id: Registered device id
            new_status: Status to enter

        Returns:
            The updated device record

        Raises:
            InvalidDeviceError: If device_id is out of range or unknown
            InvalidStatusError: If new_status is not a lifecycle state
            UnauthorizedError: If caller is neither the contract owner
                nor the device owner
            StatusUpdateFailedError: If the history is already full
        """
        device_id = validate_device_id(device_id)
        status = parse_status(new_status)
        current = self._require(device_id)

        if not self._policy.can_update(caller, current):
            raise UnauthorizedError(
                f"Caller may not update device {device_id}",
                details={"caller": str(caller), "device_id": device_id},
            )

        updated = current.with_status(status, txn.tick())
        txn.put(self._table, device_id, updated)
        txn.record(device_id=device_id, status=status.value)
        return updated

    def get_device(self, device_id: Any) -> DeviceRecord:
        """
        Raises:
            InvalidDeviceError: If device_id is out of range or unknown
        """
        return self._require(validate_device_id(device_id))

    def get_device_history(self, device_id: Any) -> List[HistoryEntry]:
        """
        Get a device's status history in insertion order

        Raises:
            InvalidDeviceError: If device_id is out of range or unknown
        """
        return self.get_device(device_id).entries()

    def __len__(self) -> int:
        return len(self._table)

    def _require(self, device_id: int) -> DeviceRecord:
        record = self._table.get(device_id)
        if record is None:
            raise InvalidDeviceError(
                f"Device {device_id} is not registered",
                details={"device_id": device_id},
            )
        return record
