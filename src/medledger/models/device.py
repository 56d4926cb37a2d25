"""Device models"""

from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field

from medledger.exceptions import StatusUpdateFailedError
from medledger.models.identity import Identity


MIN_DEVICE_ID = 1
MAX_DEVICE_ID = 1_000_000

# Fixed number of entries a device history can ever hold
HISTORY_CAPACITY = 10


class DeviceStatus(str, Enum):
    """Device lifecycle states"""
    MANUFACTURED = "Manufactured"
    TESTING = "Testing"
    DEPLOYED = "Deployed"
    MAINTAINED = "Maintained"

    @property
    def ordinal(self) -> int:
        return list(DeviceStatus).index(self)


class HistoryEntry(BaseModel):
    """Single status transition with its global order marker"""

    status: DeviceStatus = Field(..., description="Status entered")
    sequence_number: int = Field(..., description="Global sequence number", ge=1)

    model_config = {"frozen": True}

    def as_tuple(self) -> Tuple[DeviceStatus, int]:
        return (self.status, self.sequence_number)


class DeviceRecord(BaseModel):
    """Device record"""

    device_id: int = Field(..., ge=MIN_DEVICE_ID, le=MAX_DEVICE_ID)
    owner: Identity = Field(..., description="Identity that registered the device")
    history: Tuple[HistoryEntry, ...] = Field(
        ..., description="Status transitions in chronological order",
        min_length=1, max_length=HISTORY_CAPACITY,
    )

    model_config = {"frozen": True}

    @property
    def current_status(self) -> DeviceStatus:
        """Status of the most recent history entry"""
        return self.history[-1].status

    @property
    def is_full(self) -> bool:
        return len(self.history) >= HISTORY_CAPACITY

    def entries(self) -> List[HistoryEntry]:
        return list(self.history)

    def with_status(self, status: DeviceStatus, sequence_number: int) -> "DeviceRecord":
        """
        Return a copy of this record with one more history entry

        The history never evicts: once it holds HISTORY_CAPACITY entries
        every further append fails.

        Raises:
            StatusUpdateFailedError: If the history is already full
        """
        if self.is_full:
            raise StatusUpdateFailedError(
                f"Device {self.device_id} history is full "
                f"({HISTORY_CAPACITY} entries)",
                details={"device_id": self.device_id},
            )
        entry = HistoryEntry(status=status, sequence_number=sequence_number)
        return self.model_copy(update={"history": self.history + (entry,)})
