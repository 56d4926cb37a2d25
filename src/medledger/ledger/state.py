"""
Ledger state container
The owner, the sequence counter and the three keyed stores
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from medledger.audit.audit_log import AuditRecord
from medledger.models.certification import CertificationRecord, CertificationType
from medledger.models.device import DeviceRecord, DeviceStatus, HistoryEntry
from medledger.models.identity import Identity
from medledger.services.authorization import RegulatorKey
from medledger.services.certification_registry import CertificationKey
from medledger.services.sequence import SequenceGenerator


@dataclass
class LedgerState:
    """
    Process-wide ledger state

    Created once when the ledger is deployed and never torn down.
    The owner has no setter.
    """
    owner: Identity
    sequence: SequenceGenerator = field(default_factory=SequenceGenerator)
    devices: Dict[int, DeviceRecord] = field(default_factory=dict)
    certifications: Dict[CertificationKey, CertificationRecord] = field(default_factory=dict)
    regulators: Dict[RegulatorKey, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain JSON-compatible data"""
        return {
            "owner": str(self.owner),
            "sequence": self.sequence.current,
            "devices": {
                str(device_id): {
                    "owner": str(record.owner),
                    "history": [
                        {"status": e.status.value, "sequence_number": e.sequence_number}
                        for e in record.history
                    ],
                }
                for device_id, record in self.devices.items()
            },
            "certifications": [
                {
                    "device_id": record.device_id,
                    "cert_type": record.cert_type.value,
                    "issuer": str(record.issuer),
                    "sequence_number": record.sequence_number,
                    "valid": record.valid,
                }
                for record in self.certifications.values()
            ],
            "regulators": [
                {"authority": str(authority), "cert_type": cert.value, "approved": approved}
                for (authority, cert), approved in self.regulators.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerState":
        """
        Rebuild state from to_dict() output

        Raises:
            KeyError, ValueError: If the document is malformed
        """
        state = cls(
            owner=Identity(data["owner"]),
            sequence=SequenceGenerator(int(data["sequence"])),
        )

        for key, device in data.get("devices", {}).items():
            device_id = int(key)
            state.devices[device_id] = DeviceRecord(
                device_id=device_id,
                owner=Identity(device["owner"]),
                history=tuple(
                    HistoryEntry(
                        status=DeviceStatus(entry["status"]),
                        sequence_number=entry["sequence_number"],
                    )
                    for entry in device["history"]
                ),
            )

        for cert in data.get("certifications", []):
            record = CertificationRecord(
                device_id=cert["device_id"],
                cert_type=CertificationType(cert["cert_type"]),
                issuer=Identity(cert["issuer"]),
                sequence_number=cert["sequence_number"],
                valid=cert["valid"],
            )
            state.certifications[(record.device_id, record.cert_type)] = record

        for entry in data.get("regulators", []):
            key = (Identity(entry["authority"]), CertificationType(entry["cert_type"]))
            state.regulators[key] = bool(entry["approved"])

        return state

    @classmethod
    def from_audit(cls, owner: Identity, records: Iterable[AuditRecord]) -> "LedgerState":
        """
        Rebuild state by replaying committed operations from the audit chain

        Args:
            owner: Contract owner of the ledger
            records: Audit records in chain order

        Raises:
            KeyError, ValueError: If a record's details cannot be replayed
        """
        state = cls(owner=owner)
        last_sequence = 0

        for record in records:
            sequence_number = record.sequence_number
            if sequence_number is not None:
                if sequence_number <= last_sequence:
                    raise ValueError(
                        f"Audit record {record.index} reuses sequence number {sequence_number}"
                    )
                last_sequence = sequence_number

            details = record.details
            caller = Identity(record.caller)

            if record.operation == "register_device":
                device_id = int(details["device_id"])
                state.devices[device_id] = DeviceRecord(
                    device_id=device_id,
                    owner=caller,
                    history=(HistoryEntry(
                        status=DeviceStatus(details["status"]),
                        sequence_number=sequence_number,
                    ),),
                )
            elif record.operation == "update_device_status":
                device_id = int(details["device_id"])
                device = state.devices[device_id]
                if device.is_full:
                    raise ValueError(f"Audit record {record.index} overflows device {device_id}")
                state.devices[device_id] = device.with_status(
                    DeviceStatus(details["status"]), sequence_number
                )
            elif record.operation == "add_certification":
                cert = CertificationRecord(
                    device_id=int(details["device_id"]),
                    cert_type=CertificationType(details["cert_type"]),
                    issuer=caller,
                    sequence_number=sequence_number,
                    valid=True,
                )
                state.certifications[(cert.device_id, cert.cert_type)] = cert
            elif record.operation == "add_regulatory_body":
                key = (Identity(details["authority"]), CertificationType(details["cert_type"]))
                state.regulators[key] = True
            else:
                raise ValueError(
                    f"Audit record {record.index} has unknown operation {record.operation!r}"
                )

        state.sequence = SequenceGenerator(last_sequence)
        return state

    def matches(self, other: "LedgerState") -> bool:
        """Compare committed content, ignoring key insertion order"""
        return (
            self.owner == other.owner
            and self.sequence.current == other.sequence.current
            and self.devices == other.devices
            and self.certifications == other.certifications
            and self.regulators == other.regulators
        )
