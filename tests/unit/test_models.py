"""
Model Unit Tests
"""

import pytest

from medledger.exceptions import StatusUpdateFailedError
from medledger.models import (
    CertificationRecord,
    CertificationType,
    DeviceRecord,
    DeviceStatus,
    HistoryEntry,
    HISTORY_CAPACITY,
    Identity,
    NULL_IDENTITY,
)


class TestIdentity:
    """Tests for Identity"""

    def test_equality(self):
        """Should compare by value"""
        assert Identity("0xabc") == Identity("0xabc")
        assert Identity("0xabc") != Identity("0xdef")

    def test_hashable(self):
        """Should be usable as a dictionary key"""
        table = {Identity("0xabc"): True}
        assert table[Identity("0xabc")] is True

    def test_of_passes_through_identity(self):
        """Should return the same instance when already an Identity"""
        identity = Identity("0xabc")
        assert Identity.of(identity) is identity
        assert Identity.of("0xabc") == identity

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_rejects_malformed(self, value):
        """Should reject empty and non-string values"""
        with pytest.raises(ValueError):
            Identity(value)

    def test_null_identity(self):
        """Should expose the reserved all-zero identity"""
        assert str(NULL_IDENTITY) == "0x" + "0" * 40


class TestDeviceStatus:
    """Tests for DeviceStatus"""

    def test_ordinals(self):
        """Should number states in declaration order"""
        assert DeviceStatus.MANUFACTURED.ordinal == 0
        assert DeviceStatus.TESTING.ordinal == 1
        assert DeviceStatus.DEPLOYED.ordinal == 2
        assert DeviceStatus.MAINTAINED.ordinal == 3

    def test_certification_type_ordinals(self):
        """Should number certification types in declaration order"""
        assert [c.ordinal for c in CertificationType] == [0, 1, 2, 3]
        assert CertificationType.SAFETY.value == "Safety"


class TestDeviceRecord:
    """Tests for DeviceRecord"""

    @pytest.fixture
    def record(self) -> DeviceRecord:
        return DeviceRecord(
            device_id=42,
            owner=Identity("0xmaker"),
            history=(HistoryEntry(status=DeviceStatus.MANUFACTURED, sequence_number=1),),
        )

    def test_current_status(self, record: DeviceRecord):
        """Should report the status of the newest entry"""
        assert record.current_status == DeviceStatus.MANUFACTURED

    def test_with_status_appends(self, record: DeviceRecord):
        """Should return a new record with one more entry"""
        updated = record.with_status(DeviceStatus.TESTING, 2)

        assert updated.current_status == DeviceStatus.TESTING
        assert [e.as_tuple() for e in updated.entries()] == [
            (DeviceStatus.MANUFACTURED, 1),
            (DeviceStatus.TESTING, 2),
        ]
        assert len(record.history) == 1

    def test_with_status_fails_when_full(self, record: DeviceRecord):
        """Should refuse to append past the history capacity"""
        for seq in range(2, HISTORY_CAPACITY + 1):
            record = record.with_status(DeviceStatus.TESTING, seq)

        assert record.is_full
        with pytest.raises(StatusUpdateFailedError):
            record.with_status(DeviceStatus.DEPLOYED, HISTORY_CAPACITY + 1)

    def test_is_frozen(self, record: DeviceRecord):
        """Should not allow in-place mutation"""
        with pytest.raises(ValueError):
            record.device_id = 7

    def test_rejects_out_of_range_id(self):
        """Should reject ids outside the accepted range"""
        with pytest.raises(ValueError):
            DeviceRecord(
                device_id=0,
                owner=Identity("0xmaker"),
                history=(HistoryEntry(status=DeviceStatus.MANUFACTURED, sequence_number=1),),
            )


class TestCertificationRecord:
    """Tests for CertificationRecord"""

    def test_defaults_to_valid(self):
        """Should be valid when created"""
        record = CertificationRecord(
            device_id=42,
            cert_type=CertificationType.FDA,
            issuer=Identity("0xfda"),
            sequence_number=3,
        )
        assert record.valid is True
        assert record.issuer == Identity("0xfda")
