"""
Sequence, Transaction and Validator Unit Tests
"""

import pytest

from medledger.exceptions import (
    InvalidCertificationError,
    InvalidDeviceError,
    InvalidStatusError,
    UnauthorizedError,
)
from medledger.models import CertificationType, DeviceStatus, Identity
from medledger.services import SequenceGenerator, Transaction
from medledger.services.validators import (
    coerce_identity,
    is_valid_device_id,
    parse_cert_type,
    parse_status,
    validate_device_id,
)


class TestSequenceGenerator:
    """Tests for SequenceGenerator"""

    def test_starts_at_zero(self):
        """Should report 0 before the first tick"""
        assert SequenceGenerator().current == 0

    def test_tick_is_strictly_increasing(self):
        """Should hand out 1, 2, 3, ..."""
        sequence = SequenceGenerator()
        assert [sequence.tick() for _ in range(3)] == [1, 2, 3]
        assert sequence.current == 3

    def test_reset(self):
        """Should rewind to an earlier value"""
        sequence = SequenceGenerator(5)
        sequence.tick()
        sequence.reset(5)
        assert sequence.current == 5

    def test_reset_forward_rejected(self):
        """Should not move the counter forward"""
        sequence = SequenceGenerator(2)
        with pytest.raises(ValueError):
            sequence.reset(3)

    def test_negative_start_rejected(self):
        """Should reject a negative start"""
        with pytest.raises(ValueError):
            SequenceGenerator(-1)


class TestTransaction:
    """Tests for Transaction"""

    def test_rollback_restores_tables(self):
        """Should restore overwritten and remove inserted keys"""
        table = {"a": 1}
        txn = Transaction(SequenceGenerator())

        txn.put(table, "a", 2)
        txn.put(table, "b", 3)
        assert table == {"a": 2, "b": 3}

        txn.rollback()
        assert table == {"a": 1}

    def test_rollback_rewinds_sequence(self):
        """Should reset the counter to its value at transaction start"""
        sequence = SequenceGenerator(4)
        txn = Transaction(sequence)

        assert txn.tick() == 5
        txn.rollback()

        assert sequence.current == 4
        assert txn.sequence_number is None

    def test_tick_once(self):
        """Should draw at most one sequence number per operation"""
        txn = Transaction(SequenceGenerator())
        txn.tick()
        with pytest.raises(RuntimeError):
            txn.tick()

    def test_on_rollback_runs_in_reverse(self):
        """Should run registered undo steps last-in first-out"""
        calls = []
        txn = Transaction(SequenceGenerator())
        txn.on_rollback(lambda: calls.append("first"))
        txn.on_rollback(lambda: calls.append("second"))

        txn.rollback()

        assert calls == ["second", "first"]

    def test_record_details(self):
        """Should collect audit details"""
        txn = Transaction(SequenceGenerator())
        txn.record(device_id=42)
        txn.record(status="Testing")
        assert txn.details == {"device_id": 42, "status": "Testing"}


class TestValidators:
    """Tests for input validators"""

    @pytest.mark.parametrize("device_id", [1, 42, 1_000_000])
    def test_valid_device_ids(self, device_id):
        """Should accept ids within range"""
        assert is_valid_device_id(device_id)
        assert validate_device_id(device_id) == device_id

    @pytest.mark.parametrize("device_id", [0, -1, 1_000_001, "42", 4.2, True, None])
    def test_invalid_device_ids(self, device_id):
        """Should reject ids outside range and non-integers"""
        assert not is_valid_device_id(device_id)
        with pytest.raises(InvalidDeviceError) as exc_info:
            validate_device_id(device_id)
        assert exc_info.value.error_code == 2

    @pytest.mark.parametrize("value,expected", [
        (DeviceStatus.DEPLOYED, DeviceStatus.DEPLOYED),
        ("Testing", DeviceStatus.TESTING),
        (0, DeviceStatus.MANUFACTURED),
        (3, DeviceStatus.MAINTAINED),
    ])
    def test_parse_status(self, value, expected):
        """Should accept a member, its value, or its ordinal"""
        assert parse_status(value) == expected

    @pytest.mark.parametrize("value", [4, -1, "testing", "Retired", None, False])
    def test_parse_status_invalid(self, value):
        """Should reject anything outside the lifecycle states"""
        with pytest.raises(InvalidStatusError) as exc_info:
            parse_status(value)
        assert exc_info.value.error_code == 4

    @pytest.mark.parametrize("value,expected", [
        (CertificationType.CE, CertificationType.CE),
        ("ISO", CertificationType.ISO),
        (3, CertificationType.SAFETY),
    ])
    def test_parse_cert_type(self, value, expected):
        """Should accept a member, its value, or its ordinal"""
        assert parse_cert_type(value) == expected

    @pytest.mark.parametrize("value", [4, "UL", None, True])
    def test_parse_cert_type_invalid(self, value):
        """Should reject unsupported certification types"""
        with pytest.raises(InvalidCertificationError) as exc_info:
            parse_cert_type(value)
        assert exc_info.value.error_code == 5

    def test_coerce_identity(self):
        """Should wrap raw strings"""
        assert coerce_identity("0xabc") == Identity("0xabc")

    @pytest.mark.parametrize("value", ["", None, 7])
    def test_coerce_identity_invalid(self, value):
        """Should treat malformed identities as unauthorized"""
        with pytest.raises(UnauthorizedError):
            coerce_identity(value)
