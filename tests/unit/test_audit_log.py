"""
Audit Trail Unit Tests
"""

import pytest

from medledger.audit import AuditLog, GENESIS_HASH, compute_entry_hash
from medledger.crypto import AuditSigner, AuditSignerOptions
from medledger.exceptions import StorageError


@pytest.fixture
def log() -> AuditLog:
    audit = AuditLog()
    audit.append("register_device", "0xmaker", 1, {"device_id": 42, "status": "Manufactured"})
    audit.append("add_regulatory_body", "0xowner", None, {"authority": "0xfda", "cert_type": "FDA"})
    audit.append("add_certification", "0xfda", 2, {"device_id": 42, "cert_type": "FDA"})
    return audit


class TestAuditLog:
    """Tests for AuditLog"""

    def test_empty_head_is_genesis(self):
        """Should start from the genesis hash"""
        assert AuditLog().head_hash == GENESIS_HASH
        assert len(GENESIS_HASH) == 64

    def test_chain_links(self, log: AuditLog):
        """Should link each record to its predecessor"""
        records = log.records
        assert records[0].previous_hash == GENESIS_HASH
        assert records[1].previous_hash == records[0].entry_hash
        assert records[2].previous_hash == records[1].entry_hash
        assert log.head_hash == records[2].entry_hash
        assert [r.index for r in records] == [0, 1, 2]

    def test_entry_hash_recomputes(self, log: AuditLog):
        """Should hash every field except the hash and signature"""
        record = log.records[0]
        assert record.entry_hash == compute_entry_hash(
            0, "register_device", "0xmaker", 1,
            {"device_id": 42, "status": "Manufactured"}, GENESIS_HASH,
        )

    def test_verify_intact(self, log: AuditLog):
        """Should verify an untouched chain"""
        result = log.verify()
        assert result.valid is True
        assert result.broken_at is None

    def test_detects_edited_details(self, log: AuditLog):
        """Should flag a record whose content was changed"""
        data = log.to_dict()
        data["records"][1]["details"]["authority"] = "0xmallory"

        result = AuditLog.from_dict(data).verify()

        assert result.valid is False
        assert result.broken_at == 1

    def test_detects_dropped_record(self, log: AuditLog):
        """Should flag a gap in the chain"""
        data = log.to_dict()
        del data["records"][1]

        result = AuditLog.from_dict(data).verify()

        assert result.valid is False
        assert result.broken_at == 1

    def test_detects_reordering(self, log: AuditLog):
        """Should flag swapped records"""
        data = log.to_dict()
        data["records"][0], data["records"][1] = data["records"][1], data["records"][0]

        result = AuditLog.from_dict(data).verify()

        assert result.valid is False
        assert result.broken_at == 0

    def test_truncate(self, log: AuditLog):
        """Should drop trailing records"""
        head = log.records[0].entry_hash
        log.truncate(1)

        assert len(log) == 1
        assert log.head_hash == head
        with pytest.raises(ValueError):
            log.truncate(5)

    def test_export_and_load(self, log: AuditLog, tmp_path):
        """Should write a chain that loads back and verifies"""
        path = tmp_path / "audit" / "trail.json"
        log.export(path)

        loaded = AuditLog.load(path)

        assert loaded.records == log.records
        assert loaded.verify().valid

    def test_load_missing(self, tmp_path):
        """Should raise StorageError for a missing export"""
        with pytest.raises(StorageError) as exc_info:
            AuditLog.load(tmp_path / "missing.json")
        assert exc_info.value.has_code("STORE06")

    def test_load_invalid(self, tmp_path):
        """Should raise StorageError for malformed JSON"""
        path = tmp_path / "trail.json"
        path.write_text("not json")
        with pytest.raises(StorageError) as exc_info:
            AuditLog.load(path)
        assert exc_info.value.has_code("STORE07")


class TestSignedAuditLog:
    """Tests for signed audit chains"""

    @pytest.fixture
    def signer(self, private_key_pem: str) -> AuditSigner:
        return AuditSigner(AuditSignerOptions(private_key=private_key_pem))

    def test_records_are_signed(self, signer: AuditSigner):
        """Should sign every entry hash"""
        log = AuditLog(signer=signer)
        record = log.append("register_device", "0xmaker", 1, {"device_id": 42})

        assert record.signature is not None
        assert signer.verify(record.entry_hash, record.signature).valid

    def test_verify_with_public_key_only(self, signer: AuditSigner, public_key_pem: str):
        """Should verify signatures with a separate public key"""
        log = AuditLog(signer=signer)
        log.append("register_device", "0xmaker", 1, {"device_id": 42})

        verifier = AuditSigner(AuditSignerOptions(public_key=public_key_pem))
        unsigned_copy = AuditLog.from_dict(log.to_dict())

        assert unsigned_copy.verify(signer=verifier).valid

    def test_detects_forged_signature(self, signer: AuditSigner):
        """Should flag a signature that does not match"""
        log = AuditLog(signer=signer)
        log.append("register_device", "0xmaker", 1, {"device_id": 42})
        log.append("register_device", "0xmaker", 2, {"device_id": 43})

        data = log.to_dict()
        data["records"][1]["signature"] = data["records"][0]["signature"]

        result = AuditLog.from_dict(data, signer=signer).verify()

        assert result.valid is False
        assert result.broken_at == 1

    def test_require_signatures(self, signer: AuditSigner):
        """Should flag unsigned records when signatures are required"""
        log = AuditLog()
        log.append("register_device", "0xmaker", 1, {"device_id": 42})

        result = log.verify(signer=signer, require_signatures=True)

        assert result.valid is False
        assert result.broken_at == 0
