"""
Tests for credential records.
"""

import json

import pytest

from service_jssdk.app.credentials.models import CredentialKind, CredentialRecord


class TestCredentialRecord:
    """Validity and persisted payload shape."""

    def test_empty_record_invalid(self):
        assert not CredentialRecord().is_valid(0)

    def test_validity_depends_on_expiry(self):
        """Test that a record is valid strictly before its expiry."""
        record = CredentialRecord(value="TICKET", expires_at=1_000)

        assert record.is_valid(999)
        assert not record.is_valid(1_000)
        assert not record.is_valid(1_001)

    def test_empty_value_never_valid(self):
        assert not CredentialRecord(value="", expires_at=10**15).is_valid(0)

    def test_update_in_place(self):
        """Test that holders of a record see updates."""
        record = CredentialRecord()
        alias = record

        record.update(CredentialRecord(value="TOKEN", expires_at=42))

        assert alias.value == "TOKEN"
        assert alias.expires_at == 42

    @pytest.mark.parametrize("kind,field", [
        (CredentialKind.ACCESS_TOKEN, "accessToken"),
        (CredentialKind.TICKET, "ticket"),
    ])
    def test_payload_shape(self, kind, field):
        """Test the persisted JSON object for each kind."""
        record = CredentialRecord(value="VALUE", expires_at=1700000000000)

        assert json.loads(record.serialize(kind)) == {field: "VALUE", "expireTime": 1700000000000}

    def test_deserialize_restores_record(self):
        raw = '{"ticket": "TICKET", "expireTime": 1700000000000}'

        record = CredentialRecord.deserialize(CredentialKind.TICKET, raw)

        assert record == CredentialRecord(value="TICKET", expires_at=1700000000000)

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "not json",
        "[]",
        '{"accessToken": "TOKEN", "expireTime": 1}',
        '{"ticket": 12, "expireTime": 1}',
        '{"ticket": "TICKET"}',
        '{"ticket": "TICKET", "expireTime": "soon"}',
        '{"ticket": "TICKET", "expireTime": true}',
    ])
    def test_deserialize_rejects_unusable_payloads(self, raw):
        """Test that unusable payloads read as absent."""
        assert CredentialRecord.deserialize(CredentialKind.TICKET, raw) is None


class TestCredentialKind:

    def test_redis_keys(self):
        assert CredentialKind.ACCESS_TOKEN.redis_key == "jssdk.token"
        assert CredentialKind.TICKET.redis_key == "jssdk.ticket"
