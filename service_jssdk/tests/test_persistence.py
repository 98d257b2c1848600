"""
Tests for credential persistence backends.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from service_jssdk.app.config import load_options
from service_jssdk.app.credentials.models import CredentialKind, CredentialRecord
from service_jssdk.app.persistence import (
    FileBackend,
    MemoryBackend,
    RedisBackend,
    create_backend,
)
from shared.errors import BackendUnavailable
from service_jssdk.app.testing import APP_ID, SECRET, FakeRedis, UnreachableRedis


def _paths(tmp_path):
    return {
        CredentialKind.ACCESS_TOKEN: str(tmp_path / "token.json"),
        CredentialKind.TICKET: str(tmp_path / "ticket.json"),
    }


class TestCreateBackend:
    """Backend selection from options."""

    def test_memory_backend(self):
        options = load_options({"appId": APP_ID, "secret": SECRET})
        assert isinstance(create_backend(options, {}), MemoryBackend)

    def test_file_backend(self, tmp_path):
        options = load_options({
            "appId": APP_ID,
            "secret": SECRET,
            "type": "file",
            "tokenFilename": str(tmp_path / "token.json"),
            "ticketFilename": str(tmp_path / "ticket.json"),
        })

        backend = create_backend(options, {})

        assert isinstance(backend, FileBackend)
        assert backend.path_for(CredentialKind.TICKET) == str(tmp_path / "ticket.json")

    def test_redis_backend(self):
        options = load_options({"appId": APP_ID, "secret": SECRET, "type": "redis", "redisPort": 6380})

        backend = create_backend(options, {})

        assert isinstance(backend, RedisBackend)
        assert backend.port == 6380
        assert backend.connected is False


class TestMemoryBackend:

    @pytest.mark.asyncio
    async def test_write_updates_shared_records(self):
        """Test that writes land in the engine's own records."""
        records = {kind: CredentialRecord() for kind in CredentialKind}
        backend = MemoryBackend(records)

        assert await backend.write(CredentialKind.TICKET, CredentialRecord("TICKET", 10)) is True

        assert records[CredentialKind.TICKET] == CredentialRecord("TICKET", 10)
        assert await backend.read(CredentialKind.TICKET) is records[CredentialKind.TICKET]


class TestFileBackend:
    """File persistence."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        """Test that a written record reads back identically."""
        backend = FileBackend(_paths(tmp_path))
        record = CredentialRecord(value="TICKET", expires_at=1700000000000)

        assert await backend.write(CredentialKind.TICKET, record) is True

        assert await backend.read(CredentialKind.TICKET) == record
        with open(tmp_path / "ticket.json", encoding="utf-8") as handle:
            assert json.load(handle) == {"ticket": "TICKET", "expireTime": 1700000000000}

    @pytest.mark.asyncio
    async def test_kinds_stored_separately(self, tmp_path):
        backend = FileBackend(_paths(tmp_path))

        await backend.write(CredentialKind.ACCESS_TOKEN, CredentialRecord("TOKEN", 5))
        await backend.write(CredentialKind.TICKET, CredentialRecord("TICKET", 6))

        assert (await backend.read(CredentialKind.ACCESS_TOKEN)).value == "TOKEN"
        assert (await backend.read(CredentialKind.TICKET)).value == "TICKET"

    @pytest.mark.asyncio
    async def test_missing_file_reads_as_absent(self, tmp_path):
        backend = FileBackend(_paths(tmp_path))
        assert await backend.read(CredentialKind.ACCESS_TOKEN) is None

    @pytest.mark.asyncio
    async def test_garbage_file_reads_as_absent(self, tmp_path):
        """Test that unparsable content is ignored."""
        (tmp_path / "token.json").write_text("{not json", encoding="utf-8")
        backend = FileBackend(_paths(tmp_path))

        assert await backend.read(CredentialKind.ACCESS_TOKEN) is None

    @pytest.mark.asyncio
    async def test_undecodable_file_reads_as_absent(self, tmp_path):
        """Test that bytes that are not valid text are ignored."""
        (tmp_path / "ticket.json").write_bytes(b"\xff\xfe garbage")
        backend = FileBackend(_paths(tmp_path))

        assert await backend.read(CredentialKind.TICKET) is None

    @pytest.mark.asyncio
    async def test_write_into_missing_directory_fails(self, tmp_path):
        """Test that an unwritable path is reported, not raised."""
        backend = FileBackend({
            CredentialKind.ACCESS_TOKEN: str(tmp_path / "missing" / "token.json"),
            CredentialKind.TICKET: str(tmp_path / "missing" / "ticket.json"),
        })

        assert await backend.write(CredentialKind.TICKET, CredentialRecord("TICKET", 1)) is False

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_files(self, tmp_path):
        backend = FileBackend(_paths(tmp_path))

        await backend.write(CredentialKind.TICKET, CredentialRecord("OLD", 1))
        await backend.write(CredentialKind.TICKET, CredentialRecord("NEW", 2))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["ticket.json"]
        assert (await backend.read(CredentialKind.TICKET)).value == "NEW"

    @pytest.mark.asyncio
    async def test_unreadable_path_raises(self, tmp_path):
        """Test that a directory in place of the file is a backend failure."""
        (tmp_path / "ticket.json").mkdir()
        backend = FileBackend(_paths(tmp_path))

        with pytest.raises(BackendUnavailable):
            await backend.read(CredentialKind.TICKET)


class TestRedisBackend:
    """Redis persistence."""

    @pytest.mark.asyncio
    async def test_round_trip(self):
        client = FakeRedis()
        backend = RedisBackend("127.0.0.1", 6379, client=client)
        await backend.start()
        record = CredentialRecord(value="TOKEN", expires_at=1700000000000)

        assert await backend.write(CredentialKind.ACCESS_TOKEN, record) is True

        assert json.loads(client.data["jssdk.token"]) == {"accessToken": "TOKEN", "expireTime": 1700000000000}
        assert await backend.read(CredentialKind.ACCESS_TOKEN) == record
        assert await backend.read(CredentialKind.TICKET) is None

    @pytest.mark.asyncio
    async def test_unparsable_value_reads_as_absent(self):
        client = FakeRedis()
        client.data["jssdk.ticket"] = "garbage"
        backend = RedisBackend("127.0.0.1", 6379, client=client)
        await backend.start()

        assert await backend.read(CredentialKind.TICKET) is None

    @pytest.mark.asyncio
    async def test_undecodable_value_reads_as_absent(self):
        client = FakeRedis()
        client.data["jssdk.ticket"] = b"\xff\xfe garbage"
        backend = RedisBackend("127.0.0.1", 6379, client=client)
        await backend.start()

        assert await backend.read(CredentialKind.TICKET) is None

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        """Test that a failed connection is reported and never retried."""
        on_error = MagicMock()
        client = UnreachableRedis()
        backend = RedisBackend("127.0.0.1", 6379, on_error=on_error, client=client)

        await backend.start()
        await backend.start()

        assert backend.connected is False
        on_error.assert_called_once()
        with pytest.raises(BackendUnavailable):
            await backend.read(CredentialKind.TICKET)
        assert await backend.write(CredentialKind.TICKET, CredentialRecord("TICKET", 1)) is False
        assert await backend.health_check() is False

    @pytest.mark.asyncio
    async def test_runtime_error_reported(self):
        """Test that errors after connecting reach the listener."""
        on_error = MagicMock()
        client = FakeRedis()
        backend = RedisBackend("127.0.0.1", 6379, on_error=on_error, client=client)
        await backend.start()

        refused = RedisConnectionError("Connection reset by peer")
        with patch.object(client, "get", side_effect=refused), patch.object(client, "set", side_effect=refused):
            with pytest.raises(BackendUnavailable):
                await backend.read(CredentialKind.TICKET)
            assert await backend.write(CredentialKind.TICKET, CredentialRecord("TICKET", 1)) is False

        assert on_error.call_count == 2

    @pytest.mark.asyncio
    async def test_close(self):
        client = FakeRedis()
        backend = RedisBackend("127.0.0.1", 6379, client=client)
        await backend.start()

        await backend.close()

        assert client.closed is True
        assert backend.connected is False
