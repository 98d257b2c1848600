"""
Redis persistence backend.
"""

from typing import Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import BackendUnavailable
from shared.logging import get_logger
from ..credentials.models import CredentialKind, CredentialRecord
from .base import CredentialBackend

ErrorListener = Callable[[Exception], None]


class RedisBackend(CredentialBackend):
    """Backend storing each record under its own Redis key.

    The connection is attempted exactly once, from ``start``. While not
    connected, reads raise ``BackendUnavailable`` and writes return False;
    neither blocks on or retries connection establishment. Every Redis
    error is reported to ``on_error``.
    """

    name = "redis"

    def __init__(
        self,
        host: str,
        port: int,
        password: Optional[str] = None,
        *,
        on_error: Optional[ErrorListener] = None,
        client: Optional[redis.Redis] = None,
    ):
        self.host = host
        self.port = port
        self.logger = get_logger("jssdk.persistence.redis")
        self.connected = False
        self._connect_attempted = False
        self._on_error = on_error
        self._client = client or redis.Redis(
            host=host,
            port=port,
            password=password,
            socket_connect_timeout=5,
            socket_timeout=5,
        )

    async def start(self) -> None:
        """Connect to Redis."""
        if self._connect_attempted:
            return
        self._connect_attempted = True

        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            self._report_error(e)
            return

        self.connected = True
        self.logger.info("Redis connected", host=self.host, port=self.port)

    async def close(self) -> None:
        await self._client.aclose()
        self.connected = False

    async def health_check(self) -> bool:
        if not self.connected:
            return False
        try:
            await self._client.ping()
            return True
        except (RedisError, OSError):
            return False

    async def read(self, kind: CredentialKind) -> Optional[CredentialRecord]:
        if not self.connected:
            raise BackendUnavailable(self.name, "redis disconnected")

        try:
            raw = await self._client.get(kind.redis_key)
        except (RedisError, OSError) as e:
            self._report_error(e)
            raise BackendUnavailable(self.name, str(e)) from e

        if raw is None:
            return None

        record = CredentialRecord.deserialize(kind, raw)
        if record is None:
            self.logger.warning("Ignoring unparsable credential", key=kind.redis_key)
        return record

    async def write(self, kind: CredentialKind, record: CredentialRecord) -> bool:
        if not self.connected:
            self.logger.warning("redis disconnected", key=kind.redis_key)
            return False

        try:
            await self._client.set(kind.redis_key, record.serialize(kind))
        except (RedisError, OSError) as e:
            self._report_error(e)
            return False
        return True

    def _report_error(self, error: Exception) -> None:
        self.logger.error("redis error", host=self.host, port=self.port, error=str(error))
        if self._on_error is not None:
            self._on_error(error)
