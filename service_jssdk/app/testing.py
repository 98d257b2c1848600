"""
Test helpers for the JSSDK service: issuer and storage stand-ins.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Union

import httpx
from redis.exceptions import ConnectionError as RedisConnectionError

from shared.errors import BackendUnavailable
from .config import JSSDKOptions
from .credentials.models import CredentialKind, CredentialRecord
from .issuer import IssuerClient, endpoints_for
from .persistence import CredentialBackend


APP_ID = "wx8372b24417f593f2"
SECRET = "d649471dad4e9530c2ed7068089d9a82"
PAGE_URL = "http://yourdomain.com/index.html"

Payload = Union[Dict[str, Any], str]


class IssuerStub:
    """Stand-in for the remote issuer, served through ``httpx.MockTransport``."""

    def __init__(
        self,
        *,
        token_payload: Optional[Payload] = None,
        ticket_payload: Optional[Payload] = None,
        token_status: int = 200,
        ticket_status: int = 200,
        delay: float = 0.0,
    ):
        self.token_payload = token_payload or {"access_token": "ACCESS_TOKEN", "expires_in": 7200}
        self.ticket_payload = ticket_payload or {
            "errcode": 0,
            "errmsg": "ok",
            "ticket": "TICKET",
            "expires_in": 7200,
        }
        self.token_status = token_status
        self.ticket_status = ticket_status
        self.delay = delay
        self.requests: List[httpx.Request] = []
        self.token_calls = 0
        self.ticket_calls = 0

    @property
    def total_calls(self) -> int:
        return self.token_calls + self.ticket_calls

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)

        path = request.url.path
        if path.endswith(("/token", "/gettoken")):
            self.token_calls += 1
            return self._respond(self.token_status, self.token_payload)
        if path.endswith(("/getticket", "/get_jsapi_ticket")):
            self.ticket_calls += 1
            return self._respond(self.ticket_status, self.ticket_payload)
        return httpx.Response(404, json={"errcode": 404, "errmsg": "not found"})

    @staticmethod
    def _respond(status: int, payload: Payload) -> httpx.Response:
        if isinstance(payload, str):
            return httpx.Response(status, content=payload.encode("utf-8"))
        return httpx.Response(status, content=json.dumps(payload).encode("utf-8"))

    def client(self, options: JSSDKOptions) -> IssuerClient:
        transport = httpx.MockTransport(self.handler)
        return IssuerClient(endpoints_for(options), client=httpx.AsyncClient(transport=transport))


class SpyBackend(CredentialBackend):
    """Dictionary-backed backend that counts calls and can be made to fail."""

    name = "spy"

    def __init__(self, *, fail_reads: bool = False, fail_writes: bool = False):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.stored: Dict[CredentialKind, CredentialRecord] = {}
        self.reads = 0
        self.writes = 0

    async def read(self, kind: CredentialKind) -> Optional[CredentialRecord]:
        self.reads += 1
        if self.fail_reads:
            raise BackendUnavailable(self.name, "read failure")
        record = self.stored.get(kind)
        return record.copy() if record else None

    async def write(self, kind: CredentialKind, record: CredentialRecord) -> bool:
        self.writes += 1
        if self.fail_writes:
            return False
        self.stored[kind] = record.copy()
        return True


class FakeRedis:
    """In-memory substitute for ``redis.asyncio.Redis``."""

    def __init__(self):
        self.data: Dict[str, Union[str, bytes]] = {}
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[Union[str, bytes]]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    async def aclose(self) -> None:
        self.closed = True


class UnreachableRedis(FakeRedis):
    """Redis client whose server never answers."""

    async def ping(self) -> bool:
        raise RedisConnectionError("Error 111 connecting to 127.0.0.1:6379. Connection refused.")

    async def get(self, key: str) -> Optional[Union[str, bytes]]:
        raise RedisConnectionError("Connection refused.")

    async def set(self, key: str, value: str) -> bool:
        raise RedisConnectionError("Connection refused.")
