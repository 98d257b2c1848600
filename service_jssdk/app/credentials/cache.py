"""
Credential cache and refresh engine.
"""

from __future__ import annotations

import asyncio
from contextlib import nullcontext
from typing import TYPE_CHECKING, Callable, Dict, Optional

from shared.errors import BackendUnavailable, JSSDKException
from shared.logging import get_logger
from ..clock import now_ms
from ..config import JSSDKOptions, PersistenceMode
from ..issuer import IssuedCredential, IssuerClient, endpoints_for
from ..persistence import CredentialBackend, create_backend
from .models import CredentialKind, CredentialRecord

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


# Kept below the 7200 s lifetime the issuer grants.
CREDENTIAL_TTL_MS = 7000 * 1000


class CredentialCache:
    """Produces currently-valid credentials, refreshing them on demand.

    Lookup order for each kind: the in-process record (when the fast-path
    cache is enabled), then the persistence backend, then the issuer.
    Concurrent callers missing the same kind wait on one refresh instead of
    issuing their own.
    """

    def __init__(
        self,
        options: JSSDKOptions,
        *,
        issuer: Optional[IssuerClient] = None,
        backend: Optional[CredentialBackend] = None,
        metrics: Optional["MetricsCollector"] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.options = options
        self.logger = get_logger("jssdk.credentials")
        self.metrics = metrics
        self._clock = clock

        self._records: Dict[CredentialKind, CredentialRecord] = {
            kind: CredentialRecord() for kind in CredentialKind
        }
        self._cache_forced = options.type is PersistenceMode.MEMORY
        self._locks: Dict[CredentialKind, asyncio.Lock] = {kind: asyncio.Lock() for kind in CredentialKind}
        self._generations: Dict[CredentialKind, int] = {kind: 0 for kind in CredentialKind}
        self._starting: Optional[asyncio.Future] = None

        self.issuer = issuer or IssuerClient(endpoints_for(options))
        self.backend = backend or create_backend(options, self._records, on_error=self._on_backend_error)

    @property
    def cache_enabled(self) -> bool:
        """Whether the in-process record is consulted before the backend."""
        return self.options.cache or self._cache_forced

    @property
    def cache_forced(self) -> bool:
        return self._cache_forced

    def record(self, kind: CredentialKind) -> CredentialRecord:
        """Return the in-process record for ``kind``."""
        return self._records[kind]

    async def start(self) -> None:
        """Open backend connections.

        Only the first call connects; every call waits for that attempt.
        """
        if self._starting is None:
            self._starting = asyncio.ensure_future(self.backend.start())
        await asyncio.shield(self._starting)

    async def close(self) -> None:
        await self.issuer.close()
        await self.backend.close()

    def force_cache(self, reason: str) -> None:
        """Enable the in-process cache for the rest of this instance's lifetime."""
        if self._cache_forced:
            return
        self._cache_forced = True
        self.logger.warning(
            "Falling back to in-process credential cache",
            backend=self.backend.name,
            reason=reason,
        )
        self._count("backend_fallbacks_total", backend=self.backend.name)

    async def resolve(self, kind: CredentialKind) -> str:
        """Return a valid value for ``kind``.

        Raises ``IssuerError`` or ``MalformedResponse`` when a refresh is
        needed and the issuer cannot provide one.
        """
        record = self._records[kind]
        if self.cache_enabled and record.is_valid(self._clock()):
            self._trace("Credential served from process cache", kind=kind.value)
            self._count("credential_resolutions_total", kind=kind.value, source="process")
            return record.value

        generation = self._generations[kind]
        async with self._locks[kind]:
            if self._generations[kind] != generation and record.is_valid(self._clock()):
                self._trace("Credential refreshed by concurrent caller", kind=kind.value)
                self._count("credential_resolutions_total", kind=kind.value, source="process")
                return record.value

            stored = await self._read_backend(kind)
            if stored is not None and stored.is_valid(self._clock()):
                if self.cache_enabled:
                    self._adopt(kind, stored)
                self._trace("Credential served from backend", kind=kind.value, backend=self.backend.name)
                self._count("credential_resolutions_total", kind=kind.value, source="backend")
                return stored.value

            return await self._refresh(kind)

    async def _read_backend(self, kind: CredentialKind) -> Optional[CredentialRecord]:
        try:
            return await self.backend.read(kind)
        except BackendUnavailable as e:
            self._trace("Backend read failed", kind=kind.value, error=e.message)
            return None

    async def _refresh(self, kind: CredentialKind) -> str:
        if kind is CredentialKind.TICKET:
            access_token = await self.resolve(CredentialKind.ACCESS_TOKEN)
            issued = await self._issue(kind, access_token)
        else:
            issued = await self._issue(kind)

        fresh = CredentialRecord(value=issued.value, expires_at=self._clock() + CREDENTIAL_TTL_MS)
        if not await self.backend.write(kind, fresh):
            self.force_cache(f"{self.backend.name} write failed for {kind.value}")

        self._adopt(kind, fresh)
        self._count("credential_resolutions_total", kind=kind.value, source="issuer")
        self.logger.info(
            "Credential refreshed",
            kind=kind.value,
            expires_at=fresh.expires_at,
            backend=self.backend.name,
        )
        return fresh.value

    async def _issue(self, kind: CredentialKind, access_token: Optional[str] = None) -> IssuedCredential:
        timer = (
            self.metrics.time_operation("issuer_request_duration_seconds", kind=kind.value)
            if self.metrics is not None
            else nullcontext()
        )
        try:
            with timer:
                if kind is CredentialKind.TICKET:
                    issued = await self.issuer.fetch_ticket(access_token)
                else:
                    issued = await self.issuer.fetch_access_token()
        except JSSDKException as e:
            self.logger.error("Credential refresh failed", kind=kind.value, code=e.code, error=e.message)
            self._count("issuer_requests_total", kind=kind.value, status="error")
            raise

        self._count("issuer_requests_total", kind=kind.value, status="ok")
        return issued

    def _adopt(self, kind: CredentialKind, record: CredentialRecord) -> None:
        self._records[kind].update(record)
        self._generations[kind] += 1

    def _on_backend_error(self, error: Exception) -> None:
        self.force_cache(str(error))

    def _trace(self, event: str, **fields) -> None:
        if self.options.debug:
            self.logger.debug(event, **fields)

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, **labels)
