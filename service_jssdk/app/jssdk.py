"""
JSSDK facade.

Wires options, the credential engine and the signer together, and builds
the callables handed to web frameworks and application code.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .config import OptionsInput, PersistenceMode, load_options
from .credentials.cache import CredentialCache
from .issuer import IssuerClient
from .persistence import CredentialBackend
from .signing import SignResult, Signer

SignFunction = Callable[[Optional[str]], Awaitable[SignResult]]
RequestHandler = Callable[[Request], Awaitable[JSONResponse]]


class JSSDK:
    """One credential identity: its engine, its backend and its signer.

    Construction validates the options and fails with ``ConfigurationError``
    before any network or file access. When built inside a running event
    loop with Redis persistence, the Redis connection is attempted in the
    background right away; otherwise it happens on ``start`` or on the first
    ``sign_url`` call.
    """

    def __init__(
        self,
        options: OptionsInput = None,
        *,
        issuer: Optional[IssuerClient] = None,
        backend: Optional[CredentialBackend] = None,
        metrics: Optional[MetricsCollector] = None,
        **overrides: Any,
    ):
        self.options = load_options(options, **overrides)
        self.logger = get_logger("jssdk.facade")
        self.credentials = CredentialCache(self.options, issuer=issuer, backend=backend, metrics=metrics)
        self.signer = Signer(self.options, self.credentials, metrics=metrics)
        self._start_task: Optional[asyncio.Task] = None

        if self.options.type is PersistenceMode.REDIS:
            self._schedule_start()

    def _schedule_start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._start_task = loop.create_task(self.credentials.start())

    async def start(self) -> None:
        """Open backend connections. Safe to call any number of times."""
        await self.credentials.start()

    async def close(self) -> None:
        if self._start_task is not None and not self._start_task.done():
            self._start_task.cancel()
        await self.credentials.close()

    async def health(self) -> str:
        return "ok" if await self.credentials.backend.health_check() else "error"

    async def sign_url(self, url: Optional[str]) -> SignResult:
        """Sign ``url`` with the current ticket."""
        await self.start()
        return await self.signer.sign(url)

    def request_handler(self) -> RequestHandler:
        """Build a handler that signs the ``url`` found in the request."""

        async def handle(request: Request) -> JSONResponse:
            url = await extract_url(request)
            result = await self.sign_url(url)
            return JSONResponse(status_code=200, content=result.to_dict())

        return handle

    @classmethod
    def create_request_handler(cls, options: OptionsInput = None, **overrides: Any) -> RequestHandler:
        """Build an engine and return its request handler."""
        return cls(options, **overrides).request_handler()

    @classmethod
    def create_function(cls, options: OptionsInput = None, **overrides: Any) -> SignFunction:
        """Build an engine and return its bound ``sign_url``."""
        return cls(options, **overrides).sign_url

    @classmethod
    async def sign(cls, options: OptionsInput, url: Optional[str], **overrides: Any) -> SignResult:
        """Sign once with a throwaway engine."""
        instance = cls(options, **overrides)
        try:
            await instance.start()
            return await instance.sign_url(url)
        finally:
            await instance.close()


async def extract_url(request: Request) -> Optional[str]:
    """Read ``url`` from the query string, then from a JSON or form body."""
    url = request.query_params.get("url")
    if url:
        return url
    if request.method not in ("POST", "PUT", "PATCH"):
        return None

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return None
        value = body.get("url") if isinstance(body, dict) else None
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        value = form.get("url")
    else:
        return None
    return value if isinstance(value, str) else None
