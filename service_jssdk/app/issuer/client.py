"""
HTTP client for the remote credential issuer.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from shared.errors import IssuerError, MalformedResponse
from shared.logging import get_logger
from .endpoints import IssuerEndpoints, IssuerRequest


@dataclass(frozen=True)
class IssuedCredential:
    """A credential as returned by the issuer."""

    value: str
    expires_in: Optional[int] = None


class IssuerClient:
    """Fetches access tokens and tickets from the issuer.

    No retries are attempted; every failure is raised to the caller as an
    ``IssuerError`` (transport, HTTP status, issuer error code) or a
    ``MalformedResponse`` (unparseable body, missing credential field).
    """

    def __init__(
        self,
        endpoints: IssuerEndpoints,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoints = endpoints
        self.logger = get_logger("jssdk.issuer")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_access_token(self) -> IssuedCredential:
        """Request a new access token."""
        # {"access_token": "...", "expires_in": 7200} or {"errcode": 40013, "errmsg": "invalid appid"}
        payload = await self._get_json(self.endpoints.token_request(), "token")

        access_token = payload.get("access_token")
        if isinstance(access_token, str) and access_token:
            return IssuedCredential(access_token, _as_int(payload.get("expires_in")))

        if payload.get("errcode"):
            raise IssuerError(
                f"get token failed: {payload.get('errmsg', 'unknown error')}",
                details={"errcode": payload.get("errcode"), "errmsg": payload.get("errmsg")},
            )
        raise MalformedResponse("No token!", details={"fields": sorted(payload)})

    async def fetch_ticket(self, access_token: str) -> IssuedCredential:
        """Request a new ticket using a valid access token."""
        # {"errcode": 0, "errmsg": "ok", "ticket": "...", "expires_in": 7200}
        payload = await self._get_json(self.endpoints.ticket_request(access_token), "ticket")

        errcode = payload.get("errcode")
        if errcode is None:
            raise MalformedResponse("ticket response missing errcode", details={"fields": sorted(payload)})
        if errcode != 0:
            raise IssuerError(
                f"get ticket failed: {payload.get('errmsg', 'unknown error')}",
                details={"errcode": errcode, "errmsg": payload.get("errmsg")},
            )

        ticket = payload.get("ticket")
        if not isinstance(ticket, str) or not ticket:
            raise MalformedResponse("No ticket!", details={"fields": sorted(payload)})
        return IssuedCredential(ticket, _as_int(payload.get("expires_in")))

    async def _get_json(self, request: IssuerRequest, label: str) -> Dict[str, Any]:
        try:
            response = await self._client.get(request.url, params=request.params)
        except httpx.HTTPError as exc:
            self.logger.error("Issuer request failed", credential=label, url=request.url, error=str(exc))
            raise IssuerError(f"get {label} request failed: {exc}", details={"url": request.url}) from exc

        if not response.is_success:
            raise IssuerError(
                f"get {label} failed with HTTP {response.status_code}",
                details={"url": request.url, "status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"get {label} parse error", details={"url": request.url}) from exc

        if not isinstance(payload, dict):
            raise MalformedResponse(f"get {label} parse error", details={"url": request.url})
        return payload


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
