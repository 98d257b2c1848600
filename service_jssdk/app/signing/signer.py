"""
Signer for JS-SDK configuration payloads.
"""

from __future__ import annotations

import hashlib
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.errors import JSSDKException
from shared.logging import get_logger
from ..clock import create_nonce_str, unix_timestamp
from ..config import JSSDKOptions
from ..credentials.cache import CredentialCache
from ..credentials.models import CredentialKind

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class SignErrorCode(IntEnum):
    OK = 0
    MISSING_URL = 4001
    TICKET_UNAVAILABLE = 4002


class SignResult(BaseModel):
    """Signing outcome; errors are carried in ``errCode``, never raised."""

    model_config = ConfigDict(populate_by_name=True)

    err_code: int = Field(alias="errCode")
    msg: Optional[str] = None
    app_id: Optional[str] = Field(default=None, alias="appId")
    nonce_str: Optional[str] = Field(default=None, alias="nonceStr")
    timestamp: Optional[int] = None
    url: Optional[str] = None
    signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation with unset fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


def compute_signature(ticket: str, nonce_str: str, timestamp: int, url: str) -> str:
    """Lowercase hex SHA-1 of the canonical string. Field order is fixed."""
    sign_str = f"jsapi_ticket={ticket}&noncestr={nonce_str}&timestamp={timestamp}&url={url}"
    return hashlib.sha1(sign_str.encode("utf-8")).hexdigest()


class Signer:
    """Signs resource URLs with the current ticket."""

    def __init__(
        self,
        options: JSSDKOptions,
        credentials: CredentialCache,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.options = options
        self.credentials = credentials
        self.metrics = metrics
        self.logger = get_logger("jssdk.signer")

    async def sign(self, url: Optional[str]) -> SignResult:
        if not url:
            return self._finish(SignResult(err_code=SignErrorCode.MISSING_URL.value))

        try:
            ticket = await self.credentials.resolve(CredentialKind.TICKET)
        except JSSDKException as e:
            self.logger.warning("Ticket unavailable, cannot sign", url=url, code=e.code, error=e.message)
            return self._finish(SignResult(err_code=SignErrorCode.TICKET_UNAVAILABLE.value, msg=e.message))

        timestamp = unix_timestamp()
        nonce_str = create_nonce_str(self.options.nonce_str_length)
        return self._finish(SignResult(
            err_code=SignErrorCode.OK.value,
            app_id=self.options.app_id,
            nonce_str=nonce_str,
            timestamp=timestamp,
            url=url,
            signature=compute_signature(ticket, nonce_str, timestamp, url),
        ))

    def _finish(self, result: SignResult) -> SignResult:
        if self.metrics is not None:
            self.metrics.increment_counter("signatures_total", err_code=str(result.err_code))
        return result
