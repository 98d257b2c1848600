"""
Credential data model.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class CredentialKind(str, Enum):
    """The two chained credentials needed to sign a payload."""

    ACCESS_TOKEN = "access_token"
    TICKET = "ticket"

    @property
    def field_name(self) -> str:
        """Name of the value field in the persisted payload."""
        return "accessToken" if self is CredentialKind.ACCESS_TOKEN else "ticket"

    @property
    def redis_key(self) -> str:
        return "jssdk.token" if self is CredentialKind.ACCESS_TOKEN else "jssdk.ticket"


@dataclass
class CredentialRecord:
    """A credential value and its expiry in milliseconds since the epoch.

    Records are mutated in place so that every holder of a reference (the
    engine, the memory backend) sees the latest value.
    """

    value: str = ""
    expires_at: int = 0

    def is_valid(self, now: int) -> bool:
        return bool(self.value) and self.expires_at > now

    def update(self, other: "CredentialRecord") -> None:
        self.value = other.value
        self.expires_at = other.expires_at

    def copy(self) -> "CredentialRecord":
        return CredentialRecord(value=self.value, expires_at=self.expires_at)

    def to_payload(self, kind: CredentialKind) -> Dict[str, Any]:
        return {kind.field_name: self.value, "expireTime": self.expires_at}

    def serialize(self, kind: CredentialKind) -> str:
        return json.dumps(self.to_payload(kind))

    @classmethod
    def from_payload(cls, kind: CredentialKind, payload: Any) -> Optional["CredentialRecord"]:
        """Parse a persisted payload; anything unusable yields None."""
        if not isinstance(payload, dict):
            return None
        value = payload.get(kind.field_name)
        expire_time = payload.get("expireTime")
        if not isinstance(value, str):
            return None
        if isinstance(expire_time, bool) or not isinstance(expire_time, (int, float)):
            return None
        return cls(value=value, expires_at=int(expire_time))

    @classmethod
    def deserialize(cls, kind: CredentialKind, raw: Union[str, bytes, None]) -> Optional["CredentialRecord"]:
        """Parse a persisted JSON payload; undecodable or unparsable input yields None."""
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            return None
        return cls.from_payload(kind, payload)
