"""
In-process persistence backend.
"""

from typing import Dict, Optional

from ..credentials.models import CredentialKind, CredentialRecord
from .base import CredentialBackend


class MemoryBackend(CredentialBackend):
    """Backend over the engine's own in-process records."""

    name = "memory"

    def __init__(self, records: Dict[CredentialKind, CredentialRecord]):
        self._records = records

    async def read(self, kind: CredentialKind) -> Optional[CredentialRecord]:
        return self._records[kind]

    async def write(self, kind: CredentialKind, record: CredentialRecord) -> bool:
        self._records[kind].update(record)
        return True
