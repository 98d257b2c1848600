"""
Persistence backend interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..credentials.models import CredentialKind, CredentialRecord


class CredentialBackend(ABC):
    """Storage for the access token record and the ticket record.

    ``read`` returns None when nothing usable is stored and raises
    ``BackendUnavailable`` when the store cannot be reached. ``write``
    never raises; it reports failure by returning False.
    """

    name = "base"

    async def start(self) -> None:
        """Open connections. Called once by the engine."""

    async def close(self) -> None:
        """Release connections."""

    async def health_check(self) -> bool:
        return True

    @abstractmethod
    async def read(self, kind: CredentialKind) -> Optional[CredentialRecord]:
        """Read the stored record for ``kind``."""

    @abstractmethod
    async def write(self, kind: CredentialKind, record: CredentialRecord) -> bool:
        """Store ``record`` for ``kind``."""
