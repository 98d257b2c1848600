"""
Persistence package for credential records.

Three interchangeable backends keep the access token and ticket records:

- memory: the engine's own in-process records
- file: one JSON file per credential kind
- redis: one key per credential kind

The backend is selected once, from the engine options.
"""

from typing import Dict, Optional

from ..config import JSSDKOptions, PersistenceMode
from ..credentials.models import CredentialKind, CredentialRecord
from .base import CredentialBackend
from .file import FileBackend
from .memory import MemoryBackend
from .redis_store import ErrorListener, RedisBackend


def create_backend(
    options: JSSDKOptions,
    records: Dict[CredentialKind, CredentialRecord],
    on_error: Optional[ErrorListener] = None,
) -> CredentialBackend:
    """Build the backend selected by ``options.type``."""
    if options.type is PersistenceMode.FILE:
        return FileBackend({
            CredentialKind.ACCESS_TOKEN: options.token_filename,
            CredentialKind.TICKET: options.ticket_filename,
        })
    if options.type is PersistenceMode.REDIS:
        return RedisBackend(
            options.redis_host,
            options.redis_port,
            options.redis_auth,
            on_error=on_error,
        )
    return MemoryBackend(records)


__all__ = [
    "CredentialBackend",
    "FileBackend",
    "MemoryBackend",
    "RedisBackend",
    "create_backend",
]
