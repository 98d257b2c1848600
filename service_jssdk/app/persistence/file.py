"""
File persistence backend.

One JSON file per credential kind, e.g. ``{"ticket": "...", "expireTime": 1700000000000}``.
"""

import asyncio
import os
import tempfile
from typing import Dict, Optional

from shared.errors import BackendUnavailable
from shared.logging import get_logger
from ..credentials.models import CredentialKind, CredentialRecord
from .base import CredentialBackend


class FileBackend(CredentialBackend):
    """Backend storing each record in its own file."""

    name = "file"

    def __init__(self, paths: Dict[CredentialKind, Optional[str]]):
        self._paths = paths
        self.logger = get_logger("jssdk.persistence.file")

    def path_for(self, kind: CredentialKind) -> Optional[str]:
        return self._paths.get(kind)

    async def read(self, kind: CredentialKind) -> Optional[CredentialRecord]:
        path = self.path_for(kind)
        if not path:
            raise BackendUnavailable(self.name, f"no filename configured for {kind.value}")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_sync, kind, path)

    async def write(self, kind: CredentialKind, record: CredentialRecord) -> bool:
        path = self.path_for(kind)
        if not path:
            self.logger.warning("No filename configured", kind=kind.value)
            return False

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write_sync, path, record.serialize(kind))
        except OSError as e:
            self.logger.error("Failed to save credential file", path=path, error=str(e))
            return False
        return True

    def _read_sync(self, kind: CredentialKind, path: str) -> Optional[CredentialRecord]:
        try:
            with open(path, "rb") as handle:
                raw = handle.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise BackendUnavailable(self.name, str(e), details={"path": path}) from e

        record = CredentialRecord.deserialize(kind, raw)
        if record is None:
            self.logger.warning("Ignoring unparsable credential file", path=path, kind=kind.value)
        return record

    @staticmethod
    def _write_sync(path: str, data: str) -> None:
        # Readers never observe a partially written file.
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp_path = tempfile.mkstemp(prefix=".jssdk-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
