"""
Credentials package.

Holds the two chained credentials (access token and ticket) and the engine
that keeps them fresh (``credentials.cache``):

- Serve from the in-process record while it is valid.
- Otherwise read the configured backend, then fall back to the issuer.
- Degrade to in-process caching when the backend cannot be written.

Only the data model is re-exported here; the persistence package depends
on it, and the engine depends on the persistence package.
"""

from .models import CredentialKind, CredentialRecord

__all__ = ["CredentialKind", "CredentialRecord"]
