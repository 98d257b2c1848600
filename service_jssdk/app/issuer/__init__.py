"""
Credential issuer package.

Talks to the remote API that grants access tokens and tickets. Endpoint
construction is separated from the HTTP client so that standard and
corporate accounts share one refresh algorithm.
"""

from .client import IssuedCredential, IssuerClient
from .endpoints import CorpEndpoints, IssuerEndpoints, IssuerRequest, StandardEndpoints, endpoints_for

__all__ = [
    "CorpEndpoints",
    "IssuedCredential",
    "IssuerClient",
    "IssuerEndpoints",
    "IssuerRequest",
    "StandardEndpoints",
    "endpoints_for",
]
