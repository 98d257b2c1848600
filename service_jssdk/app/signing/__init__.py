"""
Signing package.

Computes the SHA-1 signature browser clients pass to the JS-SDK ``config``
call, from the current ticket, a nonce, a timestamp and the page URL.
"""

from .signer import SignErrorCode, SignResult, Signer, compute_signature

__all__ = ["SignErrorCode", "SignResult", "Signer", "compute_signature"]
