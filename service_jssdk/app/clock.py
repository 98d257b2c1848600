"""
Clock and nonce helpers.
"""

import secrets
import string
import time

from .config import NONCE_STR_DEFAULT, clamp_nonce_length

NONCE_CHARS = string.ascii_letters + string.digits


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def unix_timestamp() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())


def create_nonce_str(length: int = NONCE_STR_DEFAULT) -> str:
    """Return a random alphanumeric string of the clamped length."""
    length = clamp_nonce_length(length)
    return "".join(secrets.choice(NONCE_CHARS) for _ in range(length))
