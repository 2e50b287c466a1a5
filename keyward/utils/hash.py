"""SHA-256 hashing helpers."""

from __future__ import annotations

import hashlib
import hmac


def sha256(text: str) -> str:
    """Return the lowercase SHA-256 hex digest of ``text``."""
    return hashlib.sha256(text.encode()).hexdigest()


def sha256_compare(hash_one: str, hash_two: str) -> bool:
    """Compare two hash strings in constant time."""
    return hmac.compare_digest(hash_one.encode(), hash_two.encode())
