"""Random string generation backed by the ``secrets`` CSPRNG."""

from __future__ import annotations

import secrets
import string

# safe: letters only
_SAFE_ALPHABET = string.ascii_letters
_DEFAULT_ALPHABET = string.ascii_letters + string.digits


def random_string(
    length: int,
    *,
    safe: bool = False,
    upper_case: bool = False,
    prefix: str | None = None,
) -> str:
    """Generate a random string.

    Args:
        length: Number of random characters (the prefix is not counted)
        safe: Restrict the alphabet to letters only
        upper_case: Force the random part to uppercase
        prefix: Optional prefix prepended verbatim

    Returns:
        ``prefix + random part``
    """
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")

    alphabet = _SAFE_ALPHABET if safe else _DEFAULT_ALPHABET
    if upper_case:
        # dedupe after folding so every character stays equally likely
        alphabet = "".join(dict.fromkeys(alphabet.upper()))

    value = "".join(secrets.choice(alphabet) for _ in range(length))
    return f"{prefix}{value}" if prefix else value
