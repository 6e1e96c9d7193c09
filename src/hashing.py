"""Irreversible pseudonymisation of IdP attribute values.

Values are hashed as SHA-256 over the UTF-8 bytes of ``value + salt`` and
encoded as URL-safe base64 without padding, so they can be stored in user
attributes and compared as plain strings.
"""

import base64
import hashlib

from errors import HashComputationError

HASH_ALGORITHM = "sha256"


def hash_value(value: str, salt: str) -> str:
    """Hash a value with the salt appended as a suffix.

    Args:
        value: The raw value received from the IdP.
        salt: The active salt for this evaluation.

    Returns:
        43-character URL-safe base64 digest without "=" padding.

    Raises:
        HashComputationError: If the digest algorithm is unavailable.
    """
    try:
        digest = hashlib.new(HASH_ALGORITHM, (value + salt).encode("utf-8")).digest()
    except ValueError as e:
        raise HashComputationError(f"Digest algorithm {HASH_ALGORITHM} is unavailable") from e
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
