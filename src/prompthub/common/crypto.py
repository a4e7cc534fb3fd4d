"""Cryptographic utilities for session tokens and passwords."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


# Session tokens

TOKEN_PREFIX = "phs_"


def generate_session_token() -> tuple[str, str, str]:
    """
    Generate a new session token.

    Returns:
        (raw_token, token_hash, token_prefix)
        - raw_token: Full token returned to the client ONCE at login
        - token_hash: SHA-256 hash stored in DB for lookup
        - token_prefix: First 12 chars for display
    """
    raw = f"{TOKEN_PREFIX}{secrets.token_urlsafe(32)}"
    return raw, hash_token(raw), raw[:12]


def hash_token(raw_token: str) -> str:
    """Hash a session token with SHA-256 for secure storage."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


# Passwords
#
# Stored as "pbkdf2_sha256$<iterations>$<salt>$<digest>", salt and digest
# urlsafe-base64 encoded.

_ALGORITHM = "pbkdf2_sha256"


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def hash_password(password: str, iterations: int = 390_000) -> str:
    salt = secrets.token_bytes(16)
    digest = _derive(password, salt, iterations)
    return "$".join(
        [
            _ALGORITHM,
            str(iterations),
            base64.urlsafe_b64encode(salt).decode(),
            base64.urlsafe_b64encode(digest).decode(),
        ]
    )


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        algorithm, iterations, salt_b64, digest_b64 = encoded.split("$")
        if algorithm != _ALGORITHM:
            return False
        salt = base64.urlsafe_b64decode(salt_b64)
        expected = base64.urlsafe_b64decode(digest_b64)
        actual = _derive(password, salt, int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(actual, expected)
