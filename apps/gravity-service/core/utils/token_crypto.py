"""
Password hashing and verification for the API password.

Responsibilities:
- Hash secrets using Argon2id (default) or PBKDF2-HMAC-SHA256
- Verify secrets with constant-time comparison
- Extract the presented password from request headers
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from argon2.low_level import Type

_argon2 = PasswordHasher(time_cost=2, memory_cost=102400, parallelism=8, hash_len=32, type=Type.ID)

PBKDF2_PREFIX = "pbkdf2$"


def _pbkdf2_hash(secret: str, *, iterations: int = 200_000, salt_bytes: int = 16) -> str:
    salt = secrets.token_bytes(salt_bytes)
    dk = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, iterations)
    return "pbkdf2$sha256$%d$%s$%s" % (
        iterations,
        base64.urlsafe_b64encode(salt).decode("ascii"),
        base64.urlsafe_b64encode(dk).decode("ascii"),
    )


def _pbkdf2_verify(secret: str, encoded: str) -> bool:
    try:
        scheme, algo, iter_str, b64_salt, b64_dk = encoded.split("$")
        if scheme != "pbkdf2" or algo != "sha256":
            return False
        iterations = int(iter_str)
        salt = base64.urlsafe_b64decode(b64_salt)
        dk_expected = base64.urlsafe_b64decode(b64_dk)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(dk, dk_expected)


def hash_secret(secret: str, *, scheme: str = "argon2") -> str:
    """Hash a secret with Argon2id, or PBKDF2-HMAC-SHA256 when ``scheme='pbkdf2'``."""
    if scheme == "pbkdf2":
        return _pbkdf2_hash(secret)
    return _argon2.hash(secret)


def verify_secret(secret: Optional[str], encoded_hash: Optional[str]) -> bool:
    if not secret or not encoded_hash:
        return False
    if encoded_hash.startswith("$argon2"):
        try:
            return _argon2.verify(encoded_hash, secret)
        except (VerificationError, InvalidHashError):
            return False
    if encoded_hash.startswith(PBKDF2_PREFIX):
        return _pbkdf2_verify(secret, encoded_hash)
    # Unknown scheme
    return False


def extract_presented_secret(authorization: Optional[str], x_api_key: Optional[str]) -> Optional[str]:
    """Return the password sent as ``Authorization: Bearer`` or ``X-API-Key``."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    if x_api_key:
        return x_api_key.strip() or None
    return None
