"""
Credential checks and signed bearer tokens.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from jose import JWTError, jwt

from tracker.config import Settings

HASH_PREFIX = "scrypt"
SCRYPT_PARAMS = {
    "n": 2**14,
    "r": 8,
    "p": 1,
    "dklen": 64,
}
PROFILE_FIELDS = ("id", "username", "name", "role")


class AuthenticationError(Exception):
    """Raised when a bearer token is missing, malformed, expired or forged."""


def _scrypt(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(password.encode("utf-8"), salt=salt, **SCRYPT_PARAMS)


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    return f"{HASH_PREFIX}${salt.hex()}${_scrypt(password, salt).hex()}"


def is_hashed(stored: str) -> bool:
    return isinstance(stored, str) and stored.startswith(HASH_PREFIX + "$")


def verify_password(password: str, stored) -> bool:
    """
    Compare a login password against a stored value.

    Records written before hashing was introduced still hold the plaintext;
    those are compared directly.
    """
    if not isinstance(password, str) or not isinstance(stored, str):
        return False
    if not is_hashed(stored):
        return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))
    try:
        _, salt_hex, hash_hex = stored.split("$")
        expected = bytes.fromhex(hash_hex)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    return hmac.compare_digest(_scrypt(password, salt), expected)


def authenticate(users: Iterable[dict], username, password) -> Optional[dict]:
    for user in users:
        if user.get("username") == username and verify_password(
            password, user.get("password")
        ):
            return user
    return None


def public_profile(user: dict) -> dict:
    return {key: user.get(key) for key in PROFILE_FIELDS}


def issue_token(user: dict, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    claims = public_profile(user)
    claims["iat"] = now
    claims["exp"] = now + timedelta(seconds=settings.token_ttl_seconds)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: Optional[str], settings: Settings) -> dict:
    if not token:
        raise AuthenticationError("Missing token")
    try:
        return jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        raise AuthenticationError(str(exc)) from exc


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential part of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2:
        return None
    return parts[1]
