"""Security helpers (password hashing and JWT issuing/verification)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from argon2 import PasswordHasher, exceptions as argon_exc
from jose import JWTError, jwt

from .config import get_settings

_ph = PasswordHasher()


class ConfigurationError(RuntimeError):
    """Raised when a required secret is missing; callers must fail closed."""


class TokenError(Exception):
    """Raised for invalid, expired or tampered tokens."""


def hash_password(password: str) -> str:
    return _ph.hash(password)


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not stored_hash:
        return False
    try:
        return _ph.verify(stored_hash, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def _secret() -> str:
    secret = get_settings().jwt_secret
    if not secret:
        raise ConfigurationError("JWT_SECRET is not set")
    return secret


def create_access_token(claims: Dict[str, Any], expires_in_seconds: int) -> str:
    """Sign ``claims`` with an ``exp`` set ``expires_in_seconds`` from now."""
    secret = _secret()
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    to_encode.update({"iat": now, "exp": now + timedelta(seconds=expires_in_seconds)})
    return jwt.encode(to_encode, secret, algorithm=get_settings().jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; there is no revocation list."""
    secret = _secret()
    try:
        return jwt.decode(token, secret, algorithms=[get_settings().jwt_algorithm])
    except JWTError as exc:
        raise TokenError(str(exc)) from exc
