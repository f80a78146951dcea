"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT; access and refresh tokens use
  distinct secrets and lifetimes
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from flask import current_app

from api.errors import InvalidToken

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"

_SECRET_KEYS = {ACCESS: "ACCESS_TOKEN_SECRET", REFRESH: "REFRESH_TOKEN_SECRET"}
_EXPIRY_KEYS = {ACCESS: "ACCESS_TOKEN_EXPIRES", REFRESH: "REFRESH_TOKEN_EXPIRES"}


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a stored Argon2 hash
    """
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _encode(token_type: str, subject: str, extra: Dict[str, Any] | None = None) -> str:
    now = _now()
    exp = now + current_app.config[_EXPIRY_KEYS[token_type]]
    payload = {
        "iss": current_app.config.get("JWT_ISSUER", "user-channel-api"),
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "type": token_type,
        "jti": generate_jti(),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(
        payload,
        current_app.config[_SECRET_KEYS[token_type]],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def create_access_token(user) -> str:
    """Short-lived bearer token carrying the user's public identity claims."""
    return _encode(
        ACCESS,
        user.id,
        {"username": user.username, "email": user.email, "fullname": user.fullname},
    )


def create_refresh_token(user) -> str:
    """Long-lived token; only honored while it matches the stored session value."""
    return _encode(REFRESH, user.id)


def decode_token(token: str, expected_type: str = ACCESS) -> Dict[str, Any]:
    """
    Decode and validate a JWT with the secret of its expected type.
    Raises InvalidToken on a bad signature, expiry, missing claims or wrong type.
    """
    try:
        decoded = jwt.decode(
            token,
            current_app.config[_SECRET_KEYS[expected_type]],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            issuer=current_app.config.get("JWT_ISSUER", "user-channel-api"),
            options={"require": ["exp", "sub", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except jwt.InvalidTokenError as exc:
        raise InvalidToken(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise InvalidToken("Wrong token type")
    return decoded
