"""
Password hashing and owner session tokens.

Sessions are HS256 JWTs whose subject is the restaurant id; nothing else
about the session is stored server-side.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from qrdine.core.config import get_settings
from qrdine.core.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when ``password`` matches the stored argon2 hash."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@dataclass
class SessionClaims:
    """Decoded contents of an owner session."""
    restaurant_id: str
    email: str
    name: str
    expires_at: datetime


def create_session_token(
    restaurant_id: str,
    email: str,
    name: str,
    expires_in: Optional[timedelta] = None,
) -> tuple[str, datetime]:
    """
    Sign a session for a restaurant.

    Returns:
        The encoded token and its expiry time (UTC).
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + (expires_in or timedelta(minutes=settings.session_expire_minutes))
    payload = {
        "sub": restaurant_id,
        "email": email,
        "name": name,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.session_algorithm)
    return token, expires_at


def decode_session_token(token: str) -> SessionClaims:
    """
    Verify a session token's signature and expiry.

    Raises:
        AuthenticationFailed: If the token is expired, tampered with or malformed
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.session_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed("Session expired")
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected session token: {e}")
        raise AuthenticationFailed("Invalid session")

    return SessionClaims(
        restaurant_id=payload["sub"],
        email=payload.get("email", ""),
        name=payload.get("name", ""),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
