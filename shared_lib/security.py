"""
Credential service: password hashing and signed tokens.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
import uuid

import bcrypt
import jwt

ALGORITHM = "HS256"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    if not password or not hashed:
        return False
    return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))


def _create_token(subject: str, secret: str, expires_in: timedelta, **claims: Any) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + expires_in,
        "jti": uuid.uuid4().hex,
        **claims,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def create_access_token(user_id: str, secret: str, expires_minutes: int, **claims: Any) -> str:
    """Create a short-lived access token."""
    return _create_token(user_id, secret, timedelta(minutes=expires_minutes), **claims)


def create_refresh_token(user_id: str, secret: str, expires_days: int) -> str:
    """Create a long-lived refresh token."""
    return _create_token(user_id, secret, timedelta(days=expires_days))


def decode_token(token: str, secret: str) -> Dict[str, Any]:
    """
    Verify a token and return its payload.

    Raises:
        TokenExpired: the signature is valid but the token has expired
        TokenInvalid: the token is malformed, tampered with or has no subject
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpired("Token expired")
    except jwt.InvalidTokenError:
        raise TokenInvalid("Invalid token")

    if not payload.get("sub"):
        raise TokenInvalid("Invalid token")
    return payload
