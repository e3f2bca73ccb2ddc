"""Password hashing and JSON web tokens for authentication."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

TOKEN_LIFETIME = timedelta(hours=72)
ALGORITHM = "HS256"
_BCRYPT_COST = 10


class AuthError(Exception):
    """A token is missing or does not verify."""


def hash_password(password: str) -> str:
    """Return a bcrypt hash of the password."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=_BCRYPT_COST)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Tell whether the password matches the stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


def issue_token(email: str, secret: str | bytes, now: datetime | None = None) -> str:
    """Create a signed token for ``email`` that expires after 72 hours."""
    issued = now if now is not None else datetime.now(timezone.utc)
    expires = int((issued + TOKEN_LIFETIME).timestamp())
    return jwt.encode({"email": email, "exp": expires}, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str | bytes) -> str:
    """Verify a token and return the e-mail address it was issued for."""
    if not token:
        raise AuthError("Token required")
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError as exc:
        raise AuthError("Invalid token") from exc
    return str(claims.get("email", ""))