"""Password hashing and JWT access tokens."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from src.utils.errors import AuthenticationError, ConfigurationError
from src.utils.settings import get_settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
_DEV_SECRET = "terrasale-dev-secret"


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash. Hash comparison only."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password is not a valid bcrypt hash")
        return False


def get_jwt_secret() -> str:
    """Get the token signing secret; mandatory in production."""
    settings = get_settings()
    if settings.jwt_secret:
        return settings.jwt_secret
    if settings.is_production:
        raise ConfigurationError("JWT_SECRET must be set")
    return _DEV_SECRET


def create_access_token(user_id: int, email: str, now: Optional[datetime] = None) -> str:
    """Issue a signed token carrying the user's id and email."""
    now = now or datetime.now(timezone.utc)
    expires = now + timedelta(hours=get_settings().jwt_expires_hours)
    claims = {"id": user_id, "email": email, "exp": expires}
    return jwt.encode(claims, get_jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; return the claims."""
    if not token:
        raise AuthenticationError("Missing token")
    try:
        claims = jwt.decode(token, get_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}")

    if "id" not in claims or "email" not in claims:
        raise AuthenticationError("Invalid token: missing claims")
    return claims


def token_expiry() -> datetime:
    """Expiry timestamp for a token issued now (naive UTC, as stored in sessions)."""
    expires = datetime.now(timezone.utc) + timedelta(hours=get_settings().jwt_expires_hours)
    return expires.replace(tzinfo=None)


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an 'Authorization: Bearer ...' header."""
    if not authorization:
        raise AuthenticationError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header must be 'Bearer <token>'")
    return token.strip()
