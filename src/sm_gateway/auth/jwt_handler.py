"""JWT token creation and verification.

Tokens carry the user id (``sub``) and phone number, and stay valid for a
fixed window (JWT_EXPIRE_MINUTES, 24h by default). HS256 with one shared
secret; no revocation, a token is valid until it expires.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.sm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(user_id: str, phone: str) -> str:
    """Issue an access token for the authenticated user."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "phone": phone,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Returns:
        Decoded payload dict with at minimum {"sub": ..., "phone": ..., "type": "access"}.

    Raises:
        InvalidCredentialsError: Token is malformed, tampered with, expired, or not an access token.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidCredentialsError()

    return payload
