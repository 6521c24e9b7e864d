"""FastAPI dependency: get_current_user.

Usage in any protected router:
    from src.sm_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: User = Depends(get_current_user)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.errors import InvalidCredentialsError
from src.sm_gateway.auth.jwt_handler import decode_token
from src.sm_gateway.user.models import User

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


def user_from_token(token: str, market: Marketplace) -> User:
    """Resolve a raw bearer token to a registered user. Raises InvalidCredentialsError."""
    payload = decode_token(token)
    user = market.identity.find(payload["sub"])
    if user is None:
        raise InvalidCredentialsError()
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    market: Marketplace = Depends(get_marketplace),
) -> User:
    """Extract and validate the JWT Bearer token, return the User.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an unknown user.
    """
    try:
        return user_from_token(token, market)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
