"""User application service: register, login, profile.

Composes IdentityStore calls with token issuance and schema conversion.
"""

from config.settings import settings
from src.sm_gateway.auth.jwt_handler import create_access_token
from src.sm_gateway.user.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserInfo,
)
from src.sm_gateway.user.store import IdentityStore


class UserService:
    def __init__(self, identity: IdentityStore) -> None:
        self._identity = identity

    def _auth_response(self, user_id: str) -> AuthResponse:
        user = self._identity.get(user_id)
        return AuthResponse(
            user=UserInfo.from_domain(user),
            token=create_access_token(user.id, user.phone),
            expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        )

    def register(self, body: RegisterRequest) -> AuthResponse:
        user = self._identity.register(
            full_name=body.full_name,
            phone=body.phone,
            password=body.password,
            role=body.user_type,
            email=body.email,
        )
        return self._auth_response(user.id)

    def login(self, body: LoginRequest) -> AuthResponse:
        """Authenticate by phone + password.

        Unknown phone raises UserNotFoundError and a wrong password raises
        InvalidCredentialsError; the two are kept distinct.
        """
        user = self._identity.authenticate(body.phone, body.password)
        return self._auth_response(user.id)

    def get_profile(self, user_id: str) -> UserInfo:
        return UserInfo.from_domain(self._identity.get(user_id))

    def update_profile(self, user_id: str, body: UpdateProfileRequest) -> UserInfo:
        user = self._identity.update_profile(user_id, body.full_name, body.email)
        return UserInfo.from_domain(user)
