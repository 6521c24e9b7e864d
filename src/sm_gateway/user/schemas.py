"""Pydantic request/response schemas for sm_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

from pydantic import BaseModel, EmailStr, Field

from src.sm_common.datetime_utils import iso_or_none
from src.sm_common.enums import UserRole
from src.sm_gateway.user.models import User


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=120)
    phone: str = Field(..., min_length=8, max_length=20, pattern=r"^\+?[0-9]+$")
    email: EmailStr | None = None
    user_type: UserRole = UserRole.CLIENT
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    phone: str
    password: str


class UpdateProfileRequest(BaseModel):
    full_name: str | None = Field(None, min_length=2, max_length=120)
    email: EmailStr | None = None


class UserInfo(BaseModel):
    """Full profile, only ever returned to its owner."""

    id: str
    full_name: str
    phone: str
    email: str | None
    user_type: str
    balance: int
    rating: float
    completed_services: int
    is_online: bool
    last_seen: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, user: User) -> "UserInfo":
        return cls(
            id=user.id,
            full_name=user.full_name,
            phone=user.phone,
            email=user.email,
            user_type=user.role,
            balance=user.balance,
            rating=user.rating,
            completed_services=user.completed_services,
            is_online=user.is_online,
            last_seen=iso_or_none(user.last_seen),
            created_at=iso_or_none(user.created_at),
        )


class PublicProfile(BaseModel):
    """What one user may see of another."""

    id: str
    full_name: str
    phone: str
    rating: float
    is_online: bool

    @classmethod
    def from_domain(cls, user: User) -> "PublicProfile":
        return cls(
            id=user.id,
            full_name=user.full_name,
            phone=user.phone,
            rating=user.rating,
            is_online=user.is_online,
        )


class AuthResponse(BaseModel):
    user: UserInfo
    token: str
    token_type: str = "Bearer"
    expires_in: int = 86400  # 24 hours in seconds
