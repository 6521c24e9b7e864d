"""Auth + profile API router: register, login, profile.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.response import ApiResponse, success_response
from src.sm_gateway.auth.dependencies import get_current_user
from src.sm_gateway.user.models import User
from src.sm_gateway.user.schemas import LoginRequest, RegisterRequest, UpdateProfileRequest
from src.sm_gateway.user.service import UserService

router = APIRouter(tags=["auth"])


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def get_user_service(market: Annotated[Marketplace, Depends(get_marketplace)]) -> UserService:
    return UserService(market.identity)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = service.register(body)
    resp = success_response(data.model_dump(), message="User registered successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = service.login(body)
    resp = success_response(data.model_dump(), message="Login successful")
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/user/profile", response_model=ApiResponse, summary="Own profile")
async def get_profile(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    resp = success_response(service.get_profile(current_user.id).model_dump())
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/user/profile", response_model=ApiResponse, summary="Update own profile")
async def update_profile(
    request: Request,
    body: UpdateProfileRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = service.update_profile(current_user.id, body)
    resp = success_response(data.model_dump(), message="Profile updated")
    resp.request_id = _get_request_id(request)
    return resp
