# src/sm_stats/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.response import ApiResponse, success_response
from src.sm_gateway.auth.dependencies import get_current_user
from src.sm_gateway.user.models import User
from src.sm_stats.application.service import StatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
async def get_stats(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
) -> ApiResponse:
    data = StatsService(market).stats(current_user.id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
