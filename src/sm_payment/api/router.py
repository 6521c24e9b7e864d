"""sm_payment REST endpoints: payment intake, withdrawals, history.

A refused verification code is not an error: the response is HTTP 200 with
success=false and nothing is created.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.response import ApiResponse, error_response, success_response
from src.sm_gateway.auth.dependencies import get_current_user
from src.sm_gateway.user.models import User
from src.sm_payment.application.schemas import (
    PaymentRequestBody,
    PaymentResponse,
    WithdrawRequest,
)
from src.sm_payment.application.service import PaymentApplicationService

router = APIRouter(tags=["transactions"])


def get_payment_service(
    market: Annotated[Marketplace, Depends(get_marketplace)],
) -> PaymentApplicationService:
    return PaymentApplicationService(market)


Service = Annotated[PaymentApplicationService, Depends(get_payment_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("/transactions/payment")
async def initiate_payment(
    body: PaymentRequestBody,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    outcome = service.pay(current_user.id, body)
    if outcome.success:
        resp = success_response(
            PaymentResponse.from_outcome(outcome).model_dump(), message=outcome.message
        )
    else:
        resp = error_response(outcome.code, outcome.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = service.withdraw(current_user.id, body)
    resp = success_response(
        {"transaction": data.model_dump()}, message="Withdrawal is being processed"
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/user/transactions")
async def list_my_transactions(
    request: Request,
    current_user: CurrentUser,
    service: Service,
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    items = service.list_for_user(current_user.id, limit)
    resp = success_response([i.model_dump() for i in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
