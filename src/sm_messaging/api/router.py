# src/sm_messaging/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.response import ApiResponse, success_response
from src.sm_gateway.auth.dependencies import get_current_user
from src.sm_gateway.user.models import User
from src.sm_messaging.application.schemas import OpenConversationRequest, PostMessageRequest
from src.sm_messaging.application.service import MessagingApplicationService

router = APIRouter(prefix="/conversations", tags=["messaging"])


def get_messaging_service(
    market: Annotated[Marketplace, Depends(get_marketplace)],
) -> MessagingApplicationService:
    return MessagingApplicationService(market)


Service = Annotated[MessagingApplicationService, Depends(get_messaging_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.get("")
async def list_conversations(
    request: Request, current_user: CurrentUser, service: Service
) -> ApiResponse:
    items = service.list_conversations(current_user.id)
    resp = success_response([i.model_dump() for i in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def open_conversation(
    body: OpenConversationRequest,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = service.open_conversation(
        current_user.id, body.other_user_id, body.listing_id, body.initial_message
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{conversation_id}/messages")
async def get_messages(
    conversation_id: str,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    items = service.history(conversation_id, current_user.id)
    resp = success_response([i.model_dump() for i in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{conversation_id}/messages", status_code=status.HTTP_201_CREATED)
async def post_message(
    conversation_id: str,
    body: PostMessageRequest,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = service.send_message(conversation_id, current_user.id, body.content)
    resp = success_response(data.model_dump(), message="Message sent")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
