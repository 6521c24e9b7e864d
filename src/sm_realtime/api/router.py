# src/sm_realtime/api/router.py
"""WebSocket transport for the realtime gateway.

One connection = one hub session. The reader loop decodes inbound JSON frames
and hands them to RealtimeGateway; the sender loop drains the session's
outbound queue. Both run in one task group, and the reader cancels the group
when the client goes away.
"""

import logging
from typing import Annotated

import anyio
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.errors import InvalidCredentialsError
from src.sm_gateway.auth.dependencies import user_from_token
from src.sm_realtime.gateway import BAD_FRAME, RealtimeGateway
from src.sm_realtime.hub import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _reader(
    ws: WebSocket, gateway: RealtimeGateway, session: Session, scope: anyio.CancelScope
) -> None:
    try:
        while True:
            try:
                frame = await ws.receive_json()
            except ValueError:
                gateway.reject(session, None, BAD_FRAME, "Frame is not valid JSON")
                continue
            await gateway.handle(session.id, frame)
    except WebSocketDisconnect:
        pass
    finally:
        scope.cancel()


async def _sender(ws: WebSocket, session: Session) -> None:
    while True:
        frame = await session.queue.get()
        await ws.send_json(frame)


@router.websocket("/ws")
async def realtime(
    ws: WebSocket,
    market: Annotated[Marketplace, Depends(get_marketplace)],
    token: str = Query(...),
) -> None:
    try:
        user = user_from_token(token, market)
    except InvalidCredentialsError:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await ws.accept()
    gateway = RealtimeGateway(market)
    session = gateway.open(user.id)
    logger.info("WebSocket opened: session=%s user=%s", session.id, user.id)

    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(_reader, ws, gateway, session, tg.cancel_scope)
            tg.start_soon(_sender, ws, session)
    finally:
        gateway.close(session.id)
        logger.info("WebSocket closed: session=%s user=%s", session.id, user.id)
