"""RealtimeGateway — inbound frame dispatch for authenticated sessions.

The transport (WebSocket router) authenticates the connection, then feeds
every decoded JSON frame through `handle`. Frames carry a command name and a
payload:

    {"event": "joinUserChannel",  "data": {"userId": "USR_..."}}
    {"event": "joinConversation", "data": {"conversationId": "CONV_..."}}
    {"event": "sendMessage",      "data": {"conversationId": ..., "senderId": ..., "content": ...}}
    {"event": "markMessagesRead", "data": {"conversationId": ..., "userId": ...}}

`joinUserChannel` and `joinConversation` also accept the bare id as `data`.
Any identity carried in a frame must be the session's own user. Violations
and domain errors are answered with an `error` frame on the same session and
never close the connection.
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.marketplace import Marketplace
from src.sm_common.enums import ClientCommand, Event
from src.sm_common.errors import AppError, ForbiddenError
from src.sm_messaging.application.schemas import PostMessageRequest
from src.sm_messaging.application.service import MessagingApplicationService
from src.sm_realtime.hub import Session, conversation_channel, user_channel

logger = logging.getLogger(__name__)

# Error codes for malformed frames, outside the domain error ranges
BAD_FRAME = 9101
UNKNOWN_COMMAND = 9102


class FrameError(Exception):
    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


def _field(data: Any, key: str, *, bare: bool = False) -> str:
    if bare and isinstance(data, str) and data:
        return data
    if isinstance(data, dict):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    raise FrameError(BAD_FRAME, f"Missing or invalid field: {key}")


class RealtimeGateway:
    def __init__(self, market: Marketplace) -> None:
        self._market = market
        self._hub = market.hub
        self._presence = market.presence
        self._messaging = MessagingApplicationService(market)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def open(self, user_id: str) -> Session:
        return self._hub.connect(user_id)

    def close(self, session_id: str) -> None:
        session = self._hub.disconnect(session_id)
        if session is not None and user_channel(session.user_id) in session.channels:
            self._presence.session_left(session.user_id)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def handle(self, session_id: str, frame: Any) -> None:
        session = self._hub.session(session_id)
        if session is None:
            return
        command = frame.get("event") if isinstance(frame, dict) else None
        data = frame.get("data") if isinstance(frame, dict) else None
        try:
            if command == ClientCommand.JOIN_USER_CHANNEL.value:
                self._join_user_channel(session, data)
            elif command == ClientCommand.JOIN_CONVERSATION.value:
                self._join_conversation(session, data)
            elif command == ClientCommand.SEND_MESSAGE.value:
                self._send_message(session, data)
            elif command == ClientCommand.MARK_MESSAGES_READ.value:
                self._mark_read(session, data)
            else:
                raise FrameError(UNKNOWN_COMMAND, f"Unknown command: {command}")
        except (FrameError, AppError) as e:
            self.reject(session, command, e.code, e.message)

    def _join_user_channel(self, session: Session, data: Any) -> None:
        user_id = _field(data, "userId", bare=True)
        if user_id != session.user_id:
            raise ForbiddenError("Cannot join another user's channel")
        if self._hub.subscribe(session.id, user_channel(user_id)):
            self._presence.session_joined(user_id)

    def _join_conversation(self, session: Session, data: Any) -> None:
        conversation_id = _field(data, "conversationId", bare=True)
        self._market.conversations.get_for_participant(conversation_id, session.user_id)
        self._hub.subscribe(session.id, conversation_channel(conversation_id))

    def _send_message(self, session: Session, data: Any) -> None:
        conversation_id = _field(data, "conversationId")
        sender_id = _field(data, "senderId")
        try:
            body = PostMessageRequest(content=data.get("content"))
        except ValidationError as e:
            raise FrameError(BAD_FRAME, f"Invalid content: {e.errors()[0]['msg']}") from e
        if sender_id != session.user_id:
            raise ForbiddenError("senderId does not match the authenticated user")
        self._messaging.send_message(conversation_id, sender_id, body.content)

    def _mark_read(self, session: Session, data: Any) -> None:
        conversation_id = _field(data, "conversationId")
        user_id = _field(data, "userId")
        if user_id != session.user_id:
            raise ForbiddenError("userId does not match the authenticated user")
        self._messaging.mark_read(conversation_id, user_id)

    def reject(self, session: Session, command: Any, code: int, message: str) -> None:
        logger.info("Rejected %s from session %s: %s", command, session.id, message)
        self._hub.send(
            session.id,
            {
                "event": Event.ERROR.value,
                "data": {"command": command, "code": code, "message": message},
            },
        )
