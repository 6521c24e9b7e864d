"""NotificationHub — channel-targeted, best-effort event fan-out.

Each connected session owns a bounded outbound queue and subscribes to named
channels (`user:<id>`, `conversation:<id>`). `publish` only ever enqueues
with put_nowait, so the mutating operation that triggered it is never
blocked by a slow consumer. Delivery is at most once per session per
publish; nothing is queued for sessions that are not connected.
"""

import asyncio
import itertools
import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Frame = dict[str, Any]


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


def conversation_channel(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


@dataclass
class Session:
    id: str
    user_id: str
    queue: asyncio.Queue[Frame]
    channels: set[str] = field(default_factory=set)


class NotificationHub:
    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._seq = itertools.count(1)
        self._sessions: dict[str, Session] = {}
        self._channels: dict[str, set[str]] = defaultdict(set)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def connect(self, user_id: str) -> Session:
        session = Session(
            id=f"sess_{next(self._seq)}",
            user_id=user_id,
            queue=asyncio.Queue(maxsize=self._queue_size),
        )
        self._sessions[session.id] = session
        logger.debug("Session connected: %s user=%s", session.id, user_id)
        return session

    def disconnect(self, session_id: str) -> Session | None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        for channel in session.channels:
            members = self._channels.get(channel)
            if members is not None:
                members.discard(session_id)
                if not members:
                    del self._channels[channel]
        logger.debug("Session disconnected: %s user=%s", session_id, session.user_id)
        return session

    def subscribe(self, session_id: str, channel: str) -> bool:
        """Subscribe a session to a channel. Returns False if it was already subscribed."""
        session = self._sessions[session_id]
        if channel in session.channels:
            return False
        session.channels.add(channel)
        self._channels[channel].add(session_id)
        logger.debug("Session %s joined %s", session_id, channel)
        return True

    def session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def subscribers(self, channel: str) -> set[str]:
        return set(self._channels.get(channel, ()))

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def publish(self, event: str, payload: dict[str, Any], channels: Iterable[str]) -> int:
        """Enqueue `event` for every session on any of `channels`. Returns sessions reached."""
        targets: set[str] = set()
        for channel in channels:
            targets |= self._channels.get(channel, set())

        frame: Frame = {"event": event, "data": payload}
        delivered = 0
        for session_id in targets:
            if self.send(session_id, frame):
                delivered += 1
        return delivered

    def send(self, session_id: str, frame: Frame) -> bool:
        """Enqueue one frame for one session; drops it if the session is gone or saturated."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        try:
            session.queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(
                "Dropping %s for session %s: outbound queue full", frame.get("event"), session_id
            )
            return False
        return True
