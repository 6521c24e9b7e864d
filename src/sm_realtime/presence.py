"""Per-user presence derived from active real-time sessions.

A user is online while at least one of their sessions has joined their user
channel; the last session leaving flips them offline.
"""

import logging
from collections import defaultdict

from src.sm_gateway.user.store import IdentityStore

logger = logging.getLogger(__name__)


class PresenceTracker:
    def __init__(self, identity: IdentityStore) -> None:
        self._identity = identity
        self._active: dict[str, int] = defaultdict(int)

    def session_joined(self, user_id: str) -> None:
        self._active[user_id] += 1
        if self._active[user_id] == 1:
            self._identity.set_online(user_id, True)
            logger.info("User online: %s", user_id)

    def session_left(self, user_id: str) -> None:
        if self._active.get(user_id, 0) <= 0:
            return
        self._active[user_id] -= 1
        if self._active[user_id] == 0:
            del self._active[user_id]
            self._identity.set_online(user_id, False)
            logger.info("User offline: %s", user_id)

    def active_sessions(self, user_id: str) -> int:
        return self._active.get(user_id, 0)
