"""MessagingApplicationService — conversation store calls plus real-time fan-out.

Used by both the REST routers and the WebSocket gateway, so a message sent
over either path produces the same events.
"""

from src.marketplace import Marketplace
from src.sm_common.datetime_utils import utc_now
from src.sm_messaging.application.schemas import (
    ConversationOut,
    ConversationSummaryOut,
    MessageOut,
)
from src.sm_realtime import publishers


class MessagingApplicationService:
    def __init__(self, market: Marketplace) -> None:
        self._store = market.conversations
        self._hub = market.hub

    def list_conversations(self, user_id: str) -> list[ConversationSummaryOut]:
        return [ConversationSummaryOut.from_domain(s) for s in self._store.list_for_user(user_id)]

    def open_conversation(
        self,
        user_id: str,
        other_user_id: str,
        listing_id: str | None,
        initial_message: str | None = None,
    ) -> ConversationOut:
        conversation = self._store.open_or_get(user_id, other_user_id, listing_id)
        if initial_message:
            self.send_message(conversation.id, user_id, initial_message)
        return ConversationOut.from_domain(conversation)

    def send_message(self, conversation_id: str, sender_id: str, content: str) -> MessageOut:
        message = self._store.post_message(conversation_id, sender_id, content)
        conversation = self._store.get(conversation_id)
        publishers.new_message(self._hub, conversation, message)
        return MessageOut.from_domain(message)

    def mark_read(self, conversation_id: str, reader_id: str) -> int:
        flipped = self._store.mark_read(conversation_id, reader_id)
        if flipped:
            conversation = self._store.get(conversation_id)
            publishers.messages_read(self._hub, conversation, reader_id, utc_now())
        return flipped

    def history(self, conversation_id: str, reader_id: str) -> list[MessageOut]:
        """Fetching the thread counts as reading it."""
        self.mark_read(conversation_id, reader_id)
        return [MessageOut.from_domain(m) for m in self._store.history(conversation_id, reader_id)]
