"""ConversationStore — in-memory owner of conversations and their messages.

Conversations are indexed by id, by participant, and by (unordered pair,
listing) so `open_or_get` never scans. Messages are kept per conversation in
arrival order.
"""

import logging
from collections import defaultdict

from src.sm_common.datetime_utils import utc_now
from src.sm_common.errors import (
    ConversationNotFoundError,
    ForbiddenError,
    SelfConversationError,
)
from src.sm_common.id_generator import CONVERSATION_PREFIX, MESSAGE_PREFIX, generate_id
from src.sm_gateway.user.store import IdentityStore
from src.sm_listing.infrastructure.store import ListingStore
from src.sm_messaging.domain.models import Conversation, ConversationSummary, Message

logger = logging.getLogger(__name__)

PairKey = tuple[frozenset[str], str | None]


class ConversationStore:
    def __init__(self, identity: IdentityStore, listings: ListingStore) -> None:
        self._identity = identity
        self._listings = listings
        self._conversations: dict[str, Conversation] = {}
        self._by_pair: dict[PairKey, str] = {}
        self._by_user: dict[str, list[str]] = defaultdict(list)
        self._messages: dict[str, list[Message]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def open_or_get(self, user_a: str, user_b: str, listing_id: str | None = None) -> Conversation:
        """Return the conversation for this pair + listing, creating it on first contact."""
        if user_a == user_b:
            raise SelfConversationError()
        key: PairKey = (frozenset((user_a, user_b)), listing_id)
        existing = self._by_pair.get(key)
        if existing is not None:
            return self._conversations[existing]

        self._identity.get(user_a)
        self._identity.get(user_b)
        if listing_id is not None:
            self._listings.get(listing_id)

        now = utc_now()
        conversation = Conversation(
            id=generate_id(CONVERSATION_PREFIX),
            participants=(user_a, user_b),
            listing_id=listing_id,
            created_at=now,
            updated_at=now,
        )
        self._conversations[conversation.id] = conversation
        self._by_pair[key] = conversation.id
        self._by_user[user_a].append(conversation.id)
        self._by_user[user_b].append(conversation.id)
        logger.info(
            "Conversation opened: id=%s between %s and %s", conversation.id, user_a, user_b
        )
        return conversation

    def get(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    def get_for_participant(self, conversation_id: str, user_id: str) -> Conversation:
        conversation = self.get(conversation_id)
        if not conversation.has_participant(user_id):
            raise ForbiddenError("Not a participant of this conversation")
        return conversation

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def post_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
        conversation = self.get_for_participant(conversation_id, sender_id)
        now = utc_now()
        message = Message(
            id=generate_id(MESSAGE_PREFIX),
            conversation_id=conversation.id,
            sender_id=sender_id,
            content=content,
            created_at=now,
        )
        self._messages[conversation.id].append(message)
        conversation.updated_at = now
        return message

    def mark_read(self, conversation_id: str, reader_id: str) -> int:
        """Flag unread messages not authored by `reader_id` as read. Returns how many flipped."""
        conversation = self.get_for_participant(conversation_id, reader_id)
        now = utc_now()
        flipped = 0
        for message in self._messages.get(conversation.id, []):
            if message.sender_id != reader_id and not message.read:
                message.read = True
                message.read_at = now
                flipped += 1
        return flipped

    def history(self, conversation_id: str, reader_id: str) -> list[Message]:
        """Mark the reader's incoming messages read, then return the thread oldest first."""
        self.mark_read(conversation_id, reader_id)
        return list(self._messages.get(conversation_id, []))

    def last_message(self, conversation_id: str) -> Message | None:
        messages = self._messages.get(conversation_id)
        return messages[-1] if messages else None

    def unread_count(self, conversation_id: str, user_id: str) -> int:
        return sum(
            1
            for m in self._messages.get(conversation_id, [])
            if m.sender_id != user_id and not m.read
        )

    def unread_total(self, user_id: str) -> int:
        return sum(self.unread_count(cid, user_id) for cid in self._by_user.get(user_id, []))

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def list_for_user(self, user_id: str) -> list[ConversationSummary]:
        """Conversations the user takes part in, most recent activity first."""
        conversations = [self._conversations[cid] for cid in self._by_user.get(user_id, [])]
        conversations = sorted(
            reversed(conversations), key=lambda c: c.updated_at, reverse=True
        )
        return [
            ConversationSummary(
                conversation=c,
                other_user=self._identity.get(c.other_participant(user_id)),
                listing=self._listings.find(c.listing_id) if c.listing_id else None,
                last_message=self.last_message(c.id),
                unread_count=self.unread_count(c.id, user_id),
            )
            for c in conversations
        ]
