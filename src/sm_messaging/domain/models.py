"""Domain models for sm_messaging — pure dataclasses, no framework dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.sm_common.enums import MessageKind
from src.sm_gateway.user.models import User
from src.sm_listing.domain.models import Listing


@dataclass
class Conversation:
    id: str
    participants: tuple[str, str]      # always two distinct user ids
    listing_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None  # bumped on every new message

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def other_participant(self, user_id: str) -> str:
        first, second = self.participants
        return second if user_id == first else first


@dataclass
class Message:
    id: str
    conversation_id: str
    sender_id: str
    content: str
    kind: str = MessageKind.TEXT.value
    read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class ConversationSummary:
    conversation: Conversation
    other_user: User
    listing: Listing | None
    last_message: Message | None
    unread_count: int
