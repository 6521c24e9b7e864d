"""Pydantic schemas for sm_messaging API requests and responses."""

from typing import Literal

from pydantic import BaseModel, Field

from src.sm_common.datetime_utils import iso_or_none
from src.sm_gateway.user.schemas import PublicProfile
from src.sm_listing.application.schemas import ListingOut
from src.sm_messaging.domain.models import Conversation, ConversationSummary, Message


class OpenConversationRequest(BaseModel):
    other_user_id: str
    listing_id: str | None = None
    initial_message: str | None = Field(None, min_length=1, max_length=4000)


class PostMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)
    message_type: Literal["text"] = "text"


class MessageOut(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    message_type: str
    read: bool
    read_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, message: Message) -> "MessageOut":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender_id=message.sender_id,
            content=message.content,
            message_type=message.kind,
            read=message.read,
            read_at=iso_or_none(message.read_at),
            created_at=iso_or_none(message.created_at),
        )


class ConversationOut(BaseModel):
    id: str
    participants: list[str]
    listing_id: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, conversation: Conversation) -> "ConversationOut":
        return cls(
            id=conversation.id,
            participants=list(conversation.participants),
            listing_id=conversation.listing_id,
            created_at=iso_or_none(conversation.created_at),
            updated_at=iso_or_none(conversation.updated_at),
        )


class ConversationSummaryOut(BaseModel):
    id: str
    other_user: PublicProfile
    listing: ListingOut | None
    last_message: MessageOut | None
    unread_count: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, summary: ConversationSummary) -> "ConversationSummaryOut":
        conversation = summary.conversation
        return cls(
            id=conversation.id,
            other_user=PublicProfile.from_domain(summary.other_user),
            listing=ListingOut.from_domain(summary.listing) if summary.listing else None,
            last_message=(
                MessageOut.from_domain(summary.last_message) if summary.last_message else None
            ),
            unread_count=summary.unread_count,
            created_at=iso_or_none(conversation.created_at),
            updated_at=iso_or_none(conversation.updated_at),
        )
