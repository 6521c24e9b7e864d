"""Domain-specific realtime publishers.

Each helper builds one event payload and hands it to the hub with the exact
set of channels that should see it. No connection handling lives here.
"""

from collections.abc import Iterable
from datetime import datetime

from src.sm_common.datetime_utils import iso_or_none
from src.sm_common.enums import Event
from src.sm_gateway.user.models import User
from src.sm_gateway.user.schemas import PublicProfile
from src.sm_listing.application.schemas import ListingOut
from src.sm_listing.domain.models import Listing
from src.sm_messaging.application.schemas import MessageOut
from src.sm_messaging.domain.models import Conversation, Message
from src.sm_payment.application.schemas import TransactionOut
from src.sm_payment.domain.models import Transaction
from src.sm_realtime.hub import NotificationHub, conversation_channel, user_channel


def _users(*user_ids: str | None) -> list[str]:
    return [user_channel(uid) for uid in dict.fromkeys(user_ids) if uid]


# --- payments ---

def payment_completed(
    hub: NotificationHub, txn: Transaction, client: User, provider: User
) -> int:
    return hub.publish(
        Event.PAYMENT_COMPLETED.value,
        {
            "transaction_id": txn.id,
            "listing_id": txn.listing_id,
            "client_name": client.full_name,
            "provider_name": provider.full_name,
            "amount": txn.amount,
            "payout": txn.payout,
            "commission": txn.commission,
        },
        _users(client.id, provider.id),
    )


def new_service_assignment(
    hub: NotificationHub, listing: Listing, txn: Transaction, client: User
) -> int:
    return hub.publish(
        Event.NEW_SERVICE_ASSIGNMENT.value,
        {
            "listing": ListingOut.from_domain(listing).model_dump(mode="json"),
            "transaction": TransactionOut.from_domain(txn).model_dump(mode="json"),
            "client": PublicProfile.from_domain(client).model_dump(mode="json"),
        },
        _users(listing.provider_id),
    )


def payment_failed(hub: NotificationHub, txn: Transaction) -> int:
    return hub.publish(
        Event.PAYMENT_FAILED.value,
        {
            "transaction_id": txn.id,
            "listing_id": txn.listing_id,
            "status": txn.status,
            "reason": txn.failure_reason,
        },
        _users(txn.client_id),
    )


# --- listings ---

def service_completed(
    hub: NotificationHub, listing: Listing, provider: User, client: User | None
) -> int:
    return hub.publish(
        Event.SERVICE_COMPLETED.value,
        {
            "listing_id": listing.id,
            "title": listing.title,
            "provider_name": provider.full_name,
            "client_name": client.full_name if client else None,
            "completed_at": iso_or_none(listing.completed_at),
        },
        _users(listing.provider_id, listing.client_id),
    )


def service_cancelled(
    hub: NotificationHub,
    listing: Listing,
    cancelled_by: str,
    cancelled_transactions: Iterable[str],
    recipients: Iterable[str],
) -> int:
    return hub.publish(
        Event.SERVICE_CANCELLED.value,
        {
            "listing_id": listing.id,
            "title": listing.title,
            "cancelled_by": cancelled_by,
            "cancelled_transactions": list(cancelled_transactions),
        },
        _users(*recipients),
    )


# --- withdrawals ---

def withdrawal_completed(hub: NotificationHub, txn: Transaction, new_balance: int) -> int:
    return hub.publish(
        Event.WITHDRAWAL_COMPLETED.value,
        {
            "transaction_id": txn.id,
            "user_id": txn.client_id,
            "amount": txn.amount,
            "new_balance": new_balance,
        },
        _users(txn.client_id),
    )


def withdrawal_failed(hub: NotificationHub, txn: Transaction) -> int:
    return hub.publish(
        Event.WITHDRAWAL_FAILED.value,
        {
            "transaction_id": txn.id,
            "user_id": txn.client_id,
            "amount": txn.amount,
            "reason": txn.failure_reason,
        },
        _users(txn.client_id),
    )


# --- messaging ---

def new_message(hub: NotificationHub, conversation: Conversation, message: Message) -> int:
    """newMessage to the thread and the recipient, plus conversationUpdate to the recipient."""
    recipient = conversation.other_participant(message.sender_id)
    body = MessageOut.from_domain(message).model_dump(mode="json")
    delivered = hub.publish(
        Event.NEW_MESSAGE.value,
        body,
        [conversation_channel(conversation.id), user_channel(recipient)],
    )
    hub.publish(
        Event.CONVERSATION_UPDATE.value,
        {"conversation_id": conversation.id, "last_message": body},
        _users(recipient),
    )
    return delivered


def messages_read(
    hub: NotificationHub, conversation: Conversation, reader_id: str, read_at: datetime
) -> int:
    return hub.publish(
        Event.MESSAGES_READ.value,
        {
            "conversation_id": conversation.id,
            "read_by": reader_id,
            "read_at": read_at.isoformat(),
        },
        _users(conversation.other_participant(reader_id)),
    )
