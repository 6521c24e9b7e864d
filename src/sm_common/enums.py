"""Global enums shared by the stores, the engine and the API layer."""

from enum import Enum


class UserRole(str, Enum):
    PROVIDER = "provider"
    CLIENT = "client"
    BOTH = "both"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TransactionType(str, Enum):
    SERVICE_PAYMENT = "service_payment"
    WITHDRAWAL = "withdrawal"


class TransactionStatus(str, Enum):
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    PENDING = "pending"
    SETTLED = "settled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class MessageKind(str, Enum):
    TEXT = "text"


class Event(str, Enum):
    """Server → client real-time event names."""
    NEW_MESSAGE = "newMessage"
    CONVERSATION_UPDATE = "conversationUpdate"
    MESSAGES_READ = "messagesRead"
    PAYMENT_COMPLETED = "paymentCompleted"
    PAYMENT_FAILED = "paymentFailed"
    NEW_SERVICE_ASSIGNMENT = "newServiceAssignment"
    SERVICE_COMPLETED = "serviceCompleted"
    SERVICE_CANCELLED = "serviceCancelled"
    WITHDRAWAL_COMPLETED = "withdrawalCompleted"
    WITHDRAWAL_FAILED = "withdrawalFailed"
    ERROR = "error"


class ClientCommand(str, Enum):
    """Client → server real-time frame names."""
    JOIN_USER_CHANNEL = "joinUserChannel"
    JOIN_CONVERSATION = "joinConversation"
    SEND_MESSAGE = "sendMessage"
    MARK_MESSAGES_READ = "markMessagesRead"
