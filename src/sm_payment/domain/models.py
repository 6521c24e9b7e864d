"""Domain models for sm_payment — pure dataclasses, no framework dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.sm_common.enums import TransactionStatus, TransactionType

# status -> statuses reachable from it; anything absent is terminal
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    TransactionStatus.AWAITING_CONFIRMATION.value: frozenset({
        TransactionStatus.PENDING.value,
        TransactionStatus.REJECTED.value,
        TransactionStatus.CANCELLED.value,
    }),
    TransactionStatus.PENDING.value: frozenset({
        TransactionStatus.SETTLED.value,
        TransactionStatus.REJECTED.value,
        TransactionStatus.CANCELLED.value,
    }),
}


@dataclass
class Transaction:
    id: str
    type: str                          # TransactionType value
    status: str                        # TransactionStatus value
    client_id: str                     # payer, or the withdrawing user
    amount: int                        # gross, smallest currency unit
    commission: int = 0
    payout: int = 0                    # amount - commission
    listing_id: str | None = None
    provider_id: str | None = None
    operator: str | None = None        # mobile money operator
    payer_number: str | None = None    # paying number, or withdrawal destination
    confirmation_code: str | None = None
    notes: str = ""
    failure_reason: str | None = None
    idempotency_key: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status not in ALLOWED_TRANSITIONS

    @property
    def is_payment(self) -> bool:
        return self.type == TransactionType.SERVICE_PAYMENT.value

    def can_transition_to(self, target: str) -> bool:
        return target in ALLOWED_TRANSITIONS.get(self.status, frozenset())


@dataclass
class PaymentOutcome:
    """Result of a payment initiation. success=False is a soft failure: nothing was created."""

    success: bool
    message: str
    transaction: Transaction | None = None
    instructions: dict[str, object] = field(default_factory=dict)
    code: int = 0
