"""Pydantic schemas for sm_payment API requests and responses."""

from pydantic import BaseModel, Field

from src.sm_common.datetime_utils import iso_or_none
from src.sm_payment.domain.models import PaymentOutcome, Transaction


class PaymentRequestBody(BaseModel):
    listing_id: str
    amount: int | None = Field(None, gt=0, description="Defaults to the listing price")
    operator: str = Field(..., min_length=1, max_length=32)
    user_number: str = Field(..., min_length=8, max_length=20, pattern=r"^\+?[0-9]+$")
    notes: str = Field("", max_length=500)
    confirm_code: str | None = None
    idempotency_key: str | None = Field(None, max_length=64)


class WithdrawRequest(BaseModel):
    amount: int = Field(..., gt=0)
    operator: str = Field(..., min_length=1, max_length=32)
    withdrawal_number: str = Field(..., min_length=8, max_length=20, pattern=r"^\+?[0-9]+$")


class TransactionOut(BaseModel):
    id: str
    type: str
    status: str
    listing_id: str | None
    client_id: str
    provider_id: str | None
    amount: int
    commission: int
    payout: int
    operator: str | None
    payer_number: str | None
    notes: str
    failure_reason: str | None
    created_at: str | None
    completed_at: str | None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionOut":
        return cls(
            id=txn.id,
            type=txn.type,
            status=txn.status,
            listing_id=txn.listing_id,
            client_id=txn.client_id,
            provider_id=txn.provider_id,
            amount=txn.amount,
            commission=txn.commission,
            payout=txn.payout,
            operator=txn.operator,
            payer_number=txn.payer_number,
            notes=txn.notes,
            failure_reason=txn.failure_reason,
            created_at=iso_or_none(txn.created_at),
            completed_at=iso_or_none(txn.completed_at),
        )


class PaymentResponse(BaseModel):
    transaction: TransactionOut | None
    instructions: dict[str, object]

    @classmethod
    def from_outcome(cls, outcome: PaymentOutcome) -> "PaymentResponse":
        return cls(
            transaction=(
                TransactionOut.from_domain(outcome.transaction)
                if outcome.transaction is not None
                else None
            ),
            instructions=dict(outcome.instructions),
        )
