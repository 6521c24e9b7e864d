"""PaymentApplicationService — maps API bodies onto the TransactionEngine."""

from src.marketplace import Marketplace
from src.sm_payment.application.schemas import (
    PaymentRequestBody,
    TransactionOut,
    WithdrawRequest,
)
from src.sm_payment.domain.models import PaymentOutcome


class PaymentApplicationService:
    def __init__(self, market: Marketplace) -> None:
        self._engine = market.engine

    def pay(self, client_id: str, body: PaymentRequestBody) -> PaymentOutcome:
        return self._engine.initiate_payment(
            client_id=client_id,
            listing_id=body.listing_id,
            operator=body.operator,
            payer_number=body.user_number,
            amount=body.amount,
            notes=body.notes,
            confirm_code=body.confirm_code,
            idempotency_key=body.idempotency_key,
        )

    def withdraw(self, user_id: str, body: WithdrawRequest) -> TransactionOut:
        txn = self._engine.withdraw(
            user_id=user_id,
            amount=body.amount,
            operator=body.operator,
            withdrawal_number=body.withdrawal_number,
        )
        return TransactionOut.from_domain(txn)

    def list_for_user(self, user_id: str, limit: int) -> list[TransactionOut]:
        return [TransactionOut.from_domain(t) for t in self._engine.list_for_user(user_id, limit)]
