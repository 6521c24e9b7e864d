"""TransactionEngine — payment and withdrawal lifecycle.

Owns every Transaction. Payment intake is delegated to a pluggable
PaymentPolicy; settlement runs later as a scheduled continuation.

Locking:
  - listing-scoped work (payment settlement, completion, cancellation) runs
    under a per-listing asyncio.Lock, so a cancel and a due settlement on the
    same listing are serialised and the settlement sees the cancel;
  - balance mutations additionally hold the IdentityStore's per-user lock.
Inside a lock every state change is a synchronous block, so no reader ever
sees a status without its dependent fields.
"""

import asyncio
import logging
from collections import defaultdict

from src.sm_common.datetime_utils import utc_now
from src.sm_common.enums import ListingStatus, TransactionStatus, TransactionType
from src.sm_common.errors import (
    AmountMismatchError,
    AppError,
    ForbiddenError,
    IdempotencyConflictError,
    InsufficientBalanceError,
    INVALID_VERIFICATION_CODE,
    InvalidStatusTransitionError,
    ListingNotActiveError,
    TransactionNotFoundError,
)
from src.sm_common.id_generator import PAYMENT_PREFIX, WITHDRAWAL_PREFIX, generate_id
from src.sm_common.money import split_amount, validate_amount
from src.sm_common.scheduler import Scheduler
from src.sm_gateway.user.store import IdentityStore
from src.sm_listing.domain.models import Listing
from src.sm_listing.domain.repository import ListingStoreProtocol
from src.sm_payment.domain.models import PaymentOutcome, Transaction
from src.sm_payment.domain.policy import PaymentPolicy, PaymentRequest
from src.sm_realtime import publishers
from src.sm_realtime.hub import NotificationHub

logger = logging.getLogger(__name__)


class TransactionEngine:
    def __init__(
        self,
        identity: IdentityStore,
        listings: ListingStoreProtocol,
        hub: NotificationHub,
        scheduler: Scheduler,
        policy: PaymentPolicy,
        commission_rate_bps: int = 1000,
        payment_settle_delay: float = 2.0,
        withdrawal_settle_delay: float = 3.0,
    ) -> None:
        self._identity = identity
        self._listings = listings
        self._hub = hub
        self._scheduler = scheduler
        self._policy = policy
        self._commission_rate_bps = commission_rate_bps
        self._payment_settle_delay = payment_settle_delay
        self._withdrawal_settle_delay = withdrawal_settle_delay

        self._transactions: dict[str, Transaction] = {}
        self._by_listing: dict[str, list[str]] = defaultdict(list)
        self._by_user: dict[str, list[str]] = defaultdict(list)
        self._idempotency: dict[tuple[str, str], str] = {}
        self._pending_withdrawals: dict[str, int] = defaultdict(int)
        self._listing_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def policy(self) -> PaymentPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, transaction_id: str) -> Transaction:
        txn = self._transactions.get(transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        return txn

    def all(self) -> list[Transaction]:
        return list(self._transactions.values())

    def for_listing(self, listing_id: str) -> list[Transaction]:
        return [self._transactions[i] for i in self._by_listing.get(listing_id, [])]

    def list_for_user(self, user_id: str, limit: int = 20) -> list[Transaction]:
        """Most recent transactions the user paid, received, or withdrew."""
        txns = [self._transactions[i] for i in self._by_user.get(user_id, [])]
        txns = sorted(reversed(txns), key=lambda t: t.created_at, reverse=True)
        return txns[:limit]

    def pending_withdrawals(self, user_id: str) -> int:
        return self._pending_withdrawals.get(user_id, 0)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _store(self, txn: Transaction) -> None:
        self._transactions[txn.id] = txn
        if txn.listing_id is not None:
            self._by_listing[txn.listing_id].append(txn.id)
        self._by_user[txn.client_id].append(txn.id)
        if txn.provider_id is not None:
            self._by_user[txn.provider_id].append(txn.id)

    @staticmethod
    def _transition(txn: Transaction, target: TransactionStatus, reason: str | None = None) -> None:
        if not txn.can_transition_to(target.value):
            raise InvalidStatusTransitionError("Transaction", txn.status, target.value)
        txn.status = target.value
        if target in (TransactionStatus.SETTLED, TransactionStatus.REJECTED,
                      TransactionStatus.CANCELLED):
            txn.completed_at = utc_now()
        if reason is not None:
            txn.failure_reason = reason
        logger.info("Transaction %s → %s", txn.id, txn.status)

    def _schedule_payment_settlement(self, txn: Transaction, delay: float) -> None:
        async def _settle() -> None:
            try:
                await self._settle_payment(txn.id)
            except AppError as exc:
                self._fail_settlement(txn, exc)

        self._scheduler.call_later(delay, _settle, name=f"settle-{txn.id}")

    def _fail_settlement(self, txn: Transaction, exc: AppError) -> None:
        """Reject a transaction whose settlement raised, and tell its owner."""
        logger.error("Settlement failed: txn=%s code=%d %s", txn.id, exc.code, exc.message)
        if not txn.is_terminal:
            self._transition(txn, TransactionStatus.REJECTED, reason=exc.message)
        if txn.is_payment:
            publishers.payment_failed(self._hub, txn)
        else:
            publishers.withdrawal_failed(self._hub, txn)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def initiate_payment(
        self,
        client_id: str,
        listing_id: str,
        operator: str | None = None,
        payer_number: str | None = None,
        amount: int | None = None,
        notes: str = "",
        confirm_code: str | None = None,
        idempotency_key: str | None = None,
    ) -> PaymentOutcome:
        """Validate, ask the policy, and record the payment it accepts.

        A rejected verification code is a soft failure: success=False and no
        transaction is created. Replaying an idempotency key returns the
        transaction the first request created.
        """
        if idempotency_key is not None:
            existing_id = self._idempotency.get((client_id, idempotency_key))
            if existing_id is not None:
                existing = self._transactions[existing_id]
                if existing.listing_id != listing_id or (
                    amount is not None and amount != existing.amount
                ):
                    raise IdempotencyConflictError(idempotency_key)
                return PaymentOutcome(
                    success=True,
                    message="Payment already registered",
                    transaction=existing,
                )

        listing = self._listings.get(listing_id)
        client = self._identity.get(client_id)
        if listing.provider_id == client.id:
            raise ForbiddenError("Providers cannot pay for their own listing")
        if listing.status != ListingStatus.ACTIVE.value:
            raise ListingNotActiveError(listing.id, listing.status)
        if amount is None:
            amount = listing.price
        validate_amount(amount)
        if amount != listing.price:
            raise AmountMismatchError(amount, listing.price)

        decision = self._policy.evaluate(
            PaymentRequest(
                client_id=client.id,
                listing_id=listing.id,
                amount=amount,
                operator=operator,
                payer_number=payer_number,
                confirm_code=confirm_code,
            )
        )
        if not decision.accepted or decision.initial_status is None:
            logger.info(
                "Payment refused by %s policy: client=%s listing=%s",
                self._policy.name, client.id, listing.id,
            )
            return PaymentOutcome(
                success=False, message=decision.message, code=INVALID_VERIFICATION_CODE
            )

        commission, payout = split_amount(amount, self._commission_rate_bps)
        txn = Transaction(
            id=generate_id(PAYMENT_PREFIX),
            type=TransactionType.SERVICE_PAYMENT.value,
            status=decision.initial_status.value,
            client_id=client.id,
            provider_id=listing.provider_id,
            listing_id=listing.id,
            amount=amount,
            commission=commission,
            payout=payout,
            operator=operator,
            payer_number=payer_number,
            confirmation_code=confirm_code,
            notes=notes,
            idempotency_key=idempotency_key,
            created_at=utc_now(),
        )
        self._store(txn)
        if idempotency_key is not None:
            self._idempotency[(client.id, idempotency_key)] = txn.id
        logger.info(
            "Payment created: id=%s listing=%s amount=%d commission=%d status=%s",
            txn.id, listing.id, amount, commission, txn.status,
        )

        if decision.settle_after is not None:
            self._schedule_payment_settlement(txn, decision.settle_after)

        instructions = dict(decision.instructions)
        if instructions:
            instructions["reference"] = txn.id
        return PaymentOutcome(
            success=True, message=decision.message, transaction=txn, instructions=instructions
        )

    def confirm_payment(self, transaction_id: str, approved: bool) -> Transaction:
        """Resolve a payment waiting for out-of-band confirmation.

        Approval moves it to `pending` and schedules the usual settlement;
        refusal rejects it.
        """
        txn = self.get(transaction_id)
        if approved:
            self._transition(txn, TransactionStatus.PENDING)
            self._schedule_payment_settlement(txn, self._payment_settle_delay)
        else:
            self._transition(txn, TransactionStatus.REJECTED, reason="Payment not confirmed")
            publishers.payment_failed(self._hub, txn)
        return txn

    async def _settle_payment(self, transaction_id: str) -> None:
        txn = self._transactions[transaction_id]
        assert txn.listing_id is not None and txn.provider_id is not None

        async with self._listing_locks[txn.listing_id]:
            if txn.status != TransactionStatus.PENDING.value:
                logger.warning("Settlement pre-empted: txn=%s status=%s", txn.id, txn.status)
                return

            listing = self._listings.get(txn.listing_id)
            if listing.status != ListingStatus.ACTIVE.value:
                self._transition(
                    txn,
                    TransactionStatus.CANCELLED,
                    reason=f"Listing no longer available (status={listing.status})",
                )
                logger.warning("Settlement aborted: txn=%s listing=%s", txn.id, listing.status)
                failed = True
            else:
                async with self._identity.balance_lock(txn.provider_id):
                    self._identity.get(txn.provider_id)
                    self._listings.assign(listing.id, txn.client_id, txn.id)
                    if txn.payout > 0:
                        self._identity.apply_credit(txn.provider_id, txn.payout)
                    self._transition(txn, TransactionStatus.SETTLED)
                failed = False

        if failed:
            publishers.payment_failed(self._hub, txn)
            return

        client = self._identity.get(txn.client_id)
        provider = self._identity.get(txn.provider_id)
        publishers.payment_completed(self._hub, txn, client, provider)
        publishers.new_service_assignment(self._hub, listing, txn, client)

    # ------------------------------------------------------------------
    # Listing completion / cancellation
    # ------------------------------------------------------------------

    async def complete_service(self, listing_id: str, requester_id: str) -> Listing:
        async with self._listing_locks[listing_id]:
            self._listings.get(listing_id)
            settled = [
                t for t in self.for_listing(listing_id)
                if t.is_payment and t.status == TransactionStatus.SETTLED.value
            ]
            settled_id = settled[0].id if len(settled) == 1 else None
            listing = self._listings.complete(listing_id, requester_id, settled_id)

        provider = self._identity.get(listing.provider_id)
        client = self._identity.find(listing.client_id) if listing.client_id else None
        publishers.service_completed(self._hub, listing, provider, client)
        return listing

    async def cancel(self, listing_id: str, requester_id: str) -> tuple[Listing, list[Transaction]]:
        """Cancel the listing and every non-terminal payment attached to it."""
        async with self._listing_locks[listing_id]:
            before = self._listings.get(listing_id)
            parties = {before.provider_id, before.client_id}
            listing = self._listings.cancel(listing_id, requester_id)

            cancelled: list[Transaction] = []
            for txn in self.for_listing(listing_id):
                if not txn.is_terminal:
                    self._transition(txn, TransactionStatus.CANCELLED, reason="Listing cancelled")
                    parties.add(txn.client_id)
                    cancelled.append(txn)

        recipients = [uid for uid in parties if uid and uid != requester_id]
        publishers.service_cancelled(
            self._hub, listing, requester_id, [t.id for t in cancelled], recipients
        )
        return listing, cancelled

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------

    def withdraw(
        self,
        user_id: str,
        amount: int,
        operator: str | None = None,
        withdrawal_number: str | None = None,
    ) -> Transaction:
        """Record a withdrawal and schedule its settlement.

        Funds already promised to earlier pending withdrawals are not
        available, so concurrent requests can never over-commit the balance.
        """
        user = self._identity.get(user_id)
        validate_amount(amount)
        available = user.balance - self._pending_withdrawals.get(user_id, 0)
        if available < amount:
            raise InsufficientBalanceError(required=amount, available=available)

        txn = Transaction(
            id=generate_id(WITHDRAWAL_PREFIX),
            type=TransactionType.WITHDRAWAL.value,
            status=TransactionStatus.PENDING.value,
            client_id=user.id,
            amount=amount,
            operator=operator,
            payer_number=withdrawal_number,
            created_at=utc_now(),
        )
        self._store(txn)
        self._pending_withdrawals[user.id] += amount
        logger.info("Withdrawal created: id=%s user=%s amount=%d", txn.id, user.id, amount)

        async def _settle() -> None:
            try:
                await self._settle_withdrawal(txn.id)
            except AppError as exc:
                self._fail_settlement(txn, exc)

        self._scheduler.call_later(self._withdrawal_settle_delay, _settle, name=f"settle-{txn.id}")
        return txn

    async def _settle_withdrawal(self, transaction_id: str) -> None:
        txn = self._transactions[transaction_id]
        new_balance: int | None = None

        async with self._identity.balance_lock(txn.client_id):
            if txn.status != TransactionStatus.PENDING.value:
                return
            self._pending_withdrawals[txn.client_id] -= txn.amount
            try:
                new_balance = self._identity.apply_debit(txn.client_id, txn.amount)
            except InsufficientBalanceError as exc:
                self._transition(txn, TransactionStatus.REJECTED, reason=exc.message)
            else:
                self._transition(txn, TransactionStatus.SETTLED)

        if new_balance is None:
            logger.warning("Withdrawal rejected at settlement: txn=%s", txn.id)
            publishers.withdrawal_failed(self._hub, txn)
        else:
            publishers.withdrawal_completed(self._hub, txn, new_balance)
