"""Payment intake policies.

A policy decides, from the request alone, whether a payment is accepted and
how the resulting transaction starts its life. It never touches balances,
listings or the clock; the engine applies the decision.

  deferred      — simulated mobile money: start `pending`, settle after a delay.
  verification  — caller must present a known confirmation code; the
                  transaction waits in `awaiting_confirmation` for an
                  out-of-band confirmation, and the caller gets manual
                  payment instructions.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from config.settings import Settings
from src.sm_common.enums import TransactionStatus
from src.sm_common.money import amount_to_display


@dataclass(frozen=True)
class PaymentRequest:
    client_id: str
    listing_id: str
    amount: int
    operator: str | None = None
    payer_number: str | None = None
    confirm_code: str | None = None


@dataclass(frozen=True)
class PaymentDecision:
    accepted: bool
    message: str
    initial_status: TransactionStatus | None = None
    settle_after: float | None = None   # seconds; None means no automatic settlement
    instructions: Mapping[str, object] = field(default_factory=dict)


class PaymentPolicy(Protocol):
    name: str

    def evaluate(self, request: PaymentRequest) -> PaymentDecision: ...


class DeferredSettlementPolicy:
    name = "deferred"

    def __init__(self, settle_delay: float = 2.0) -> None:
        self._settle_delay = settle_delay

    def evaluate(self, request: PaymentRequest) -> PaymentDecision:
        return PaymentDecision(
            accepted=True,
            message="Payment is being processed",
            initial_status=TransactionStatus.PENDING,
            settle_after=self._settle_delay,
        )


class VerificationGatedPolicy:
    name = "verification"

    def __init__(self, confirm_codes: Iterable[str], accounts: Mapping[str, str]) -> None:
        self._confirm_codes = frozenset(confirm_codes)
        self._accounts = dict(accounts)

    def evaluate(self, request: PaymentRequest) -> PaymentDecision:
        if request.confirm_code not in self._confirm_codes:
            return PaymentDecision(accepted=False, message="Invalid confirmation code")

        if request.operator in self._accounts:
            accounts = {request.operator: self._accounts[request.operator]}
        else:
            accounts = dict(self._accounts)
        targets = ", ".join(f"{op} {number}" for op, number in accounts.items())
        return PaymentDecision(
            accepted=True,
            message="Payment registered, awaiting manual confirmation",
            initial_status=TransactionStatus.AWAITING_CONFIRMATION,
            instructions={
                "accounts": accounts,
                "amount": request.amount,
                "text": (
                    f"Send {amount_to_display(request.amount)} to {targets} "
                    "and keep the operator's confirmation SMS."
                ),
            },
        )


def build_payment_policy(settings: Settings) -> PaymentPolicy:
    """Select the policy named by PAYMENT_POLICY."""
    if settings.PAYMENT_POLICY == DeferredSettlementPolicy.name:
        return DeferredSettlementPolicy(settings.PAYMENT_SETTLE_DELAY_SECONDS)
    if settings.PAYMENT_POLICY == VerificationGatedPolicy.name:
        return VerificationGatedPolicy(
            settings.PAYMENT_CONFIRM_CODES, settings.MOBILE_MONEY_ACCOUNTS
        )
    raise ValueError(f"Unknown PAYMENT_POLICY: {settings.PAYMENT_POLICY!r}")
