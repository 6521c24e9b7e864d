"""StatsService — platform-wide and per-caller aggregates.

Read-only; computed on demand from the stores' public query methods.
"""

from pydantic import BaseModel

from src.marketplace import Marketplace
from src.sm_common.enums import ListingStatus, TransactionStatus


class PlatformStats(BaseModel):
    total_users: int
    total_listings: int
    active_listings: int
    completed_listings: int
    settled_payments: int
    total_commission: int
    pending_transactions: int


class UserStats(BaseModel):
    total_earnings: int
    total_spent: int
    completed_as_provider: int
    completed_as_client: int
    in_progress_as_provider: int
    in_progress_as_client: int
    unread_messages: int


class StatsResponse(BaseModel):
    platform: PlatformStats
    user: UserStats


class StatsService:
    def __init__(self, market: Marketplace) -> None:
        self._market = market

    def platform(self) -> PlatformStats:
        listings = self._market.listings.all()
        txns = self._market.engine.all()
        settled = [
            t for t in txns if t.is_payment and t.status == TransactionStatus.SETTLED.value
        ]
        return PlatformStats(
            total_users=self._market.identity.count(),
            total_listings=len(listings),
            active_listings=sum(1 for s in listings if s.status == ListingStatus.ACTIVE.value),
            completed_listings=sum(
                1 for s in listings if s.status == ListingStatus.COMPLETED.value
            ),
            settled_payments=len(settled),
            total_commission=sum(t.commission for t in settled),
            pending_transactions=sum(
                1 for t in txns if t.status == TransactionStatus.PENDING.value
            ),
        )

    def for_user(self, user_id: str) -> UserStats:
        settled = [
            t for t in self._market.engine.all()
            if t.is_payment and t.status == TransactionStatus.SETTLED.value
        ]
        listings = self._market.listings.list_for_user(user_id)
        provided = [s for s in listings if s.provider_id == user_id]
        requested = [s for s in listings if s.client_id == user_id]
        completed, in_progress = ListingStatus.COMPLETED.value, ListingStatus.IN_PROGRESS.value
        return UserStats(
            total_earnings=sum(t.payout for t in settled if t.provider_id == user_id),
            total_spent=sum(t.amount for t in settled if t.client_id == user_id),
            completed_as_provider=sum(1 for s in provided if s.status == completed),
            completed_as_client=sum(1 for s in requested if s.status == completed),
            in_progress_as_provider=sum(1 for s in provided if s.status == in_progress),
            in_progress_as_client=sum(1 for s in requested if s.status == in_progress),
            unread_messages=self._market.conversations.unread_total(user_id),
        )

    def stats(self, user_id: str) -> StatsResponse:
        return StatsResponse(platform=self.platform(), user=self.for_user(user_id))
