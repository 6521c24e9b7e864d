"""Unit tests for StatsService aggregates."""

from src.marketplace import Marketplace
from src.sm_common.scheduler import VirtualScheduler
from src.sm_gateway.user.models import User
from src.sm_listing.domain.models import Listing
from src.sm_stats.application.service import StatsService


async def test_platform_and_user_aggregates(
    market: Marketplace,
    scheduler: VirtualScheduler,
    provider: User,
    buyer: User,
    listing: Listing,
) -> None:
    market.listings.create(provider.id, "Second", "", "home", "Cotonou", 2000)
    market.engine.initiate_payment(buyer.id, listing.id, "MTN", "+22990000002")
    await scheduler.advance(2.0)
    await market.engine.complete_service(listing.id, buyer.id)
    conv = market.conversations.open_or_get(buyer.id, provider.id)
    market.conversations.post_message(conv.id, buyer.id, "thanks!")

    stats = StatsService(market).stats(provider.id)

    assert stats.platform.total_users == 2
    assert stats.platform.total_listings == 2
    assert stats.platform.active_listings == 1
    assert stats.platform.completed_listings == 1
    assert stats.platform.settled_payments == 1
    assert stats.platform.total_commission == 100
    assert stats.platform.pending_transactions == 0

    assert stats.user.total_earnings == 900
    assert stats.user.total_spent == 0
    assert stats.user.completed_as_provider == 1
    assert stats.user.unread_messages == 1

    buyer_stats = StatsService(market).for_user(buyer.id)
    assert buyer_stats.total_spent == 1000
    assert buyer_stats.completed_as_client == 1
    assert buyer_stats.unread_messages == 0


def test_empty_platform(market: Marketplace) -> None:
    stats = StatsService(market).platform()
    assert stats.total_users == 0
    assert stats.total_commission == 0
