"""Process-wide wiring of the stores, the transaction engine and the hub.

Each store is built once and handed to its dependants; nothing else holds
entity maps. Routers reach the instance through the `get_marketplace`
FastAPI dependency, and tests swap it with `set_marketplace`.
"""

from dataclasses import dataclass

from config.settings import Settings, settings
from src.sm_common.scheduler import AsyncioScheduler, Scheduler
from src.sm_gateway.user.store import IdentityStore
from src.sm_listing.infrastructure.store import ListingStore
from src.sm_messaging.infrastructure.store import ConversationStore
from src.sm_payment.domain.policy import PaymentPolicy, build_payment_policy
from src.sm_payment.engine.engine import TransactionEngine
from src.sm_realtime.hub import NotificationHub
from src.sm_realtime.presence import PresenceTracker


@dataclass
class Marketplace:
    scheduler: Scheduler
    identity: IdentityStore
    listings: ListingStore
    engine: TransactionEngine
    conversations: ConversationStore
    hub: NotificationHub
    presence: PresenceTracker


def build_marketplace(
    config: Settings | None = None,
    scheduler: Scheduler | None = None,
    policy: PaymentPolicy | None = None,
) -> Marketplace:
    cfg = config or settings
    sched = scheduler or AsyncioScheduler()
    identity = IdentityStore(
        initial_rating=cfg.INITIAL_RATING,
        max_rating=cfg.MAX_RATING,
        rating_increment=cfg.RATING_INCREMENT,
        bcrypt_rounds=cfg.BCRYPT_ROUNDS,
    )
    listings = ListingStore(identity)
    hub = NotificationHub(queue_size=cfg.SESSION_QUEUE_SIZE)
    engine = TransactionEngine(
        identity=identity,
        listings=listings,
        hub=hub,
        scheduler=sched,
        policy=policy or build_payment_policy(cfg),
        commission_rate_bps=cfg.COMMISSION_RATE_BPS,
        payment_settle_delay=cfg.PAYMENT_SETTLE_DELAY_SECONDS,
        withdrawal_settle_delay=cfg.WITHDRAWAL_SETTLE_DELAY_SECONDS,
    )
    return Marketplace(
        scheduler=sched,
        identity=identity,
        listings=listings,
        engine=engine,
        conversations=ConversationStore(identity, listings),
        hub=hub,
        presence=PresenceTracker(identity),
    )


_marketplace: Marketplace | None = None


def get_marketplace() -> Marketplace:
    global _marketplace  # noqa: PLW0603
    if _marketplace is None:
        _marketplace = build_marketplace()
    return _marketplace


def set_marketplace(marketplace: Marketplace | None) -> None:
    """Replace the process-wide instance (None rebuilds lazily on next use)."""
    global _marketplace  # noqa: PLW0603
    _marketplace = marketplace
