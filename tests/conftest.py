"""Shared test fixtures.

Settings are read from the environment at import time, so the overrides
below must be in place before anything under src/ is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.marketplace import Marketplace, build_marketplace, set_marketplace  # noqa: E402
from src.sm_common.enums import UserRole  # noqa: E402
from src.sm_common.scheduler import VirtualScheduler  # noqa: E402
from src.sm_gateway.user.models import User  # noqa: E402
from src.sm_listing.domain.models import Listing  # noqa: E402


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def market(scheduler: VirtualScheduler) -> Marketplace:
    return build_marketplace(scheduler=scheduler)


@pytest.fixture
def provider(market: Marketplace) -> User:
    return market.identity.register("Awa Provider", "+22990000001", "secret1", UserRole.PROVIDER)


@pytest.fixture
def buyer(market: Marketplace) -> User:
    return market.identity.register("Bio Client", "+22990000002", "secret2", UserRole.CLIENT)


@pytest.fixture
def listing(market: Marketplace, provider: User) -> Listing:
    return market.listings.create(
        provider_id=provider.id,
        title="Plumbing repair",
        description="Leaks, taps and pipes",
        category="home",
        location="Cotonou",
        price=1000,
    )


@pytest.fixture
async def client(market: Marketplace) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh marketplace on a virtual clock."""
    set_marketplace(market)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    set_marketplace(None)
