"""Unit tests for ListingStore: lifecycle, ownership and search."""

import pytest

from src.marketplace import Marketplace
from src.sm_common.errors import (
    ForbiddenError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    MissingSettlementError,
    UserNotFoundError,
)
from src.sm_gateway.user.models import User
from src.sm_listing.domain.models import Listing
from src.sm_listing.infrastructure.store import ListingStore


def _create(store: ListingStore, provider_id: str, **kwargs: object) -> Listing:
    fields: dict[str, object] = {
        "title": "Garden care",
        "description": "Mowing and hedges",
        "category": "home",
        "location": "Cotonou",
        "price": 5000,
    }
    fields.update(kwargs)
    return store.create(provider_id=provider_id, **fields)  # type: ignore[arg-type]


class TestCreate:
    def test_defaults(self, listing: Listing, provider: User) -> None:
        assert listing.id.startswith("SRV_")
        assert listing.status == "active"
        assert listing.provider_id == provider.id
        assert listing.client_id is None
        assert listing.view_count == 0

    def test_unknown_provider(self, market: Marketplace) -> None:
        with pytest.raises(UserNotFoundError):
            _create(market.listings, "USR_missing")

    def test_price_must_be_positive(self, market: Marketplace, provider: User) -> None:
        with pytest.raises(ValueError):
            _create(market.listings, provider.id, price=0)

    def test_get_missing(self, market: Marketplace) -> None:
        with pytest.raises(ListingNotFoundError):
            market.listings.get("SRV_missing")

    def test_record_view(self, market: Marketplace, listing: Listing) -> None:
        market.listings.record_view(listing.id)
        market.listings.record_view(listing.id)
        assert listing.view_count == 2


class TestEdit:
    def test_owner_can_edit(self, market: Marketplace, listing: Listing, provider: User) -> None:
        market.listings.edit(listing.id, provider.id, {"title": "Pipes", "price": 1500})
        assert listing.title == "Pipes"
        assert listing.price == 1500

    def test_non_owner_forbidden(self, market: Marketplace, listing: Listing, buyer: User) -> None:
        with pytest.raises(ForbiddenError):
            market.listings.edit(listing.id, buyer.id, {"title": "Mine now"})

    def test_status_is_not_editable(
        self, market: Marketplace, listing: Listing, provider: User
    ) -> None:
        market.listings.edit(listing.id, provider.id, {"status": "completed", "client_id": "x"})
        assert listing.status == "active"
        assert listing.client_id is None


class TestLifecycle:
    def test_assign_sets_client(self, market: Marketplace, listing: Listing, buyer: User) -> None:
        assert market.listings.assign(listing.id, buyer.id, "TXN_1") is True
        assert listing.status == "in_progress"
        assert listing.client_id == buyer.id
        assert listing.transaction_id == "TXN_1"

    def test_assign_is_noop_when_not_active(
        self, market: Marketplace, listing: Listing, provider: User, buyer: User
    ) -> None:
        market.listings.cancel(listing.id, provider.id)
        assert market.listings.assign(listing.id, buyer.id, "TXN_1") is False
        assert listing.status == "cancelled"
        assert listing.client_id is None

    def test_complete_requires_settlement(
        self, market: Marketplace, listing: Listing, provider: User, buyer: User
    ) -> None:
        market.listings.assign(listing.id, buyer.id, "TXN_1")
        with pytest.raises(MissingSettlementError):
            market.listings.complete(listing.id, provider.id, None)

    def test_complete_by_outsider_forbidden(
        self, market: Marketplace, listing: Listing, buyer: User
    ) -> None:
        outsider = market.identity.register("Eve", "+22990000099", "secret9", "client")
        market.listings.assign(listing.id, buyer.id, "TXN_1")
        with pytest.raises(ForbiddenError):
            market.listings.complete(listing.id, outsider.id, "TXN_1")

    def test_complete_bumps_provider_reputation(
        self, market: Marketplace, listing: Listing, provider: User, buyer: User
    ) -> None:
        market.listings.assign(listing.id, buyer.id, "TXN_1")
        market.listings.complete(listing.id, buyer.id, "TXN_1")
        assert listing.status == "completed"
        assert listing.completed_at is not None
        assert listing.client_id == buyer.id
        assert provider.completed_services == 1

    def test_complete_active_listing_is_invalid_transition(
        self, market: Marketplace, listing: Listing, provider: User
    ) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            market.listings.complete(listing.id, provider.id, "TXN_1")

    def test_terminal_listing_cannot_be_cancelled(
        self, market: Marketplace, listing: Listing, provider: User
    ) -> None:
        market.listings.cancel(listing.id, provider.id)
        assert listing.is_terminal
        with pytest.raises(InvalidStatusTransitionError):
            market.listings.cancel(listing.id, provider.id)

    def test_cancel_in_progress_clears_client(
        self, market: Marketplace, listing: Listing, buyer: User
    ) -> None:
        market.listings.assign(listing.id, buyer.id, "TXN_1")
        market.listings.cancel(listing.id, buyer.id)
        assert listing.status == "cancelled"
        assert listing.client_id is None


class TestSearch:
    @pytest.fixture
    def catalogue(self, market: Marketplace, provider: User) -> list[Listing]:
        store = market.listings
        return [
            _create(store, provider.id, title="Plumbing", category="home", price=1000),
            _create(store, provider.id, title="Math tutoring", category="education",
                    location="Porto-Novo", price=3000),
            _create(store, provider.id, title="Wiring", category="home",
                    description="Electrical plumbing-free work", price=8000),
        ]

    def test_newest_first(self, market: Marketplace, catalogue: list[Listing]) -> None:
        assert [item.id for item in market.listings.search()] == [
            item.id for item in reversed(catalogue)
        ]

    def test_category_all_disables_filter(
        self, market: Marketplace, catalogue: list[Listing]
    ) -> None:
        assert len(market.listings.search(category="all")) == 3
        assert len(market.listings.search(category="home")) == 2

    def test_location_case_insensitive_substring(
        self, market: Marketplace, catalogue: list[Listing]
    ) -> None:
        results = market.listings.search(location="porto")
        assert [item.title for item in results] == ["Math tutoring"]

    def test_text_matches_title_or_description(
        self, market: Marketplace, catalogue: list[Listing]
    ) -> None:
        titles = {item.title for item in market.listings.search(text="PLUMBING")}
        assert titles == {"Plumbing", "Wiring"}

    def test_price_bounds_inclusive(self, market: Marketplace, catalogue: list[Listing]) -> None:
        titles = {item.title for item in market.listings.search(min_price=1000, max_price=3000)}
        assert titles == {"Plumbing", "Math tutoring"}

    def test_only_active_listed(
        self, market: Marketplace, catalogue: list[Listing], provider: User
    ) -> None:
        market.listings.cancel(catalogue[0].id, provider.id)
        assert catalogue[0].id not in {item.id for item in market.listings.search()}


class TestListForUser:
    def test_provided_and_requested(
        self, market: Marketplace, listing: Listing, provider: User, buyer: User
    ) -> None:
        market.listings.assign(listing.id, buyer.id, "TXN_1")
        assert market.listings.list_for_user(provider.id, "provided") == [listing]
        assert market.listings.list_for_user(provider.id, "requested") == []
        assert market.listings.list_for_user(buyer.id, "requested") == [listing]
        assert market.listings.list_for_user(buyer.id) == [listing]
