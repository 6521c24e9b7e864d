"""ListingApplicationService — thin composition layer over ListingStore.

Lifecycle changes that involve payments (complete, cancel) go through the
TransactionEngine; everything else is a direct store call plus schema
conversion.
"""

from pydantic import BaseModel

from src.marketplace import Marketplace
from src.sm_listing.application.schemas import (
    CreateListingRequest,
    ListingOut,
    UpdateListingRequest,
)
from src.sm_listing.domain.models import Listing
from src.sm_payment.application.schemas import TransactionOut


class CancelListingResponse(BaseModel):
    listing: ListingOut
    cancelled_transactions: list[TransactionOut]


class ListingApplicationService:
    def __init__(self, market: Marketplace) -> None:
        self._market = market

    def _out(self, listing: Listing) -> ListingOut:
        provider = self._market.identity.find(listing.provider_id)
        return ListingOut.from_domain(
            listing,
            provider_name=provider.full_name if provider else None,
            provider_rating=provider.rating if provider else None,
        )

    def search(
        self,
        category: str | None,
        location: str | None,
        search: str | None,
        min_price: int | None,
        max_price: int | None,
    ) -> list[ListingOut]:
        listings = self._market.listings.search(
            category=category,
            location=location,
            text=search,
            min_price=min_price,
            max_price=max_price,
        )
        return [self._out(item) for item in listings]

    def get(self, listing_id: str) -> ListingOut:
        return self._out(self._market.listings.record_view(listing_id))

    def create(self, provider_id: str, body: CreateListingRequest) -> ListingOut:
        listing = self._market.listings.create(
            provider_id=provider_id,
            title=body.title,
            description=body.description,
            category=body.category,
            location=body.location,
            price=body.price,
            images=body.images,
        )
        return self._out(listing)

    def update(self, listing_id: str, requester_id: str, body: UpdateListingRequest) -> ListingOut:
        patch = body.model_dump(exclude_unset=True)
        return self._out(self._market.listings.edit(listing_id, requester_id, patch))

    async def complete(self, listing_id: str, requester_id: str) -> ListingOut:
        listing = await self._market.engine.complete_service(listing_id, requester_id)
        return self._out(listing)

    async def cancel(self, listing_id: str, requester_id: str) -> CancelListingResponse:
        listing, cancelled = await self._market.engine.cancel(listing_id, requester_id)
        return CancelListingResponse(
            listing=self._out(listing),
            cancelled_transactions=[TransactionOut.from_domain(t) for t in cancelled],
        )

    def list_for_user(self, user_id: str, kind: str) -> list[ListingOut]:
        return [self._out(item) for item in self._market.listings.list_for_user(user_id, kind)]
