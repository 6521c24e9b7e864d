"""ListingStore — in-memory owner of listings and their lifecycle.

Primary index by id plus a secondary index by provider. Every state
transition runs as one synchronous block, so a concurrent reader on the
event loop never observes status and its dependent fields half-applied.
"""

import logging
from collections import defaultdict
from typing import Any

from src.sm_common.datetime_utils import utc_now
from src.sm_common.enums import ListingStatus
from src.sm_common.errors import (
    ForbiddenError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    MissingSettlementError,
)
from src.sm_common.id_generator import LISTING_PREFIX, generate_id
from src.sm_common.money import validate_amount
from src.sm_gateway.user.store import IdentityStore
from src.sm_listing.domain.models import EDITABLE_FIELDS, Listing

logger = logging.getLogger(__name__)


class ListingStore:
    def __init__(self, identity: IdentityStore) -> None:
        self._identity = identity
        self._listings: dict[str, Listing] = {}
        self._by_provider: dict[str, list[str]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    def create(
        self,
        provider_id: str,
        title: str,
        description: str,
        category: str,
        location: str,
        price: int,
        images: list[str] | None = None,
    ) -> Listing:
        self._identity.get(provider_id)
        validate_amount(price)
        now = utc_now()
        listing = Listing(
            id=generate_id(LISTING_PREFIX),
            provider_id=provider_id,
            title=title,
            description=description,
            category=category,
            location=location,
            price=price,
            images=list(images or []),
            created_at=now,
            updated_at=now,
        )
        self._listings[listing.id] = listing
        self._by_provider[provider_id].append(listing.id)
        logger.info("Listing created: id=%s provider=%s price=%d", listing.id, provider_id, price)
        return listing

    def find(self, listing_id: str) -> Listing | None:
        return self._listings.get(listing_id)

    def get(self, listing_id: str) -> Listing:
        listing = self._listings.get(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing

    def record_view(self, listing_id: str) -> Listing:
        listing = self.get(listing_id)
        listing.view_count += 1
        return listing

    def all(self) -> list[Listing]:
        return list(self._listings.values())

    # ------------------------------------------------------------------
    # Owner edits
    # ------------------------------------------------------------------

    def edit(self, listing_id: str, requester_id: str, patch: dict[str, Any]) -> Listing:
        listing = self.get(listing_id)
        if listing.provider_id != requester_id:
            raise ForbiddenError("Only the provider can edit this listing")

        changes = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS and v is not None}
        if "price" in changes:
            validate_amount(changes["price"])
        for key, value in changes.items():
            setattr(listing, key, list(value) if key == "images" else value)
        listing.updated_at = utc_now()
        return listing

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _transition(self, listing: Listing, target: ListingStatus) -> None:
        if not listing.can_transition_to(target.value):
            raise InvalidStatusTransitionError("Listing", listing.status, target.value)
        listing.status = target.value
        listing.updated_at = utc_now()

    def assign(self, listing_id: str, client_id: str, transaction_id: str) -> bool:
        """active → in_progress. Returns False (no-op) if the listing is not active."""
        listing = self.get(listing_id)
        if listing.status != ListingStatus.ACTIVE.value:
            logger.info("Assign skipped: listing=%s status=%s", listing_id, listing.status)
            return False
        self._transition(listing, ListingStatus.IN_PROGRESS)
        listing.client_id = client_id
        listing.transaction_id = transaction_id
        logger.info(
            "Listing assigned: id=%s client=%s txn=%s", listing_id, client_id, transaction_id
        )
        return True

    def complete(
        self, listing_id: str, requester_id: str, settled_transaction_id: str | None
    ) -> Listing:
        listing = self.get(listing_id)
        if not listing.is_party(requester_id):
            raise ForbiddenError("Only the provider or the assigned client can complete")
        if settled_transaction_id is None:
            raise MissingSettlementError(listing_id)

        self._transition(listing, ListingStatus.COMPLETED)
        listing.completed_at = listing.updated_at
        self._identity.record_completed_service(listing.provider_id)
        logger.info("Listing completed: id=%s by=%s", listing_id, requester_id)
        return listing

    def cancel(self, listing_id: str, requester_id: str) -> Listing:
        listing = self.get(listing_id)
        if not listing.is_party(requester_id):
            raise ForbiddenError("Only the provider or the assigned client can cancel")

        self._transition(listing, ListingStatus.CANCELLED)
        listing.client_id = None
        logger.info("Listing cancelled: id=%s by=%s", listing_id, requester_id)
        return listing

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(
        self,
        category: str | None = None,
        location: str | None = None,
        text: str | None = None,
        min_price: int | None = None,
        max_price: int | None = None,
    ) -> list[Listing]:
        """Active listings matching every given filter, newest first."""
        active = ListingStatus.ACTIVE.value
        results = [item for item in self._listings.values() if item.status == active]

        if category and category != "all":
            results = [item for item in results if item.category == category]
        if location:
            needle = location.lower()
            results = [item for item in results if needle in item.location.lower()]
        if text:
            needle = text.lower()
            results = [
                item for item in results
                if needle in item.title.lower() or needle in item.description.lower()
            ]
        if min_price is not None:
            results = [item for item in results if item.price >= min_price]
        if max_price is not None:
            results = [item for item in results if item.price <= max_price]

        return _newest_first(results)

    def list_for_user(self, user_id: str, kind: str = "all") -> list[Listing]:
        """Listings the user provides ("provided"), bought ("requested"), or both ("all")."""
        provided = [self._listings[i] for i in self._by_provider.get(user_id, [])]
        requested = [item for item in self._listings.values() if item.client_id == user_id]
        if kind == "provided":
            results = provided
        elif kind == "requested":
            results = requested
        else:
            seen = {item.id for item in provided}
            results = provided + [item for item in requested if item.id not in seen]
        return _newest_first(results)


def _newest_first(listings: list[Listing]) -> list[Listing]:
    # Stable sort over reversed insertion order: equal timestamps keep newest-created first.
    return sorted(reversed(listings), key=lambda item: item.created_at, reverse=True)
