"""Listing store Protocol — what the transaction engine needs from listings.

Unit tests may inject a fake that conforms to this Protocol.
"""

from typing import Protocol

from src.sm_listing.domain.models import Listing


class ListingStoreProtocol(Protocol):
    def find(self, listing_id: str) -> Listing | None: ...

    def get(self, listing_id: str) -> Listing: ...

    def assign(self, listing_id: str, client_id: str, transaction_id: str) -> bool: ...

    def complete(
        self, listing_id: str, requester_id: str, settled_transaction_id: str | None
    ) -> Listing: ...

    def cancel(self, listing_id: str, requester_id: str) -> Listing: ...
