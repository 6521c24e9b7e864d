"""Domain models for sm_listing — pure dataclasses, no framework dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.sm_common.enums import ListingStatus

# status -> statuses reachable from it; anything absent is terminal
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    ListingStatus.ACTIVE.value: frozenset(
        {ListingStatus.IN_PROGRESS.value, ListingStatus.CANCELLED.value}
    ),
    ListingStatus.IN_PROGRESS.value: frozenset(
        {ListingStatus.COMPLETED.value, ListingStatus.CANCELLED.value}
    ),
}

EDITABLE_FIELDS = frozenset({"title", "description", "category", "location", "price", "images"})


@dataclass
class Listing:
    id: str
    provider_id: str
    title: str
    description: str
    category: str
    location: str
    price: int                          # smallest currency unit, > 0
    images: list[str] = field(default_factory=list)
    status: str = ListingStatus.ACTIVE.value
    client_id: str | None = None        # set iff in_progress or completed
    transaction_id: str | None = None
    view_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status not in ALLOWED_TRANSITIONS

    def can_transition_to(self, target: str) -> bool:
        return target in ALLOWED_TRANSITIONS.get(self.status, frozenset())

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.provider_id, self.client_id)
