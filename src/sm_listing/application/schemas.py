"""Pydantic schemas for sm_listing API requests and responses."""

from pydantic import BaseModel, Field

from src.sm_common.datetime_utils import iso_or_none
from src.sm_listing.domain.models import Listing


class CreateListingRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field("", max_length=5000)
    category: str = Field(..., min_length=1, max_length=64)
    location: str = Field(..., min_length=1, max_length=120)
    price: int = Field(..., gt=0, description="Price in the smallest currency unit")
    images: list[str] = Field(default_factory=list)


class UpdateListingRequest(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, min_length=1, max_length=64)
    location: str | None = Field(None, min_length=1, max_length=120)
    price: int | None = Field(None, gt=0)
    images: list[str] | None = None


class ListingOut(BaseModel):
    id: str
    provider_id: str
    provider_name: str | None = None
    provider_rating: float | None = None
    title: str
    description: str
    category: str
    location: str
    price: int
    images: list[str]
    status: str
    client_id: str | None
    transaction_id: str | None
    view_count: int
    created_at: str | None
    updated_at: str | None
    completed_at: str | None

    @classmethod
    def from_domain(
        cls,
        listing: Listing,
        provider_name: str | None = None,
        provider_rating: float | None = None,
    ) -> "ListingOut":
        return cls(
            id=listing.id,
            provider_id=listing.provider_id,
            provider_name=provider_name,
            provider_rating=provider_rating,
            title=listing.title,
            description=listing.description,
            category=listing.category,
            location=listing.location,
            price=listing.price,
            images=list(listing.images),
            status=listing.status,
            client_id=listing.client_id,
            transaction_id=listing.transaction_id,
            view_count=listing.view_count,
            created_at=iso_or_none(listing.created_at),
            updated_at=iso_or_none(listing.updated_at),
            completed_at=iso_or_none(listing.completed_at),
        )
