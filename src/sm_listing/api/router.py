"""sm_listing REST endpoints.

GET  /listings                      — public search over active listings
GET  /listings/{listing_id}         — public detail (counts a view)
POST /listings                      — create (provider)
PUT  /listings/{listing_id}         — edit (owner only)
POST /listings/{listing_id}/complete
POST /listings/{listing_id}/cancel
GET  /user/services                 — caller's listings (provided / requested)
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request, status

from src.marketplace import Marketplace, get_marketplace
from src.sm_common.response import ApiResponse, success_response
from src.sm_gateway.auth.dependencies import get_current_user
from src.sm_gateway.user.models import User
from src.sm_listing.application.schemas import CreateListingRequest, UpdateListingRequest
from src.sm_listing.application.service import ListingApplicationService

router = APIRouter(tags=["listings"])


def get_listing_service(
    market: Annotated[Marketplace, Depends(get_marketplace)],
) -> ListingApplicationService:
    return ListingApplicationService(market)


Service = Annotated[ListingApplicationService, Depends(get_listing_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.get("/listings")
async def search_listings(
    request: Request,
    service: Service,
    category: str | None = Query(None, description="Exact category; 'all' disables the filter"),
    location: str | None = Query(None, description="Case-insensitive substring"),
    search: str | None = Query(None, description="Substring of title or description"),
    min_price: int | None = Query(None, alias="minPrice", ge=0),
    max_price: int | None = Query(None, alias="maxPrice", ge=0),
) -> ApiResponse:
    items = service.search(category, location, search, min_price, max_price)
    resp = success_response([i.model_dump() for i in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/listings/{listing_id}")
async def get_listing(listing_id: str, request: Request, service: Service) -> ApiResponse:
    resp = success_response(service.get(listing_id).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/listings", status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: CreateListingRequest,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = service.create(current_user.id, body)
    resp = success_response(data.model_dump(), message="Listing created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/listings/{listing_id}")
async def update_listing(
    listing_id: str,
    body: UpdateListingRequest,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = service.update(listing_id, current_user.id, body)
    resp = success_response(data.model_dump(), message="Listing updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/listings/{listing_id}/complete")
async def complete_listing(
    listing_id: str,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = await service.complete(listing_id, current_user.id)
    resp = success_response(data.model_dump(), message="Service marked as completed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/listings/{listing_id}/cancel")
async def cancel_listing(
    listing_id: str,
    request: Request,
    current_user: CurrentUser,
    service: Service,
) -> ApiResponse:
    data = await service.cancel(listing_id, current_user.id)
    resp = success_response(data.model_dump(), message="Service cancelled")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/user/services")
async def list_my_listings(
    request: Request,
    current_user: CurrentUser,
    service: Service,
    kind: Literal["all", "provided", "requested"] = Query("all", alias="type"),
) -> ApiResponse:
    items = service.list_for_user(current_user.id, kind)
    resp = success_response([i.model_dump() for i in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
