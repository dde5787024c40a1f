"""
Property listing API endpoints.

Listings are not ingested from any data source; the dashboard ships with a
single demo listing.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import List

from propvest.api.sessions import SessionResponse, get_session_store, session_to_response
from propvest.calculations.analysis import FinancingAssumptions
from propvest.session import SessionStore

router = APIRouter()


class PropertyResponse(BaseModel):
    """Schema for a property listing."""

    id: str
    address: str
    city: str
    state: str
    zip: str
    price: float
    beds: int
    baths: float
    sqft: int
    image_url: str
    description: str


class PropertyListResponse(BaseModel):
    """Response for listing properties."""

    properties: List[PropertyResponse]
    total: int


DEMO_LISTING = PropertyResponse(
    id="1",
    address="1204 Willow Creek Dr",
    city="Austin",
    state="TX",
    zip="78741",
    price=450000,
    beds=4,
    baths=3,
    sqft=2400,
    image_url=(
        "https://images.unsplash.com/photo-1600596542815-37a9a22110dl"
        "?ixlib=rb-4.0.3&auto=format&fit=crop&w=2000&q=80"
    ),
    description=(
        "Beautiful modern home in the heart of Austin, perfect for short term "
        "rentals with pool access and spacious living areas."
    ),
)

LISTINGS = {DEMO_LISTING.id: DEMO_LISTING}


def get_listing(property_id: str) -> PropertyResponse:
    listing = LISTINGS.get(property_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return listing


@router.get("/", response_model=PropertyListResponse)
async def list_properties():
    """List available listings."""
    return PropertyListResponse(properties=list(LISTINGS.values()), total=len(LISTINGS))


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(property_id: str):
    """Get a listing by ID."""
    return get_listing(property_id)


@router.post("/{property_id}/sessions", response_model=SessionResponse, status_code=201)
async def start_property_session(
    property_id: str, store: SessionStore = Depends(get_session_store)
):
    """Start an analysis session priced at the listing's asking price."""
    listing = get_listing(property_id)
    session = store.create(FinancingAssumptions(purchase_price=listing.price))
    return session_to_response(session)
