"""Geocoding routes for the wizards' location step.

  GET /search?q=          - address text → coordinates
  GET /reverse?lat=&lng=  - coordinates → address

Both always answer 200; a failed lookup has `confidence: 0`.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.auth.deps import get_current_user
from app.context import UIContext, get_ui_context
from app.models.user import User
from app.services.geocoding import GeocodingClient, get_geocoding_client

router = APIRouter()


class GeocodeOut(BaseModel):
    latitude: float | None
    longitude: float | None
    formatted_address: str | None
    street: str | None
    city: str | None
    province: str | None
    postal_code: str | None
    country: str
    confidence: float


@router.get("/search", response_model=GeocodeOut)
async def search(
    q: str = Query(..., min_length=3, max_length=200),
    ui: UIContext = Depends(get_ui_context),
    client: GeocodingClient = Depends(get_geocoding_client),
    _user: User = Depends(get_current_user),
):
    client.language = ui.language
    result = await client.geocode(q)
    return GeocodeOut(**result.to_dict())


@router.get("/reverse", response_model=GeocodeOut)
async def reverse(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    ui: UIContext = Depends(get_ui_context),
    client: GeocodingClient = Depends(get_geocoding_client),
    _user: User = Depends(get_current_user),
):
    client.language = ui.language
    result = await client.reverse_geocode(lat, lng)
    return GeocodeOut(**result.to_dict())
