"""
Address search and quoting
==========================

GET  /api/v1/geo/search?q=...  -- up to five address suggestions
POST /api/v1/quotes            -- distance, price and route for a trip
"""

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import get_actor, get_geo_client, get_pricing
from src.api.middleware import limiter
from src.api.schemas import PlaceResponse, QuoteRequest, QuoteResponse
from src.config import settings
from src.domain.pricing import PricingEngine
from src.infrastructure.geo_client import GeoClient
from src.services.orders import quote
from src.services.session import SessionContext

router = APIRouter(tags=["geo"])


@router.get(
    "/geo/search",
    response_model=list[PlaceResponse],
    summary="Search addresses",
    description="Queries shorter than three characters return no results.",
)
@limiter.limit(settings.api_rate_limit)
async def search_addresses(
    request: Request,
    q: str = Query("", max_length=200),
    actor: SessionContext = Depends(get_actor),
    geo: GeoClient = Depends(get_geo_client),
):
    return await geo.search(q)


@router.post("/quotes", response_model=QuoteResponse, summary="Quote a delivery")
@limiter.limit(settings.api_rate_limit)
async def create_quote(
    request: Request,
    body: QuoteRequest,
    actor: SessionContext = Depends(get_actor),
    geo: GeoClient = Depends(get_geo_client),
    pricing: PricingEngine = Depends(get_pricing),
):
    q = await quote(
        geo, pricing, body.pickup_location, body.dropoff_location, body.vehicle
    )
    return QuoteResponse.from_quote(q)
