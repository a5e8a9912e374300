"""Hotel search router — Amadeus hotel offers behind the request cache."""


from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from voyage.config import settings
from voyage.rate_limit import limiter
from voyage.services.hotel_service import HotelSearchQuery, hotel_service


router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ok": True, "route": "/api/hotels"}


@router.get("/search")
@limiter.limit(settings.hotel_rate_limit)
async def search_hotels(
    request: Request,
    check_in_date: str | None = Query(None, alias="checkInDate"),
    check_out_date: str | None = Query(None, alias="checkOutDate"),
    adults: str = Query("1"),
    city_code: str | None = Query(None, alias="cityCode"),
    latitude: str | None = Query(None),
    longitude: str | None = Query(None),
    radius: str | None = Query(None),
    radius_unit: str | None = Query(None, alias="radiusUnit"),
    currency_code: str | None = Query(None, alias="currencyCode"),
    page_limit: str | None = Query(None, alias="page[limit]"),
    page_offset: str | None = Query(None, alias="page[offset]"),
    hotel_ids: str | None = Query(None, alias="hotelIds"),
    strict_city: str = Query("0", alias="strictCity"),
):
    """Hotel offers for a city, a coordinate pair or explicit hotel ids."""
    if not check_in_date or not check_out_date:
        return JSONResponse(
            status_code=400, content={"error": "checkInDate and checkOutDate are required"}
        )

    query = HotelSearchQuery(
        check_in_date=check_in_date,
        check_out_date=check_out_date,
        adults=adults,
        city_code=city_code,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        radius_unit=radius_unit,
        currency_code=currency_code,
        page_limit=page_limit,
        page_offset=page_offset,
        hotel_ids=[h.strip() for h in (hotel_ids or "").split(",") if h.strip()],
        strict_city=strict_city == "1",
    )
    if not query.has_location:
        return JSONResponse(
            status_code=400,
            content={"error": "Provide cityCode, latitude and longitude, or hotelIds"},
        )

    return await hotel_service.search(query)


@router.get("/offer/{offer_id}")
async def get_offer(offer_id: str):
    return await hotel_service.get_offer(offer_id)
