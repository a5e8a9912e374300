"""Flight search router."""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from voyage.services.amadeus_client import AmadeusError
from voyage.services.flight_service import FlightSearchQuery, flight_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search")
async def search_flights(
    origin: str | None = Query(None, alias="originLocationCode"),
    destination: str | None = Query(None, alias="destinationLocationCode"),
    departure_date: str | None = Query(None, alias="departureDate"),
    return_date: str | None = Query(None, alias="returnDate"),
    adults: str = Query("1"),
    currency_code: str = Query("INR", alias="currencyCode"),
    limit: str = Query("10"),
):
    if not origin or not destination or not departure_date:
        return JSONResponse(
            status_code=400,
            content={
                "ok": False,
                "error": "originLocationCode, destinationLocationCode and departureDate are required",
            },
        )

    query = FlightSearchQuery(
        origin=origin,
        destination=destination,
        departure_date=departure_date,
        return_date=return_date or None,
        adults=adults,
        currency_code=currency_code,
        limit=limit,
    )
    try:
        return await flight_service.search(query)
    except AmadeusError as e:
        logger.error(f"Flight search failed: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": e.message})
