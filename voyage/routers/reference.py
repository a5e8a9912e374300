"""City autocomplete and exchange rates."""

import logging

from fastapi import APIRouter, Query

from voyage.services.amadeus_client import AmadeusError
from voyage.services.location_service import location_service

logger = logging.getLogger(__name__)

router = APIRouter()

# INR-anchored reference rates (1 INR in each currency)
FX_RATES = {
    "INR": 1,
    "USD": 0.012,
    "EUR": 0.011,
    "GBP": 0.0095,
}


@router.get("/cities")
async def search_cities(q: str = Query(""), limit: int = Query(10)):
    limit = max(1, min(15, limit))
    try:
        return await location_service.search_cities(q, limit)
    except AmadeusError as e:
        logger.warning(f"City search failed: {e}")
        return {"ok": False, "data": [], "meta": {"message": e.message}}


@router.get("/fx/latest")
async def fx_latest(base: str = Query("INR")):
    return {"base": "INR", "rates": FX_RATES}
