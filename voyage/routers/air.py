"""Reference-data router — location lookup and nearby airports."""

import math

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from voyage.services.location_service import location_service

router = APIRouter()


@router.get("/lookup")
async def lookup(
    keyword: str = Query(""),
    sub_type: str = Query("CITY,AIRPORT", alias="subType"),
    limit: int = Query(8),
):
    limit = max(1, min(50, limit))
    return {"data": await location_service.lookup(keyword, sub_type, limit)}


@router.get("/nearby")
async def nearby(
    lat: str | None = Query(None),
    lon: str | None = Query(None),
    limit: int = Query(5),
):
    """Airports closest to a coordinate pair."""
    try:
        latitude, longitude = float(lat), float(lon)
    except (TypeError, ValueError):
        return JSONResponse(status_code=400, content={"error": "lat_and_lon_required"})
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return JSONResponse(status_code=400, content={"error": "lat_and_lon_required"})

    limit = max(1, min(10, limit))
    return {"data": await location_service.nearby_airports(latitude, longitude, limit)}
