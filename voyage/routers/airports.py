"""Airport search router — city/airport autocomplete with catalog fallback."""

from fastapi import APIRouter, Query

from voyage.services.location_service import location_service

router = APIRouter()


@router.get("/search")
@router.get("/autocomplete")
@router.get("")
async def search_airports(
    term: str | None = Query(None),
    q: str | None = Query(None),
    limit: int = Query(10),
):
    """Search airports and cities by name or IATA code."""
    limit = max(1, min(20, limit))
    return await location_service.search_airports(term or q or "", limit)


@router.get("/ping")
async def ping():
    return {"ok": True, "route": "/api/airports/search"}
