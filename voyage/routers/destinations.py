"""Destination catalog router — browse and suggest."""

from fastapi import APIRouter, Query

from voyage.data.catalog import list_catalog, suggest

router = APIRouter()


@router.get("/catalog")
@router.get("/all")
async def catalog(
    q: str = Query(""),
    region: str = Query(""),
    country: str = Query(""),
    limit: int = Query(300),
):
    limit = max(1, min(1000, limit))
    items = list_catalog(q=q, region=region, country=country, limit=limit)
    return {"data": items, "via": "catalog"}


@router.get("/suggest")
async def suggest_destinations(q: str = Query(""), limit: int = Query(12)):
    limit = max(1, min(50, limit))
    return {"data": suggest(q, limit), "via": "catalog:suggest"}
