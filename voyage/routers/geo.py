from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from voyage.services.location_service import location_service

router = APIRouter()


@router.get("/resolve")
async def resolve(code: str = Query(""), city: str = Query("")):
    """Coordinates for a city name or IATA code."""
    if not code.strip() and not city.strip():
        return JSONResponse(status_code=400, content={"error": "city_or_code_required"})

    data = await location_service.resolve(code, city)
    if data is None:
        return JSONResponse(status_code=404, content={"error": "city_not_found"})
    return {"data": data}
