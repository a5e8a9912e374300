"""Agent planner router."""

from datetime import date

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from voyage.schemas.agent import PlanTripRequest
from voyage.services.planner_service import PlanRequest, planner_service

router = APIRouter()


@router.post("/plan")
async def plan_trip(req: PlanTripRequest):
    """Flights, hotels and a daily plan for one trip, as two priced options."""
    origin = (req.origin or "").strip().upper()
    destination = (req.destination or "").strip().upper()
    start = ((req.dates.start if req.dates else None) or "")[:10]
    end = ((req.dates.end if req.dates else None) or "")[:10]
    if not origin or not destination or not start or not end:
        return JSONResponse(
            status_code=400,
            content={"error": "origin, destination, dates.start and dates.end are required"},
        )
    try:
        date.fromisoformat(start)
        date.fromisoformat(end)
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={"error": "dates.start and dates.end must be YYYY-MM-DD dates"},
        )

    data = await planner_service.plan(
        PlanRequest(
            origin=origin,
            destination=destination,
            start=start,
            end=end,
            budget=req.budget,
            interests=req.interests,
            adults=req.pax.adults,
            cabin=req.cabin,
        )
    )
    return {"data": data, "via": "agent:flights-and-hotels"}
