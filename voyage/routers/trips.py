"""Saved trips router — per-user trip CRUD."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voyage.database import get_db
from voyage.dependencies import get_current_user
from voyage.models.trip import Trip
from voyage.models.user import User
from voyage.schemas.trip import CreateTripRequest, TripResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_TRIPS = 50


def _serialize(trip: Trip) -> dict:
    return TripResponse.model_validate(trip).model_dump(mode="json")


def _first_option(plan: dict | None) -> dict:
    options = (plan or {}).get("options")
    if not isinstance(options, list) or not options:
        return {}
    first = options[0]
    return first if isinstance(first, dict) else {}


async def _get_user_trip(trip_id: uuid.UUID, db: AsyncSession, user: User) -> Trip | None:
    result = await db.execute(select(Trip).where(Trip.id == trip_id, Trip.user_id == user.id))
    return result.scalar_one_or_none()


@router.get("")
async def list_trips(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """The user's trips, newest first."""
    result = await db.execute(
        select(Trip)
        .where(Trip.user_id == user.id)
        .order_by(Trip.created_at.desc())
        .limit(MAX_TRIPS)
    )
    return {"ok": True, "data": [_serialize(t) for t in result.scalars().all()]}


@router.post("")
async def create_trip(
    req: CreateTripRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not req.origin or not req.destination:
        raise HTTPException(status_code=400, detail="origin and destination are required")

    first_option = _first_option(req.plan)
    trip = Trip(
        user_id=user.id,
        origin=req.origin,
        destination=req.destination,
        dates=req.dates.model_dump() if req.dates else None,
        budget=req.budget or 0,
        adults=req.adults or 1,
        interests=req.interests,
        plan=req.plan,
        selected_flight=first_option.get("flight"),
        selected_hotel=first_option.get("hotel"),
    )
    db.add(trip)
    await db.commit()
    await db.refresh(trip)

    logger.info(f"Trip {trip.id} created for user {user.id}: {trip.origin} → {trip.destination}")
    return {"ok": True, "data": _serialize(trip)}


@router.get("/{trip_id}")
async def get_trip(
    trip_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    trip = await _get_user_trip(trip_id, db, user)
    if not trip:
        return JSONResponse(status_code=404, content={"ok": False, "error": "not_found"})
    return {"ok": True, "data": _serialize(trip)}


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    trip = await _get_user_trip(trip_id, db, user)
    if not trip:
        return JSONResponse(status_code=404, content={"ok": False, "error": "not_found"})

    await db.delete(trip)
    await db.commit()
    return {"ok": True, "deleted": str(trip_id)}
