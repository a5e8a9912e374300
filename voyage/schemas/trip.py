import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class TripDates(BaseModel):
    start: str | None = None
    end: str | None = None


class CreateTripRequest(BaseModel):
    origin: str | None = None
    destination: str | None = None
    dates: TripDates | None = None
    budget: float = 0
    adults: int = 1
    interests: list[str] = Field(default_factory=list)
    plan: dict | None = None


class TripResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    origin: str
    destination: str
    dates: dict | None
    budget: float
    adults: int
    interests: list[str]
    plan: dict | None
    selected_flight: dict | None
    selected_hotel: dict | None
    itinerary: list | None
    status: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
