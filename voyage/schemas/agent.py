from pydantic import BaseModel, Field


class PlanDates(BaseModel):
    start: str | None = None
    end: str | None = None


class Pax(BaseModel):
    adults: int = 1


class PlanTripRequest(BaseModel):
    origin: str | None = None
    destination: str | None = None
    dates: PlanDates | None = None
    budget: float = 0
    interests: list[str] = Field(default_factory=list)
    pax: Pax = Field(default_factory=Pax)
    cabin: str = "ECONOMY"
