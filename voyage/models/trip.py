import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voyage.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

TRIP_STATUSES = ("draft", "upcoming", "past", "completed")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Trip(Base):
    __tablename__ = "trips"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    origin: Mapped[str] = mapped_column(String(100), nullable=False)
    destination: Mapped[str] = mapped_column(String(100), nullable=False)
    dates: Mapped[dict | None] = mapped_column(JSONType)
    budget: Mapped[float] = mapped_column(Float, default=0)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    interests: Mapped[list] = mapped_column(JSONType, default=list)
    plan: Mapped[dict | None] = mapped_column(JSONType)
    selected_flight: Mapped[dict | None] = mapped_column(JSONType)
    selected_hotel: Mapped[dict | None] = mapped_column(JSONType)
    itinerary: Mapped[list | None] = mapped_column(JSONType)
    status: Mapped[str] = mapped_column(String(20), default="draft")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="trips")
