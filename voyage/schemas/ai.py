from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: Any = None
    conversation_id: str = Field(default="default", alias="conversationId")
    context: dict = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class ExtractIntentRequest(BaseModel):
    message: Any = None


class RecommendationsRequest(BaseModel):
    trip_data: dict | None = Field(default=None, alias="tripData")
    user_preferences: dict = Field(default_factory=dict, alias="userPreferences")

    model_config = {"populate_by_name": True}


class EnhanceItineraryRequest(BaseModel):
    daily_plan: list[dict] | None = Field(default=None, alias="dailyPlan")
    destination: str | None = None
    interests: list[str] = Field(default_factory=list)
    weather: dict | None = None

    model_config = {"populate_by_name": True}


class InsightsRequest(BaseModel):
    trip_history: list[dict] = Field(default_factory=list, alias="tripHistory")
    preferences: dict = Field(default_factory=dict)

    model_config = {"populate_by_name": True}
