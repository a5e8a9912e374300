"""AI concierge router — chat, intent extraction, and travel advice."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from voyage.schemas.ai import (
    ChatRequest,
    EnhanceItineraryRequest,
    ExtractIntentRequest,
    InsightsRequest,
    RecommendationsRequest,
)
from voyage.services.concierge_service import (
    concierge_service,
    enhance_itinerary,
    extract_intent,
    smart_recommendations,
    travel_insights,
)

logger = logging.getLogger(__name__)

router = APIRouter()

FEATURES = [
    "Natural language processing",
    "Travel intent extraction",
    "Conversational responses",
    "Smart recommendations",
    "Itinerary enhancement",
    "Travel insights",
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _bad_request(error: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": error})


@router.get("/test")
async def test():
    return {"message": "AI routes are working!"}


@router.post("/chat")
async def chat(req: ChatRequest):
    if not req.message or not isinstance(req.message, str):
        return _bad_request("Message is required and must be a string")

    logger.debug(f"Chat topic={req.context.get('topic')} city={req.context.get('city')}")
    response = await concierge_service.reply(req.message, req.conversation_id, req.context)
    return {
        "success": True,
        "response": response,
        "intent": extract_intent(req.message),
        "conversationId": req.conversation_id,
        "topic": req.context.get("topic") or None,
        "timestamp": _now(),
    }


@router.post("/extract-intent")
async def extract(req: ExtractIntentRequest):
    if not req.message or not isinstance(req.message, str):
        return _bad_request("Message is required and must be a string")
    return {"success": True, "intent": extract_intent(req.message)}


@router.post("/recommendations")
async def recommendations(req: RecommendationsRequest):
    if not req.trip_data:
        return _bad_request("Trip data is required")
    return {
        "success": True,
        "recommendations": smart_recommendations(req.trip_data, req.user_preferences),
    }


@router.post("/enhance-itinerary")
async def enhance(req: EnhanceItineraryRequest):
    if not req.daily_plan or not req.destination:
        return _bad_request("Daily plan and destination are required")
    return {
        "success": True,
        "enhancedItinerary": enhance_itinerary(
            req.daily_plan, req.destination, req.interests, req.weather
        ),
    }


@router.post("/insights")
async def insights(req: InsightsRequest):
    return {"success": True, "insights": travel_insights(req.trip_history, req.preferences)}


@router.get("/conversation/{conversation_id}")
async def get_conversation(conversation_id: str):
    history = await concierge_service.get_history(conversation_id)
    return {"success": True, "conversationId": conversation_id, "history": history}


@router.delete("/conversation/{conversation_id}")
async def clear_conversation(conversation_id: str):
    await concierge_service.clear_history(conversation_id)
    return {"success": True, "message": "Conversation cleared successfully"}


@router.get("/status")
async def status():
    return {
        "success": True,
        "status": "AI service is running",
        "features": FEATURES,
        "llm": concierge_service.llm.available,
        "timestamp": _now(),
    }
