"""AI concierge — chat replies, intent extraction, and rule-based travel advice.

Replies come from the configured LLM when one is available. Explicit topic
requests and any LLM failure fall back to the deterministic templates below,
so the concierge keeps answering without provider keys.
"""

import json
import logging
import re

from voyage.config import settings
from voyage.data.catalog import resolve_city_to_iata, suggest
from voyage.services.cache_service import CacheService, cache_service
from voyage.services.llm_client import LLMClient, llm_client

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 6

DEFAULT_INTERESTS = ["Culture", "Food"]

# Common city names → primary IATA code
DESTINATION_MAP = {
    "paris": "CDG", "tokyo": "NRT", "london": "LHR", "new york": "JFK",
    "dubai": "DXB", "singapore": "SIN", "bangkok": "BKK", "istanbul": "IST",
    "rome": "FCO", "madrid": "MAD", "amsterdam": "AMS", "zurich": "ZRH",
    "mumbai": "BOM", "delhi": "DEL", "goa": "GOI", "sydney": "SYD",
    "melbourne": "MEL", "toronto": "YYZ", "vancouver": "YVR",
}

INTEREST_KEYWORDS = {
    "Culture": ("culture", "museum", "history"),
    "Food": ("food", "restaurant", "cuisine"),
    "Shopping": ("shopping", "market", "mall"),
    "Nightlife": ("nightlife", "bar", "club"),
    "Beach": ("beach", "ocean", "sea"),
}

_ORIGIN = re.compile(r"(?:from|departing from|leaving from|fly from)\s+([a-z][a-z\s]*?)(?:\s|$|,|\.)")
_DEST_PATTERNS = [
    re.compile(rf"\b{prefix}\s+([a-z][a-z\s]*?)(?=\s+(?:from|in|on|with|for|next|this)\b|[,.!?]|$)")
    for prefix in ("trip to", "visit", "go to", "travel to", "city to", "to")
]
_BUDGET = re.compile(r"\$(\d+)|(\d+)\s*dollars?|budget\s*of\s*(\d+)", re.I)
_ADULTS = re.compile(r"(\d+)\s*(?:adults?|people|travelers?)", re.I)
_HIDDEN_TOPIC = re.compile(r"\[\[topic:([a-z_]+)\]\]\n?", re.I)
_GREETING = re.compile(r"\b(hello|hi|hey)\b")
_SIM = re.compile(r"\b(e?sim|sim card)\b")

_PLACE_FOR = re.compile(r"for\s+([a-z\s]+?)(?:,\s*([A-Z]{2}))?(?=[).?]|$)", re.I)
_PLACE_ABOUT = re.compile(r"about\s+([a-z\s]+?)(?=[,).?]|$)", re.I)
_PLACE_IN = re.compile(r"in\s+([a-z\s]+?)(?=[,).?]|$)", re.I)

BEST_TIME = (
    "• Best months: Nov–Feb (cooler, drier, pleasant) for {name}\n"
    "• Avoid: Jun–Sep (monsoon; heavy rain and humidity)\n"
    "• Notes: Mar–Apr can be warm; book early for peak season."
)
VISA_DOMESTIC = (
    "• Visa: Not required for Indian citizens traveling domestically\n"
    "• ID: Carry a government photo ID for flights and hotels\n"
    "• Tip: Arrive 2–3 hours early for domestic flights"
)
VISA_INTERNATIONAL = (
    "• Visa: Check eVisa / visa on arrival eligibility for Indian passport\n"
    "• Docs: Passport (6+ months validity), confirmed tickets, hotel proof, funds\n"
    "• Timing: Apply 2–6 weeks ahead; verify with the official embassy portal for {name}"
)
SAFETY = (
    "• Safety score: 7/10 (standard urban precautions in {name})\n"
    "• Tips: Keep valuables concealed; use registered cabs; avoid isolated areas late\n"
    "• Emergency: Save local emergency numbers; use hotel safe for passports"
)
WEATHER = (
    "• Nov–Feb: 18–28°C, dry & pleasant\n"
    "• Mar–May: 28–38°C, hot afternoons\n"
    "• Jun–Sep: Monsoon, heavy rain & humidity\n"
    "• Best window: Nov–Feb for comfortable sightseeing in {name}"
)
SIM_DOMESTIC = (
    "• Providers: Jio, Airtel, Vi (good urban coverage)\n"
    "• Cost: ₹199–₹599 for 1–4 weeks with 1–2GB/day\n"
    "• Where: Airport kiosks, major stores; carry passport for KYC"
)
SIM_INTERNATIONAL = (
    "• eSIM: Airalo/Holafly for instant setup (data packs 3–10GB)\n"
    "• Local: Buy at airport or city shops; bring passport for registration\n"
    "• Tip: Check 4G/5G bands and fair-use policy"
)
ITINERARY = (
    "Day 1\n• Morning: Old town walking tour\n• Afternoon: Signature museum & local cafe\n"
    "• Evening: Riverside promenade + dinner\n\n"
    "Day 2\n• Morning: Iconic landmark + viewpoint\n• Afternoon: Neighborhood food crawl ({profile})\n"
    "• Evening: Cultural show or night market\n\n"
    "Day 3\n• Morning: Park/temple visit\n• Afternoon: Shopping street or beach time\n"
    "• Evening: Sunset spot and farewell dinner"
)
GREETING = (
    "Hello! I'm Voyage AI, your personal travel planning assistant. I can help you plan "
    "amazing trips with flights, hotels, and daily itineraries. Where would you like to go?"
)
HELP = (
    "I can help you plan complete trips! Just tell me:\n• Where you want to go (destination)\n"
    "• When you want to travel (dates)\n• Your budget\n• Your interests (culture, food, shopping, etc.)\n"
    "• Number of travelers\n\nI'll create a personalized itinerary with flights, hotels, and daily activities!"
)
PLAN_PROMPT = (
    "Great! I'd love to help you plan your trip. To get started, please tell me:\n\n"
    "1. **Where** do you want to go? (city or country)\n"
    "2. **When** do you want to travel? (dates or season)\n"
    "3. **What's your budget?** (approximate amount)\n"
    "4. **What interests you?** (culture, food, shopping, nightlife, beach, etc.)\n"
    "5. **How many people** are traveling?\n\n"
    "For example: 'I want to visit Paris in spring with a $2000 budget, love culture and food, "
    "traveling with 2 adults'"
)
DESTINATION_REPLY = (
    "{destination} is an amazing destination! I can help you plan a complete trip there. "
    "What dates are you thinking of traveling? And what's your budget? I'll create a personalized "
    "itinerary with the best attractions, restaurants, and activities."
)
BUDGET_REPLY = (
    "I can work with any budget! Whether you're looking for a budget-friendly trip or a luxury "
    "experience, I'll find the best options for you. What's your approximate budget for this trip?"
)
CULTURE_REPLY = (
    "Perfect! I love planning cultural trips. I'll include museums, historical sites, local "
    "experiences, and cultural activities in your itinerary. Which destination are you interested in?"
)
FOOD_REPLY = (
    "Food is one of the best parts of traveling! I'll make sure to include amazing local restaurants, "
    "food tours, cooking classes, and must-try dishes in your itinerary. Where would you like to "
    "explore the local cuisine?"
)
SHOPPING_REPLY = (
    "Shopping can be so much fun while traveling! I'll include local markets, shopping districts, "
    "and unique stores in your itinerary. What destination are you thinking of for your shopping adventure?"
)
DEFAULT_REPLY = (
    "I'm here to help you plan an amazing trip! Could you tell me more about where you'd like to go "
    "and when? I can create a complete itinerary with flights, hotels, and daily activities tailored "
    "to your interests and budget."
)

SYSTEM_PROMPT = (
    "You are Voyage AI, a helpful travel planning assistant. Be conversational, friendly, and "
    "informative. You help plan trips with flights, hotels, and daily itineraries, and give "
    "recommendations based on interests and budget.\n\nCurrent context: {context}"
)


def parse_place(text: str) -> tuple[str, str]:
    """Pull a city and optional ISO-2 country out of phrases like "for Goa, IN"."""
    m_for = _PLACE_FOR.search(text)
    m_about = _PLACE_ABOUT.search(text)
    m_in = _PLACE_IN.search(text)
    city = ""
    for m in (m_for, m_about, m_in):
        if m and m.group(1).strip():
            city = m.group(1)
            break
    city = " ".join(city.split())
    cc = (m_for.group(2) or "").upper() if m_for else ""
    return city, cc


def _resolve_destination(raw: str | None) -> str | None:
    if not raw:
        return None
    if raw in DESTINATION_MAP:
        return DESTINATION_MAP[raw]
    code = resolve_city_to_iata(raw)
    if code:
        return code
    hits = suggest(raw, limit=1)
    if hits:
        return hits[0]["code"]
    return raw.upper()


def extract_intent(message: str) -> dict:
    """Structured trip details from free text via pattern matching."""
    text = message.lower()

    origin = None
    m = _ORIGIN.search(text)
    if m:
        raw_origin = m.group(1).strip()
        origin = resolve_city_to_iata(raw_origin) or raw_origin.upper()

    dest_raw = None
    for pattern in _DEST_PATTERNS:
        m = pattern.search(text)
        if m and m.group(1).strip():
            dest_raw = m.group(1).strip()
            break

    budget = None
    m = _BUDGET.search(message)
    if m:
        budget = int(next(g for g in m.groups() if g))

    m = _ADULTS.search(message)
    adults = int(m.group(1)) if m else 1

    interests = [
        name for name, words in INTEREST_KEYWORDS.items() if any(w in text for w in words)
    ]

    if "luxury" in text:
        style = "luxury"
    elif "budget" in text:
        style = "budget"
    elif "adventure" in text:
        style = "adventure"
    else:
        style = "mid-range"

    return {
        "origin": origin,
        "destination": _resolve_destination(dest_raw),
        "dates": {"start": None, "end": None},
        "budget": budget,
        "interests": interests or list(DEFAULT_INTERESTS),
        "adults": adults,
        "children": 0,
        "cabin": "ECONOMY",
        "travelStyle": style,
    }


def topic_reply(topic: str, city: str, country: str) -> str | None:
    name = city or "this destination"
    if topic == "best_time":
        return BEST_TIME.format(name=name)
    if topic == "visa":
        return VISA_DOMESTIC if country == "IN" else VISA_INTERNATIONAL.format(name=city or "destination")
    if topic == "safety":
        return SAFETY.format(name=city or "destination")
    if topic == "weather":
        return WEATHER.format(name=city or "destination")
    if topic == "sim":
        return SIM_DOMESTIC if country == "IN" else SIM_INTERNATIONAL
    if topic.startswith("itinerary_"):
        return ITINERARY.format(profile=topic.removeprefix("itinerary_"))
    return None


def rule_based_reply(message: str, context: dict | None = None) -> str:
    """Deterministic reply keyed on an explicit topic or message keywords."""
    context = context or {}
    hidden = _HIDDEN_TOPIC.search(message)
    cleaned = _HIDDEN_TOPIC.sub("", message).strip()
    text = cleaned.lower()
    place_city, place_cc = parse_place(cleaned)
    city = place_city or context.get("city") or ""

    topic = str(context.get("topic") or (hidden.group(1) if hidden else "")).lower()
    if topic:
        country = (place_cc or str(context.get("country") or "")).upper()
        reply = topic_reply(topic, city, country)
        if reply:
            return reply

    if "best time" in text or "best months" in text:
        return topic_reply("best_time", city, place_cc)
    if "visa" in text:
        domestic = place_cc == "IN" or re.search(r"\bin(dia)?\b", message, re.I)
        return topic_reply("visa", city, "IN" if domestic else place_cc)
    if "safety" in text:
        return topic_reply("safety", city, place_cc)
    if "weather" in text:
        return topic_reply("weather", city, place_cc)
    if _SIM.search(text):
        return topic_reply("sim", city, place_cc)
    if _GREETING.search(text):
        return GREETING
    if "help" in text or "what can you do" in text:
        return HELP
    if any(w in text for w in ("trip", "travel", "vacation", "holiday", "plan")):
        for known in ("paris", "london", "tokyo", "new york"):
            if known in text:
                return DESTINATION_REPLY.format(destination=known.title())
        return PLAN_PROMPT
    for known in ("paris", "london", "tokyo", "new york"):
        if known in text:
            return DESTINATION_REPLY.format(destination=known.title())
    if any(w in text for w in ("budget", "cost", "price")):
        return BUDGET_REPLY
    if any(w in text for w in ("culture", "museum", "history")):
        return CULTURE_REPLY
    if any(w in text for w in ("food", "restaurant", "cuisine")):
        return FOOD_REPLY
    if "shopping" in text:
        return SHOPPING_REPLY
    return DEFAULT_REPLY


def smart_recommendations(trip_data: dict, user_preferences: dict | None = None) -> dict:
    destination = trip_data.get("destination") or "your destination"
    try:
        budget = float(trip_data.get("budget") or 0)
    except (TypeError, ValueError):
        budget = 0.0
    interests = trip_data.get("interests") or []

    insights = [
        f"{destination} is a fantastic choice for your trip!",
        "Consider booking flights and hotels in advance for better prices",
        "Check local events and festivals happening during your visit",
    ]
    alternatives: list[dict] = []
    optimizations: list[dict] = []
    local_tips: list[str] = []

    if budget < 1000:
        optimizations.append({
            "area": "budget",
            "suggestion": "Consider staying in hostels or budget hotels",
            "savings": "Save 30-50% on accommodation",
        })
    elif budget > 3000:
        alternatives.append({
            "type": "accommodation",
            "suggestion": "Luxury hotels with premium amenities",
            "reason": "You have budget for premium experiences",
            "costImpact": "premium",
        })

    if "Culture" in interests:
        local_tips.append("Visit museums early in the morning to avoid crowds")
        alternatives.append({
            "type": "activity",
            "suggestion": "Guided cultural walking tours",
            "reason": "Get deeper insights into local history and culture",
            "costImpact": "same",
        })
    if "Food" in interests:
        local_tips.append("Try local street food for authentic flavors")
        alternatives.append({
            "type": "activity",
            "suggestion": "Food tours and cooking classes",
            "reason": "Experience local cuisine hands-on",
            "costImpact": "same",
        })
    if "Shopping" in interests:
        local_tips.append("Visit local markets for unique souvenirs")
        optimizations.append({
            "area": "activities",
            "suggestion": "Combine shopping with cultural experiences",
            "savings": "More value from your time",
        })

    optimizations.append({
        "area": "timing",
        "suggestion": "Book activities for weekdays when possible",
        "savings": "Lower prices and fewer crowds",
    })
    return {
        "insights": insights,
        "alternatives": alternatives,
        "optimizations": optimizations,
        "localTips": local_tips,
    }


def enhance_itinerary(
    daily_plan: list[dict],
    destination: str,
    interests: list[str] | None = None,
    weather: dict | None = None,
) -> list[dict]:
    weather_advice = None
    if weather:
        outdoor = (weather.get("precipitation") or 0) <= 50
        weather_advice = f"Weather: {weather.get('summary')}. " + (
            "Perfect for outdoor exploration!" if outdoor else "Consider indoor activities."
        )

    enhanced = []
    for day in daily_plan:
        blocks = [
            {
                **block,
                "description": f"Explore {block.get('title')} - a must-visit attraction in {destination}",
                "duration": "2-3 hours",
                "cost": "Free - $50",
                "tips": [
                    "Best visited in the morning",
                    "Bring comfortable walking shoes",
                    "Check opening hours in advance",
                ],
                "transportation": "Walking distance or public transport",
                "nearbyRestaurants": "Local cafes and restaurants nearby",
            }
            for block in day.get("blocks") or []
        ]
        enhanced.append({**day, "blocks": blocks, "weatherAdvice": weather_advice})
    return enhanced


def travel_insights(trip_history: list[dict], preferences: dict | None = None) -> dict:
    insights = {
        "travelPatterns": ["You enjoy exploring new destinations"],
        "preferences": ["Cultural experiences and local cuisine"],
        "recommendations": ["Consider similar destinations with rich culture"],
        "budgetInsights": ["You prefer mid-range accommodations for comfort"],
        "seasonalPreferences": ["You travel year-round, adapting to seasons"],
    }
    if trip_history:
        if len({t.get("destination") for t in trip_history}) > 3:
            insights["travelPatterns"].append("You're an experienced traveler who loves variety")
        avg_budget = sum(float(t.get("budget") or 0) for t in trip_history) / len(trip_history)
        if avg_budget > 2000:
            insights["budgetInsights"].append("You prefer comfortable, well-planned trips")
        elif avg_budget < 1000:
            insights["budgetInsights"].append("You're great at finding value and budget-friendly options")
    return insights


class ConciergeService:
    """Chat concierge with per-conversation history kept in the cache."""

    def __init__(self, llm: LLMClient | None = None, cache: CacheService | None = None):
        self.llm = llm or llm_client
        self.cache = cache or cache_service

    async def get_history(self, conversation_id: str) -> list[dict]:
        return await self.cache.get(self.cache.conversation_key(conversation_id)) or []

    async def clear_history(self, conversation_id: str) -> None:
        await self.cache.delete(self.cache.conversation_key(conversation_id))

    async def _save_history(self, conversation_id: str, history: list[dict]) -> None:
        await self.cache.set(
            self.cache.conversation_key(conversation_id),
            history,
            settings.conversation_ttl_seconds,
        )

    async def reply(self, message: str, conversation_id: str = "default", context: dict | None = None) -> str:
        context = context or {}
        history = await self.get_history(conversation_id)

        response = None
        if self.llm.available and not context.get("topic"):
            try:
                response = await self.llm.complete(
                    SYSTEM_PROMPT.format(context=json.dumps(context, default=str)),
                    message,
                    messages=history[-HISTORY_WINDOW:] + [{"role": "user", "content": message}],
                )
            except RuntimeError as e:
                logger.warning(f"LLM reply failed, using rule-based reply: {e}")
        if not response:
            response = rule_based_reply(message, context)

        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": response})
        await self._save_history(conversation_id, history)
        return response


concierge_service = ConciergeService()
