"""Agent trip planner — combines flight and hotel searches with a generated daily plan.

The daily plan is deterministic: activity pools, weather and tie-breaking
noise are all derived from stable hashes of the city and date, so the same
request always produces the same itinerary.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from voyage.services.amadeus_client import AmadeusError
from voyage.services.flight_service import FlightSearchQuery, FlightService, flight_service
from voyage.services.hotel_service import HotelSearchQuery, HotelService, hotel_service

logger = logging.getLogger(__name__)

SLOTS = [("morning", "09:30"), ("afternoon", "13:30"), ("evening", "18:30")]

WEATHER_LABELS = ["Sunny", "Mild", "Showers", "Partly Cloudy", "Cool & Clear"]

# Curated points of interest: IATA → (title, tags)
CITY_POIS = {
    "DXB": [
        ("Burj Khalifa", ["Culture", "Indoor"]),
        ("The Dubai Mall", ["Shopping", "Indoor"]),
        ("Dubai Fountain", ["Culture", "Outdoor"]),
        ("Old Dubai (Creek & Al Fahidi)", ["Culture", "Outdoor"]),
        ("Jumeirah Beach", ["Beach", "Outdoor"]),
        ("Gold & Spice Souks", ["Shopping", "Outdoor"]),
    ],
    "IST": [
        ("Hagia Sophia", ["Culture", "Indoor"]),
        ("Blue Mosque", ["Culture", "Indoor"]),
        ("Topkapi Palace", ["Culture", "Indoor"]),
        ("Grand Bazaar", ["Shopping", "Indoor"]),
        ("Spice Bazaar", ["Food", "Indoor"]),
        ("Istiklal Street", ["Shopping", "Nightlife", "Outdoor"]),
        ("Bosphorus Cruise", ["Culture", "Outdoor"]),
    ],
    "SIN": [
        ("Gardens by the Bay", ["Culture", "Outdoor"]),
        ("Chinatown", ["Culture", "Food", "Outdoor"]),
        ("Little India", ["Culture", "Food", "Outdoor"]),
        ("Sentosa Island", ["Beach", "Outdoor"]),
        ("Hawker Centre Crawl", ["Food", "Indoor"]),
        ("Clarke Quay", ["Nightlife", "Outdoor"]),
    ],
    "BKK": [
        ("Grand Palace", ["Culture", "Outdoor"]),
        ("Wat Arun", ["Culture", "Outdoor"]),
        ("Wat Pho", ["Culture", "Indoor"]),
        ("Chatuchak Market", ["Shopping", "Outdoor"]),
        ("ICONSIAM", ["Shopping", "Indoor"]),
        ("Asiatique Night Market", ["Nightlife", "Shopping", "Outdoor"]),
    ],
    "DEL": [
        ("Red Fort", ["Culture", "Outdoor"]),
        ("Qutub Minar", ["Culture", "Outdoor"]),
        ("Humayun's Tomb", ["Culture", "Outdoor"]),
        ("Chandni Chowk Food Walk", ["Food", "Shopping", "Outdoor"]),
        ("Lotus Temple", ["Culture", "Indoor"]),
        ("Hauz Khas", ["Nightlife", "Culture", "Outdoor"]),
    ],
    "BOM": [
        ("Gateway of India", ["Culture", "Outdoor"]),
        ("Colaba Causeway", ["Shopping", "Food", "Outdoor"]),
        ("Marine Drive", ["Culture", "Outdoor"]),
        ("Juhu Beach", ["Beach", "Outdoor"]),
        ("Kala Ghoda", ["Culture", "Outdoor"]),
    ],
    "GOI": [
        ("Baga Beach", ["Beach", "Outdoor"]),
        ("Fort Aguada", ["Culture", "Outdoor"]),
        ("Old Goa Churches", ["Culture", "Indoor"]),
        ("Anjuna Flea Market", ["Shopping", "Outdoor"]),
        ("Palolem Beach", ["Beach", "Outdoor"]),
    ],
    "CDG": [
        ("Eiffel Tower", ["Culture", "Outdoor"]),
        ("Louvre Museum", ["Culture", "Indoor"]),
        ("Seine Cruise", ["Culture", "Outdoor"]),
        ("Montmartre", ["Culture", "Outdoor"]),
        ("Le Marais", ["Shopping", "Food", "Outdoor"]),
    ],
    "LHR": [
        ("British Museum", ["Culture", "Indoor"]),
        ("Tower of London", ["Culture", "Indoor"]),
        ("Borough Market", ["Food", "Outdoor"]),
        ("Camden Market", ["Shopping", "Outdoor"]),
        ("Soho", ["Nightlife", "Outdoor"]),
    ],
    "JFK": [
        ("Central Park", ["Culture", "Outdoor"]),
        ("Met Museum", ["Culture", "Indoor"]),
        ("Brooklyn Bridge", ["Culture", "Outdoor"]),
        ("Times Square", ["Nightlife", "Outdoor"]),
        ("Chelsea Market", ["Food", "Shopping", "Indoor"]),
    ],
}

# Generic activity banks, localized with the city token
TEMPLATES = {
    "beach": [
        ("Sunset Beach Walk", ["Beach", "Outdoor"]),
        ("Waterfront Promenade", ["Culture", "Outdoor"]),
        ("Seafood Night Market", ["Food", "Outdoor"]),
        ("Beach Club", ["Nightlife", "Outdoor"]),
    ],
    "historic": [
        ("Old Town Walk", ["Culture", "Outdoor"]),
        ("City Museum", ["Culture", "Indoor"]),
        ("Fortress & Ramparts", ["Culture", "Outdoor"]),
        ("Local Crafts Bazaar", ["Shopping", "Indoor"]),
    ],
    "foodie": [
        ("Street Food Crawl", ["Food", "Outdoor"]),
        ("Farmers Market", ["Food", "Outdoor"]),
        ("Cooking Class", ["Food", "Indoor"]),
        ("Rooftop Dinner", ["Food", "Nightlife", "Outdoor"]),
    ],
    "shopping": [
        ("Main Bazaar", ["Shopping", "Outdoor"]),
        ("Designer District", ["Shopping", "Indoor"]),
        ("Antique Arcade", ["Shopping", "Indoor"]),
    ],
    "nature": [
        ("Botanical Garden", ["Culture", "Outdoor"]),
        ("Scenic Viewpoint", ["Culture", "Outdoor"]),
        ("Riverfront Trail", ["Culture", "Outdoor"]),
    ],
    "nightlife": [
        ("Jazz Bar", ["Nightlife", "Indoor"]),
        ("Skyline Rooftop", ["Nightlife", "Outdoor"]),
        ("Night Market", ["Nightlife", "Shopping", "Outdoor"]),
    ],
}

BEACH_HINTS = {"DPS", "HKT", "GOI", "CMB", "MLE", "BCN", "LIS", "NCE", "MIA", "HNL", "SYD"}


def seeded_int(seed: str, low: int, high: int) -> int:
    """Stable pseudo-random integer in [low, high] from a 32-bit FNV-1a hash."""
    h = 2166136261
    for ch in seed:
        h ^= ord(ch)
        h = (h * 16777619) & 0xFFFFFFFF
    return round(low + (h % 1000) / 1000 * (high - low))


def days_between(start: str, end: str) -> int:
    return max(1, (date.fromisoformat(end) - date.fromisoformat(start)).days)


def _profile_for_city(key: str) -> list[str]:
    banks = sorted(TEMPLATES, key=lambda name: seeded_int(f"profile:{key}:{name}", 0, 1_000_000))
    return banks[: 4 if key in BEACH_HINTS else 3]


def activity_pool(city: str) -> list[tuple[str, list[str]]]:
    pool = {title: tags for title, tags in CITY_POIS.get(city, [])}
    for bank in _profile_for_city(city):
        for title, tags in TEMPLATES[bank]:
            pool.setdefault(f"{title} in {city}", tags)
    return list(pool.items())


def forecast(city: str, start: str, days: int) -> list[dict]:
    out = []
    first = date.fromisoformat(start)
    for i in range(days):
        day = (first + timedelta(days=i)).isoformat()
        seed = f"{city}:{day}"
        hi = seeded_int(seed, 12, 34)
        out.append({
            "date": day,
            "summary": WEATHER_LABELS[seeded_int(seed + ":s", 0, len(WEATHER_LABELS) - 1)],
            "hi": hi,
            "lo": max(0, hi - seeded_int(seed + ":lo", 4, 12)),
            "precipitation": seeded_int(seed + ":p", 0, 80),
        })
    return out


def _slot_score(slot: str, tags: list[str], wet: bool, weekend: bool) -> int:
    score = 0
    if wet and "Indoor" in tags:
        score += 10
    if not wet and "Outdoor" in tags:
        score += 6
    if slot == "morning" and ("Culture" in tags or "Outdoor" in tags):
        score += 6
    elif slot == "afternoon" and any(t in tags for t in ("Culture", "Shopping", "Beach", "Food")):
        score += 6
    elif slot == "evening":
        if "Food" in tags:
            score += 6
        if "Nightlife" in tags:
            score += 14 if weekend else 8
        if wet and "Indoor" in tags:
            score += 6
    return score


def build_daily_plan(city: str, start: str, end: str, interests: list[str] | None = None) -> list[dict]:
    """Three activity blocks per day, ranked by interests, weather and time of day."""
    key = city.upper()
    pool = activity_pool(key)
    wanted = {i.lower() for i in interests or []}
    used: set[str] = set()

    plan = []
    for weather in forecast(key, start, days_between(start, end)):
        wet = weather["precipitation"] >= 50 or weather["summary"] == "Showers"
        weekend = date.fromisoformat(weather["date"]).weekday() in (4, 5)

        blocks = []
        for slot, time in SLOTS:
            def rank(item):
                title, tags = item
                score = _slot_score(slot, tags, wet, weekend)
                if any(t.lower() in wanted for t in tags):
                    score += 30
                return score + seeded_int(f"{key}:{weather['date']}:{slot}:{title}", 0, 20)

            # Repeats only once every activity has been used
            fresh = [item for item in pool if item[0] not in used]
            title, tags = max(fresh or pool, key=rank)
            used.add(title)
            blocks.append({"time": time, "title": title, "notes": f"({', '.join(tags)})"})

        plan.append({"date": weather["date"], "weather": weather, "blocks": blocks})
    return plan


@dataclass
class PlanRequest:
    origin: str
    destination: str
    start: str
    end: str
    budget: float = 0
    interests: list[str] = field(default_factory=list)
    adults: int = 1
    cabin: str = "ECONOMY"


def _flight_summary(offer: dict) -> dict:
    segments = ((offer.get("itineraries") or [{}])[0]).get("segments") or []
    carrier = (offer.get("validatingAirlineCodes") or [None])[0] or (
        segments[0].get("carrierCode") if segments else None
    ) or "Unknown"
    stops = max(0, len(segments) - 1)
    price = offer.get("price") or {}
    return {
        "id": offer.get("id"),
        "carrier": carrier,
        "summary": f"{carrier} {'nonstop' if stops == 0 else f'{stops} stop'}",
        "price": float(price.get("grandTotal") or price.get("total") or 0),
        "currency": price.get("currency") or "INR",
    }


def _hotel_summary(item: dict, nights: int) -> dict:
    hotel = item.get("hotel") or {}
    offer = (item.get("offers") or [{}])[0]
    price = offer.get("price") or {}
    total = float(price.get("total") or 0)
    return {
        "id": hotel.get("hotelId"),
        "name": hotel.get("name"),
        "price": round(total / nights, 2) if nights else total,
        "currency": price.get("currency"),
        "nights": nights,
        "link": offer.get("self") or "",
    }


class PlannerService:
    def __init__(self, flights: FlightService | None = None, hotels: HotelService | None = None):
        self.flights = flights or flight_service
        self.hotels = hotels or hotel_service

    async def _flight_options(self, req: PlanRequest) -> list[dict]:
        query = FlightSearchQuery(
            origin=req.origin,
            destination=req.destination,
            departure_date=req.start,
            return_date=req.end,
            adults=str(req.adults),
            limit="5",
        )
        try:
            result = await self.flights.search(query)
        except AmadeusError as e:
            logger.warning(f"Planner flight search failed: {e}")
            return []
        offers = [_flight_summary(o) for o in result.get("data") or []]
        return sorted(offers, key=lambda o: o["price"])

    async def _hotel_options(self, req: PlanRequest, nights: int) -> list[dict]:
        query = HotelSearchQuery(
            check_in_date=req.start,
            check_out_date=req.end,
            adults=str(req.adults),
            city_code=req.destination,
        )
        try:
            result = await self.hotels.search(query)
        except AmadeusError as e:
            logger.warning(f"Planner hotel search failed: {e}")
            return []
        hotels = [_hotel_summary(h, nights) for h in result.get("data") or []]
        return sorted(hotels, key=lambda h: h["price"])

    async def plan(self, req: PlanRequest) -> dict:
        nights = days_between(req.start, req.end)
        flights = await self._flight_options(req)
        hotels = await self._hotel_options(req, nights)
        daily_plan = build_daily_plan(req.destination, req.start, req.end, req.interests)

        def option(label: str, index: int, factor: float) -> dict:
            f = flights[min(index, len(flights) - 1)] if flights else None
            h = hotels[min(index, len(hotels) - 1)] if hotels else None
            total = (f["price"] if f else 0) + (h["price"] * h["nights"] * factor if h else 0)
            return {
                "label": label,
                "flight": f,
                "hotel": h,
                "dailyPlan": daily_plan,
                "estTotal": math.floor(total + 0.5),
            }

        return {
            "trip": {
                "origin": req.origin,
                "destination": req.destination,
                "dates": {"start": req.start, "end": req.end},
                "budget": req.budget,
                "theme": req.interests,
            },
            "options": [option("Best value", 0, 1.0), option("Alternative", 1, 1.05)],
            "notes": ["Itinerary is auto-generated; adjust to your taste."],
        }


planner_service = PlannerService()
