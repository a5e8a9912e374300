"""Hotel search service — staged hotel-id resolution and cached offer lookups."""

import logging
from dataclasses import dataclass, field

from voyage.config import settings
from voyage.services.amadeus_client import AmadeusClient, amadeus_client
from voyage.services.cache_service import (
    TTL_HOTEL_OFFER,
    TTL_OFFER_FROM_SEARCH,
    CacheService,
    cache_service,
    ttl_for_travel_date,
)

logger = logging.getLogger(__name__)

HOTELS_BY_CITY = "/v1/reference-data/locations/hotels/by-city"
HOTELS_BY_GEOCODE = "/v1/reference-data/locations/hotels/by-geocode"
HOTEL_OFFERS = "/v3/shopping/hotel-offers"

# Some markets list their hotels under a sibling city code
CITY_ALIASES = {"GOI": ["GOI", "GOX"], "GOX": ["GOX", "GOI"]}

# Nearby large markets tried when a city has no bookable inventory
CITY_REGION = {
    "GOI": "IN", "GOX": "IN", "DEL": "IN", "BOM": "IN",
    "BLR": "IN", "MAA": "IN", "HYD": "IN", "CCU": "IN",
}
REGION_MARKETS = {"IN": ["BOM", "DEL", "BLR", "MAA"], "DEFAULT": ["PAR", "MAD", "BCN", "AMS"]}

GEO_RADII_KM = (10, 25, 50)
TTL_MARKET_RESULT = 300


def fallback_markets(city: str) -> list[str]:
    """Markets to try for ``city``, regional first, never the city itself."""
    region = REGION_MARKETS.get(CITY_REGION.get(city, "DEFAULT"), REGION_MARKETS["DEFAULT"])
    return [m for m in dict.fromkeys(region + REGION_MARKETS["DEFAULT"]) if m != city]


@dataclass
class HotelSearchQuery:
    check_in_date: str
    check_out_date: str
    adults: str = "1"
    city_code: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    radius: str | None = None
    radius_unit: str | None = None
    currency_code: str | None = None
    page_limit: str | None = None
    page_offset: str | None = None
    hotel_ids: list[str] = field(default_factory=list)
    strict_city: bool = False

    @property
    def has_location(self) -> bool:
        return bool(self.city_code or (self.latitude and self.longitude) or self.hotel_ids)

    def cache_params(self) -> dict:
        params = {
            "checkInDate": self.check_in_date,
            "checkOutDate": self.check_out_date,
            "adults": self.adults,
            "currencyCode": self.currency_code,
            "page[limit]": self.page_limit,
            "page[offset]": self.page_offset,
            "includeClosed": False,
            "bestRateOnly": True,
            "strictCity": self.strict_city,
        }
        if self.city_code:
            params["cityCode"] = self.city_code.upper()
        if self.latitude and self.longitude:
            params["latitude"] = self.latitude
            params["longitude"] = self.longitude
            params["radius"] = self.radius
            params["radiusUnit"] = self.radius_unit
        if self.hotel_ids:
            params["hotelIds"] = ",".join(self.hotel_ids)
        return params


class HotelService:
    """Hotel offers via Amadeus, fronted by the request cache."""

    def __init__(
        self,
        amadeus: AmadeusClient | None = None,
        cache: CacheService | None = None,
    ):
        self.amadeus = amadeus or amadeus_client
        self.cache = cache or cache_service

    async def search(self, query: HotelSearchQuery) -> dict:
        key = self.cache.hotel_search_key(query.cache_params())
        cached = await self.cache.get(key)
        if cached is not None:
            return {"fromCache": True, **cached}

        result = await self._search_upstream(query)
        for hotel in result["data"]:
            for offer in hotel.get("offers") or []:
                if offer.get("id"):
                    await self.cache.set(
                        self.cache.hotel_offer_key(offer["id"]),
                        {"offer": offer, "hotel": hotel.get("hotel")},
                        TTL_OFFER_FROM_SEARCH,
                    )

        if result["data"]:
            if result["via"].startswith("v3-market"):
                ttl = TTL_MARKET_RESULT
            else:
                ttl = ttl_for_travel_date(query.check_in_date)
            await self.cache.set(key, result, ttl)
        return {"fromCache": False, **result}

    async def _search_upstream(self, query: HotelSearchQuery) -> dict:
        city = (query.city_code or "").upper() or None

        if query.hotel_ids:
            data = await self._offers_for_ids(query.hotel_ids, query)
            if data:
                return {"via": "v3:explicit-ids", "data": data, "resolvedCity": city}
            if not (city or query.latitude):
                return {"via": "v3-empty:explicit", "data": [], "resolvedCity": None}

        city_ids: list[str] = []
        if city:
            city_ids = await self.hotel_ids_by_city(city)
            if city_ids:
                data = await self._offers_for_ids(city_ids[: settings.hotel_city_ids_cap], query)
                if data:
                    return {"via": "v3:v1-city", "data": data, "resolvedCity": city}

            if query.strict_city:
                return {"via": "v3-empty:strict-city", "data": [], "resolvedCity": city}

        if query.latitude and query.longitude:
            geo_ids = await self._geo_ids(query)
            merged = list(dict.fromkeys(city_ids + geo_ids))[: settings.hotel_expanded_ids_cap]
            if merged:
                data = await self._offers_for_ids(merged, query)
                if data:
                    via = "v3:v1-city+geo" if city_ids else "v3:v1-geo"
                    return {"via": via, "data": data, "resolvedCity": city}

        if city:
            for market in fallback_markets(city):
                market_ids = (await self.hotel_ids_by_city(market))[: settings.hotel_city_ids_cap]
                if not market_ids:
                    continue
                data = await self._offers_for_ids(market_ids, query)
                if data:
                    logger.info(f"No hotel offers in {city}, showing {market} instead")
                    return {"via": f"v3-market({market})", "data": data, "resolvedCity": market}

        logger.info(f"Hotel search found no offers for {city or (query.latitude, query.longitude)}")
        return {"via": "v3-empty:staged", "data": [], "resolvedCity": city}

    async def _geo_ids(self, query: HotelSearchQuery) -> list[str]:
        if query.radius:
            return await self.hotel_ids_by_geocode(
                query.latitude, query.longitude, query.radius, query.radius_unit
            )
        ids: list[str] = []
        for radius in GEO_RADII_KM:
            ids.extend(
                await self.hotel_ids_by_geocode(query.latitude, query.longitude, str(radius), "KM")
            )
        return list(dict.fromkeys(ids))

    async def hotel_ids_by_city(self, city_code: str) -> list[str]:
        key = self.cache.hotel_ids_key("city", {"cityCode": city_code})
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        ids: list[str] = []
        for code in CITY_ALIASES.get(city_code, [city_code]):
            data = await self.amadeus.get(HOTELS_BY_CITY, {"cityCode": code})
            ids.extend(h["hotelId"] for h in data.get("data", []) if h.get("hotelId"))
        ids = list(dict.fromkeys(ids))
        if ids:
            await self.cache.set(key, ids, settings.hotel_ids_cache_ttl)
        return ids

    async def hotel_ids_by_geocode(
        self,
        latitude: str,
        longitude: str,
        radius: str | None = None,
        radius_unit: str | None = None,
    ) -> list[str]:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "radius": radius,
            "radiusUnit": radius_unit,
        }
        key = self.cache.hotel_ids_key("geo", params)
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        data = await self.amadeus.get(HOTELS_BY_GEOCODE, params)
        ids = list(dict.fromkeys(h["hotelId"] for h in data.get("data", []) if h.get("hotelId")))
        if ids:
            await self.cache.set(key, ids, settings.hotel_ids_cache_ttl)
        return ids

    async def _offers_for_ids(self, hotel_ids: list[str], query: HotelSearchQuery) -> list[dict]:
        data = await self.amadeus.get(
            HOTEL_OFFERS,
            {
                "hotelIds": ",".join(hotel_ids),
                "checkInDate": query.check_in_date,
                "checkOutDate": query.check_out_date,
                "adults": query.adults,
                "currency": query.currency_code,
                "bestRateOnly": True,
            },
        )
        return data.get("data", [])

    async def get_offer(self, offer_id: str) -> dict:
        key = self.cache.hotel_offer_key(offer_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return {"fromCache": True, "data": cached}

        data = await self.amadeus.get(f"{HOTEL_OFFERS}/{offer_id}")
        await self.cache.set(key, data, TTL_HOTEL_OFFER)
        return {"fromCache": False, "data": data}


hotel_service = HotelService()
