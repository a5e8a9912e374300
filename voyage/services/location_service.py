"""Location service — airport/city autocomplete, nearby airports, geocode resolution."""

import logging

from voyage.data.catalog import DESTINATIONS
from voyage.services.amadeus_client import AmadeusClient, AmadeusError, amadeus_client
from voyage.services.cache_service import TTL_CITIES, CacheService, cache_service

logger = logging.getLogger(__name__)

LOCATIONS = "/v1/reference-data/locations"
AIRPORTS_NEARBY = "/v1/reference-data/locations/airports"

# Offline autocomplete rows built from the destination catalog
FALLBACK_AIRPORTS = list({
    d.iata: {"code": d.iata, "city": d.city, "name": d.city, "country": d.country}
    for d in DESTINATIONS
}.values())


def _prefer_city(rows: list[dict]) -> list[dict]:
    """One row per IATA code, keeping the CITY row over an AIRPORT row."""
    picked: dict[str, dict] = {}
    for row in rows:
        prev = picked.get(row["code"])
        if prev is None or (prev["subType"] != "CITY" and row["subType"] == "CITY"):
            picked[row["code"]] = row
    return list(picked.values())


class LocationService:
    """Amadeus reference-data lookups with catalog fallbacks."""

    def __init__(
        self,
        amadeus: AmadeusClient | None = None,
        cache: CacheService | None = None,
    ):
        self.amadeus = amadeus or amadeus_client
        self.cache = cache or cache_service

    async def search_airports(self, term: str, limit: int = 10) -> dict:
        term = term.strip()
        if not term:
            return {"ok": True, "data": []}

        try:
            resp = await self.amadeus.get(
                LOCATIONS,
                {"keyword": term, "subType": "CITY,AIRPORT", "page[limit]": str(limit * 3)},
            )
        except AmadeusError as e:
            logger.warning(f"Airport search falling back to catalog: {e}")
            q = term.lower()
            matches = [
                a for a in FALLBACK_AIRPORTS
                if a["code"].lower().startswith(q) or q in a["city"].lower() or q in a["name"].lower()
            ]
            return {"ok": True, "data": self._shape(matches[:limit]), "via": "fallback"}

        rows = []
        for item in resp.get("data") or []:
            code = (item.get("iataCode") or "").upper()
            if not code:
                continue
            address = item.get("address") or {}
            rows.append({
                "code": code,
                "city": address.get("cityName") or item.get("name") or "",
                "name": item.get("name") or "",
                "country": address.get("countryName") or address.get("countryCode") or "",
                "subType": item.get("subType"),
            })
        return {"ok": True, "data": self._shape(_prefer_city(rows)[:limit]), "via": "amadeus"}

    @staticmethod
    def _shape(rows: list[dict]) -> list[dict]:
        return [
            {
                "id": f"{r['code']}-{i}",
                "code": r["code"],
                "city": r.get("city") or r.get("name") or "",
                "name": r.get("name") or "",
                "country": r.get("country") or "",
            }
            for i, r in enumerate(rows)
        ]

    async def search_cities(self, q: str, limit: int = 10) -> dict:
        q = q.strip()
        if len(q) < 2:
            return {"ok": True, "data": []}

        key = self.cache.cities_key(q, limit)
        cached = await self.cache.get(key)
        if cached is not None:
            return {"ok": True, "data": cached, "fromCache": True}

        resp = await self.amadeus.get(
            LOCATIONS,
            {"subType": "CITY,AIRPORT", "keyword": q, "page[limit]": str(limit * 3)},
        )

        rows = []
        for item in resp.get("data") or []:
            code = (item.get("iataCode") or "").upper()
            if not code:
                continue
            address = item.get("address") or {}
            geo = item.get("geoCode") or {}
            sub_type = item.get("subType")
            country = address.get("countryName") or address.get("countryCode") or ""
            city = address.get("cityName") or address.get("cityNameEn") or address.get("stateCode") or ""
            name = f"{item.get('name')} — {city}" if sub_type == "AIRPORT" and city else item.get("name")
            rows.append({
                "code": code,
                "name": name,
                "city": city or item.get("name"),
                "country": country,
                "subType": sub_type,
                "lat": geo.get("latitude"),
                "lon": geo.get("longitude"),
                "display": f"{name}, {country}" if country else name,
            })

        out = _prefer_city(rows)[:limit]
        await self.cache.set(key, out, TTL_CITIES)
        return {"ok": True, "data": out}

    async def lookup(self, keyword: str, sub_type: str = "CITY,AIRPORT", limit: int = 8) -> list[dict]:
        keyword = keyword.strip()
        if not keyword:
            return []
        resp = await self.amadeus.get(LOCATIONS, {"keyword": keyword, "subType": sub_type})
        out = []
        for item in (resp.get("data") or [])[:limit]:
            address = item.get("address") or {}
            out.append({
                "id": f"{item.get('subType')}:{item.get('iataCode')}",
                "type": item.get("subType"),
                "code": item.get("iataCode"),
                "name": item.get("name"),
                "detailedName": item.get("detailedName") or item.get("name"),
                "cityName": address.get("cityName") or item.get("name"),
                "countryCode": address.get("countryCode"),
                "geo": item.get("geoCode"),
            })
        return out

    async def nearby_airports(self, lat: float, lon: float, limit: int = 5) -> list[dict]:
        resp = await self.amadeus.get(AIRPORTS_NEARBY, {"latitude": lat, "longitude": lon})
        out = []
        for item in resp.get("data") or []:
            if not item.get("iataCode"):
                continue
            address = item.get("address") or {}
            out.append({
                "code": item["iataCode"],
                "name": item.get("name"),
                "city": address.get("cityName") or "",
                "countryCode": address.get("countryCode") or "",
                "distance": (item.get("distance") or {}).get("value"),
                "geo": item.get("geoCode"),
            })
        return out[:limit]

    async def resolve(self, code: str = "", city: str = "") -> dict | None:
        """Coordinates for a city name or IATA code, preferring CITY matches."""
        keyword = code.strip().upper() or city.strip()
        if not keyword:
            return None
        resp = await self.amadeus.get(LOCATIONS, {"keyword": keyword, "subType": "CITY,AIRPORT"})
        rows = resp.get("data") or []
        best = next((r for r in rows if r.get("subType") == "CITY"), None) or next(
            (r for r in rows if r.get("subType") == "AIRPORT"), None
        )
        if not best:
            return None
        geo = best.get("geoCode") or {}
        lat, lon = geo.get("latitude"), geo.get("longitude")
        if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            return None
        address = best.get("address") or {}
        return {
            "source": "amadeus",
            "lat": lat,
            "lon": lon,
            "name": best.get("name"),
            "code": best.get("iataCode"),
            "country": address.get("countryName") or address.get("countryCode"),
        }


location_service = LocationService()
