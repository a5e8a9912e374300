import pytest

import voyage.routers.flights as flights_router
import voyage.routers.hotels as hotels_router
from conftest import FakeAmadeus
from voyage.services.amadeus_client import AmadeusError
from voyage.services.cache_service import CacheService
from voyage.services.flight_service import FLIGHT_OFFERS, FlightService
from voyage.services.hotel_service import HOTEL_OFFERS, HOTELS_BY_CITY, HotelService

OFFERS = {
    "data": [
        {
            "hotel": {"hotelId": "HPPAR001", "name": "Hotel Lumiere"},
            "offers": [{"id": "OFFER1", "price": {"total": "420.00"}}],
        }
    ]
}


@pytest.fixture
def hotel_upstream(monkeypatch):
    amadeus = FakeAmadeus({
        HOTELS_BY_CITY: {"data": [{"hotelId": "HPPAR001"}]},
        HOTEL_OFFERS: OFFERS,
        f"{HOTEL_OFFERS}/OFFER9": {"data": {"id": "OFFER9"}},
    })
    service = HotelService(amadeus=amadeus, cache=CacheService(redis_url=""))
    monkeypatch.setattr(hotels_router, "hotel_service", service)
    return amadeus


SEARCH = "/api/hotels/search?cityCode=PAR&checkInDate=2026-12-01&checkOutDate=2026-12-04"


def test_ping(client):
    assert client.get("/api/hotels/ping").json() == {"ok": True, "route": "/api/hotels"}


def test_search_then_cache_hit(client, hotel_upstream):
    first = client.get(SEARCH).json()
    second = client.get(SEARCH).json()

    assert first["fromCache"] is False
    assert first["via"] == "v3:v1-city"
    assert second["fromCache"] is True
    assert second["data"] == first["data"]
    assert hotel_upstream.count(HOTEL_OFFERS) == 1


def test_search_requires_dates(client, hotel_upstream):
    resp = client.get("/api/hotels/search?cityCode=PAR&checkInDate=2026-12-01")
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_search_requires_a_location(client, hotel_upstream):
    resp = client.get("/api/hotels/search?checkInDate=2026-12-01&checkOutDate=2026-12-04")
    assert resp.status_code == 400
    assert hotel_upstream.calls == []


def test_offer_lookup_hits_upstream_once(client, hotel_upstream):
    first = client.get("/api/hotels/offer/OFFER9").json()
    second = client.get("/api/hotels/offer/OFFER9").json()

    assert first == {"fromCache": False, "data": {"data": {"id": "OFFER9"}}}
    assert second["fromCache"] is True


def test_upstream_failure_is_a_500_with_message(client, monkeypatch):
    amadeus = FakeAmadeus({HOTELS_BY_CITY: AmadeusError(502, "Amadeus responded 502")})
    monkeypatch.setattr(
        hotels_router, "hotel_service", HotelService(amadeus=amadeus, cache=CacheService(redis_url=""))
    )

    resp = client.get(SEARCH)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Amadeus responded 502"}


def test_flight_search_falls_back_on_unauthorized(client, monkeypatch):
    amadeus = FakeAmadeus({FLIGHT_OFFERS: AmadeusError(401, "Amadeus responded 401")})
    monkeypatch.setattr(
        flights_router, "flight_service", FlightService(amadeus=amadeus, cache=CacheService(redis_url=""))
    )

    resp = client.get(
        "/api/flights/search?originLocationCode=DEL&destinationLocationCode=BOM&departureDate=2026-12-10"
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["via"] == "fallback:401"
    assert body["data"]


def test_flight_search_other_errors(client, monkeypatch):
    amadeus = FakeAmadeus({FLIGHT_OFFERS: AmadeusError(400, "Amadeus responded 400")})
    monkeypatch.setattr(
        flights_router, "flight_service", FlightService(amadeus=amadeus, cache=CacheService(redis_url=""))
    )

    resp = client.get(
        "/api/flights/search?originLocationCode=DEL&destinationLocationCode=BOM&departureDate=2026-12-10"
    )

    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "error": "Amadeus responded 400"}


def test_strict_city_flag_reaches_the_search(client, monkeypatch):
    amadeus = FakeAmadeus({HOTELS_BY_CITY: {"data": []}})
    monkeypatch.setattr(
        hotels_router, "hotel_service", HotelService(amadeus=amadeus, cache=CacheService(redis_url=""))
    )

    body = client.get(SEARCH + "&strictCity=1&latitude=48.85&longitude=2.35").json()

    assert body["via"] == "v3-empty:strict-city"
    assert body["data"] == []
