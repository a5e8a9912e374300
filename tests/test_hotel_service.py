import pytest

from conftest import FakeAmadeus
from voyage.services.amadeus_client import AmadeusError
from voyage.services.cache_service import CacheService
from voyage.services.hotel_service import (
    HOTEL_OFFERS,
    HOTELS_BY_CITY,
    HOTELS_BY_GEOCODE,
    HotelSearchQuery,
    HotelService,
    fallback_markets,
)

PARIS_OFFERS = {
    "data": [
        {
            "hotel": {"hotelId": "HPPAR001", "name": "Hotel Lumiere"},
            "offers": [{"id": "OFFER1", "price": {"total": "420.00", "currency": "EUR"}}],
        }
    ]
}


def make_service(responses):
    amadeus = FakeAmadeus(responses)
    return HotelService(amadeus=amadeus, cache=CacheService(redis_url="")), amadeus


def paris_query(**overrides):
    params = {"check_in_date": "2026-12-01", "check_out_date": "2026-12-04", "city_code": "par"}
    params.update(overrides)
    return HotelSearchQuery(**params)


async def test_city_search_resolves_ids_then_offers():
    service, amadeus = make_service({
        HOTELS_BY_CITY: {"data": [{"hotelId": f"H{i:03}"} for i in range(30)]},
        HOTEL_OFFERS: PARIS_OFFERS,
    })

    result = await service.search(paris_query())

    assert result["fromCache"] is False
    assert result["via"] == "v3:v1-city"
    assert result["resolvedCity"] == "PAR"
    assert result["data"][0]["hotel"]["name"] == "Hotel Lumiere"

    _, _, params = next(c for c in amadeus.calls if c[1] == HOTEL_OFFERS)
    assert len(params["hotelIds"].split(",")) == 20
    assert params["bestRateOnly"] is True


async def test_second_identical_search_is_served_from_cache():
    service, amadeus = make_service({
        HOTELS_BY_CITY: {"data": [{"hotelId": "HPPAR001"}]},
        HOTEL_OFFERS: PARIS_OFFERS,
    })

    await service.search(paris_query())
    second = await service.search(paris_query())

    assert second["fromCache"] is True
    assert second["data"] == PARIS_OFFERS["data"]
    assert amadeus.count(HOTEL_OFFERS) == 1


async def test_offers_from_search_are_cached_individually():
    service, amadeus = make_service({
        HOTELS_BY_CITY: {"data": [{"hotelId": "HPPAR001"}]},
        HOTEL_OFFERS: PARIS_OFFERS,
    })
    await service.search(paris_query())

    offer = await service.get_offer("OFFER1")

    assert offer["fromCache"] is True
    assert offer["data"]["hotel"]["hotelId"] == "HPPAR001"
    assert not any(path.endswith("/OFFER1") for _, path, _ in amadeus.calls)


async def test_geo_ids_are_merged_when_city_has_no_offers():
    offer_calls = []

    def offers(params):
        offer_calls.append(1)
        return PARIS_OFFERS if len(offer_calls) > 1 else {"data": []}

    service, amadeus = make_service({
        HOTELS_BY_CITY: {"data": [{"hotelId": "C1"}, {"hotelId": "G1"}]},
        HOTELS_BY_GEOCODE: {"data": [{"hotelId": "G1"}, {"hotelId": "G2"}]},
        HOTEL_OFFERS: offers,
    })

    result = await service.search(paris_query(latitude="48.85", longitude="2.35"))

    assert result["via"] == "v3:v1-city+geo"
    _, _, params = [c for c in amadeus.calls if c[1] == HOTEL_OFFERS][-1]
    assert params["hotelIds"] == "C1,G1,G2"


async def test_explicit_ids_skip_id_resolution():
    service, amadeus = make_service({HOTEL_OFFERS: PARIS_OFFERS})

    result = await service.search(
        HotelSearchQuery("2026-12-01", "2026-12-04", hotel_ids=["HPPAR001"])
    )

    assert result["via"] == "v3:explicit-ids"
    assert amadeus.count(HOTELS_BY_CITY) == 0


async def test_empty_results_are_not_cached():
    service, amadeus = make_service({HOTELS_BY_CITY: {"data": []}})

    first = await service.search(paris_query())
    lookups = amadeus.count(HOTELS_BY_CITY)
    second = await service.search(paris_query())

    assert first["via"] == "v3-empty:staged"
    assert second["fromCache"] is False
    assert amadeus.count(HOTELS_BY_CITY) == 2 * lookups


async def test_strict_city_stops_after_city_stage():
    service, amadeus = make_service({HOTELS_BY_CITY: {"data": []}})

    result = await service.search(
        paris_query(latitude="48.85", longitude="2.35", strict_city=True)
    )

    assert result["via"] == "v3-empty:strict-city"
    assert result["resolvedCity"] == "PAR"
    assert amadeus.count(HOTELS_BY_GEOCODE) == 0
    assert amadeus.count(HOTELS_BY_CITY) == 1


async def test_geocode_sweeps_widening_radii():
    service, amadeus = make_service({
        HOTELS_BY_GEOCODE: lambda params: {"data": [{"hotelId": f"G{params['radius']}"}]},
        HOTEL_OFFERS: PARIS_OFFERS,
    })

    result = await service.search(
        HotelSearchQuery("2026-12-01", "2026-12-04", latitude="48.85", longitude="2.35")
    )

    assert result["via"] == "v3:v1-geo"
    radii = [
        (p["radius"], p["radiusUnit"]) for _, path, p in amadeus.calls if path == HOTELS_BY_GEOCODE
    ]
    assert radii == [("10", "KM"), ("25", "KM"), ("50", "KM")]
    _, _, params = next(c for c in amadeus.calls if c[1] == HOTEL_OFFERS)
    assert params["hotelIds"] == "G10,G25,G50"


async def test_explicit_radius_is_used_as_given():
    service, amadeus = make_service({HOTELS_BY_GEOCODE: {"data": []}})

    await service.search(
        HotelSearchQuery(
            "2026-12-01", "2026-12-04", latitude="48.85", longitude="2.35",
            radius="5", radius_unit="MILE",
        )
    )

    assert amadeus.count(HOTELS_BY_GEOCODE) == 1
    _, _, params = next(c for c in amadeus.calls if c[1] == HOTELS_BY_GEOCODE)
    assert params["radius"] == "5"


def test_fallback_markets_are_regional_first():
    assert fallback_markets("GOI") == ["BOM", "DEL", "BLR", "MAA", "PAR", "MAD", "BCN", "AMS"]
    assert fallback_markets("DEL") == ["BOM", "BLR", "MAA", "PAR", "MAD", "BCN", "AMS"]
    assert fallback_markets("XYZ") == ["PAR", "MAD", "BCN", "AMS"]


async def test_city_without_inventory_falls_back_to_a_nearby_market():
    def hotels_by_city(params):
        if params["cityCode"] == "DEL":
            return {"data": [{"hotelId": "HDEL0001"}]}
        return {"data": []}

    service, amadeus = make_service({
        HOTELS_BY_CITY: hotels_by_city,
        HOTEL_OFFERS: PARIS_OFFERS,
    })

    result = await service.search(paris_query(city_code="GOI"))

    assert result["via"] == "v3-market(DEL)"
    assert result["resolvedCity"] == "DEL"
    codes = [p["cityCode"] for _, path, p in amadeus.calls if path == HOTELS_BY_CITY]
    assert codes == ["GOI", "GOX", "BOM", "DEL"]


async def test_goa_searches_sibling_city_code():
    service, amadeus = make_service({HOTELS_BY_CITY: {"data": []}})

    await service.hotel_ids_by_city("GOI")

    codes = [params["cityCode"] for _, path, params in amadeus.calls if path == HOTELS_BY_CITY]
    assert codes == ["GOI", "GOX"]


async def test_upstream_errors_propagate():
    service, _ = make_service({HOTELS_BY_CITY: AmadeusError(500, "Amadeus responded 500")})

    with pytest.raises(AmadeusError):
        await service.search(paris_query())


def test_cache_params_are_canonical():
    params = paris_query(currency_code="EUR").cache_params()
    assert params["cityCode"] == "PAR"
    assert params["includeClosed"] is False
    assert params["bestRateOnly"] is True
    assert "latitude" not in params
