import voyage.routers.ai as ai_router
from voyage.services.cache_service import CacheService
from voyage.services.concierge_service import ConciergeService


class NoLLM:
    available = False


def test_health(client):
    body = client.get("/api/health").json()
    assert body["ok"] is True
    assert body["amadeusBase"].startswith("https://")


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found", "path": "/api/nope", "method": "GET"}


def test_fx_rates_are_inr_anchored(client):
    body = client.get("/api/fx/latest?base=USD").json()
    assert body["base"] == "INR"
    assert body["rates"]["INR"] == 1


def test_destination_catalog_and_suggest(client):
    catalog = client.get("/api/destinations/catalog?region=Europe&limit=3").json()
    assert len(catalog["data"]) == 3
    assert catalog["via"] == "catalog"

    alias = client.get("/api/destinations/all?q=dxb").json()
    assert alias["data"][0]["destinationIata"] == "DXB"

    suggestions = client.get("/api/destinations/suggest?q=par").json()
    assert suggestions["data"][0]["code"] == "CDG"
    assert client.get("/api/destinations/suggest?q=p").json()["data"] == []


def test_airport_search_falls_back_when_amadeus_is_disabled(client):
    body = client.get("/api/airports/search?term=del").json()
    assert body["via"] == "fallback"
    assert body["data"][0]["code"] == "DEL"

    assert client.get("/api/airports?q=").json() == {"ok": True, "data": []}
    assert client.get("/api/airports/ping").json()["ok"] is True


def test_cities_report_upstream_failure_inline(client):
    body = client.get("/api/cities?q=paris").json()
    assert body["ok"] is False
    assert body["data"] == []
    assert body["meta"]["message"] == "Amadeus disabled"


def test_air_nearby_requires_numeric_coordinates(client):
    assert client.get("/api/air/nearby?lat=abc&lon=1").status_code == 400


def test_air_nearby_rejects_non_finite_coordinates(client):
    for query in ("lat=nan&lon=77", "lat=28.6&lon=inf", "lat=-inf&lon=77"):
        resp = client.get(f"/api/air/nearby?{query}")
        assert resp.status_code == 400
        assert resp.json() == {"error": "lat_and_lon_required"}


def test_destination_limits_are_clamped(client):
    catalog = client.get("/api/destinations/catalog?limit=5000")
    assert catalog.status_code == 200
    assert 0 < len(catalog.json()["data"]) <= 1000

    assert len(client.get("/api/destinations/all?limit=0").json()["data"]) == 1

    suggest = client.get("/api/destinations/suggest?q=pa&limit=0")
    assert suggest.status_code == 200
    assert len(suggest.json()["data"]) <= 1


def test_geo_resolve_requires_city_or_code(client):
    assert client.get("/api/geo/resolve").status_code == 400


def test_ai_chat_round_trip(client, monkeypatch):
    service = ConciergeService(llm=NoLLM(), cache=CacheService(redis_url=""))
    monkeypatch.setattr(ai_router, "concierge_service", service)

    resp = client.post(
        "/api/ai/chat",
        json={"message": "Plan a trip to paris", "conversationId": "abc", "context": {}},
    )
    body = resp.json()
    assert body["success"] is True
    assert body["conversationId"] == "abc"
    assert body["intent"]["destination"] == "CDG"
    assert "Paris" in body["response"]

    history = client.get("/api/ai/conversation/abc").json()["history"]
    assert len(history) == 2

    assert client.delete("/api/ai/conversation/abc").json()["success"] is True
    assert client.get("/api/ai/conversation/abc").json()["history"] == []


def test_ai_chat_rejects_non_string_message(client):
    assert client.post("/api/ai/chat", json={"message": 42}).status_code == 400
    assert client.post("/api/ai/chat", json={}).status_code == 400


def test_ai_helpers(client):
    assert client.post("/api/ai/recommendations", json={}).status_code == 400
    recs = client.post(
        "/api/ai/recommendations", json={"tripData": {"destination": "Goa", "budget": 500}}
    ).json()
    assert recs["success"] is True

    assert client.post("/api/ai/enhance-itinerary", json={"destination": "Goa"}).status_code == 400
    assert client.post("/api/ai/insights", json={}).json()["success"] is True
    assert client.get("/api/ai/status").json()["success"] is True
    assert client.get("/api/ai/test").json() == {"message": "AI routes are working!"}


def test_agent_plan_requires_dates(client):
    resp = client.post("/api/agent/plan", json={"origin": "DEL", "destination": "IST"})
    assert resp.status_code == 400


def test_agent_plan_rejects_invalid_dates(client):
    resp = client.post(
        "/api/agent/plan",
        json={
            "origin": "DEL",
            "destination": "DXB",
            "dates": {"start": "2026-13-01", "end": "2026-13-05"},
        },
    )
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_agent_plan_with_upstream_disabled(client):
    resp = client.post(
        "/api/agent/plan",
        json={
            "origin": "del",
            "destination": "ist",
            "dates": {"start": "2026-11-01", "end": "2026-11-03"},
            "interests": ["Food"],
        },
    )
    body = resp.json()
    assert resp.status_code == 200
    assert body["data"]["trip"]["origin"] == "DEL"
    assert [o["label"] for o in body["data"]["options"]] == ["Best value", "Alternative"]
    assert len(body["data"]["options"][0]["dailyPlan"]) == 2
