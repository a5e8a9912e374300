from voyage.services.amadeus_client import AmadeusError
from voyage.services.planner_service import (
    PlanRequest,
    PlannerService,
    build_daily_plan,
    days_between,
    forecast,
    seeded_int,
)


class FakeFlights:
    def __init__(self, data=None, error=None):
        self.data = data or []
        self.error = error
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return {"ok": True, "data": self.data, "via": "amadeus"}


class FakeHotels(FakeFlights):
    pass


def flight_offer(offer_id, total, carrier="TK", segments=1):
    return {
        "id": offer_id,
        "validatingAirlineCodes": [carrier],
        "price": {"currency": "INR", "total": str(total), "grandTotal": str(total)},
        "itineraries": [{"segments": [{"carrierCode": carrier}] * segments}],
    }


def hotel_item(hotel_id, total):
    return {
        "hotel": {"hotelId": hotel_id, "name": f"Hotel {hotel_id}"},
        "offers": [{"price": {"total": str(total), "currency": "INR"}, "self": f"https://h/{hotel_id}"}],
    }


def test_seeded_int_is_stable_and_bounded():
    values = [seeded_int(f"seed:{i}", 4, 12) for i in range(50)]
    assert values == [seeded_int(f"seed:{i}", 4, 12) for i in range(50)]
    assert all(4 <= v <= 12 for v in values)


def test_days_between_has_a_floor_of_one():
    assert days_between("2026-11-01", "2026-11-04") == 3
    assert days_between("2026-11-01", "2026-11-01") == 1


def test_forecast_covers_each_day():
    days = forecast("IST", "2026-11-01", 3)
    assert [d["date"] for d in days] == ["2026-11-01", "2026-11-02", "2026-11-03"]
    assert all(d["lo"] <= d["hi"] for d in days)


def test_daily_plan_has_three_slots_per_day():
    plan = build_daily_plan("IST", "2026-11-01", "2026-11-04", ["Food"])

    assert len(plan) == 3
    for day in plan:
        assert [b["time"] for b in day["blocks"]] == ["09:30", "13:30", "18:30"]
        assert day["weather"]["date"] == day["date"]


def test_daily_plan_is_deterministic_without_repeats():
    first = build_daily_plan("DXB", "2026-11-01", "2026-11-04", ["Shopping"])
    second = build_daily_plan("dxb", "2026-11-01", "2026-11-04", ["Shopping"])
    assert first == second

    titles = [b["title"] for day in first for b in day["blocks"]]
    assert len(titles) == len(set(titles))


def test_unknown_city_uses_localized_templates():
    plan = build_daily_plan("XYZ", "2026-11-01", "2026-11-02")
    assert all(b["title"].endswith("in XYZ") for b in plan[0]["blocks"])


async def test_plan_composes_two_priced_options():
    flights = FakeFlights([flight_offer("F2", 32000, "QR", 2), flight_offer("F1", 30000)])
    hotels = FakeHotels([hotel_item("H1", 300), hotel_item("H2", 600)])
    service = PlannerService(flights=flights, hotels=hotels)

    data = await service.plan(
        PlanRequest("DEL", "IST", "2026-11-01", "2026-11-04", budget=50000, interests=["Culture"])
    )

    best, alternative = data["options"]
    assert best["label"] == "Best value"
    assert best["flight"]["id"] == "F1"
    assert best["flight"]["summary"] == "TK nonstop"
    assert best["hotel"]["price"] == 100
    assert best["estTotal"] == 30300
    assert alternative["label"] == "Alternative"
    assert alternative["flight"]["summary"] == "QR 1 stop"
    assert alternative["estTotal"] == round(32000 + 200 * 3 * 1.05)
    assert len(best["dailyPlan"]) == 3
    assert data["trip"]["dates"] == {"start": "2026-11-01", "end": "2026-11-04"}
    assert flights.queries[0].return_date == "2026-11-04"


async def test_plan_survives_upstream_failures():
    service = PlannerService(
        flights=FakeFlights(error=AmadeusError(0, "Amadeus disabled")),
        hotels=FakeHotels(error=AmadeusError(500, "down")),
    )

    data = await service.plan(PlanRequest("DEL", "GOI", "2026-11-01", "2026-11-03"))

    assert data["options"][0]["flight"] is None
    assert data["options"][0]["hotel"] is None
    assert data["options"][0]["estTotal"] == 0
    assert len(data["options"][0]["dailyPlan"]) == 2
