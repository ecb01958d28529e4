"""
Integration tests for the Booking API.
"""

import asyncio
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from courtbook.api.booking_server import create_app
from courtbook.config import FACILITIES

# Squash: generic timetable, 1 to 6 participants
FACILITY_ID = "indoor-2"


@pytest.fixture
def app(now):
    """Application with an empty store and a frozen clock."""
    return create_app(clock=lambda: now)


@pytest.fixture
async def client(app):
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def tomorrow(now):
    return now.date() + timedelta(days=1)


async def bookable_slots(client, day, facility_id=FACILITY_ID, court=0):
    response = await client.get(
        f"/api/v1/facilities/{facility_id}/slots", params={"date": day.isoformat(), "court": court}
    )
    assert response.status_code == 200
    return [slot for slot in response.json()["slots"] if slot["available"] > 0]


def separated(slots):
    """Two bookable slots with at least one slot between them."""
    for first in slots:
        for second in slots:
            if second["slot_index"] - first["slot_index"] >= 2:
                return first, second
    raise AssertionError("No two separated bookable slots")


def booking_body(slot, day, **overrides):
    body = {
        "facility_id": FACILITY_ID,
        "court": 0,
        "date": day.isoformat(),
        "slot_id": slot["id"],
        "participant_count": 2,
        "signed_in": True,
    }
    body.update(overrides)
    return body


class TestHealthEndpoint:
    """Test health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        """Health endpoint should return OK."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestFacilityEndpoints:
    """Test the facility catalog and slot listing."""

    @pytest.mark.asyncio
    async def test_list_facilities(self, client):
        response = await client.get("/api/v1/facilities")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == len(FACILITIES)
        assert {"id", "name", "sport", "location", "courts"} <= set(data[0])

    @pytest.mark.asyncio
    async def test_bookable_dates(self, client, now):
        response = await client.get("/api/v1/dates")

        assert response.status_code == 200
        dates = response.json()
        assert len(dates) == 60
        assert dates[0] == now.date().isoformat()
        assert dates[-1] == (now.date() + timedelta(days=59)).isoformat()

    @pytest.mark.asyncio
    async def test_get_slots(self, client, tomorrow):
        response = await client.get(
            f"/api/v1/facilities/{FACILITY_ID}/slots", params={"date": tomorrow.isoformat()}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 21
        assert len(data["slots"]) == 21
        slot = data["slots"][0]
        assert slot["time_range"] == "6:45 AM - 7:30 AM"
        assert slot["capacity"] == 6

    @pytest.mark.asyncio
    async def test_slots_are_stable_across_requests(self, client, tomorrow):
        params = {"date": tomorrow.isoformat(), "court": 1}
        first = await client.get(f"/api/v1/facilities/{FACILITY_ID}/slots", params=params)
        second = await client.get(f"/api/v1/facilities/{FACILITY_ID}/slots", params=params)

        assert first.json() == second.json()

    @pytest.mark.asyncio
    async def test_unknown_facility(self, client, tomorrow):
        response = await client.get(
            "/api/v1/facilities/indoor-99/slots", params={"date": tomorrow.isoformat()}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_court_out_of_range(self, client, tomorrow):
        response = await client.get(
            f"/api/v1/facilities/{FACILITY_ID}/slots", params={"date": tomorrow.isoformat(), "court": 5}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_date(self, client):
        response = await client.get(f"/api/v1/facilities/{FACILITY_ID}/slots", params={"date": "soon"})

        assert response.status_code == 422


class TestCreateBooking:
    """Test the booking endpoint."""

    @pytest.mark.asyncio
    async def test_create_booking(self, client, tomorrow):
        slot = (await bookable_slots(client, tomorrow))[0]

        response = await client.post("/api/v1/bookings", json=booking_body(slot, tomorrow))

        assert response.status_code == 201
        data = response.json()
        assert data["real_time_status"] == "Upcoming"
        assert data["is_active"] is True
        assert data["can_cancel"] is True
        assert data["booking"]["date"] == "Tomorrow"
        assert data["booking"]["time"] == slot["time_range"]
        assert data["booking"]["id"].startswith("BK-")

    @pytest.mark.asyncio
    async def test_sign_in_required(self, client, tomorrow):
        slot = (await bookable_slots(client, tomorrow))[0]

        response = await client.post(
            "/api/v1/bookings", json=booking_body(slot, tomorrow, signed_in=False)
        )

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "SIGN_IN_REQUIRED"

    @pytest.mark.asyncio
    async def test_unknown_slot(self, client, tomorrow):
        response = await client.post(
            "/api/v1/bookings", json=booking_body({"id": "no-such-slot"}, tomorrow)
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "SLOT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unknown_facility(self, client, tomorrow):
        response = await client.post(
            "/api/v1/bookings",
            json=booking_body({"id": "no-such-slot"}, tomorrow, facility_id="indoor-99"),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_too_many_participants(self, client, tomorrow):
        slot = (await bookable_slots(client, tomorrow))[0]

        response = await client.post(
            "/api/v1/bookings", json=booking_body(slot, tomorrow, participant_count=7)
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "PARTICIPANTS_ABOVE_MAXIMUM"

    @pytest.mark.asyncio
    async def test_date_beyond_horizon(self, client, now):
        day = now.date() + timedelta(days=90)

        response = await client.post(
            "/api/v1/bookings", json=booking_body({"id": "no-such-slot"}, day)
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "DATE_OUT_OF_RANGE"

    @pytest.mark.asyncio
    async def test_daily_cap(self, client, tomorrow):
        """A third booking on the same day is refused with 409."""
        slots = await bookable_slots(client, tomorrow)
        first, second = separated(slots)
        third = next(
            s
            for s in slots
            if abs(s["slot_index"] - first["slot_index"]) >= 2
            and abs(s["slot_index"] - second["slot_index"]) >= 2
        )

        assert (await client.post("/api/v1/bookings", json=booking_body(first, tomorrow))).status_code == 201
        assert (await client.post("/api/v1/bookings", json=booking_body(second, tomorrow))).status_code == 201
        response = await client.post("/api/v1/bookings", json=booking_body(third, tomorrow))

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "DAILY_BOOKING_LIMIT"

    @pytest.mark.asyncio
    async def test_concurrent_bookings_of_one_slot(self, client, tomorrow):
        """Only one of several simultaneous requests for a slot succeeds."""
        slot = (await bookable_slots(client, tomorrow))[0]
        body = booking_body(slot, tomorrow)

        responses = await asyncio.gather(
            *[client.post("/api/v1/bookings", json=body) for _ in range(5)]
        )

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 409, 409, 409, 409]
        listed = await client.get("/api/v1/bookings")
        assert len(listed.json()) == 1


class TestBookingEndpoints:
    """Test reading, cancelling and credentials."""

    @pytest.fixture
    async def booking(self, client, tomorrow):
        slot = (await bookable_slots(client, tomorrow))[0]
        response = await client.post("/api/v1/bookings", json=booking_body(slot, tomorrow))
        assert response.status_code == 201
        return response.json()["booking"]

    @pytest.mark.asyncio
    async def test_get_booking(self, client, booking):
        response = await client.get(f"/api/v1/bookings/{booking['id']}")

        assert response.status_code == 200
        assert response.json()["booking"]["id"] == booking["id"]

    @pytest.mark.asyncio
    async def test_get_unknown_booking(self, client):
        response = await client.get("/api/v1/bookings/BK-NOPE00")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_bookings(self, client, booking):
        response = await client.get("/api/v1/bookings")

        assert response.status_code == 200
        assert [v["booking"]["id"] for v in response.json()] == [booking["id"]]

    @pytest.mark.asyncio
    async def test_cancel_booking(self, client, booking):
        response = await client.post(f"/api/v1/bookings/{booking['id']}/cancel")

        assert response.status_code == 200
        assert response.json()["real_time_status"] == "Cancelled"
        active = await client.get("/api/v1/bookings", params={"active": True})
        assert active.json() == []

    @pytest.mark.asyncio
    async def test_cancel_twice(self, client, booking):
        await client.post(f"/api/v1/bookings/{booking['id']}/cancel")

        response = await client.post(f"/api/v1/bookings/{booking['id']}/cancel")

        assert response.status_code == 409
        assert "already cancelled" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, client):
        response = await client.post("/api/v1/bookings/BK-NOPE00/cancel")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_credential(self, client, booking):
        response = await client.get(f"/api/v1/bookings/{booking['id']}/credential")

        assert response.status_code == 200
        data = response.json()
        assert data["share_token"] == booking["share_token"]
        assert data["share_url"].endswith(f"/join/{booking['share_token']}")
        assert data["available"] is False
        assert data["status"].startswith("Available in ")

    @pytest.mark.asyncio
    async def test_join_link_opens_the_booking(self, client, booking):
        """The share URL from the credential resolves to the booking."""
        credential = (await client.get(f"/api/v1/bookings/{booking['id']}/credential")).json()
        path = "/join/" + credential["share_url"].rsplit("/join/", 1)[1]

        response = await client.get(path)

        assert response.status_code == 200
        data = response.json()
        assert data["booking"]["id"] == booking["id"]
        assert data["real_time_status"] == "Upcoming"

    @pytest.mark.asyncio
    async def test_join_link_with_unknown_token(self, client, booking):
        response = await client.get("/join/BK-NOPE0000")

        assert response.status_code == 404
