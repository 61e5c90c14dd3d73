"""
Tests for date constraints: availability lookups and lock repair.
"""

import pytest
from httpx import AsyncClient

from nomadic.models.date_lock import DateLocationLock

from conftest import future_date


@pytest.mark.asyncio
async def test_open_date(client: AsyncClient):
    response = await client.get("/api/v1/date-constraints", params={"date": future_date().isoformat()})
    assert response.status_code == 200
    assert response.json() == {
        "locked_location": None,
        "total_tents": 0,
        "remaining_capacity": 10,
        "available_locations": ["Desert", "Mountain", "Wadi"],
    }


@pytest.mark.asyncio
async def test_locked_date_counts_paid_only(client: AsyncClient, make_booking):
    day = future_date()
    await make_booking(booking_date=day, location="Wadi", tents=3)
    await make_booking(booking_date=day, location="Wadi", tents=2)
    await make_booking(booking_date=day, location="Desert", tents=4, is_paid=False)

    response = await client.get("/api/v1/date-constraints", params={"date": day.isoformat()})
    data = response.json()
    assert data["locked_location"] == "Wadi"
    assert data["total_tents"] == 5
    assert data["remaining_capacity"] == 5
    assert data["available_locations"] == ["Wadi"]


@pytest.mark.asyncio
async def test_date_parameter_required(client: AsyncClient):
    response = await client.get("/api/v1/date-constraints")
    assert response.status_code == 400
    assert response.json()["detail"] == "Date parameter is required"


@pytest.mark.asyncio
async def test_inconsistent_locations_are_an_internal_error(client: AsyncClient, make_booking):
    day = future_date()
    await make_booking(booking_date=day, location="Desert")
    await make_booking(booking_date=day, location="Mountain")

    response = await client.get("/api/v1/date-constraints", params={"date": day.isoformat()})
    assert response.status_code == 500
    assert response.json()["detail"] == "Internal error: Inconsistent location data for this date"


@pytest.mark.asyncio
async def test_update_requires_fields(client: AsyncClient):
    response = await client.post("/api/v1/date-constraints", json={"date": future_date().isoformat()})
    assert response.status_code == 400
    assert response.json()["detail"] == "Date, location, and tents are required"


@pytest.mark.asyncio
async def test_update_rebuilds_lock_from_paid_bookings(client: AsyncClient, db_session, make_booking):
    day = future_date()
    await make_booking(booking_date=day, location="Mountain", tents=4)
    db_session.add(DateLocationLock(date=day, locked_location="Desert", total_tents=9))
    await db_session.commit()

    response = await client.post(
        "/api/v1/date-constraints",
        json={"date": day.isoformat(), "location": "Desert", "tents": 2},
    )
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "locked_location": "Mountain",
        "total_tents": 4,
        "remaining_capacity": 6,
    }


@pytest.mark.asyncio
async def test_update_is_idempotent(client: AsyncClient, db_session, make_booking):
    day = future_date()
    await make_booking(booking_date=day, location="Desert", tents=3)
    body = {"date": day.isoformat(), "location": "Desert", "tents": 3}

    first = await client.post("/api/v1/date-constraints", json=body)
    second = await client.post("/api/v1/date-constraints", json=body)
    assert first.json() == second.json()

    lock = await db_session.get(DateLocationLock, day)
    assert (lock.locked_location, lock.total_tents) == ("Desert", 3)


@pytest.mark.asyncio
async def test_update_on_empty_date_uses_requested_location(client: AsyncClient):
    day = future_date()
    response = await client.post(
        "/api/v1/date-constraints",
        json={"date": day.isoformat(), "location": "Wadi", "tents": 2},
    )
    assert response.json()["locked_location"] == "Wadi"
    assert response.json()["total_tents"] == 0
