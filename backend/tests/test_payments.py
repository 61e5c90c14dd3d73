"""
Tests for checkout sessions and the Stripe webhook.

Webhook requests carry real Stripe-Signature headers computed with the
test secret, so signature verification runs unpatched.
"""

import hashlib
import hmac
import json
import time

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.core.config import get_settings
from nomadic.main import app
from nomadic.models.booking import Booking
from nomadic.models.date_lock import DateLocationLock
from nomadic.services.interfaces.optimistic_admission import OptimisticAdmission
from nomadic.services.notification_service import get_notifier
from nomadic.services.strategy_factory import get_admission

from conftest import FakeNotifier, future_date

WEBHOOK_SECRET = "whsec_test_secret"


def sign(payload: str, secret: str = WEBHOOK_SECRET) -> str:
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def completed_event(booking_id, payment_intent: str = "pi_123") -> str:
    return json.dumps(
        {
            "id": "evt_1",
            "type": "checkout.session.completed",
            "data": {
                "object": {
                    "id": "cs_test_1",
                    "payment_intent": payment_intent,
                    "metadata": {"booking_id": str(booking_id)},
                }
            },
        }
    )


async def post_webhook(client: AsyncClient, payload: str, signature: str = None):
    return await client.post(
        "/api/v1/webhooks/stripe",
        content=payload,
        headers={
            "content-type": "application/json",
            "stripe-signature": signature if signature is not None else sign(payload),
        },
    )


@pytest.fixture(autouse=True)
def stripe_settings(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(settings, "STRIPE_USE_STUB", True)
    return settings


@pytest.mark.asyncio
async def test_checkout_session_stub(client: AsyncClient, make_booking):
    booking = await make_booking(is_paid=False)

    response = await client.post("/api/v1/checkout/sessions", json={"booking_id": booking.id})
    assert response.status_code == 200
    data = response.json()
    assert data["session_id"].startswith("cs_test_")
    assert f"booking={booking.id}" in data["url"]
    assert "amount=272370" in data["url"]

    lookup = await client.get(f"/api/v1/bookings/session/{data['session_id']}")
    assert lookup.json()["id"] == booking.id


@pytest.mark.asyncio
async def test_checkout_rejects_paid_or_unknown_booking(client: AsyncClient, make_booking):
    paid = await make_booking(is_paid=True)

    response = await client.post("/api/v1/checkout/sessions", json={"booking_id": paid.id})
    assert response.status_code == 400
    assert response.json()["detail"] == "Booking is already paid"

    response = await client.post("/api/v1/checkout/sessions", json={"booking_id": 9999})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_completed_checkout_marks_booking_paid(client: AsyncClient, db_session, make_booking, notifier):
    booking = await make_booking(is_paid=False, location="Mountain", tents=3)

    response = await post_webhook(client, completed_event(booking.id))
    assert response.status_code == 200
    assert response.json() == {"received": True}

    await db_session.refresh(booking)
    assert booking.is_paid is True
    assert booking.stripe_payment_intent_id == "pi_123"
    assert booking.paid_at is not None

    lock = await db_session.get(DateLocationLock, booking.booking_date)
    assert (lock.locked_location, lock.total_tents) == ("Mountain", 3)
    assert notifier.sent == [("customer", booking.id), ("admin", booking.id)]


@pytest.mark.asyncio
async def test_paid_booking_now_counts_toward_capacity(client: AsyncClient, make_booking):
    day = future_date()
    booking = await make_booking(booking_date=day, is_paid=False, tents=4)

    before = await client.get("/api/v1/date-constraints", params={"date": day.isoformat()})
    assert before.json()["remaining_capacity"] == 10

    await post_webhook(client, completed_event(booking.id))

    after = await client.get("/api/v1/date-constraints", params={"date": day.isoformat()})
    assert after.json()["remaining_capacity"] == 6


@pytest.mark.asyncio
async def test_bad_signature_changes_nothing(client: AsyncClient, db_session, make_booking, notifier):
    booking = await make_booking(is_paid=False)
    payload = completed_event(booking.id)

    response = await post_webhook(client, payload, signature=sign(payload, secret="whsec_wrong"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid signature"

    response = await post_webhook(client, payload, signature="")
    assert response.status_code == 400

    await db_session.refresh(booking)
    assert booking.is_paid is False
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_unparseable_payload(client: AsyncClient):
    response = await post_webhook(client, "not json")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid payload"


@pytest.mark.asyncio
async def test_missing_webhook_secret(client: AsyncClient, stripe_settings, monkeypatch):
    monkeypatch.setattr(stripe_settings, "STRIPE_WEBHOOK_SECRET", "")
    response = await post_webhook(client, completed_event(1))
    assert response.status_code == 500


@pytest.mark.asyncio
async def test_replayed_event_sends_no_second_notification(client: AsyncClient, make_booking, notifier):
    booking = await make_booking(is_paid=False)
    payload = completed_event(booking.id)

    first = await post_webhook(client, payload)
    second = await post_webhook(client, payload)
    assert first.status_code == second.status_code == 200
    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_notification_failure_still_marks_paid(client: AsyncClient, db_session, make_booking):
    app.dependency_overrides[get_notifier] = lambda: FakeNotifier(fail=True)
    booking = await make_booking(is_paid=False)

    response = await post_webhook(client, completed_event(booking.id))
    assert response.status_code == 200

    await db_session.refresh(booking)
    assert booking.is_paid is True


@pytest.mark.asyncio
async def test_unknown_booking_and_other_events_are_acknowledged(client: AsyncClient, notifier):
    response = await post_webhook(client, completed_event(4242))
    assert response.status_code == 200

    payload = json.dumps({"type": "payment_intent.created", "data": {"object": {}}})
    response = await post_webhook(client, payload)
    assert response.status_code == 200
    assert notifier.sent == []


class RecordingAdmission(OptimisticAdmission):
    def __init__(self):
        self.released = []

    async def release(self, booking_date, booking_id):
        self.released.append((booking_date, booking_id))


@pytest.mark.asyncio
async def test_confirmed_payment_releases_its_own_hold(client: AsyncClient, make_booking):
    admission = RecordingAdmission()
    app.dependency_overrides[get_admission] = lambda: admission
    booking = await make_booking(is_paid=False, tents=3)

    await post_webhook(client, completed_event(booking.id))
    await post_webhook(client, completed_event(booking.id))

    assert admission.released == [(booking.booking_date, booking.id)]


@pytest.mark.asyncio
async def test_failed_commit_leaves_booking_unpaid(
    request_session_client: AsyncClient, db_session, make_booking, notifier, monkeypatch
):
    """Stripe gets a 500 and retries; no emails go out for an unsaved payment."""
    admission = RecordingAdmission()
    app.dependency_overrides[get_admission] = lambda: admission
    booking = await make_booking(is_paid=False, tents=3)
    booking_id = booking.id

    async def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)

    response = await post_webhook(request_session_client, completed_event(booking_id))
    assert response.status_code == 500

    is_paid = (await db_session.execute(select(Booking.is_paid).where(Booking.id == booking_id))).scalar_one()
    assert is_paid is False
    assert notifier.sent == []
    assert admission.released == []
