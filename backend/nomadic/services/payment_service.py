"""
Stripe checkout and payment confirmation.

Checkout runs against Stripe when a secret key is configured; otherwise a
stub session with predictable identifiers is returned so local development
and tests exercise the same flow without network calls.

Confirmation is the only way a booking becomes paid:
    unpaid --(checkout.session.completed)--> paid
"""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import uuid4

import stripe
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nomadic.db.base import utcnow
from nomadic.models.booking import Booking
from nomadic.services.availability_service import rebuild_date_lock
from nomadic.services.interfaces.admission import AdmissionStrategy
from nomadic.services.notification_service import EmailNotifier
from nomadic.services.pricing import to_minor_units
from nomadic.core.config import get_settings
from nomadic.core.logging import get_logger
from nomadic.core.metrics import (
    record_notification_failure,
    record_payment_confirmation,
    record_webhook_rejection,
)

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_EXPIRED = "checkout.session.expired"


@dataclass
class CheckoutSessionStub:
    """Stand-in for stripe.checkout.Session when Stripe is not configured."""

    id: str
    payment_intent: str
    payment_status: str
    url: str


def _should_use_stub() -> bool:
    settings = get_settings()
    return settings.STRIPE_USE_STUB or not settings.STRIPE_SECRET_KEY


def build_checkout_preview_url(*, booking: Booking, amount: int, session_id: str) -> str:
    return (
        f"{get_settings().FRONTEND_URL.rstrip('/')}/payments/preview?"
        f"booking={booking.id}&amount={amount}&session={session_id}"
    )


def create_checkout_session(booking: Booking):
    """
    Create a Stripe Checkout session (or stub) for the booking total.
    Returns an object exposing `id` and `url`.
    """
    settings = get_settings()
    amount = to_minor_units(booking.total)

    if _should_use_stub():
        session_id = f"cs_test_{uuid4().hex}"
        return CheckoutSessionStub(
            id=session_id,
            payment_intent=f"pi_test_{uuid4().hex}",
            payment_status="unpaid",
            url=build_checkout_preview_url(booking=booking, amount=amount, session_id=session_id),
        )

    stripe.api_key = settings.STRIPE_SECRET_KEY
    frontend = settings.FRONTEND_URL.rstrip('/')
    return stripe.checkout.Session.create(
        mode="payment",
        payment_method_types=["card"],
        customer_email=booking.customer_email,
        line_items=[
            {
                "quantity": 1,
                "price_data": {
                    "currency": settings.CURRENCY,
                    "unit_amount": amount,
                    "product_data": {
                        "name": f"{booking.location} camp, {booking.number_of_tents} tent(s)",
                        "description": f"Booking date {booking.booking_date.isoformat()}",
                    },
                },
            }
        ],
        success_url=f"{frontend}/booking/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{frontend}/booking/failed?booking={booking.id}",
        metadata={"booking_id": str(booking.id)},
    )


async def start_checkout(db: AsyncSession, booking_id: int):
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking_id} not found",
        )
    if booking.is_paid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking is already paid",
        )

    session = create_checkout_session(booking)
    booking.stripe_session_id = session.id
    await db.commit()

    logger.info("checkout_session_created", booking_id=booking.id, session_id=session.id, stub=_should_use_stub())
    return session


def construct_webhook_event(payload: bytes, sig_header: Optional[str]) -> stripe.Event:
    """
    Verify the Stripe-Signature header and decode the event (a dict-like stripe.Event).
    Raises HTTPException(400) on a bad signature or payload; nothing is written.
    """
    settings = get_settings()
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("stripe_webhook_secret_missing")
        record_webhook_rejection("not_configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook secret not configured",
        )

    if not sig_header:
        logger.warning("stripe_webhook_rejected", reason="missing_signature")
        record_webhook_rejection("signature")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")

    try:
        event = stripe.Webhook.construct_event(
            payload, sig_header, settings.STRIPE_WEBHOOK_SECRET, settings.STRIPE_WEBHOOK_TOLERANCE
        )
    except stripe.SignatureVerificationError:
        logger.warning("stripe_webhook_rejected", reason="invalid_signature")
        record_webhook_rejection("signature")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")
    except ValueError:
        logger.warning("stripe_webhook_rejected", reason="invalid_payload")
        record_webhook_rejection("payload")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")
    return event


def booking_id_from_session(session: dict[str, Any]) -> Optional[int]:
    raw = (session.get("metadata") or {}).get("booking_id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


async def confirm_payment(
    db: AsyncSession,
    booking_id: int,
    payment_intent_id: Optional[str],
    admission: AdmissionStrategy,
) -> Optional[Booking]:
    """
    Mark the booking paid and re-derive its date lock.

    Returns the booking when this call confirmed it, None when there is
    nothing to do (unknown id, or already paid by an earlier delivery).
    """
    booking = await db.get(Booking, booking_id)
    if booking is None:
        logger.warning("payment_for_unknown_booking", booking_id=booking_id)
        record_payment_confirmation("unknown_booking")
        return None

    if booking.is_paid:
        logger.info("payment_already_confirmed", booking_id=booking_id)
        record_payment_confirmation("duplicate")
        return None

    booking.is_paid = True
    booking.stripe_payment_intent_id = payment_intent_id
    booking.paid_at = utcnow()
    await db.flush()

    await rebuild_date_lock(db, booking.booking_date, booking.location)
    # Committed before acknowledging, so a failed write gets a 500 and Stripe retries
    await db.commit()
    # Paid tents are counted from the database from now on
    await admission.release(booking.booking_date, booking.id)

    logger.info(
        "payment_confirmed",
        booking_id=booking.id,
        booking_date=booking.booking_date.isoformat(),
        location=booking.location,
        tents=booking.number_of_tents,
        payment_intent=payment_intent_id,
    )
    record_payment_confirmation("confirmed")
    return booking


async def dispatch_confirmation_notifications(notifier: EmailNotifier, booking: Booking) -> None:
    """Send customer and admin emails; failures are logged, never raised."""
    for kind, send in (
        ("customer", notifier.send_booking_confirmation),
        ("admin", notifier.send_admin_notification),
    ):
        try:
            await send(booking)
        except Exception as e:
            logger.error("notification_failed", kind=kind, booking_id=booking.id, error=str(e))
            record_notification_failure(kind)


async def handle_webhook_event(
    db: AsyncSession,
    event: dict[str, Any],
    admission: AdmissionStrategy,
) -> Optional[Booking]:
    """Route a verified event. Returns a newly confirmed booking, if any."""
    event_type = event.get("type")
    session = (event.get("data") or {}).get("object") or {}

    if event_type == CHECKOUT_COMPLETED:
        booking_id = booking_id_from_session(session)
        if booking_id is None:
            logger.warning("checkout_completed_without_booking", session_id=session.get("id"))
            return None
        return await confirm_payment(db, booking_id, session.get("payment_intent"), admission)

    if event_type == CHECKOUT_EXPIRED:
        logger.info("checkout_session_expired", booking_id=booking_id_from_session(session))
        return None

    logger.info("stripe_event_ignored", event_type=event_type)
    return None
