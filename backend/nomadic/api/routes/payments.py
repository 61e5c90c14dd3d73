"""
Checkout and Stripe webhook endpoints.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from nomadic.db.session import get_db
from nomadic.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse, WebhookAck
from nomadic.services.interfaces.admission import AdmissionStrategy
from nomadic.services.notification_service import EmailNotifier, get_notifier
from nomadic.services.payment_service import (
    construct_webhook_event,
    dispatch_confirmation_notifications,
    handle_webhook_event,
    start_checkout,
)
from nomadic.services.strategy_factory import get_admission

router = APIRouter(tags=["Payments"])


@router.post("/checkout/sessions", response_model=CheckoutSessionResponse)
async def create_checkout_session_endpoint(
    payload: CheckoutSessionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Open a checkout session for an unpaid booking; the client redirects to `url`."""
    session = await start_checkout(db, payload.booking_id)
    return CheckoutSessionResponse(session_id=session.id, url=session.url)


@router.post("/webhooks/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    admission: AdmissionStrategy = Depends(get_admission),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """
    Receive Stripe events.

    The signature is checked before anything else; a bad one is a 400 with
    no state change. checkout.session.completed marks the booking paid and
    queues the confirmation emails.
    """
    payload = await request.body()
    event = construct_webhook_event(payload, request.headers.get("stripe-signature"))

    booking = await handle_webhook_event(db, event, admission)
    if booking is not None:
        background_tasks.add_task(dispatch_confirmation_notifications, notifier, booking)

    return WebhookAck()
