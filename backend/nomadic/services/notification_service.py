"""
Booking confirmation emails.

Plain-text SMTP messages sent from a worker thread. Delivery is a side
channel: callers log failures and move on.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from nomadic.models.booking import Booking
from nomadic.core.config import Settings, get_settings
from nomadic.core.logging import get_logger

logger = get_logger(__name__)


def _booking_summary(booking: Booking) -> str:
    return (
        f"Booking ID: {booking.id}\n"
        f"Date: {booking.booking_date.isoformat()}\n"
        f"Location: {booking.location}\n"
        f"Tents: {booking.number_of_tents}\n"
        f"Guests: {booking.adults} adults, {booking.children} children\n"
        f"Total paid: AED {booking.total:.2f}\n"
    )


class EmailNotifier:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def configured(self) -> bool:
        return bool(self.settings.SMTP_HOST)

    def _build_message(self, to_email: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.EMAIL_FROM or self.settings.SMTP_USER
        msg["To"] = to_email
        msg.set_content(body)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=10) as smtp_conn:
            if self.settings.SMTP_USER:
                smtp_conn.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)
            smtp_conn.send_message(msg)

    async def _send(self, to_email: str, subject: str, body: str) -> bool:
        if not self.configured:
            logger.info("email_skipped", reason="smtp_not_configured", to=to_email, subject=subject)
            return False
        msg = self._build_message(to_email, subject, body)
        await asyncio.to_thread(self._deliver, msg)
        logger.info("email_sent", to=to_email, subject=subject)
        return True

    async def send_booking_confirmation(self, booking: Booking) -> bool:
        body = (
            f"Dear {booking.customer_name},\n\n"
            "Thank you for choosing Nomadic. We're pleased to confirm your booking.\n\n"
            f"{_booking_summary(booking)}\n"
            "If you have any questions, reply to this email.\n\n"
            "Best regards,\nNomadic Bookings Team"
        )
        return await self._send(booking.customer_email, "Your Booking Confirmation", body)

    async def send_admin_notification(self, booking: Booking) -> bool:
        body = (
            "A new booking has been confirmed.\n\n"
            f"Name: {booking.customer_name}\n"
            f"Email: {booking.customer_email}\n"
            f"Phone: {booking.customer_phone}\n"
            f"{_booking_summary(booking)}"
        )
        return await self._send(self.settings.ADMIN_EMAIL, "New Booking Received", body)


def get_notifier() -> EmailNotifier:
    return EmailNotifier()
