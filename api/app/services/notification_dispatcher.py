"""
Notification Dispatcher - Email delivery for price alerts
"""
from dataclasses import dataclass
from typing import Optional
import asyncio
import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from tenacity import retry, stop_after_attempt, wait_exponential

from app.config import settings
from app.services.email_templates import EmailNotification, render_email

logger = logging.getLogger(__name__)


@dataclass
class ChannelFlags:
    """Channels the user allows for this notification"""
    email: bool
    in_app: bool = True


@dataclass
class DeliveryResult:
    email_sent: bool
    in_app: bool = True


class EmailDeliveryError(Exception):
    """SendGrid answered with an error status"""


class NotificationDispatcher:
    """
    Sends price alert emails through SendGrid.

    deliver() never raises: a disabled channel, missing configuration or a
    provider outage all come back as email_sent=False.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
    ):
        self.api_key = settings.SENDGRID_API_KEY if api_key is None else api_key
        self.from_email = from_email or settings.FROM_EMAIL
        self.from_name = from_name or settings.FROM_NAME

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.from_email)

    async def deliver(self, email: EmailNotification, channels: ChannelFlags) -> DeliveryResult:
        if not channels.email:
            return DeliveryResult(email_sent=False, in_app=channels.in_app)

        if not self.is_configured:
            logger.info(
                f"[MOCK EMAIL] SendGrid not configured, skipping {email.notification_type} "
                f"alert to {email.to}: {email.route} @ €{email.new_price}"
            )
            return DeliveryResult(email_sent=False, in_app=channels.in_app)

        subject, html = render_email(email)

        try:
            await asyncio.to_thread(self._send, email.to, subject, html)
        except Exception as e:
            logger.error(f"Failed to send price alert email to {email.to}: {e}")
            return DeliveryResult(email_sent=False, in_app=channels.in_app)

        logger.info(f"Email notification sent to {email.to} for {email.route}")
        return DeliveryResult(email_sent=True, in_app=channels.in_app)

    @retry(
        stop=stop_after_attempt(settings.EMAIL_SEND_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _send(self, to_email: str, subject: str, html: str) -> None:
        message = Mail(
            from_email=(self.from_email, self.from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html,
        )
        response = SendGridAPIClient(self.api_key).send(message)
        if response.status_code >= 400:
            raise EmailDeliveryError(f"SendGrid returned HTTP {response.status_code}")


# Singleton instance for the application
notification_dispatcher = NotificationDispatcher()
