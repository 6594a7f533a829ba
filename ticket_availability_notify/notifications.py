"""
Notification handling for the Ticket Availability Notifier.
"""
import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

import httpx
from twilio.rest import Client as TwilioClient

from .models import MonitoredItem, Notification, NotificationConfig

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Tickets Available"


def build_notification(item: MonitoredItem) -> Notification:
    """Create the alert sent when an item becomes available."""
    return Notification(
        title=f"{NOTIFICATION_TITLE}: {item.name}",
        message=f'🎵 Tickets now available for "{item.name}"! Book here: {item.location}',
    )


class NotificationService:
    """Base class for notification services."""

    def __init__(self, config: NotificationConfig):
        self.config = config

    async def send(self, notification: Notification) -> bool:
        """Send a notification once; failures are logged, never raised."""
        try:
            return await self._send_impl(notification)
        except Exception as e:
            logger.error(
                f"Error sending notification via {self.__class__.__name__}: {e}",
                exc_info=True,
            )
            return False

    async def _send_impl(self, notification: Notification) -> bool:
        """Implementation of the notification sending logic."""
        raise NotImplementedError("Subclasses must implement this method")


class TwilioNotificationService(NotificationService):
    """Sends SMS or WhatsApp messages through Twilio."""

    def __init__(self, config: NotificationConfig, whatsapp: bool = False):
        super().__init__(config)
        self.whatsapp = whatsapp
        self.client = TwilioClient(config.twilio_account_sid, config.twilio_auth_token)

    def _address(self, number: str) -> str:
        return f"whatsapp:{number}" if self.whatsapp else number

    async def _send_impl(self, notification: Notification) -> bool:
        message = await asyncio.to_thread(
            self.client.messages.create,
            body=notification.message,
            from_=self._address(self.config.sender),
            to=self._address(self.config.recipient),
        )
        channel = "WhatsApp" if self.whatsapp else "SMS"
        logger.info(f"{channel} notification sent. SID: {message.sid}")
        return True


class EmailNotificationService(NotificationService):
    """Sends email through SMTP (STARTTLS on 587, SSL otherwise)."""

    def _build_message(self, notification: Notification) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = notification.title
        msg["From"] = self.config.sender or (self.config.smtp_username or "")
        msg["To"] = self.config.recipient
        msg.set_content(notification.message)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        host, port = self.config.smtp_host, int(self.config.smtp_port)
        context = ssl.create_default_context()
        if port == 587:
            with smtplib.SMTP(host, port, timeout=20) as s:
                s.ehlo()
                s.starttls(context=context)
                if self.config.smtp_username:
                    s.login(self.config.smtp_username, self.config.smtp_password or "")
                s.send_message(msg)
        else:
            with smtplib.SMTP_SSL(host, port, context=context, timeout=20) as s:
                if self.config.smtp_username:
                    s.login(self.config.smtp_username, self.config.smtp_password or "")
                s.send_message(msg)

    async def _send_impl(self, notification: Notification) -> bool:
        msg = self._build_message(notification)
        await asyncio.to_thread(self._deliver, msg)
        logger.info(f"Email sent to {self.config.recipient} (subject={msg['Subject']})")
        return True


class NtfyNotificationService(NotificationService):
    """Notification service for ntfy.sh."""

    def __init__(self, config: NotificationConfig):
        super().__init__(config)
        self.topic = config.ntfy_topic
        self.base_url = f"https://ntfy.sh/{self.topic}"

    async def _send_impl(self, notification: Notification) -> bool:
        """Send notification via ntfy.sh."""
        # Header values must stay ASCII
        headers = {
            "Title": NOTIFICATION_TITLE
        }
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                self.base_url,
                content=notification.message.encode("utf-8"),
                headers=headers
            )
            response.raise_for_status()
            return True


class NotificationManager:
    """Delivers alerts through the single configured channel."""

    def __init__(self, config: NotificationConfig):
        self.config = config
        self.service: Optional[NotificationService] = self._setup_service()

    def _setup_service(self) -> Optional[NotificationService]:
        """Set up the notification service based on config."""
        if not self.config.enabled:
            logger.warning("Notifications are disabled in config")
            return None

        channel = self.config.channel.lower()
        if channel in ("whatsapp", "sms"):
            if not (self.config.twilio_account_sid and self.config.twilio_auth_token
                    and self.config.sender and self.config.recipient):
                logger.warning(
                    "Twilio config incomplete; set TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, "
                    "NOTIFY_FROM and NOTIFY_TO"
                )
                return None
            return TwilioNotificationService(self.config, whatsapp=channel == "whatsapp")

        if channel == "email":
            if not self.config.recipient:
                logger.warning("Email config incomplete; set NOTIFY_TO")
                return None
            return EmailNotificationService(self.config)

        if channel == "ntfy":
            if not self.config.ntfy_topic:
                logger.warning("ntfy config incomplete; set NTFY_TOPIC")
                return None
            return NtfyNotificationService(self.config)

        logger.warning(f"Unknown notification channel: {self.config.channel}")
        return None

    async def notify(self, item: MonitoredItem) -> bool:
        """Send one availability alert for the item."""
        if self.service is None:
            logger.warning(f"No notification service configured; not notifying for {item.name}")
            return False

        sent = await self.service.send(build_notification(item))
        if sent:
            logger.info(f"Notification sent for {item.name}")
        else:
            logger.error(f"Notification for {item.name} was not delivered")
        return sent


def create_notification_manager(config: NotificationConfig) -> NotificationManager:
    """Create a notification manager with the given config."""
    return NotificationManager(config)
