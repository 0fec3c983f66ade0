from __future__ import annotations

import html
import logging
import os
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ALERT_SUBJECT = "Daily Journal Crisis Alert - Immediate Attention Needed"
SNIPPET_LENGTH = 500


@dataclass
class EmailSettings:
    host: str = "smtp.gmail.com"
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = ""
    sender: str = ""

    @classmethod
    def from_env(cls) -> "EmailSettings":
        user = os.getenv("EMAIL_USER") or os.getenv("GMAIL_USER") or ""
        return cls(
            host=os.getenv("EMAIL_HOST", "smtp.gmail.com"),
            port=int(os.getenv("EMAIL_PORT", "587")),
            secure=os.getenv("EMAIL_SECURE", "").strip().lower() == "true",
            user=user,
            password=os.getenv("EMAIL_PASS") or os.getenv("GMAIL_APP_PASSWORD") or "",
            sender=os.getenv("EMAIL_FROM") or user,
        )

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)


@dataclass
class CrisisAlert:
    user_email: str
    trusted_email: str
    entry_text: str
    timestamp: datetime


def build_alert_message(alert: CrisisAlert, sender: str) -> EmailMessage:
    formatted = alert.timestamp.strftime("%Y-%m-%d %H:%M UTC")
    snippet = alert.entry_text[:SNIPPET_LENGTH]
    message = EmailMessage()
    message["Subject"] = ALERT_SUBJECT
    message["From"] = sender
    message["To"] = alert.trusted_email
    message.set_content(
        f"You are listed as a trusted contact for {alert.user_email} on Daily Journal.\n\n"
        f"On {formatted} they wrote a journal entry containing language associated with "
        "self-harm or suicidal thoughts. Please reach out to them as soon as you can.\n\n"
        f"Entry excerpt:\n{snippet}\n\n"
        "If you believe they are in immediate danger, contact local emergency services. "
        "In the U.S. you can call or text 988 for the Suicide & Crisis Lifeline.\n"
    )
    message.add_alternative(
        "<html><body>"
        "<h2>Crisis Alert</h2>"
        f"<p>You are listed as a trusted contact for <strong>{html.escape(alert.user_email)}</strong> "
        "on Daily Journal.</p>"
        f"<p>On {formatted} they wrote a journal entry containing language associated with "
        "self-harm or suicidal thoughts. Please reach out to them as soon as you can.</p>"
        f"<blockquote>{html.escape(snippet)}</blockquote>"
        "<p>If you believe they are in immediate danger, contact local emergency services. "
        "In the U.S. you can call or text 988 for the Suicide &amp; Crisis Lifeline.</p>"
        "</body></html>",
        subtype="html",
    )
    return message


def smtp_send(settings: EmailSettings, message: EmailMessage) -> None:
    smtp_class = smtplib.SMTP_SSL if settings.secure else smtplib.SMTP
    with smtp_class(settings.host, settings.port, timeout=10) as client:
        if not settings.secure:
            client.starttls()
        client.login(settings.user, settings.password)
        client.send_message(message)


class CrisisNotifier:
    """Sends crisis alerts to a user's trusted contact.

    Delivery is best effort: ``send_crisis_alert`` reports success as a bool and
    never raises, so a mail outage cannot fail the journal request that
    triggered it.
    """

    def __init__(
        self,
        settings: Optional[EmailSettings] = None,
        sender: Optional[Callable[[EmailSettings, EmailMessage], None]] = None,
    ) -> None:
        self.settings = settings or EmailSettings.from_env()
        self.sender = sender or smtp_send
        if not self.settings.configured:
            logger.warning("Email credentials not configured. Crisis alerts will not be sent.")

    def send_crisis_alert(self, alert: CrisisAlert) -> bool:
        if not self.settings.configured:
            logger.error("Email transport not configured. Cannot send crisis alert.")
            return False
        message = build_alert_message(alert, self.settings.sender)
        try:
            self.sender(self.settings, message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send crisis alert email")
            return False
        logger.info("Crisis alert sent to trusted contact for %s", alert.user_email)
        return True
