"""
Outgoing email for booking inquiries.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional, Protocol

from backend.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, subject: str, body: str, reply_to: Optional[str] = None) -> None:
        ...


@dataclass
class InMemoryMailer:
    """Test double that records sent messages."""

    sent: List[EmailMessage] = field(default_factory=list)

    def send(self, subject: str, body: str, reply_to: Optional[str] = None) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to
        message.set_content(body)
        self.sent.append(message)


@dataclass
class SmtpMailer:
    """Sends mail through an authenticated SMTP server using STARTTLS."""

    host: Optional[str]
    port: int
    username: Optional[str]
    password: Optional[str]
    recipient: Optional[str]
    timeout: float = 30.0

    def _check_config(self) -> None:
        missing = [
            name
            for name, value in (
                ("SMTP_HOST", self.host),
                ("SMTP_USERNAME", self.username),
                ("SMTP_PASSWORD", self.password),
                ("BOOKING_EMAIL_TO", self.recipient),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Email delivery is not configured (missing {', '.join(missing)})."
            )

    def send(self, subject: str, body: str, reply_to: Optional[str] = None) -> None:
        self._check_config()
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.username
        message["To"] = self.recipient
        if reply_to:
            message["Reply-To"] = reply_to
        message.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.username, self.password)
            server.send_message(message)
        logger.info("Sent email '%s' to %s", subject, self.recipient)
