"""
Email utilities: configuration, message structure, and SMTP-based sending.

This module provides:
- EmailMessage: validated email message dataclass.
- EmailConfig: SMTP configuration taken from application settings.
- build_email: convenience helper to construct EmailMessage.
- send_email: SMTP-based sending function.
"""

from __future__ import annotations

import re
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterable, Mapping

from hallbook.config.settings import Settings
from hallbook.core.logging import get_logger

logger = get_logger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailError(Exception):
    """Custom exception for email operations."""


def is_valid_email(address: str) -> bool:
    return bool(address) and _EMAIL_RE.match(address) is not None


@dataclass
class EmailMessage:
    """Email message structure with validation."""
    subject: str
    to: list[str]
    body_text: str | None = None
    body_html: str | None = None
    from_email: str | None = None
    headers: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise EmailError("Subject cannot be empty")
        if not self.to:
            raise EmailError("At least one recipient is required")
        if not self.body_text and not self.body_html:
            raise EmailError("Either body_text or body_html must be provided")
        for email in self.to:
            if not is_valid_email(email):
                raise EmailError(f"Invalid recipient email: {email}")


@dataclass
class EmailConfig:
    """Email configuration."""
    smtp_host: str
    smtp_port: int
    username: str | None
    password: str | None
    use_tls: bool = True
    from_email: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailConfig:
        if not settings.SMTP_HOST:
            raise EmailError("SMTP is not configured")
        return cls(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_TLS,
            from_email=settings.EMAIL_FROM_ADDRESS,
        )


def build_email(
    *,
    subject: str,
    to: Iterable[str],
    body_text: str | None = None,
    body_html: str | None = None,
    from_email: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> EmailMessage:
    """Helper to construct EmailMessage from typical arguments."""
    return EmailMessage(
        subject=subject,
        to=list(to),
        body_text=body_text,
        body_html=body_html,
        from_email=from_email,
        headers=headers,
    )


def send_email(message: EmailMessage, config: EmailConfig) -> None:
    """Send an email using SMTP."""
    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = message.subject
        msg['From'] = message.from_email or config.from_email or config.username or ""
        msg['To'] = ', '.join(message.to)

        if message.headers:
            for key, value in message.headers.items():
                msg[key] = value

        if message.body_text:
            msg.attach(MIMEText(message.body_text, 'plain'))
        if message.body_html:
            msg.attach(MIMEText(message.body_html, 'html'))

        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=10) as server:
            if config.use_tls:
                server.starttls()
            if config.username and config.password:
                server.login(config.username, config.password)
            server.send_message(msg, to_addrs=message.to)

        logger.info(f"Email sent to {len(message.to)} recipient(s)")

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {e}")
        raise EmailError(f"Failed to send email: {e}") from e
