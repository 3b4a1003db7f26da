"""Mailer implementations (implements IMailer).

SmtpMailer sends through aiosmtplib; LogOnlyMailer logs instead of sending
and is used when SMTP_HOST is empty (local development, tests).
"""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from formdesk.core.config import Settings

logger = logging.getLogger(__name__)


class SmtpMailer:
    """Send plain-text email over SMTP (STARTTLS by default)."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        start_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username or None
        self._password = password or None
        self._start_tls = start_tls
        self._timeout = timeout

    async def send(self, to_email: str, subject: str, body: str) -> bool:
        """Send one message. Returns False (and logs) when delivery fails."""
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        try:
            await aiosmtplib.send(
                message,
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                start_tls=self._start_tls,
                timeout=self._timeout,
            )
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("Email delivery failed (subject=%r)", subject[:80])
            return False
        logger.info("Email sent (subject=%r)", subject[:80])
        return True


class LogOnlyMailer:
    """IMailer implementation that logs instead of sending email."""

    async def send(self, to_email: str, subject: str, body: str) -> bool:
        """Log the message metadata; no actual email sent. Body is not logged (may hold tokens)."""
        logger.info(
            "Email not sent (SMTP not configured): subject=%r, body_length=%d",
            subject[:80],
            len(body),
        )
        return True


def create_mailer(settings: Settings) -> SmtpMailer | LogOnlyMailer:
    """Return an SMTP mailer when SMTP_HOST is set, else the log-only mailer."""
    if not settings.smtp_host:
        return LogOnlyMailer()
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.email_from,
        username=settings.smtp_user,
        password=(
            settings.smtp_password.get_secret_value() if settings.smtp_password else None
        ),
        start_tls=settings.smtp_start_tls,
    )
