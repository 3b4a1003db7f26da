"""Outbound email (SMTP via aiosmtplib, or log-only when SMTP is not configured)."""

from formdesk.infrastructure.external.email.mailer import (
    LogOnlyMailer,
    SmtpMailer,
    create_mailer,
)

__all__ = ["LogOnlyMailer", "SmtpMailer", "create_mailer"]
