# maladireta/services/mailer.py
"""
Outbound SMTP delivery.

Callers pass anything exposing the EmailConfiguration SMTP attributes
(an ORM row, a schema, or ``SmtpSettings`` built from process config).
Failures surface as MailDeliveryError; deciding whether that is fatal is
left to the caller.
"""
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from maladireta.core import config

logger = logging.getLogger("maladireta.mailer")


class MailDeliveryError(Exception):
    pass


@dataclass
class SmtpSettings:
    smtp_host: str
    smtp_port: int
    smtp_secure: bool
    smtp_user: str
    smtp_pass: str
    from_email: str
    from_name: Optional[str] = None


def system_settings() -> Optional[SmtpSettings]:
    """Process-level SMTP server, or None when SMTP_HOST is not set."""
    if not config.SMTP_HOST:
        return None
    return SmtpSettings(
        smtp_host=config.SMTP_HOST,
        smtp_port=config.SMTP_PORT,
        smtp_secure=config.SMTP_SECURE,
        smtp_user=config.SMTP_USER,
        smtp_pass=config.SMTP_PASS,
        from_email=config.SMTP_FROM,
        from_name="Mala Direta",
    )


def _connect(settings) -> smtplib.SMTP:
    if settings.smtp_secure:
        server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=config.SMTP_TIMEOUT)
    else:
        server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=config.SMTP_TIMEOUT)
    try:
        if not settings.smtp_secure:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
        if settings.smtp_user and settings.smtp_pass:
            server.login(settings.smtp_user, settings.smtp_pass)
    except Exception:
        server.close()
        raise
    return server


def send_mail(settings, to: str, subject: str, body: str) -> None:
    msg = EmailMessage()
    msg["From"] = formataddr((settings.from_name or "", settings.from_email))
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with _connect(settings) as server:
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("SMTP delivery to %s via %s failed: %s", to, settings.smtp_host, e)
        raise MailDeliveryError(str(e)) from e
    logger.info("Mail sent to %s via %s:%s", to, settings.smtp_host, settings.smtp_port)


def check_connection(settings) -> None:
    """Connect and authenticate without sending anything."""
    try:
        with _connect(settings) as server:
            server.noop()
    except (smtplib.SMTPException, OSError) as e:
        logger.info("SMTP check against %s failed: %s", settings.smtp_host, e)
        raise MailDeliveryError(str(e)) from e
