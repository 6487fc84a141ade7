"""Outgoing email over SMTP."""

from __future__ import annotations

import logging
import os
import smtplib
from email.message import EmailMessage

_LOGGER = logging.getLogger(__name__)

DEFAULT_SENDER = "clickcrateofficial@gmail.com"
VERIFICATION_SUBJECT = "ClickCrate Product Creation Verification"
SMTP_TIMEOUT_SECONDS = 10


def send_email(to: str, subject: str, html: str) -> None:
    """Send an HTML email through the configured SMTP server."""
    host = os.getenv("SMTP_HOST")
    if not host:
        raise RuntimeError("SMTP_HOST environment variable is not set")
    port = int(os.getenv("SMTP_PORT", "587"))
    user = os.getenv("SMTP_USER")
    password = os.getenv("SMTP_PASSWORD")

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = os.getenv("EMAIL_FROM") or user or DEFAULT_SENDER
    message["To"] = to
    message.set_content("This message requires an HTML capable email client.")
    message.add_alternative(html, subtype="html")

    _LOGGER.info("Attempting to send email to %s: %s", to, subject)
    try:
        if port == 465:
            server = smtplib.SMTP_SSL(host, port, timeout=SMTP_TIMEOUT_SECONDS)
        else:
            server = smtplib.SMTP(host, port, timeout=SMTP_TIMEOUT_SECONDS)
        with server:
            if port != 465:
                server.starttls()
            if user and password:
                server.login(user, password)
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        _LOGGER.error("Error sending email to %s: %s", to, e)
        raise

    _LOGGER.info("Email sent to %s", to)


def render_verification_email(verification_code: str) -> str:
    return (
        f"<h1>{VERIFICATION_SUBJECT}</h1>"
        f"<p>Your verification code is: <strong>{verification_code}</strong></p>"
        "<p>Please enter this code to complete your product creation process.</p>"
    )


def send_verification_email(to: str, verification_code: str) -> None:
    """Email a product creator their verification code."""
    send_email(to, VERIFICATION_SUBJECT, render_verification_email(verification_code))
