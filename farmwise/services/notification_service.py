"""
farmwise.services.notification_service — Email & SMS Dispatch
==============================================================

Outbound delivery of OTP codes, welcome mail and challenge-award notices.

Every public ``send_*`` function is fire-and-forget: a delivery failure is
logged and reported as ``False``, never raised, so it cannot roll back the
OTP generation or points award that triggered it.

Transport settings come from the environment:

* Email — ``EMAIL_HOST``, ``EMAIL_PORT``, ``EMAIL_USER``, ``EMAIL_PASS``
* SMS   — ``TWILIO_ACCOUNT_SID``, ``TWILIO_AUTH_TOKEN``, ``TWILIO_PHONE_NUMBER``

An unconfigured channel is skipped with a warning.
"""

from __future__ import annotations

import logging
import os
import smtplib
from collections.abc import Callable
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import httpx

from farmwise.config import FarmwiseConfig

logger = logging.getLogger(__name__)

TWILIO_API = "https://api.twilio.com/2010-04-01"
SMTP_TIMEOUT_SECONDS = 10


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------
def _send_email(to_email: str, subject: str, html_body: str, from_address: str) -> bool:
    host = os.getenv("EMAIL_HOST", "smtp.gmail.com")
    port = int(os.getenv("EMAIL_PORT", "587"))
    user = os.getenv("EMAIL_USER", "")
    password = os.getenv("EMAIL_PASS", "")
    if not user:
        logger.warning("EMAIL_USER not configured — skipping email to %s", to_email)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html"))

    with smtplib.SMTP(host, port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
        smtp.starttls()
        smtp.login(user, password)
        smtp.sendmail(user, [to_email], msg.as_string())
    logger.info("Email %r sent to %s", subject, to_email)
    return True


def _send_sms(phone: str, body: str) -> bool:
    sid = os.getenv("TWILIO_ACCOUNT_SID", "")
    token = os.getenv("TWILIO_AUTH_TOKEN", "")
    sender = os.getenv("TWILIO_PHONE_NUMBER", "")
    if not sid or not token:
        logger.warning("Twilio credentials not configured — skipping SMS to %s", phone)
        return False

    transport = httpx.HTTPTransport(retries=1)
    with httpx.Client(timeout=10, transport=transport) as client:
        resp = client.post(
            f"{TWILIO_API}/Accounts/{sid}/Messages.json",
            data={"To": phone, "From": sender, "Body": body},
            auth=(sid, token),
        )
    resp.raise_for_status()
    logger.info("SMS sent to %s, SID: %s", phone, resp.json().get("sid"))
    return True


def _dispatch(description: str, func: Callable[..., bool], *args) -> bool:
    """Run one delivery, logging and swallowing any failure."""
    try:
        return func(*args)
    except Exception:
        logger.exception("Failed to send %s", description)
        return False


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------
def _otp_email_html(cfg: FarmwiseConfig, first_name: str, code: str) -> str:
    return (
        f"<h1>🌱 {cfg.app_name}</h1>"
        f"<h2>Hello {first_name}!</h2>"
        "<p>Please verify your email address to get started with your "
        "sustainable farming journey.</p>"
        f"<p><strong>Your Verification Code</strong></p><p><code>{code}</code></p>"
        f"<p>This code will expire in {cfg.otp_ttl_minutes} minutes. If you "
        "didn't request this verification, please ignore this email.</p>"
    )


def _welcome_email_html(cfg: FarmwiseConfig, first_name: str) -> str:
    return (
        f"<h1>🌱 Welcome to {cfg.app_name}!</h1>"
        f"<h2>Hello {first_name}!</h2>"
        "<p>Your email has been verified and you're now part of the community.</p>"
        "<ul>"
        "<li>Complete your farming profile to get personalized challenges</li>"
        "<li>Join daily and weekly sustainability challenges</li>"
        "<li>Earn points and unlock badges for your achievements</li>"
        "</ul>"
        f'<p><a href="{cfg.client_url}/dashboard">Start Your Journey</a></p>'
    )


def _challenge_email_html(
    cfg: FarmwiseConfig, first_name: str, title: str, points: int,
) -> str:
    return (
        "<h1>🏆 Challenge Completed!</h1>"
        f"<h2>Well done, {first_name}!</h2>"
        f'<p>You completed "{title}" and earned {points} points.</p>'
        f'<p><a href="{cfg.client_url}/challenges">Find your next challenge</a></p>'
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def send_otp_email(cfg: FarmwiseConfig, email: str, code: str, first_name: str) -> bool:
    return _dispatch(
        f"OTP email to {email}",
        _send_email,
        email,
        f"{cfg.app_name} - Email Verification OTP",
        _otp_email_html(cfg, first_name, code),
        cfg.email_from,
    )


def send_otp_sms(cfg: FarmwiseConfig, phone: str, code: str) -> bool:
    body = (
        f"{cfg.app_name} verification code: {code}. This code expires in "
        f"{cfg.otp_ttl_minutes} minutes. Don't share it with anyone."
    )
    return _dispatch(f"OTP SMS to {phone}", _send_sms, phone, body)


def send_welcome_email(cfg: FarmwiseConfig, email: str, first_name: str) -> bool:
    return _dispatch(
        f"welcome email to {email}",
        _send_email,
        email,
        f"Welcome to {cfg.app_name} - Start Your Sustainable Farming Journey!",
        _welcome_email_html(cfg, first_name),
        cfg.email_from,
    )


def send_challenge_award_email(
    cfg: FarmwiseConfig, email: str, first_name: str, title: str, points: int,
) -> bool:
    return _dispatch(
        f"challenge award notice to {email}",
        _send_email,
        email,
        f"Challenge Completed: {title} (+{points} points)",
        _challenge_email_html(cfg, first_name, title, points),
        cfg.email_from,
    )
