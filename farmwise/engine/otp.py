"""
farmwise.engine.otp — One-Time Codes for Contact Verification
==============================================================

Generates, checks and clears the single OTP stored on an account.
Pure calculation: the caller persists the account and dispatches the code.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from farmwise.constants import OTP_MAX, OTP_MIN, OTP_TTL
from farmwise.database.models import Account
from farmwise.engine.clock import as_utc, utcnow


def generate(
    account: Account,
    *,
    now: datetime | None = None,
    ttl: timedelta = OTP_TTL,
) -> str:
    """Store a fresh 6-digit code on *account*, replacing any previous one."""
    code = str(secrets.randbelow(OTP_MAX - OTP_MIN + 1) + OTP_MIN)
    account.otp_code = code
    account.otp_expires_at = (now or utcnow()) + ttl
    return code


def verify(account: Account, candidate: str, *, now: datetime | None = None) -> bool:
    """True iff a code exists, is unexpired, and equals *candidate*.

    The code is left in place; call :func:`clear` once it is consumed.
    """
    if not account.otp_code or account.otp_expires_at is None:
        return False
    if not (now or utcnow()) < as_utc(account.otp_expires_at):
        return False
    return account.otp_code == candidate


def clear(account: Account) -> None:
    account.otp_code = None
    account.otp_expires_at = None
