"""
farmwise.services.verification_service — Email & Phone OTP Flows
==================================================================

send → the account stores a fresh code (:mod:`farmwise.engine.otp`), the
row is committed, then the code is dispatched.  A dispatch failure is
logged and the stored code stays valid.

verify → on a match the flag is set, the code cleared and the
verification bonus awarded through the ledger, all in one transaction.
Expired and wrong codes both fail with the same :class:`AuthError`.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from farmwise.constants import EMAIL_VERIFICATION_DESCRIPTION, PHONE_VERIFICATION_DESCRIPTION
from farmwise.database.engine import retry_on_stale
from farmwise.engine import ledger, otp
from farmwise.errors import AuthError, ConflictError, ValidationError
from farmwise.services import notification_service
from farmwise.services.account_service import get_account, phone_taken, validate_phone
from farmwise.services.serializers import account_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from farmwise.config import FarmwiseConfig

logger = logging.getLogger(__name__)

INVALID_OTP_MESSAGE = "Invalid or expired OTP"


def _ttl(cfg: FarmwiseConfig) -> timedelta:
    return timedelta(minutes=cfg.otp_ttl_minutes)


# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------
def send_email_otp(engine: Engine, cfg: FarmwiseConfig, account_id: int) -> bool:
    """Generate and email a new code.  Returns whether dispatch succeeded."""

    def _txn() -> tuple[str, str, str]:
        with Session(engine, expire_on_commit=False) as session:
            account = get_account(session, account_id)
            if account.is_email_verified:
                raise ConflictError("Email is already verified")
            code = otp.generate(account, ttl=_ttl(cfg))
            session.commit()
            return account.email, account.first_name, code

    email, first_name, code = retry_on_stale(_txn)
    return notification_service.send_otp_email(cfg, email, code, first_name)


def verify_email_otp(engine: Engine, cfg: FarmwiseConfig, account_id: int, code: str) -> dict:
    """Mark the email verified and award the bonus.

    Raises
    ------
    ValidationError
        No code supplied.
    ConflictError
        Email already verified.
    AuthError
        Code wrong, expired or never issued.
    """
    if not code:
        raise ValidationError("Please provide OTP")

    def _txn() -> dict:
        with Session(engine, expire_on_commit=False) as session:
            account = get_account(session, account_id)
            if account.is_email_verified:
                raise ConflictError("Email is already verified")
            if not otp.verify(account, code):
                raise AuthError(INVALID_OTP_MESSAGE)
            account.is_email_verified = True
            otp.clear(account)
            ledger.award_points(
                account,
                cfg.verification_bonus_points,
                EMAIL_VERIFICATION_DESCRIPTION,
                points_per_level=cfg.points_per_level,
            )
            session.commit()
            return account_dict(account, points_per_level=cfg.points_per_level)

    profile = retry_on_stale(_txn)
    logger.info("Account %s verified email", account_id)
    notification_service.send_welcome_email(cfg, profile["email"], profile["first_name"])
    return profile


# ---------------------------------------------------------------------------
# Phone
# ---------------------------------------------------------------------------
def send_phone_otp(engine: Engine, cfg: FarmwiseConfig, account_id: int, phone: str) -> bool:
    """Attach *phone* to the account and text it a new code.

    Raises
    ------
    ConflictError
        Another account already uses *phone*.
    """
    phone = validate_phone(phone)

    def _txn() -> str:
        with Session(engine, expire_on_commit=False) as session:
            account = get_account(session, account_id)
            if phone_taken(session, phone, account.id):
                raise ConflictError("Phone number is already registered")
            if account.phone != phone:
                account.phone = phone
                account.is_phone_verified = False
            code = otp.generate(account, ttl=_ttl(cfg))
            session.commit()
            return code

    code = retry_on_stale(_txn)
    return notification_service.send_otp_sms(cfg, phone, code)


def verify_phone_otp(engine: Engine, cfg: FarmwiseConfig, account_id: int, code: str) -> dict:
    """Mark the phone verified and award the bonus."""
    if not code:
        raise ValidationError("Please provide OTP")

    def _txn() -> dict:
        with Session(engine, expire_on_commit=False) as session:
            account = get_account(session, account_id)
            if account.is_phone_verified:
                raise ConflictError("Phone is already verified")
            if not account.phone:
                raise ValidationError("No phone number on file")
            if not otp.verify(account, code):
                raise AuthError(INVALID_OTP_MESSAGE)
            account.is_phone_verified = True
            otp.clear(account)
            ledger.award_points(
                account,
                cfg.verification_bonus_points,
                PHONE_VERIFICATION_DESCRIPTION,
                points_per_level=cfg.points_per_level,
            )
            session.commit()
            return account_dict(account, points_per_level=cfg.points_per_level)

    profile = retry_on_stale(_txn)
    logger.info("Account %s verified phone", account_id)
    return profile
