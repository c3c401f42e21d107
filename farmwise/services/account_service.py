"""
farmwise.services.account_service — Registration, Login & Profile
==================================================================

Every write opens its own session, mutates the versioned ``Account`` row and
commits.  Writes that can lose a version race run under
:func:`~farmwise.database.engine.retry_on_stale` so the whole
read-modify-write is repeated on fresh state.

Outbound mail happens **after** commit and never raises
(see :mod:`farmwise.services.notification_service`).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farmwise.constants import RECENT_ACTIVITY_LIMIT
from farmwise.database.engine import retry_on_stale
from farmwise.database.models import (
    Account,
    FarmingExperience,
    IrrigationType,
    Language,
    Role,
    Theme,
    WalletTransaction,
)
from farmwise.engine import otp
from farmwise.engine.clock import utcnow
from farmwise.errors import AuthError, ConflictError, NotFoundError, ValidationError
from farmwise.services import notification_service
from farmwise.services.passwords import hash_password, validate_password, verify_password
from farmwise.services.serializers import account_dict, transaction_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from farmwise.config import FarmwiseConfig

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\+?[0-9]{10,14}$")

# Roles a visitor may pick at sign-up; admins are seeded or promoted.
SELF_SERVICE_ROLES = frozenset({Role.FARMER, Role.STUDENT, Role.DEALER})

MAX_NAME_LENGTH = 50


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_account(session: Session, account_id: int) -> Account:
    """Load an active account or raise :class:`NotFoundError`."""
    account = session.get(Account, account_id)
    if account is None or not account.is_active:
        raise NotFoundError("User not found")
    return account


def find_by_email(session: Session, email: str) -> Account | None:
    return session.scalar(select(Account).where(Account.email == normalize_email(email)))


def get_profile(engine: Engine, account_id: int) -> dict:
    with Session(engine) as session:
        return account_dict(get_account(session, account_id))


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def _require_name(value: str | None, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    if len(value) > MAX_NAME_LENGTH:
        raise ValidationError(f"{label} cannot exceed {MAX_NAME_LENGTH} characters")
    return value


def _validate_email(email: str) -> str:
    email = normalize_email(email)
    if not EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email")
    return email


def validate_phone(phone: str) -> str:
    phone = (phone or "").strip()
    if not PHONE_RE.match(phone):
        raise ValidationError("Please provide a valid phone number")
    return phone


def _check_choice(value: str, enum_cls: type, label: str) -> str:
    allowed = {m.value for m in enum_cls}
    if value not in allowed:
        raise ValidationError(f"Invalid {label}: {value!r}")
    return value


def phone_taken(session: Session, phone: str, account_id: int | None) -> bool:
    query = select(Account.id).where(Account.phone == phone)
    if account_id is not None:
        query = query.where(Account.id != account_id)
    return session.scalar(query) is not None


# ---------------------------------------------------------------------------
# Registration & login
# ---------------------------------------------------------------------------
def register(
    engine: Engine,
    cfg: FarmwiseConfig,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    phone: str | None = None,
    role: str = Role.FARMER.value,
) -> dict:
    """Create an account and email it a verification code.

    Raises
    ------
    ValidationError
        Bad name, email, phone, password or role.
    ConflictError
        Email or phone already registered.
    """
    first_name = _require_name(first_name, "First name")
    last_name = _require_name(last_name, "Last name")
    email = _validate_email(email)
    phone = validate_phone(phone) if phone else None
    validate_password(password)
    if role not in SELF_SERVICE_ROLES:
        raise ValidationError(f"Invalid role: {role!r}")

    with Session(engine, expire_on_commit=False) as session:
        if find_by_email(session, email) is not None:
            raise ConflictError("User already exists with this email")
        if phone and phone_taken(session, phone, None):
            raise ConflictError("User already exists with this phone number")

        account = Account(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            password_hash=hash_password(password),
            role=role,
        )
        code = otp.generate(account, ttl=timedelta(minutes=cfg.otp_ttl_minutes))
        session.add(account)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ConflictError("User already exists with this email") from None
        profile = account_dict(account, points_per_level=cfg.points_per_level)

    logger.info("Registered account %s (%s)", profile["id"], role)
    notification_service.send_otp_email(cfg, email, code, first_name)
    return profile


def authenticate(engine: Engine, email: str, password: str) -> dict:
    """Check credentials and stamp ``last_login_at``.

    Unknown email and wrong password produce the same :class:`AuthError`.
    """
    if not email or not password:
        raise ValidationError("Please provide an email and password")

    def _login() -> dict:
        with Session(engine, expire_on_commit=False) as session:
            account = find_by_email(session, email)
            if account is None or not verify_password(password, account.password_hash):
                raise AuthError("Invalid credentials")
            if not account.is_active:
                raise AuthError("Account is deactivated")
            account.last_login_at = utcnow()
            session.commit()
            return account_dict(account)

    return retry_on_stale(_login)


# ---------------------------------------------------------------------------
# Profile mutations
# ---------------------------------------------------------------------------
def _update(engine: Engine, account_id: int, mutate: Callable[[Session, Account], None]) -> dict:
    """Load, mutate and commit one account, retrying on a version race."""

    def _txn() -> dict:
        with Session(engine, expire_on_commit=False) as session:
            account = get_account(session, account_id)
            mutate(session, account)
            session.commit()
            return account_dict(account)

    return retry_on_stale(_txn)


def update_profile(
    engine: Engine,
    account_id: int,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    phone: str | None = None,
    profile_image: str | None = None,
) -> dict:
    """Change basic identity fields.  A new phone number must be re-verified."""
    if phone is not None:
        phone = validate_phone(phone)

    def _apply(session: Session, account: Account) -> None:
        if first_name is not None:
            account.first_name = _require_name(first_name, "First name")
        if last_name is not None:
            account.last_name = _require_name(last_name, "Last name")
        if profile_image is not None:
            account.profile_image = profile_image
        if phone is not None and phone != account.phone:
            if phone_taken(session, phone, account.id):
                raise ConflictError("Phone number is already in use")
            account.phone = phone
            account.is_phone_verified = False

    return _update(engine, account_id, _apply)


def update_preferences(
    engine: Engine,
    account_id: int,
    *,
    language: str | None = None,
    theme: str | None = None,
    notifications: dict[str, bool] | None = None,
) -> dict:
    if language is not None:
        _check_choice(language, Language, "language")
    if theme is not None:
        _check_choice(theme, Theme, "theme")

    def _apply(session: Session, account: Account) -> None:
        if language is not None:
            account.language = language
        if theme is not None:
            account.theme = theme
        if notifications:
            if "email" in notifications:
                account.notify_email = bool(notifications["email"])
            if "push" in notifications:
                account.notify_push = bool(notifications["push"])
            if "sms" in notifications:
                account.notify_sms = bool(notifications["sms"])

    return _update(engine, account_id, _apply)


def update_farming_profile(
    engine: Engine,
    account_id: int,
    *,
    experience: str | None = None,
    farm_size: float | None = None,
    crops: list[str] | None = None,
    irrigation_type: str | None = None,
    location: dict[str, Any] | None = None,
) -> dict:
    """Farming details plus location; both feed challenge eligibility."""
    if experience is not None:
        _check_choice(experience, FarmingExperience, "farming experience")
    if irrigation_type is not None:
        _check_choice(irrigation_type, IrrigationType, "irrigation type")
    if farm_size is not None and farm_size < 0:
        raise ValidationError("Farm size cannot be negative")

    def _apply(session: Session, account: Account) -> None:
        if experience is not None:
            account.farming_experience = experience
        if farm_size is not None:
            account.farm_size = farm_size
        if crops is not None:
            account.crops = [c.strip() for c in crops if c and c.strip()]
        if irrigation_type is not None:
            account.irrigation_type = irrigation_type
        if location:
            for key, attr in (
                ("state", "location_state"),
                ("district", "location_district"),
                ("village", "location_village"),
                ("latitude", "latitude"),
                ("longitude", "longitude"),
            ):
                if key in location:
                    setattr(account, attr, location[key])

    return _update(engine, account_id, _apply)


def change_password(
    engine: Engine, account_id: int, current_password: str, new_password: str,
) -> None:
    """Replace the password hash.  A wrong current password is an :class:`AuthError`."""
    validate_password(new_password)

    def _apply(session: Session, account: Account) -> None:
        if not verify_password(current_password or "", account.password_hash):
            raise AuthError("Password is incorrect")
        account.password_hash = hash_password(new_password)

    _update(engine, account_id, _apply)
    logger.info("Password changed for account %s", account_id)


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------
def get_stats(engine: Engine, account_id: int) -> dict:
    with Session(engine) as session:
        account = get_account(session, account_id)
        txn_count = session.scalar(
            select(func.count())
            .select_from(WalletTransaction)
            .where(WalletTransaction.account_id == account_id)
        ) or 0
        return {
            "total_points": account.points,
            "level": account.level,
            "experience": account.experience,
            "badges": len(account.badges),
            "streak": account.streak,
            "wallet_balance": account.balance,
            "total_transactions": txn_count,
            "member_since": account.created_at.isoformat() if account.created_at else None,
        }


def get_activity(engine: Engine, account_id: int, limit: int = RECENT_ACTIVITY_LIMIT) -> list[dict]:
    """Most recent wallet transactions, newest first."""
    with Session(engine) as session:
        get_account(session, account_id)
        rows = session.scalars(
            select(WalletTransaction)
            .where(WalletTransaction.account_id == account_id)
            .order_by(WalletTransaction.timestamp.desc(), WalletTransaction.id.desc())
            .limit(limit)
        ).all()
        return [transaction_dict(t) for t in rows]
