"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of farmwise.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from farmwise.config import FarmwiseConfig  # noqa: E402
from farmwise.database.models import Account, Base, Challenge, Role  # noqa: E402
from farmwise.services.passwords import hash_password  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()

TEST_PASSWORD = "password123"
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all FarmWise tables.

    JSONB columns are transparently mapped to TEXT for SQLite compatibility.
    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def cfg() -> FarmwiseConfig:
    return FarmwiseConfig()


@pytest.fixture(autouse=True)
def outbox():
    """Stub the SMTP and Twilio transports so no test reaches the network.

    Yields ``(send_email_mock, send_sms_mock)``.
    """
    with (
        patch("farmwise.services.notification_service._send_email", return_value=True) as email,
        patch("farmwise.services.notification_service._send_sms", return_value=True) as sms,
    ):
        yield email, sms


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------
@pytest.fixture
def make_account(db_engine: Engine):
    """Factory: insert an account and return its id."""
    counter = {"n": 0}

    def _make(**overrides) -> int:
        counter["n"] += 1
        n = counter["n"]
        values = {
            "first_name": f"User{n}",
            "last_name": "Test",
            "email": f"user{n}@example.com",
            "password_hash": _TEST_PASSWORD_HASH,
            "role": Role.FARMER.value,
            "farming_experience": "beginner",
            "level": 1,
            "experience": 0,
            "points": 0,
            "balance": 0,
        }
        values.update(overrides)
        with Session(db_engine) as session:
            account = Account(**values)
            session.add(account)
            session.commit()
            return account.id

    return _make


@pytest.fixture
def make_challenge(db_engine: Engine, make_account):
    """Factory: insert a challenge (owned by a fresh admin) and return its id."""
    state: dict[str, int] = {}

    def _make(**overrides) -> int:
        if "admin" not in state:
            state["admin"] = make_account(role=Role.ADMIN.value, email="admin@example.com")
        values = {
            "title": "Drip Irrigation Setup",
            "description": "Install a drip irrigation system",
            "category": "water_conservation",
            "points": 100,
            "created_by": state["admin"],
            "eligible_roles": [],
            "eligible_states": [],
            "total_participants": 0,
            "completed_participants": 0,
        }
        values.update(overrides)
        with Session(db_engine) as session:
            challenge = Challenge(**values)
            session.add(challenge)
            session.commit()
            return challenge.id

    return _make
