"""
tests/test_account_service.py — Registration, Login & Profile
==============================================================

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from farmwise.database.models import Account
from farmwise.engine import ledger
from farmwise.errors import AuthError, ConflictError, NotFoundError, ValidationError
from farmwise.services import account_service

TEST_PASSWORD = "password123"


def _register(engine, cfg, **overrides) -> dict:
    values = dict(
        first_name="Rajesh",
        last_name="Kumar",
        email="Rajesh@FarmWise.com ",
        password="password123",
    )
    values.update(overrides)
    return account_service.register(engine, cfg, **values)


# ---------------------------------------------------------------------------
# register
# ---------------------------------------------------------------------------
class TestRegister:
    def test_creates_account_with_otp(self, db_engine, cfg, outbox):
        user = _register(db_engine, cfg)

        assert user["email"] == "rajesh@farmwise.com"
        assert user["role"] == "farmer"
        assert user["gamification"]["level"] == 1
        assert "password_hash" not in user
        with Session(db_engine) as session:
            account = session.get(Account, user["id"])
            assert account.password_hash != "password123"
            assert account.otp_code is not None
            assert account.is_email_verified is False

        email_mock, _ = outbox
        email_mock.assert_called_once()
        assert email_mock.call_args.args[0] == "rajesh@farmwise.com"

    def test_duplicate_email_is_conflict(self, db_engine, cfg):
        _register(db_engine, cfg)
        with pytest.raises(ConflictError):
            _register(db_engine, cfg, email="rajesh@farmwise.com")

    def test_duplicate_phone_is_conflict(self, db_engine, cfg):
        _register(db_engine, cfg, phone="9876543210")
        with pytest.raises(ConflictError):
            _register(db_engine, cfg, email="other@farmwise.com", phone="9876543210")

    def test_dispatch_failure_keeps_account_and_code(self, db_engine, cfg, outbox):
        email_mock, _ = outbox
        email_mock.side_effect = OSError("smtp down")

        user = _register(db_engine, cfg)

        with Session(db_engine) as session:
            account = session.get(Account, user["id"])
            assert account is not None
            assert account.otp_code is not None

    @pytest.mark.parametrize("overrides", [
        {"first_name": ""},
        {"email": "not-an-email"},
        {"password": "123"},
        {"phone": "12ab"},
        {"role": "admin"},
    ])
    def test_rejects_invalid_input(self, db_engine, cfg, overrides):
        with pytest.raises(ValidationError):
            _register(db_engine, cfg, **overrides)
        with Session(db_engine) as session:
            assert session.scalar(select(Account)) is None


# ---------------------------------------------------------------------------
# authenticate
# ---------------------------------------------------------------------------
class TestAuthenticate:
    def test_valid_credentials_stamp_last_login(self, db_engine, make_account):
        account_id = make_account(email="asha@example.com")
        user = account_service.authenticate(db_engine, "ASHA@example.com", TEST_PASSWORD)
        assert user["id"] == account_id
        assert user["last_login_at"] is not None

    def test_wrong_password_and_unknown_email_look_the_same(self, db_engine, make_account):
        make_account(email="asha@example.com")
        with pytest.raises(AuthError) as wrong_pw:
            account_service.authenticate(db_engine, "asha@example.com", "nope-nope")
        with pytest.raises(AuthError) as unknown:
            account_service.authenticate(db_engine, "ghost@example.com", TEST_PASSWORD)
        assert wrong_pw.value.message == unknown.value.message == "Invalid credentials"

    def test_deactivated_account(self, db_engine, make_account):
        make_account(email="gone@example.com", is_active=False)
        with pytest.raises(AuthError):
            account_service.authenticate(db_engine, "gone@example.com", TEST_PASSWORD)

    def test_missing_fields(self, db_engine):
        with pytest.raises(ValidationError):
            account_service.authenticate(db_engine, "", "")


# ---------------------------------------------------------------------------
# Profile mutations
# ---------------------------------------------------------------------------
class TestProfileUpdates:
    def test_update_profile(self, db_engine, make_account):
        account_id = make_account()
        user = account_service.update_profile(
            db_engine, account_id, first_name="Priya", profile_image="https://img/p.png",
        )
        assert user["first_name"] == "Priya"
        assert user["profile_image"] == "https://img/p.png"

    def test_new_phone_resets_phone_verification(self, db_engine, make_account):
        account_id = make_account(phone="9876543210", is_phone_verified=True)
        user = account_service.update_profile(db_engine, account_id, phone="9876500000")
        assert user["phone"] == "9876500000"
        assert user["is_phone_verified"] is False

    def test_phone_in_use_elsewhere(self, db_engine, make_account):
        make_account(phone="9876543210")
        account_id = make_account()
        with pytest.raises(ConflictError):
            account_service.update_profile(db_engine, account_id, phone="9876543210")

    def test_update_preferences(self, db_engine, make_account):
        account_id = make_account()
        user = account_service.update_preferences(
            db_engine, account_id, language="hi", theme="dark", notifications={"sms": True},
        )
        prefs = user["preferences"]
        assert prefs["language"] == "hi"
        assert prefs["theme"] == "dark"
        assert prefs["notifications"] == {"email": True, "push": True, "sms": True}

    def test_invalid_language(self, db_engine, make_account):
        account_id = make_account()
        with pytest.raises(ValidationError):
            account_service.update_preferences(db_engine, account_id, language="fr")

    def test_update_farming_profile_with_location(self, db_engine, make_account):
        account_id = make_account()
        user = account_service.update_farming_profile(
            db_engine,
            account_id,
            experience="expert",
            farm_size=12.5,
            crops=["cotton", " ", "wheat"],
            irrigation_type="sprinkler",
            location={"state": "Gujarat", "district": "Ahmedabad"},
        )
        assert user["farming_profile"] == {
            "experience": "expert",
            "farm_size": 12.5,
            "crops": ["cotton", "wheat"],
            "irrigation_type": "sprinkler",
        }
        assert user["location"]["state"] == "Gujarat"
        assert user["location"]["district"] == "Ahmedabad"

    def test_negative_farm_size(self, db_engine, make_account):
        account_id = make_account()
        with pytest.raises(ValidationError):
            account_service.update_farming_profile(db_engine, account_id, farm_size=-1)

    def test_change_password(self, db_engine, make_account):
        account_id = make_account(email="pw@example.com")
        account_service.change_password(db_engine, account_id, TEST_PASSWORD, "newsecret1")
        assert account_service.authenticate(db_engine, "pw@example.com", "newsecret1")["id"] == account_id

    def test_change_password_wrong_current(self, db_engine, make_account):
        account_id = make_account()
        with pytest.raises(AuthError):
            account_service.change_password(db_engine, account_id, "wrong-one", "newsecret1")

    def test_missing_account(self, db_engine):
        with pytest.raises(NotFoundError):
            account_service.update_profile(db_engine, 424242, first_name="X")


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------
class TestStatsAndActivity:
    def test_stats(self, db_engine, make_account):
        account_id = make_account(streak=4)
        with Session(db_engine) as session:
            account = session.get(Account, account_id)
            ledger.award_points(account, 300, "Seed")
            ledger.award_badge(account, "1", "First Steps")
            session.commit()

        stats = account_service.get_stats(db_engine, account_id)
        assert stats["total_points"] == 300
        assert stats["experience"] == 300
        assert stats["badges"] == 1
        assert stats["streak"] == 4
        assert stats["wallet_balance"] == 300
        assert stats["total_transactions"] == 1

    def test_activity_limited_to_twenty_newest_first(self, db_engine, make_account):
        account_id = make_account()
        with Session(db_engine) as session:
            account = session.get(Account, account_id)
            for i in range(1, 26):
                ledger.award_points(account, i, f"award {i}")
            session.commit()

        activity = account_service.get_activity(db_engine, account_id)
        assert len(activity) == 20
        assert activity[0]["description"] == "award 25"
        assert activity[-1]["description"] == "award 6"
