"""
tests/test_otp.py — One-Time Code Generation & Verification
============================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from farmwise.database.models import Account
from farmwise.engine import otp

T0 = datetime(2026, 5, 10, 8, 0, tzinfo=UTC)


def _account() -> Account:
    return Account(first_name="Ravi", last_name="Das", email="ravi@example.com", password_hash="x")


class TestGenerate:
    def test_six_digit_numeric_code(self):
        account = _account()
        for _ in range(50):
            code = otp.generate(account, now=T0)
            assert len(code) == 6
            assert code.isdigit()
            assert 100000 <= int(code) <= 999999

    def test_expires_ten_minutes_after_generation(self):
        account = _account()
        otp.generate(account, now=T0)
        assert account.otp_expires_at == T0 + timedelta(minutes=10)

    def test_custom_ttl(self):
        account = _account()
        otp.generate(account, now=T0, ttl=timedelta(minutes=3))
        assert account.otp_expires_at == T0 + timedelta(minutes=3)

    def test_new_code_overwrites_previous(self):
        account = _account()
        otp.generate(account, now=T0)
        second = otp.generate(account, now=T0 + timedelta(minutes=1))
        assert account.otp_code == second
        assert account.otp_expires_at == T0 + timedelta(minutes=11)


class TestVerify:
    def test_valid_within_window(self):
        account = _account()
        code = otp.generate(account, now=T0)
        assert otp.verify(account, code, now=T0 + timedelta(minutes=5)) is True

    def test_expired_after_window(self):
        account = _account()
        code = otp.generate(account, now=T0)
        assert otp.verify(account, code, now=T0 + timedelta(minutes=11)) is False

    def test_exact_expiry_instant_is_expired(self):
        account = _account()
        code = otp.generate(account, now=T0)
        assert otp.verify(account, code, now=T0 + timedelta(minutes=10)) is False

    def test_wrong_code(self):
        account = _account()
        code = otp.generate(account, now=T0)
        wrong = "100000" if code != "100000" else "100001"
        assert otp.verify(account, wrong, now=T0) is False

    def test_no_code_issued(self):
        assert otp.verify(_account(), "123456", now=T0) is False

    def test_verify_does_not_clear(self):
        account = _account()
        code = otp.generate(account, now=T0)
        otp.verify(account, code, now=T0)
        assert account.otp_code == code

    def test_naive_stored_expiry_treated_as_utc(self):
        account = _account()
        code = otp.generate(account, now=T0)
        account.otp_expires_at = account.otp_expires_at.replace(tzinfo=None)
        assert otp.verify(account, code, now=T0 + timedelta(minutes=5)) is True


class TestClear:
    def test_clear_removes_code_and_expiry(self):
        account = _account()
        code = otp.generate(account, now=T0)
        otp.clear(account)
        assert account.otp_code is None
        assert account.otp_expires_at is None
        assert otp.verify(account, code, now=T0) is False
