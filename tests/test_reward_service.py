"""
tests/test_reward_service.py — Wallet & Rewards Read Models
============================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from farmwise.database.models import Account, WalletTransaction
from farmwise.engine import ledger
from farmwise.errors import NotFoundError
from farmwise.services import reward_service


def _award(engine, account_id: int, *amounts: int) -> None:
    with Session(engine) as session:
        account = session.get(Account, account_id)
        for i, amount in enumerate(amounts, start=1):
            ledger.award_points(account, amount, f"award {i}")
        session.commit()


class TestWallet:
    def test_empty_wallet(self, db_engine, make_account):
        wallet = reward_service.get_wallet(db_engine, make_account())
        assert wallet == {"balance": 0, "total_earned": 0, "total_spent": 0, "reconciled": True}

    def test_totals_after_awards(self, db_engine, make_account):
        account_id = make_account()
        _award(db_engine, account_id, 100, 50)
        wallet = reward_service.get_wallet(db_engine, account_id)
        assert wallet["balance"] == 150
        assert wallet["total_earned"] == 150
        assert wallet["reconciled"] is True

    def test_drift_is_reported(self, db_engine, make_account):
        account_id = make_account()
        _award(db_engine, account_id, 100)
        with Session(db_engine) as session:
            session.add(WalletTransaction(account_id=account_id, kind="spent", amount=40))
            session.commit()
        wallet = reward_service.get_wallet(db_engine, account_id)
        assert wallet["total_spent"] == 40
        assert wallet["reconciled"] is False

    def test_unknown_account(self, db_engine):
        with pytest.raises(NotFoundError):
            reward_service.get_wallet(db_engine, 77)


class TestTransactions:
    def test_newest_first_with_pages(self, db_engine, make_account):
        account_id = make_account()
        _award(db_engine, account_id, 1, 2, 3, 4, 5)

        page = reward_service.get_transactions(db_engine, account_id, page=1, page_size=2)
        assert page["total"] == 5
        assert page["pages"] == 3
        assert [t["description"] for t in page["transactions"]] == ["award 5", "award 4"]
        assert page["transactions"][0]["type"] == "earned"

    def test_only_own_transactions(self, db_engine, make_account):
        mine, other = make_account(), make_account()
        _award(db_engine, mine, 10)
        _award(db_engine, other, 20, 30)
        assert reward_service.get_transactions(db_engine, mine)["total"] == 1


class TestRewards:
    def test_badges_points_level(self, db_engine, make_account):
        account_id = make_account()
        with Session(db_engine) as session:
            account = session.get(Account, account_id)
            ledger.award_points(account, 1200)
            ledger.award_badge(account, "2", "Water Saver")
            session.commit()

        rewards = reward_service.get_rewards(db_engine, account_id)
        assert rewards["points"] == 1200
        assert rewards["level"] == 2
        assert rewards["wallet_balance"] == 1200
        assert [b["badge_id"] for b in rewards["badges"]] == ["2"]
