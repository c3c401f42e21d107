"""
tests/test_seed.py — Demo Data Seeding
=======================================
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from farmwise.constants import level_for_experience
from farmwise.database.engine import create_db_engine, init_db
from farmwise.database.models import Account, Challenge
from farmwise.database.seed import DEMO_ACCOUNTS, seed_challenges, seed_database
from farmwise.engine import ledger
from farmwise.services import account_service


class TestSeedDatabase:
    def test_seeds_accounts_and_challenges(self, db_engine):
        seed_database(db_engine)
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(Account)) == len(DEMO_ACCOUNTS)
            titles = set(session.scalars(select(Challenge.title)))
        assert len(titles) == 3

    def test_idempotent(self, db_engine):
        seed_database(db_engine)
        seed_database(db_engine)
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(Account)) == len(DEMO_ACCOUNTS)
            assert session.scalar(select(func.count()).select_from(Challenge)) == 3

    def test_wallets_reconcile_and_levels_follow_formula(self, db_engine):
        seed_database(db_engine)
        with Session(db_engine) as session:
            for account in session.scalars(select(Account)):
                assert ledger.is_balanced(account), account.email
                assert account.points == account.experience
                assert account.level == level_for_experience(account.experience)

    def test_demo_totals(self, db_engine):
        seed_database(db_engine)
        with Session(db_engine) as session:
            rajesh = session.scalar(select(Account).where(Account.email == "rajesh@farmwise.com"))
            assert rajesh.points == 2500
            assert rajesh.level == 3
            assert {b.badge_id for b in rajesh.badges} == {"1", "2"}

    def test_demo_login_works(self, db_engine):
        seed_database(db_engine)
        user = account_service.authenticate(db_engine, "admin@farmwise.com", "admin123")
        assert user["role"] == "admin"

    def test_challenges_need_an_admin(self, db_engine, make_account):
        make_account(role="farmer")
        with Session(db_engine) as session:
            assert seed_challenges(session) == 0


class TestSetupEntryPoint:
    def test_creates_schema_and_seeds(self, db_engine):
        from farmwise import setup_db

        with patch.object(setup_db, "create_db_engine", return_value=db_engine):
            assert setup_db.main() == 0
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(Challenge)) == 3

    def test_missing_database_url(self):
        from farmwise import setup_db

        with patch.dict(os.environ, {"DATABASE_URL": ""}), patch.object(setup_db, "load_dotenv"):
            assert setup_db.main() == 1


class TestCreateDbEngine:
    def test_sqlite_url_builds_without_pool_options(self):
        engine = create_db_engine("sqlite://")
        try:
            init_db(engine)
            with Session(engine) as session:
                assert session.scalar(select(func.count()).select_from(Account)) == 0
        finally:
            engine.dispose()

    def test_requires_a_url(self):
        with patch.dict(os.environ, {"DATABASE_URL": ""}), pytest.raises(RuntimeError, match="DATABASE_URL"):
            create_db_engine()
