"""
tests/test_leaderboard_service.py — Derived Rankings
=====================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from farmwise.errors import NotFoundError
from farmwise.services import leaderboard_service


class TestRankForPoints:
    def test_counts_strictly_greater(self, db_engine, make_account):
        make_account(points=500)
        make_account(points=300)
        make_account(points=300)
        with Session(db_engine) as session:
            assert leaderboard_service.rank_for_points(session, 600) == 1
            assert leaderboard_service.rank_for_points(session, 300) == 2
            assert leaderboard_service.rank_for_points(session, 0) == 4

    def test_inactive_accounts_ignored(self, db_engine, make_account):
        make_account(points=9000, is_active=False)
        with Session(db_engine) as session:
            assert leaderboard_service.rank_for_points(session, 10) == 1


class TestUserRank:
    def test_ties_share_rank(self, db_engine, make_account):
        make_account(points=800)
        first = make_account(points=400)
        second = make_account(points=400)
        make_account(points=100)

        assert leaderboard_service.get_user_rank(db_engine, first)["rank"] == 2
        assert leaderboard_service.get_user_rank(db_engine, second)["rank"] == 2

    def test_payload(self, db_engine, make_account):
        account_id = make_account(points=1500, level=2)
        rank = leaderboard_service.get_user_rank(db_engine, account_id)
        assert rank == {"rank": 1, "points": 1500, "level": 2, "badges": 0}

    def test_unknown_account(self, db_engine):
        with pytest.raises(NotFoundError):
            leaderboard_service.get_user_rank(db_engine, 321)


class TestLeaderboard:
    def test_ordered_and_paginated(self, db_engine, make_account):
        ids = [make_account(points=p) for p in (10, 50, 30, 40, 20)]
        make_account(points=999, is_active=False)

        page = leaderboard_service.get_leaderboard(db_engine, page=2, page_size=2)
        assert page["total"] == 5
        assert page["pages"] == 3
        assert [(row["rank"], row["points"]) for row in page["leaderboard"]] == [(3, 30), (4, 20)]
        assert page["leaderboard"][0]["id"] == ids[2]

    def test_filters(self, db_engine, make_account):
        make_account(points=10, role="student", location_state="Punjab")
        make_account(points=20, role="farmer", location_state="Punjab")
        make_account(points=30, role="farmer", location_state="Gujarat")

        farmers = leaderboard_service.get_leaderboard(db_engine, role="farmer")
        assert [row["points"] for row in farmers["leaderboard"]] == [30, 20]

        punjab = leaderboard_service.get_leaderboard(db_engine, state="Punjab")
        assert [row["points"] for row in punjab["leaderboard"]] == [20, 10]

    def test_top(self, db_engine, make_account):
        for points in (5, 15, 25, 35):
            make_account(points=points)
        top = leaderboard_service.get_top(db_engine, limit=3)
        assert [row["points"] for row in top] == [35, 25, 15]
        assert [row["rank"] for row in top] == [1, 2, 3]
