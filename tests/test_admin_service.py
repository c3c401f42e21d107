"""
tests/test_admin_service.py — Admin Dashboard & User Directory
===============================================================
"""

from __future__ import annotations

import pytest

from farmwise.services import admin_service


class TestDashboard:
    def test_counts_active_rows_only(self, db_engine, make_account, make_challenge):
        make_account(points=100)
        make_account(points=250)
        make_account(points=1000, is_active=False)
        make_challenge()
        make_challenge(is_active=False)

        dashboard = admin_service.get_dashboard(db_engine)
        # make_challenge adds an admin account with zero points
        assert dashboard == {"total_users": 3, "total_challenges": 1, "total_points": 350}

    def test_empty_database(self, db_engine):
        assert admin_service.get_dashboard(db_engine) == {
            "total_users": 0, "total_challenges": 0, "total_points": 0,
        }


class TestListUsers:
    def test_search_matches_name_or_email(self, db_engine, make_account):
        make_account(first_name="Rajesh", email="rk@example.com")
        make_account(first_name="Priya", last_name="Sharma", email="ps@example.com")
        make_account(first_name="Amit", email="amit.patel@example.com")

        assert [u["first_name"] for u in admin_service.list_users(db_engine, search="RAJ")["users"]] == ["Rajesh"]
        assert [u["first_name"] for u in admin_service.list_users(db_engine, search="sharma")["users"]] == ["Priya"]
        assert [u["first_name"] for u in admin_service.list_users(db_engine, search="patel@")["users"]] == ["Amit"]

    @pytest.mark.parametrize("search", ["%", "_", "a_b"])
    def test_wildcards_in_search_are_literal(self, db_engine, make_account, search):
        make_account(first_name="Rajesh", email="rk@example.com")
        make_account(first_name="A_B", email="ab@example.com")

        names = [u["first_name"] for u in admin_service.list_users(db_engine, search=search)["users"]]
        assert names == ([] if search == "%" else ["A_B"])

    def test_role_filter_and_paging(self, db_engine, make_account):
        for _ in range(3):
            make_account(role="student")
        make_account(role="dealer")
        make_account(role="student", is_active=False)

        students = admin_service.list_users(db_engine, role="student", page_size=2)
        assert students["total"] == 3
        assert students["pages"] == 2
        assert len(students["users"]) == 2
        assert all(u["role"] == "student" for u in students["users"])

    def test_never_exposes_secrets(self, db_engine, make_account):
        make_account(otp_code="123456")
        user = admin_service.list_users(db_engine)["users"][0]
        assert "password_hash" not in user
        assert "otp_code" not in user
