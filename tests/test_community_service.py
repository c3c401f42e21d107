"""
tests/test_community_service.py — Community Feed
=================================================
"""

from __future__ import annotations

import pytest

from farmwise.errors import NotFoundError, ValidationError
from farmwise.services import community_service


def _post(engine, author_id, **overrides) -> dict:
    values = dict(title="Best time to sow wheat?", content="Punjab, late October?")
    values.update(overrides)
    return community_service.create_post(engine, author_id, **values)


class TestPosts:
    def test_create_uses_author_name(self, db_engine, make_account):
        author = make_account(first_name="Rajesh", last_name="Kumar")
        post = _post(db_engine, author, category="tips")
        assert post["author"] == {"id": author, "name": "Rajesh Kumar"}
        assert post["category"] == "tips"
        assert post["likes"] == 0
        assert post["created_at"] is not None

    @pytest.mark.parametrize("overrides", [
        {"title": "  "},
        {"content": ""},
        {"title": "t" * 201},
        {"category": "rant"},
    ])
    def test_rejects_invalid(self, db_engine, make_account, overrides):
        with pytest.raises(ValidationError):
            _post(db_engine, make_account(), **overrides)

    def test_list_newest_first_and_filtered(self, db_engine, make_account):
        author = make_account()
        _post(db_engine, author, title="One", category="question")
        _post(db_engine, author, title="Two", category="success_story")
        _post(db_engine, author, title="Three", category="question")

        feed = community_service.list_posts(db_engine)
        assert [p["title"] for p in feed["posts"]] == ["Three", "Two", "One"]

        questions = community_service.list_posts(db_engine, category="question")
        assert questions["total"] == 2
        assert community_service.list_posts(db_engine, category="all")["total"] == 3


class TestLikes:
    def test_like_increments_without_dedup(self, db_engine, make_account):
        post = _post(db_engine, make_account())
        community_service.like_post(db_engine, post["id"])
        liked = community_service.like_post(db_engine, post["id"])
        assert liked == {"id": post["id"], "likes": 2}

    def test_like_unknown_post(self, db_engine):
        with pytest.raises(NotFoundError):
            community_service.like_post(db_engine, 1234)


class TestCategories:
    def test_counts_with_all_first(self, db_engine, make_account):
        author = make_account()
        _post(db_engine, author, category="tips")
        _post(db_engine, author, category="tips")
        _post(db_engine, author, category="guide")

        categories = community_service.get_categories(db_engine)
        assert categories[0] == {"id": "all", "count": 3}
        counts = {c["id"]: c["count"] for c in categories}
        assert counts["tips"] == 2
        assert counts["guide"] == 1
        assert counts["question"] == 0
