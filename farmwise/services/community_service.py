"""
farmwise.services.community_service — Community Feed
=====================================================

Posts are persisted rows.  Likes are a plain counter incremented in SQL;
the same account may like a post more than once.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from farmwise.database.models import CommunityPost, PostCategory
from farmwise.engine.clock import utcnow
from farmwise.errors import NotFoundError, ValidationError
from farmwise.services.account_service import get_account
from farmwise.services.serializers import post_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

ALL = "all"
MAX_TITLE_LENGTH = 200


def list_posts(
    engine: Engine, *, category: str | None = None, page: int = 1, page_size: int = 10,
) -> dict:
    page = max(page, 1)
    query = select(CommunityPost)
    if category and category != ALL:
        query = query.where(CommunityPost.category == category)

    with Session(engine) as session:
        total = session.scalar(select(func.count()).select_from(query.subquery())) or 0
        rows = session.scalars(
            query.order_by(CommunityPost.created_at.desc(), CommunityPost.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()
        return {
            "posts": [post_dict(p) for p in rows],
            "total": total,
            "page": page,
            "pages": math.ceil(total / page_size) if page_size else 0,
        }


def create_post(
    engine: Engine,
    author_id: int,
    *,
    title: str,
    content: str,
    category: str = PostCategory.QUESTION.value,
) -> dict:
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise ValidationError("Title and content are required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")
    if category not in {c.value for c in PostCategory}:
        raise ValidationError(f"Invalid category: {category!r}")

    with Session(engine, expire_on_commit=False) as session:
        author = get_account(session, author_id)
        post = CommunityPost(
            author_id=author.id,
            author_name=author.full_name,
            title=title,
            content=content,
            category=category,
            created_at=utcnow(),
        )
        session.add(post)
        session.commit()
        logger.info("Account %s posted %s in %s", author_id, post.id, category)
        return post_dict(post)


def like_post(engine: Engine, post_id: int) -> dict:
    with Session(engine, expire_on_commit=False) as session:
        result = session.execute(
            update(CommunityPost)
            .where(CommunityPost.id == post_id)
            .values(likes=CommunityPost.likes + 1)
        )
        if result.rowcount == 0:
            raise NotFoundError("Post not found")
        session.commit()
        post = session.get(CommunityPost, post_id)
        return {"id": post.id, "likes": post.likes}


def get_categories(engine: Engine) -> list[dict]:
    """``all`` first, then every category with its post count."""
    with Session(engine) as session:
        counts = dict(session.execute(
            select(CommunityPost.category, func.count()).group_by(CommunityPost.category)
        ).all())
    categories = [{"id": ALL, "count": sum(counts.values())}]
    categories.extend({"id": c.value, "count": counts.get(c.value, 0)} for c in PostCategory)
    return categories
