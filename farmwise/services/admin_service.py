"""
farmwise.services.admin_service — Admin Dashboard & User Directory
===================================================================
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from farmwise.database.models import Account, Challenge
from farmwise.services.serializers import account_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine


def get_dashboard(engine: Engine) -> dict:
    """Headline counters for the admin dashboard."""
    with Session(engine) as session:
        total_users = session.scalar(
            select(func.count()).select_from(Account).where(Account.is_active.is_(True))
        ) or 0
        total_challenges = session.scalar(
            select(func.count()).select_from(Challenge).where(Challenge.is_active.is_(True))
        ) or 0
        total_points = session.scalar(
            select(func.coalesce(func.sum(Account.points), 0)).where(Account.is_active.is_(True))
        ) or 0
    return {
        "total_users": total_users,
        "total_challenges": total_challenges,
        "total_points": total_points,
    }


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_users(
    engine: Engine,
    *,
    role: str | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 10,
) -> dict:
    """Active accounts, newest first, filtered by role and a name/email search."""
    page = max(page, 1)
    query = select(Account).where(Account.is_active.is_(True))
    if role:
        query = query.where(Account.role == role)
    if search:
        pattern = f"%{_escape_like(search.strip().lower())}%"
        query = query.where(or_(
            func.lower(Account.first_name).like(pattern, escape="\\"),
            func.lower(Account.last_name).like(pattern, escape="\\"),
            func.lower(Account.email).like(pattern, escape="\\"),
        ))

    with Session(engine) as session:
        total = session.scalar(select(func.count()).select_from(query.subquery())) or 0
        rows = session.scalars(
            query.order_by(Account.created_at.desc(), Account.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()
        return {
            "users": [account_dict(a) for a in rows],
            "total": total,
            "page": page,
            "pages": math.ceil(total / page_size) if page_size else 0,
        }
