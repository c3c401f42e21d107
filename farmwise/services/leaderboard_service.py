"""
farmwise.services.leaderboard_service — Derived Rankings
=========================================================

Read-only views over ``accounts.points``; nothing here is stored.
A caller's rank is one plus the number of active accounts with strictly
more points, so tied accounts share a rank.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from farmwise.constants import LEADERBOARD_PAGE_SIZE
from farmwise.database.models import Account
from farmwise.services.account_service import get_account
from farmwise.services.serializers import leaderboard_entry

if TYPE_CHECKING:
    from sqlalchemy import Engine


def _active():
    return select(Account).where(Account.is_active.is_(True))


def rank_for_points(session: Session, points: int) -> int:
    higher = session.scalar(
        select(func.count())
        .select_from(Account)
        .where(Account.is_active.is_(True), Account.points > points)
    ) or 0
    return higher + 1


def get_leaderboard(
    engine: Engine,
    *,
    page: int = 1,
    page_size: int = LEADERBOARD_PAGE_SIZE,
    role: str | None = None,
    state: str | None = None,
) -> dict:
    """Paginated leaderboard, highest points first."""
    page = max(page, 1)
    query = _active()
    if role:
        query = query.where(Account.role == role)
    if state:
        query = query.where(Account.location_state == state)

    with Session(engine) as session:
        total = session.scalar(select(func.count()).select_from(query.subquery())) or 0
        offset = (page - 1) * page_size
        rows = session.scalars(
            query.order_by(Account.points.desc(), Account.id).offset(offset).limit(page_size)
        ).all()
        return {
            "leaderboard": [leaderboard_entry(a, offset + i + 1) for i, a in enumerate(rows)],
            "total": total,
            "page": page,
            "pages": math.ceil(total / page_size) if page_size else 0,
        }


def get_top(engine: Engine, limit: int = 10) -> list[dict]:
    with Session(engine) as session:
        rows = session.scalars(
            _active().order_by(Account.points.desc(), Account.id).limit(limit)
        ).all()
        return [leaderboard_entry(a, i + 1) for i, a in enumerate(rows)]


def get_user_rank(engine: Engine, account_id: int) -> dict:
    with Session(engine) as session:
        account = get_account(session, account_id)
        return {
            "rank": rank_for_points(session, account.points),
            "points": account.points,
            "level": account.level,
            "badges": len(account.badges),
        }
