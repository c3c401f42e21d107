"""
farmwise.services.reward_service — Wallet & Rewards Read Models
================================================================

Balances are only ever changed by :func:`farmwise.engine.ledger.award_points`;
this module reports on them.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from farmwise.database.models import WalletTransaction
from farmwise.engine import ledger
from farmwise.services.account_service import get_account
from farmwise.services.serializers import badge_dict, transaction_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine


def get_wallet(engine: Engine, account_id: int) -> dict:
    """Balance, lifetime totals and whether the log reconciles."""
    with Session(engine) as session:
        account = get_account(session, account_id)
        summary = ledger.summarize_wallet(account)
        return {
            "balance": summary.balance,
            "total_earned": summary.total_earned,
            "total_spent": summary.total_spent,
            "reconciled": ledger.is_balanced(account),
        }


def get_transactions(
    engine: Engine, account_id: int, *, page: int = 1, page_size: int = 20,
) -> dict:
    """Wallet log, newest first."""
    page = max(page, 1)
    with Session(engine) as session:
        get_account(session, account_id)
        base = select(WalletTransaction).where(WalletTransaction.account_id == account_id)
        total = session.scalar(select(func.count()).select_from(base.subquery())) or 0
        rows = session.scalars(
            base.order_by(WalletTransaction.timestamp.desc(), WalletTransaction.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()
        return {
            "transactions": [transaction_dict(t) for t in rows],
            "total": total,
            "page": page,
            "pages": math.ceil(total / page_size) if page_size else 0,
        }


def get_rewards(engine: Engine, account_id: int) -> dict:
    with Session(engine) as session:
        account = get_account(session, account_id)
        return {
            "badges": [badge_dict(b) for b in account.badges],
            "points": account.points,
            "level": account.level,
            "wallet_balance": account.balance,
        }
