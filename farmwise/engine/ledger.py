"""
farmwise.engine.ledger — Gamification Ledger
=============================================

Pure rules for points, experience, level and wallet balance.
No DB I/O: functions mutate the ORM objects they are handed and the
calling service owns the transaction.

Every point-awarding path (challenge completion, verification bonuses)
converges on :func:`award_points`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from farmwise.constants import DEFAULT_AWARD_DESCRIPTION, POINTS_PER_LEVEL, level_for_experience
from farmwise.database.models import Account, AccountBadge, TransactionKind, WalletTransaction
from farmwise.engine.clock import utcnow
from farmwise.errors import ValidationError

logger = logging.getLogger(__name__)

# Sign applied to each transaction kind when reconstructing the balance
TRANSACTION_SIGN: dict[str, int] = {
    TransactionKind.EARNED: 1,
    TransactionKind.REWARD: 1,
    TransactionKind.PURCHASE: 1,
    TransactionKind.SPENT: -1,
}


# ---------------------------------------------------------------------------
# Balance invariant
# ---------------------------------------------------------------------------
def signed_amount(txn: WalletTransaction) -> int:
    """Contribution of *txn* to the wallet balance."""
    try:
        sign = TRANSACTION_SIGN[txn.kind]
    except KeyError:
        raise ValidationError(f"Unknown transaction kind: {txn.kind!r}") from None
    return sign * txn.amount


def reconcile_balance(transactions: Iterable[WalletTransaction]) -> int:
    """Recompute a balance from its transaction log."""
    return sum(signed_amount(t) for t in transactions)


def is_balanced(account: Account) -> bool:
    return account.balance == reconcile_balance(account.transactions)


# ---------------------------------------------------------------------------
# Award
# ---------------------------------------------------------------------------
def award_points(
    account: Account,
    amount: int,
    description: str = DEFAULT_AWARD_DESCRIPTION,
    *,
    now: datetime | None = None,
    points_per_level: int = POINTS_PER_LEVEL,
) -> Account:
    """Credit *amount* points to *account* and record it in the wallet.

    Effects, applied together:

    1. ``points`` and ``experience`` grow by *amount*.
    2. ``level`` is recomputed from experience and only ever raised.
    3. ``balance`` grows by *amount*.
    4. An ``earned`` transaction is appended to the wallet log.

    Raises
    ------
    ValidationError
        If *amount* is not a positive integer.  Nothing is mutated.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError(f"Award amount must be a positive integer, got {amount!r}")

    timestamp = now or utcnow()
    # Column defaults only apply at INSERT, so a pending account may hold None
    old_level = account.level or 1
    new_points = (account.points or 0) + amount
    new_experience = (account.experience or 0) + amount
    new_level = max(old_level, level_for_experience(new_experience, points_per_level))
    new_balance = (account.balance or 0) + amount

    account.points = new_points
    account.experience = new_experience
    account.level = new_level
    account.balance = new_balance
    account.transactions.append(WalletTransaction(
        kind=TransactionKind.EARNED.value,
        amount=amount,
        description=description,
        timestamp=timestamp,
    ))

    if new_level > old_level:
        logger.info(
            "Account %s levelled up %d → %d", account.id, old_level, new_level,
        )
    return account


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------
def award_badge(
    account: Account,
    badge_id: str,
    description: str | None = None,
    *,
    now: datetime | None = None,
) -> bool:
    """Attach *badge_id* to *account*.  Returns False if already held."""
    if any(b.badge_id == badge_id for b in account.badges):
        return False
    account.badges.append(AccountBadge(
        badge_id=badge_id,
        description=description,
        earned_at=now or utcnow(),
    ))
    return True


# ---------------------------------------------------------------------------
# Wallet summary
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class WalletSummary:
    balance: int
    total_earned: int
    total_spent: int


def summarize_wallet(account: Account) -> WalletSummary:
    """Balance plus lifetime earned/spent totals."""
    earned = sum(t.amount for t in account.transactions if t.kind == TransactionKind.EARNED)
    spent = sum(t.amount for t in account.transactions if t.kind == TransactionKind.SPENT)
    return WalletSummary(balance=account.balance, total_earned=earned, total_spent=spent)
