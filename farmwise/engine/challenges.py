"""
farmwise.engine.challenges — Challenge Participation Rules
===========================================================

State machine per (challenge, account)::

    pending ──submit──▶ completed
       │
       └─ (in_progress / failed reserved, never reached)

Pure calculation over ORM objects — no DB I/O.  The service layer loads
the challenge, hands it here, and commits.  Completion invokes the
gamification ledger so points, wallet and participant entry change in the
same unit of work.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from farmwise.constants import POINTS_PER_LEVEL, challenge_award_description
from farmwise.database.models import (
    Account,
    Challenge,
    ChallengeParticipant,
    ParticipantStatus,
)
from farmwise.engine import ledger
from farmwise.engine.clock import as_utc, utcnow
from farmwise.errors import (
    AlreadyCompleted,
    AlreadyJoined,
    ChallengeInactive,
    NotEligible,
    NotParticipant,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------
def is_eligible(challenge: Challenge, account: Account) -> bool:
    """Role, farming experience and state must all pass.

    Empty role/state lists mean "no restriction".  Experience is an
    exact match, not a minimum.
    """
    roles = challenge.eligible_roles or []
    if roles and account.role not in roles:
        return False

    if challenge.eligible_experience and account.farming_experience != challenge.eligible_experience:
        return False

    states = challenge.eligible_states or []
    if states and account.location_state not in states:
        return False

    return True


# ---------------------------------------------------------------------------
# Participant lookup
# ---------------------------------------------------------------------------
def participants_by_account(challenge: Challenge) -> dict[int, ChallengeParticipant]:
    """Index the challenge's entries by account id (order preserved)."""
    return {p.account_id: p for p in challenge.participants}


def find_participant(challenge: Challenge, account_id: int) -> ChallengeParticipant | None:
    return participants_by_account(challenge).get(account_id)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
def join(
    challenge: Challenge,
    account: Account,
    *,
    now: datetime | None = None,
) -> ChallengeParticipant:
    """Add *account* to *challenge* as a ``pending`` participant.

    Raises
    ------
    AlreadyJoined, ChallengeInactive, NotEligible
        Checked in that order.
    """
    if find_participant(challenge, account.id) is not None:
        raise AlreadyJoined()
    if not challenge.is_active:
        raise ChallengeInactive()
    if not is_eligible(challenge, account):
        raise NotEligible()

    participant = ChallengeParticipant(
        account_id=account.id,
        status=ParticipantStatus.PENDING.value,
        joined_at=now or utcnow(),
        submissions=[],
        points_earned=0,
    )
    challenge.participants.append(participant)
    challenge.total_participants = (challenge.total_participants or 0) + 1

    logger.info("Account %s joined challenge %s", account.id, challenge.id)
    return participant


def submit(
    challenge: Challenge,
    account: Account,
    submissions: list[dict],
    *,
    now: datetime | None = None,
    points_per_level: int = POINTS_PER_LEVEL,
) -> ChallengeParticipant:
    """Complete *account*'s entry and award the challenge points.

    Raises
    ------
    NotParticipant
        If *account* never joined.
    AlreadyCompleted
        If the entry is already completed.  Nothing changes.
    """
    participant = find_participant(challenge, account.id)
    if participant is None:
        raise NotParticipant()
    if participant.status == ParticipantStatus.COMPLETED:
        raise AlreadyCompleted()

    timestamp = now or utcnow()
    if submissions:
        participant.submissions = [
            {**s, "submitted_at": s.get("submitted_at") or timestamp.isoformat()}
            for s in submissions
        ]
    participant.status = ParticipantStatus.COMPLETED.value
    participant.completed_at = timestamp
    participant.points_earned = challenge.points

    challenge.completed_participants = (challenge.completed_participants or 0) + 1
    challenge.success_rate = success_rate(
        challenge.completed_participants, challenge.total_participants,
    )
    challenge.average_completion_minutes = average_completion_minutes(challenge.participants)

    ledger.award_points(
        account,
        challenge.points,
        challenge_award_description(challenge.title),
        now=timestamp,
        points_per_level=points_per_level,
    )

    logger.info(
        "Account %s completed challenge %s (+%d points)",
        account.id, challenge.id, challenge.points,
    )
    return participant


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------
def success_rate(completed: int, total: int) -> float:
    """Completed share as a percentage (0 when nobody joined)."""
    if not total:
        return 0.0
    return completed / total * 100


def average_completion_minutes(participants: Iterable[ChallengeParticipant]) -> float | None:
    """Mean minutes from join to completion over completed entries."""
    durations = [
        (as_utc(p.completed_at) - as_utc(p.joined_at)).total_seconds() / 60
        for p in participants
        if p.status == ParticipantStatus.COMPLETED and p.completed_at and p.joined_at
    ]
    if not durations:
        return None
    return sum(durations) / len(durations)


def days_remaining(challenge: Challenge, *, now: datetime | None = None) -> int | None:
    """Whole days left before ``ends_at`` (rounded up, never negative)."""
    if challenge.ends_at is None:
        return None
    delta = as_utc(challenge.ends_at) - (now or utcnow())
    days = math.ceil(delta.total_seconds() / 86400)
    return days if days > 0 else 0


# ---------------------------------------------------------------------------
# Per-challenge ranking
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RankedEntry:
    rank: int
    participant: ChallengeParticipant


def rank_completions(challenge: Challenge) -> list[RankedEntry]:
    """Completed entries, earliest completion first, ranked from 1."""
    completed = [
        p for p in challenge.participants if p.status == ParticipantStatus.COMPLETED
    ]
    completed.sort(key=lambda p: (
        as_utc(p.completed_at) if p.completed_at else as_utc(datetime.max),
        -p.points_earned,
    ))
    return [RankedEntry(rank=i + 1, participant=p) for i, p in enumerate(completed)]
