"""
farmwise.services.challenge_service — Challenge Listing, Join & Submit
=======================================================================

Wraps :mod:`farmwise.engine.challenges` in sessions.

Join and submit each run as one transaction under
:func:`~farmwise.database.engine.retry_on_stale`.  Both bump the
challenge's statistics, so the challenge row's ``version`` serialises
concurrent transitions; the loser re-reads and sees the winner's entry
(``AlreadyJoined`` / ``AlreadyCompleted``).  The unique
``(challenge_id, account_id)`` key backs the join path as well.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from farmwise.constants import LEADERBOARD_PAGE_SIZE
from farmwise.database.engine import retry_on_stale
from farmwise.database.models import (
    Challenge,
    ChallengeCategory,
    ChallengeParticipant,
    ChallengeType,
    Difficulty,
    FarmingExperience,
    Role,
    SubmissionType,
)
from farmwise.engine import challenges as rules
from farmwise.engine.clock import as_utc, utcnow
from farmwise.errors import AlreadyJoined, NotFoundError, ValidationError
from farmwise.services import notification_service
from farmwise.services.account_service import get_account
from farmwise.services.serializers import account_dict, challenge_dict, participant_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from farmwise.config import FarmwiseConfig

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
ALL = "all"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _get_challenge(session: Session, challenge_id: int) -> Challenge:
    challenge = session.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError("Challenge not found")
    return challenge


def _own_entries(session: Session, account_id: int, challenge_ids: list[int]) -> dict[int, ChallengeParticipant]:
    if not challenge_ids:
        return {}
    rows = session.scalars(
        select(ChallengeParticipant).where(
            ChallengeParticipant.account_id == account_id,
            ChallengeParticipant.challenge_id.in_(challenge_ids),
        )
    ).all()
    return {p.challenge_id: p for p in rows}


def _choice(value: str | None, enum_cls: type, label: str) -> str | None:
    if value is None:
        return None
    if value not in {m.value for m in enum_cls}:
        raise ValidationError(f"Invalid {label}: {value!r}")
    return value


def _validate_submissions(submissions: list[dict] | None) -> list[dict]:
    """Each entry needs a known ``type`` and string ``content``."""
    cleaned: list[dict] = []
    for item in submissions or []:
        if not isinstance(item, dict):
            raise ValidationError("Each submission must be an object")
        if item.get("type") is None:
            raise ValidationError("Submission type is required")
        _choice(item["type"], SubmissionType, "submission type")
        content = item.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Submission content is required")
        cleaned.append({"type": item["type"], "content": content})
    return cleaned


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_challenges(
    engine: Engine,
    account_id: int,
    *,
    category: str | None = None,
    difficulty: str | None = None,
    challenge_type: str | None = None,
    page: int = 1,
    page_size: int = 10,
) -> dict:
    """Active challenges, newest first.  ``category="all"`` disables that filter."""
    if category == ALL:
        category = None
    _choice(category, ChallengeCategory, "category")
    _choice(difficulty, Difficulty, "difficulty")
    _choice(challenge_type, ChallengeType, "type")
    page = max(page, 1)

    query = select(Challenge).where(Challenge.is_active.is_(True))
    if category:
        query = query.where(Challenge.category == category)
    if difficulty:
        query = query.where(Challenge.difficulty == difficulty)
    if challenge_type:
        query = query.where(Challenge.type == challenge_type)

    with Session(engine) as session:
        total = session.scalar(select(func.count()).select_from(query.subquery())) or 0
        rows = session.scalars(
            query.order_by(Challenge.created_at.desc(), Challenge.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()
        mine = _own_entries(session, account_id, [c.id for c in rows])
        now = utcnow()
        return {
            "challenges": [challenge_dict(c, participant=mine.get(c.id), now=now) for c in rows],
            "total": total,
            "page": page,
            "pages": math.ceil(total / page_size) if page_size else 0,
        }


def get_challenge(engine: Engine, challenge_id: int, account_id: int) -> dict:
    """One challenge with the caller's own entry (if any)."""
    with Session(engine) as session:
        challenge = _get_challenge(session, challenge_id)
        entry = rules.find_participant(challenge, account_id)
        return challenge_dict(challenge, participant=entry)


def get_user_challenges(engine: Engine, account_id: int) -> list[dict]:
    """Active challenges the caller joined, most recently joined first."""
    with Session(engine) as session:
        rows = session.execute(
            select(Challenge, ChallengeParticipant)
            .join(ChallengeParticipant, ChallengeParticipant.challenge_id == Challenge.id)
            .where(
                ChallengeParticipant.account_id == account_id,
                Challenge.is_active.is_(True),
            )
            .order_by(ChallengeParticipant.joined_at.desc(), ChallengeParticipant.id.desc())
        ).all()
        now = utcnow()
        return [challenge_dict(c, participant=p, now=now) for c, p in rows]


def get_challenge_leaderboard(
    engine: Engine, challenge_id: int, limit: int = LEADERBOARD_PAGE_SIZE,
) -> list[dict]:
    """Completed entries, earliest completion first."""
    with Session(engine) as session:
        challenge = _get_challenge(session, challenge_id)
        ranked = rules.rank_completions(challenge)[:limit]
        return [
            {
                "rank": r.rank,
                "account": {
                    "id": r.participant.account.id,
                    "full_name": r.participant.account.full_name,
                    "profile_image": r.participant.account.profile_image,
                    "level": r.participant.account.level,
                },
                "completed_at": r.participant.completed_at.isoformat()
                if r.participant.completed_at else None,
                "points_earned": r.participant.points_earned,
            }
            for r in ranked
        ]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
def create_challenge(
    engine: Engine,
    creator_id: int,
    *,
    title: str,
    description: str,
    category: str,
    points: int,
    difficulty: str = Difficulty.EASY.value,
    challenge_type: str = ChallengeType.DAILY.value,
    requirements: list[dict] | None = None,
    instructions: list[str] | None = None,
    resources: dict[str, Any] | None = None,
    rewards: dict[str, Any] | None = None,
    tags: list[str] | None = None,
    starts_at: datetime | None = None,
    ends_at: datetime | None = None,
    time_limit_minutes: int | None = None,
    eligible_roles: list[str] | None = None,
    eligible_experience: str | None = None,
    eligible_states: list[str] | None = None,
    eligible_districts: list[str] | None = None,
    is_active: bool = True,
    is_featured: bool = False,
) -> dict:
    """Validate and insert a new challenge owned by *creator_id*."""
    title = (title or "").strip()
    description = (description or "").strip()
    if not title:
        raise ValidationError("Please add a title")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title cannot be more than {MAX_TITLE_LENGTH} characters")
    if not description:
        raise ValidationError("Please add a description")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description cannot be more than {MAX_DESCRIPTION_LENGTH} characters"
        )
    if isinstance(points, bool) or not isinstance(points, int) or points < 1:
        raise ValidationError("Points must be a positive integer")
    _choice(category, ChallengeCategory, "category")
    _choice(difficulty, Difficulty, "difficulty")
    _choice(challenge_type, ChallengeType, "type")
    _choice(eligible_experience, FarmingExperience, "farming experience")
    for role in eligible_roles or []:
        _choice(role, Role, "role")
    if starts_at and ends_at and as_utc(ends_at) <= as_utc(starts_at):
        raise ValidationError("End date must be after start date")

    with Session(engine, expire_on_commit=False) as session:
        get_account(session, creator_id)
        challenge = Challenge(
            title=title,
            description=description,
            category=category,
            difficulty=difficulty,
            type=challenge_type,
            points=points,
            requirements=requirements or [],
            instructions=instructions or [],
            resources=resources or {},
            rewards=rewards or {},
            tags=tags or [],
            starts_at=starts_at or utcnow(),
            ends_at=ends_at,
            time_limit_minutes=time_limit_minutes,
            eligible_roles=eligible_roles or [],
            eligible_experience=eligible_experience,
            eligible_states=eligible_states or [],
            eligible_districts=eligible_districts or [],
            is_active=is_active,
            is_featured=is_featured,
            created_by=creator_id,
        )
        session.add(challenge)
        session.commit()
        logger.info("Account %s created challenge %s (%r)", creator_id, challenge.id, title)
        return challenge_dict(challenge)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
def join_challenge(engine: Engine, challenge_id: int, account_id: int) -> dict:
    """Add the caller as a ``pending`` participant.

    Raises
    ------
    NotFoundError, AlreadyJoined, ChallengeInactive, NotEligible
        Checked in that order.
    """

    def _txn() -> dict:
        with Session(engine, expire_on_commit=False) as session:
            challenge = _get_challenge(session, challenge_id)
            account = get_account(session, account_id)
            entry = rules.join(challenge, account)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise AlreadyJoined() from None
            return participant_dict(entry)

    return retry_on_stale(_txn)


def submit_challenge(
    engine: Engine,
    cfg: FarmwiseConfig,
    challenge_id: int,
    account_id: int,
    submissions: list[dict] | None = None,
) -> dict:
    """Complete the caller's entry and award the challenge points.

    Returns the updated entry plus the caller's new profile.  The award
    notice is emailed after commit when the caller has email notices on.
    """
    cleaned = _validate_submissions(submissions)

    def _txn() -> tuple[dict, dict, str]:
        with Session(engine, expire_on_commit=False) as session:
            challenge = _get_challenge(session, challenge_id)
            account = get_account(session, account_id)
            entry = rules.submit(
                challenge, account, cleaned, points_per_level=cfg.points_per_level,
            )
            session.commit()
            return (
                participant_dict(entry),
                account_dict(account, points_per_level=cfg.points_per_level),
                challenge.title,
            )

    entry, profile, title = retry_on_stale(_txn)
    if profile["preferences"]["notifications"]["email"]:
        notification_service.send_challenge_award_email(
            cfg, profile["email"], profile["first_name"], title, entry["points_earned"],
        )
    return {"participation": entry, "user": profile}
