"""
farmwise.services.serializers — ORM → JSON-ready dicts
=======================================================

Called inside an open session so relationships can still lazy-load.
Datetimes are rendered as ISO-8601 strings.
"""

from __future__ import annotations

from datetime import datetime

from farmwise.constants import POINTS_PER_LEVEL
from farmwise.database.models import (
    Account,
    AccountBadge,
    Challenge,
    ChallengeParticipant,
    CommunityPost,
    WalletTransaction,
)
from farmwise.engine.challenges import days_remaining


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
def badge_dict(b: AccountBadge) -> dict:
    return {
        "badge_id": b.badge_id,
        "description": b.description,
        "earned_at": _iso(b.earned_at),
    }


def account_dict(a: Account, *, points_per_level: int = POINTS_PER_LEVEL) -> dict:
    """Public profile.  Never includes the password hash or OTP."""
    return {
        "id": a.id,
        "first_name": a.first_name,
        "last_name": a.last_name,
        "full_name": a.full_name,
        "email": a.email,
        "phone": a.phone,
        "role": a.role,
        "profile_image": a.profile_image,
        "is_email_verified": a.is_email_verified,
        "is_phone_verified": a.is_phone_verified,
        "preferences": {
            "language": a.language,
            "theme": a.theme,
            "notifications": {
                "email": a.notify_email,
                "push": a.notify_push,
                "sms": a.notify_sms,
            },
        },
        "location": {
            "state": a.location_state,
            "district": a.location_district,
            "village": a.location_village,
            "latitude": a.latitude,
            "longitude": a.longitude,
        },
        "farming_profile": {
            "experience": a.farming_experience,
            "farm_size": a.farm_size,
            "crops": list(a.crops or []),
            "irrigation_type": a.irrigation_type,
        },
        "gamification": {
            "level": a.level,
            "experience": a.experience,
            "points": a.points,
            "streak": a.streak,
            "next_level_at": a.level * points_per_level,
            "badges": [badge_dict(b) for b in a.badges],
        },
        "wallet": {"balance": a.balance},
        "is_active": a.is_active,
        "last_login_at": _iso(a.last_login_at),
        "created_at": _iso(a.created_at),
    }


def leaderboard_entry(a: Account, rank: int) -> dict:
    return {
        "rank": rank,
        "id": a.id,
        "full_name": a.full_name,
        "profile_image": a.profile_image,
        "role": a.role,
        "state": a.location_state,
        "points": a.points,
        "level": a.level,
        "badge_count": len(a.badges),
    }


def transaction_dict(t: WalletTransaction) -> dict:
    return {
        "id": t.id,
        "type": t.kind,
        "amount": t.amount,
        "description": t.description,
        "timestamp": _iso(t.timestamp),
    }


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------
def participant_dict(p: ChallengeParticipant) -> dict:
    return {
        "account_id": p.account_id,
        "status": p.status,
        "joined_at": _iso(p.joined_at),
        "completed_at": _iso(p.completed_at),
        "submissions": list(p.submissions or []),
        "points_earned": p.points_earned,
    }


def challenge_dict(
    c: Challenge,
    *,
    participant: ChallengeParticipant | None = None,
    now: datetime | None = None,
) -> dict:
    """Challenge definition plus statistics.

    *participant* is the caller's own entry, included as ``my_participation``.
    The full participant list is never exposed here.
    """
    return {
        "id": c.id,
        "title": c.title,
        "description": c.description,
        "category": c.category,
        "difficulty": c.difficulty,
        "type": c.type,
        "points": c.points,
        "requirements": list(c.requirements or []),
        "instructions": list(c.instructions or []),
        "resources": dict(c.resources or {}),
        "rewards": dict(c.rewards or {}),
        "tags": list(c.tags or []),
        "duration": {
            "start_date": _iso(c.starts_at),
            "end_date": _iso(c.ends_at),
            "time_limit": c.time_limit_minutes,
        },
        "eligibility": {
            "roles": list(c.eligible_roles or []),
            "farming_experience": c.eligible_experience,
            "states": list(c.eligible_states or []),
            "districts": list(c.eligible_districts or []),
        },
        "is_active": c.is_active,
        "is_featured": c.is_featured,
        "created_by": c.created_by,
        "statistics": {
            "total_participants": c.total_participants,
            "completed_participants": c.completed_participants,
            "average_completion_time": c.average_completion_minutes,
            "success_rate": c.success_rate,
        },
        "completion_rate": c.completion_rate,
        "days_remaining": days_remaining(c, now=now),
        "my_participation": participant_dict(participant) if participant else None,
        "created_at": _iso(c.created_at),
    }


# ---------------------------------------------------------------------------
# Community
# ---------------------------------------------------------------------------
def post_dict(p: CommunityPost) -> dict:
    return {
        "id": p.id,
        "author": {"id": p.author_id, "name": p.author_name},
        "title": p.title,
        "content": p.content,
        "category": p.category,
        "likes": p.likes,
        "comments": p.comments,
        "created_at": _iso(p.created_at),
    }
