"""
farmwise.constants — Shared Constants & Helpers
================================================

Single source of truth for the leveling formula and the fixed gameplay
amounts.  Import from here instead of duplicating in services and routes.
"""

from __future__ import annotations

from datetime import timedelta

# ---------------------------------------------------------------------------
# Leveling formula — THE single canonical implementation
# ---------------------------------------------------------------------------
POINTS_PER_LEVEL = 1000


def level_for_experience(experience: int, points_per_level: int = POINTS_PER_LEVEL) -> int:
    """Level reached with *experience* points.

    Linear bands: 0–999 → 1, 1000–1999 → 2, and so on::

        level = experience // points_per_level + 1
    """
    return experience // points_per_level + 1


# ---------------------------------------------------------------------------
# OTP
# ---------------------------------------------------------------------------
OTP_TTL = timedelta(minutes=10)
OTP_MIN = 100000
OTP_MAX = 999999

# ---------------------------------------------------------------------------
# Awards
# ---------------------------------------------------------------------------
VERIFICATION_BONUS_POINTS = 50
EMAIL_VERIFICATION_DESCRIPTION = "Email verification bonus"
PHONE_VERIFICATION_DESCRIPTION = "Phone verification bonus"
DEFAULT_AWARD_DESCRIPTION = "Points earned"


def challenge_award_description(title: str) -> str:
    return f"Completed challenge: {title}"


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------
RECENT_ACTIVITY_LIMIT = 20
LEADERBOARD_PAGE_SIZE = 50
