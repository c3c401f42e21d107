"""
farmwise.errors — Typed failure reasons
========================================

Every engine and service operation either returns its payload or raises
one of these.  The API layer renders them as ``{"detail", "code"}`` with
the class's ``status_code``; nothing here is fatal to the process.
"""

from __future__ import annotations


class FarmwiseError(Exception):
    """Base class for all locally recoverable failures."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class ValidationError(FarmwiseError):
    """Malformed input, rejected before core logic runs."""

    status_code = 400
    code = "validation_error"
    default_message = "Validation failed"


class NotFoundError(FarmwiseError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ConflictError(FarmwiseError):
    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class AlreadyJoined(ConflictError):
    code = "already_joined"
    default_message = "You are already participating in this challenge"


class AlreadyCompleted(ConflictError):
    code = "already_completed"
    default_message = "Challenge already completed"


class EligibilityError(FarmwiseError):
    status_code = 400
    code = "eligibility_error"
    default_message = "Not allowed"


class ChallengeInactive(EligibilityError):
    code = "challenge_inactive"
    default_message = "Challenge is not active"


class NotEligible(EligibilityError):
    code = "not_eligible"
    default_message = "You are not eligible for this challenge"


class NotParticipant(EligibilityError):
    code = "not_participant"
    default_message = "You are not participating in this challenge"


class AuthError(FarmwiseError):
    """Invalid OTP or credentials.  Messages never say which check failed."""

    status_code = 401
    code = "auth_error"
    default_message = "Invalid credentials"
