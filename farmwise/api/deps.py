"""
farmwise.api.deps — Shared FastAPI dependencies
================================================

* ``JWT_SECRET`` is checked once, at import, so a misconfigured deployment
  fails on boot instead of on the first login.
* :func:`get_engine` / :func:`get_config` are process-wide singletons that
  tests replace through ``app.dependency_overrides``.
* :func:`get_current_account` / :func:`get_current_admin` guard routes.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from farmwise.config import FarmwiseConfig, load_config
from farmwise.database.engine import create_db_engine
from farmwise.database.models import Account, Role

# Placeholder values from .env.example and common defaults
_WEAK_SECRETS = frozenset({
    "farmwise-dev-secret-change-me",
    "your-secret-key",
    "change-me",
    "secret",
    "dev",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"
DEFAULT_JWT_EXPIRE_DAYS = 7


def _load_jwt_secret() -> str:
    """Return ``JWT_SECRET`` or raise :class:`RuntimeError` if it is unusable."""
    secret = os.getenv("JWT_SECRET", "").strip()
    problem = None
    if not secret:
        problem = (
            "JWT_SECRET environment variable is not set. "
            "Create one with `openssl rand -base64 48` and put it in .env"
        )
    elif secret in _WEAK_SECRETS:
        problem = f"JWT_SECRET is a known weak default ({secret!r}); choose a unique value"
    elif len(secret) < _MIN_SECRET_LENGTH:
        problem = (
            f"JWT_SECRET is too short: {len(secret)} characters, "
            f"at least {_MIN_SECRET_LENGTH} required"
        )
    if problem:
        raise RuntimeError(problem)
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """The process-wide database engine (built on first use)."""
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> FarmwiseConfig:
    """``config.yaml`` from the working directory, read once."""
    return load_config()


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------
def create_access_token(account_id: int, role: str) -> str:
    """Sign an HS256 bearer token for *account_id*."""
    days = int(os.getenv("JWT_EXPIRE_DAYS", str(DEFAULT_JWT_EXPIRE_DAYS)))
    payload = {
        "sub": str(account_id),
        "role": role,
        "exp": datetime.now(UTC) + timedelta(days=days),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_current_account(
    authorization: Annotated[str | None, Header()] = None,
    engine: Engine = Depends(get_engine),
) -> dict:
    """Validate the bearer token and return ``{"id", "role"}``.

    The account must still exist and be active.  Raises 401 otherwise.
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Not authorized to access this route")
    try:
        claims = jwt.decode(token.strip(), JWT_SECRET, algorithms=[JWT_ALGORITHM])
        account_id = int(claims["sub"])
    except (InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token") from None

    # Role comes from the row, not the token claims
    with Session(engine) as session:
        row = session.execute(
            select(Account.id, Account.role).where(
                Account.id == account_id, Account.is_active.is_(True),
            )
        ).first()
    if row is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return {"id": row.id, "role": row.role}


def get_current_admin(current: dict = Depends(get_current_account)) -> dict:
    """Like :func:`get_current_account` but requires the admin role (403)."""
    if current["role"] != Role.ADMIN:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            f"User role {current['role']} is not authorized to access this route",
        )
    return current
