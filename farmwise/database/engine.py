"""
farmwise.database.engine — Engine, Schema & Thread Bridge
==========================================================

Services are plain synchronous SQLAlchemy code.  The async auth routes
reach them through :func:`run_db`, which hands the call to
``asyncio.to_thread()``; the sync routes in ``farmwise.api.routes`` run
on FastAPI's threadpool already.  Optimistic-lock conflicts on wallets
and challenge counters are retried by :func:`retry_on_stale`.

Usage::

    engine = create_db_engine()          # DATABASE_URL from .env
    init_db(engine)
    account = await run_db(account_service.authenticate, engine, email, password)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm.exc import StaleDataError

from farmwise.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Attempts for a whole read-modify-write transaction that lost a version race
MAX_STALE_RETRIES = 3


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
_POOL_OPTIONS = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_pre_ping": True,
    "pool_timeout": 10,
    "pool_recycle": 3600,
}


def create_db_engine(url: str | None = None) -> Engine:
    """Engine for *url*, or for ``DATABASE_URL`` when *url* is omitted.

    PostgreSQL gets a bounded connection pool; a SQLite URL (local
    development) uses SQLAlchemy's default pool for that driver.

    Raises
    ------
    RuntimeError
        If no URL is given and ``DATABASE_URL`` is unset.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example to .env and point it at the FarmWise database."
        )

    options = {} if url.startswith("sqlite") else _POOL_OPTIONS
    engine = create_engine(url, echo=False, **options)
    logger.info("Database engine ready: %s", engine.url.render_as_string(hide_password=True))
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """``CREATE TABLE IF NOT EXISTS`` for every FarmWise table.

    Deployed databases are migrated with ``alembic upgrade head``; this is
    for local setup and tests.
    """
    Base.metadata.create_all(engine)
    logger.info("Schema ensured (%d tables)", len(Base.metadata.tables))


# ---------------------------------------------------------------------------
# Compare-and-swap retry
# ---------------------------------------------------------------------------
def retry_on_stale(
    func: Callable[P, T],
    *args: P.args,
    **kwargs: P.kwargs,
) -> T:
    """Run *func* and re-run it when a versioned row changed underneath it.

    *func* must own its whole transaction (open, mutate, commit) so a retry
    re-reads fresh state.  After :data:`MAX_STALE_RETRIES` losses the
    :class:`StaleDataError` propagates.
    """
    for attempt in range(1, MAX_STALE_RETRIES + 1):
        try:
            return func(*args, **kwargs)
        except StaleDataError:
            if attempt == MAX_STALE_RETRIES:
                raise
            logger.warning(
                "Concurrent update in %s — retrying (%d/%d)",
                getattr(func, "__name__", func), attempt, MAX_STALE_RETRIES,
            )
    raise RuntimeError("retry_on_stale: no attempts made")


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Await a blocking service call from an ``async`` route::

        user = await run_db(account_service.get_profile, engine, account_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
