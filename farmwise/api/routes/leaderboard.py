"""
farmwise.api.routes.leaderboard — Global rankings
==================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query

from farmwise.api.deps import get_current_account, get_engine
from farmwise.constants import LEADERBOARD_PAGE_SIZE
from farmwise.services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("/global")
def get_global(
    page: int = Query(1, ge=1),
    limit: int = Query(LEADERBOARD_PAGE_SIZE, ge=1, le=100),
    role: str | None = Query(None),
    state: str | None = Query(None),
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return leaderboard_service.get_leaderboard(
        engine, page=page, page_size=limit, role=role, state=state,
    )


@router.get("/user-rank")
def get_user_rank(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return leaderboard_service.get_user_rank(engine, current["id"])


@router.get("/top/{limit}")
def get_top(
    limit: int = Path(..., ge=1, le=100),
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return {"leaderboard": leaderboard_service.get_top(engine, limit)}
