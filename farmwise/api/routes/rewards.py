"""
farmwise.api.routes.rewards — Wallet & rewards
===============================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from farmwise.api.deps import get_current_account, get_engine
from farmwise.services import reward_service

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/wallet")
def get_wallet(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return reward_service.get_wallet(engine, current["id"])


@router.get("/transactions")
def get_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return reward_service.get_transactions(engine, current["id"], page=page, page_size=limit)


@router.get("/user")
def get_rewards(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return reward_service.get_rewards(engine, current["id"])
