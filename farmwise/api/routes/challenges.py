"""
farmwise.api.routes.challenges — Browse, join & submit challenges
==================================================================

``/challenges/user`` is declared before ``/challenges/{challenge_id}`` so
the literal path wins.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from farmwise.api.deps import get_config, get_current_account, get_engine
from farmwise.config import FarmwiseConfig
from farmwise.services import challenge_service

router = APIRouter(prefix="/challenges", tags=["challenges"])


class Submission(BaseModel):
    type: str
    content: str


class SubmitRequest(BaseModel):
    submissions: list[Submission] = Field(default_factory=list)


@router.get("")
def list_challenges(
    category: str | None = Query(None),
    difficulty: str | None = Query(None),
    type: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    return challenge_service.list_challenges(
        engine,
        current["id"],
        category=category,
        difficulty=difficulty,
        challenge_type=type,
        page=page,
        page_size=limit or cfg.default_page_size,
    )


@router.get("/user")
def get_user_challenges(
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return {"challenges": challenge_service.get_user_challenges(engine, current["id"])}


@router.get("/{challenge_id}")
def get_challenge(
    challenge_id: int,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return challenge_service.get_challenge(engine, challenge_id, current["id"])


@router.post("/{challenge_id}/join")
def join_challenge(
    challenge_id: int,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    participation = challenge_service.join_challenge(engine, challenge_id, current["id"])
    return {"message": "Successfully joined the challenge", "participation": participation}


@router.post("/{challenge_id}/submit")
def submit_challenge(
    challenge_id: int,
    body: SubmitRequest,
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    result = challenge_service.submit_challenge(
        engine,
        cfg,
        challenge_id,
        current["id"],
        [s.model_dump() for s in body.submissions],
    )
    return {"message": "Challenge completed successfully", **result}


@router.get("/{challenge_id}/leaderboard")
def get_challenge_leaderboard(
    challenge_id: int,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return {"leaderboard": challenge_service.get_challenge_leaderboard(engine, challenge_id)}
