"""
farmwise.api.routes.admin — Admin endpoints (admin role required)
==================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from farmwise.api.deps import get_config, get_current_admin, get_engine
from farmwise.config import FarmwiseConfig
from farmwise.services import admin_service, challenge_service

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ChallengeCreate(BaseModel):
    title: str
    description: str
    category: str
    points: int
    difficulty: str = "easy"
    type: str = "daily"
    requirements: list[dict[str, Any]] = Field(default_factory=list)
    instructions: list[Any] = Field(default_factory=list)
    resources: dict[str, Any] = Field(default_factory=dict)
    rewards: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    time_limit: int | None = None
    roles: list[str] = Field(default_factory=list)
    farming_experience: str | None = None
    states: list[str] = Field(default_factory=list)
    districts: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/analytics/dashboard")
def get_dashboard(admin: dict = Depends(get_current_admin), engine=Depends(get_engine)):
    return admin_service.get_dashboard(engine)


@router.get("/users")
def list_users(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    role: str | None = Query(None),
    search: str | None = Query(None),
    admin: dict = Depends(get_current_admin),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    return admin_service.list_users(
        engine, role=role, search=search, page=page, page_size=limit or cfg.default_page_size,
    )


@router.post("/challenges", status_code=201)
def create_challenge(
    body: ChallengeCreate,
    admin: dict = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    return challenge_service.create_challenge(
        engine,
        admin["id"],
        title=body.title,
        description=body.description,
        category=body.category,
        points=body.points,
        difficulty=body.difficulty,
        challenge_type=body.type,
        requirements=body.requirements,
        instructions=body.instructions,
        resources=body.resources,
        rewards=body.rewards,
        tags=body.tags,
        starts_at=body.start_date,
        ends_at=body.end_date,
        time_limit_minutes=body.time_limit,
        eligible_roles=body.roles,
        eligible_experience=body.farming_experience,
        eligible_states=body.states,
        eligible_districts=body.districts,
        is_active=body.is_active,
        is_featured=body.is_featured,
    )
