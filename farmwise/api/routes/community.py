"""
farmwise.api.routes.community — Community feed
===============================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from farmwise.api.deps import get_config, get_current_account, get_engine
from farmwise.config import FarmwiseConfig
from farmwise.services import community_service

router = APIRouter(prefix="/community", tags=["community"])


class PostCreate(BaseModel):
    title: str
    content: str
    category: str = "question"


@router.get("/posts")
def list_posts(
    category: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    return community_service.list_posts(
        engine, category=category, page=page, page_size=limit or cfg.default_page_size,
    )


@router.post("/posts", status_code=201)
def create_post(
    body: PostCreate,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return community_service.create_post(
        engine, current["id"], title=body.title, content=body.content, category=body.category,
    )


@router.post("/posts/{post_id}/like")
def like_post(
    post_id: int,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return community_service.like_post(engine, post_id)


@router.get("/categories")
def get_categories(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return {"categories": community_service.get_categories(engine)}
