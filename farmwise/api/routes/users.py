"""
farmwise.api.routes.users — Profile, preferences & account history
===================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from farmwise.api.deps import get_current_account, get_engine
from farmwise.services import account_service

router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ProfileUpdate(BaseModel):
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    phone: str | None = None
    profile_image: str | None = Field(None, alias="profileImage")

    model_config = {"populate_by_name": True}


class Notifications(BaseModel):
    email: bool | None = None
    push: bool | None = None
    sms: bool | None = None


class PreferencesUpdate(BaseModel):
    language: str | None = None
    theme: str | None = None
    notifications: Notifications | None = None


class FarmingProfileUpdate(BaseModel):
    experience: str | None = None
    farm_size: float | None = Field(None, alias="farmSize")
    crops: list[str] | None = None
    irrigation_type: str | None = Field(None, alias="irrigationType")
    location: dict[str, Any] | None = None

    model_config = {"populate_by_name": True}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/profile")
def get_profile(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return account_service.get_profile(engine, current["id"])


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return account_service.update_profile(
        engine,
        current["id"],
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        profile_image=body.profile_image,
    )


@router.put("/preferences")
def update_preferences(
    body: PreferencesUpdate,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    notifications = (
        body.notifications.model_dump(exclude_none=True) if body.notifications else None
    )
    return account_service.update_preferences(
        engine,
        current["id"],
        language=body.language,
        theme=body.theme,
        notifications=notifications,
    )


@router.put("/farming-profile")
def update_farming_profile(
    body: FarmingProfileUpdate,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    return account_service.update_farming_profile(
        engine,
        current["id"],
        experience=body.experience,
        farm_size=body.farm_size,
        crops=body.crops,
        irrigation_type=body.irrigation_type,
        location=body.location,
    )


@router.get("/stats")
def get_stats(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return account_service.get_stats(engine, current["id"])


@router.get("/activity")
def get_activity(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    return {"activity": account_service.get_activity(engine, current["id"])}
