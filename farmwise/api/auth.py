"""
farmwise.api.auth — Registration, login, OTP verification + JWT issuance
=========================================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from farmwise.api.deps import (
    create_access_token,
    get_config,
    get_current_account,
    get_engine,
)
from farmwise.config import FarmwiseConfig
from farmwise.database.engine import run_db
from farmwise.services import account_service, verification_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class RegisterRequest(BaseModel):
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    password: str
    phone: str | None = None
    role: str = "farmer"

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    email: str
    password: str


class OtpRequest(BaseModel):
    otp: str


class PhoneRequest(BaseModel):
    phone: str


class PasswordUpdate(BaseModel):
    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


def _token_response(user: dict) -> dict:
    return {"token": create_access_token(user["id"], user["role"]), "user": user}


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------
@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    """Create an account, email its verification code and issue a token."""
    user = await run_db(
        account_service.register,
        engine,
        cfg,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        phone=body.phone,
        role=body.role,
    )
    return {
        **_token_response(user),
        "message": "User registered successfully. Please verify your email.",
    }


@router.post("/login")
async def login(body: LoginRequest, engine=Depends(get_engine)):
    user = await run_db(account_service.authenticate, engine, body.email, body.password)
    return _token_response(user)


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------
@router.post("/send-email-otp")
async def send_email_otp(
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    delivered = await run_db(verification_service.send_email_otp, engine, cfg, current["id"])
    return {"message": "OTP sent to your email", "delivered": delivered}


@router.post("/verify-email-otp")
async def verify_email_otp(
    body: OtpRequest,
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    user = await run_db(
        verification_service.verify_email_otp, engine, cfg, current["id"], body.otp,
    )
    return {"message": "Email verified successfully", "user": user}


@router.post("/send-phone-otp")
async def send_phone_otp(
    body: PhoneRequest,
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    delivered = await run_db(
        verification_service.send_phone_otp, engine, cfg, current["id"], body.phone,
    )
    return {"message": "OTP sent to your phone", "delivered": delivered}


@router.post("/verify-phone-otp")
async def verify_phone_otp(
    body: OtpRequest,
    current: dict = Depends(get_current_account),
    cfg: FarmwiseConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    user = await run_db(
        verification_service.verify_phone_otp, engine, cfg, current["id"], body.otp,
    )
    return {"message": "Phone verified successfully", "user": user}


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
@router.get("/me")
async def me(current: dict = Depends(get_current_account), engine=Depends(get_engine)):
    """Return the authenticated account's profile."""
    return await run_db(account_service.get_profile, engine, current["id"])


@router.post("/logout")
async def logout(current: dict = Depends(get_current_account)):
    """Tokens are stateless; the client discards its copy."""
    logger.info("Account %s logged out", current["id"])
    return {"message": "Logged out successfully"}


@router.put("/updatepassword")
async def update_password(
    body: PasswordUpdate,
    current: dict = Depends(get_current_account),
    engine=Depends(get_engine),
):
    await run_db(
        account_service.change_password,
        engine,
        current["id"],
        body.current_password,
        body.new_password,
    )
    return {"token": create_access_token(current["id"], current["role"])}
