"""
Auth API routes — register, login, theme, current user.

Route prefix: /api/auth
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_current_user, get_settings, get_token_issuer
from auth.service import login_user, register_user, update_theme
from auth.tokens import TokenIssuer
from config.settings import Settings
from database.models import User

router = APIRouter(tags=["auth"])


# ── Request schemas ────────────────────────────────────────────────────
# Fields are optional so missing values reach the flows and come back as
# the flows' own ValidationError.


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ThemeRequest(BaseModel):
    theme: Optional[str] = None


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Register a new user."""
    result = await register_user(
        session,
        issuer,
        username=req.username,
        email=req.email,
        password=req.password,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    return {"message": "User created successfully", **result.to_dict()}


@router.post("/login")
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await login_user(session, issuer, email=req.email, password=req.password)
    return {"message": "Login successful", **result.to_dict()}


@router.patch("/theme")
async def change_theme(
    req: ThemeRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    user = await update_theme(session, current_user, req.theme)
    return {"message": "Theme updated successfully", "user": user.to_public()}


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)) -> Dict[str, Any]:
    return {"user": current_user.to_public()}
