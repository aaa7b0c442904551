"""
FastAPI dependencies for authentication.

The authorization gate is an ordered chain, each link a plain dependency:

    get_bearer_token → get_current_user_id → get_current_user

Protected routes depend on ``get_current_user``; FastAPI resolves the chain
before the handler runs.  Every failure is reported as ``Unauthenticated``.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.tokens import InvalidToken, TokenIssuer
from config.settings import Settings
from database.helpers import get_user
from database.models import User
from database.session import get_db_session
from utils.errors import Unauthenticated

logger = logging.getLogger(__name__)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


async def get_bearer_token(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """Extract the token from ``Authorization: Bearer <token>``."""
    if not authorization:
        raise Unauthenticated("No token provided")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("No token provided")
    return token


async def get_current_user_id(
    token: str = Depends(get_bearer_token),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> str:
    """Verify the bearer token, returning the ``user_id`` it was issued for."""
    try:
        return issuer.verify(token)
    except InvalidToken as exc:
        logger.debug("Rejected token: %s", exc)
        raise Unauthenticated() from exc


async def get_current_user(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(db_session),
) -> User:
    """
    Resolve the token's user and attach it to ``request.state.user``.

    A token for a user that no longer exists is rejected like any other
    invalid token.
    """
    user = await get_user(session, user_id)
    if user is None:
        logger.debug("Token subject %s not found", user_id)
        raise Unauthenticated()
    request.state.user = user
    return user
