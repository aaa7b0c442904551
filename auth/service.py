"""
Registration, login and theme flows.

Each flow validates its input, touches the credential store at most twice
and translates anything unexpected into ``InternalError``.  Nothing here
retries; clients resubmit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from auth.password import DEFAULT_ROUNDS, verify_password
from auth.tokens import TokenIssuer
from database.helpers import (
    find_user_by_email,
    find_user_by_email_or_username,
    insert_user,
    set_user_theme,
)
from database.models import THEMES, User
from utils.errors import (
    AppError,
    DuplicateUser,
    InternalError,
    InvalidCredentials,
    ValidationError,
    WeakPassword,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
EMAIL_MAX_LENGTH = 255


@dataclass
class AuthResult:
    token: str
    user: User

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "user": {
                "id": str(self.user.id),
                "username": self.user.username,
                "email": self.user.email,
                "theme": self.user.theme,
            },
        }


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _validate_registration(
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> tuple[str, str, str]:
    if password is None:
        raise ValidationError("All fields are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword()

    username = (username or "").strip()
    email = normalize_email(email or "")
    if not username or not email:
        raise ValidationError("All fields are required")
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if "@" not in email or len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError("Invalid email address")
    return username, email, password


async def register_user(
    session: AsyncSession,
    issuer: TokenIssuer,
    *,
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    bcrypt_rounds: int = DEFAULT_ROUNDS,
) -> AuthResult:
    """Create a user with the default theme and issue its first token."""
    username, email, password = _validate_registration(username, email, password)

    try:
        existing = await find_user_by_email_or_username(session, email, username)
        if existing is not None:
            raise DuplicateUser()

        user = await insert_user(
            session,
            User.create(username, email, password, rounds=bcrypt_rounds),
        )
        token = issuer.issue(str(user.id))
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Registration failed for %s", username)
        raise InternalError() from exc

    logger.info("Registered user %s (%s)", user.username, user.id)
    return AuthResult(token=token, user=user)


async def login_user(
    session: AsyncSession,
    issuer: TokenIssuer,
    *,
    email: Optional[str],
    password: Optional[str],
) -> AuthResult:
    """
    Verify email + password and issue a token.

    An unknown email and a wrong password raise the same
    ``InvalidCredentials`` so callers cannot discover which accounts exist.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    try:
        user = await find_user_by_email(session, normalize_email(email))
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        token = issuer.issue(str(user.id))
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Login failed unexpectedly")
        raise InternalError() from exc

    logger.info("Login: %s (%s)", user.username, user.id)
    return AuthResult(token=token, user=user)


async def update_theme(session: AsyncSession, user: User, theme: Optional[str]) -> User:
    if theme not in THEMES:
        raise ValidationError("Invalid theme")

    user_id = user.id
    try:
        user = await set_user_theme(session, user, theme)
    except Exception as exc:
        logger.exception("Theme update failed for %s", user_id)
        raise InternalError() from exc

    logger.info("Theme for %s set to %s", user_id, theme)
    return user
