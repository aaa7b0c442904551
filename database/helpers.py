"""
Database helper functions — user credential store and diary persistence.

Every mutating helper commits its own unit of work so later requests see
the change regardless of when the request-scoped session closes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import DiaryEntry, User
from utils.errors import DuplicateUser

logger = logging.getLogger(__name__)

DIARY_PAGE_SIZE = 50


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    """Parse ``value`` into a UUID, returning ``None`` if it is malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


# ── Users ───────────────────────────────────────────────────────────────


async def get_user(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    uid = _to_uuid(user_id)
    if uid is None:
        return None
    result = await session.execute(select(User).where(User.id == uid))
    return result.scalar_one_or_none()


async def find_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def find_user_by_email_or_username(
    session: AsyncSession,
    email: str,
    username: str,
) -> Optional[User]:
    result = await session.execute(
        select(User)
        .where(or_(User.email == email, User.username == username))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def insert_user(session: AsyncSession, user: User) -> User:
    """
    Persist a new user.

    The unique constraints on ``email`` and ``username`` are the final word:
    a concurrent registration that slipped past the pre-check surfaces here
    as ``DuplicateUser``.
    """
    session.add(user)
    try:
        await session.flush()
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Insert rejected by unique constraint for %s", user.username)
        raise DuplicateUser() from exc
    return user


async def set_user_theme(session: AsyncSession, user: User, theme: str) -> User:
    user.theme = theme
    session.add(user)
    await session.commit()
    return user


# ── Diary entries ───────────────────────────────────────────────────────


async def list_entries(
    session: AsyncSession,
    user_id: uuid.UUID,
    limit: int = DIARY_PAGE_SIZE,
) -> List[DiaryEntry]:
    """Newest entries first, capped at *limit*."""
    result = await session.execute(
        select(DiaryEntry)
        .where(DiaryEntry.user_id == user_id)
        .order_by(DiaryEntry.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_entry(
    session: AsyncSession,
    user_id: uuid.UUID,
    entry_id: str,
) -> Optional[DiaryEntry]:
    eid = _to_uuid(entry_id)
    if eid is None:
        return None
    result = await session.execute(
        select(DiaryEntry).where(DiaryEntry.id == eid, DiaryEntry.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_entry(
    session: AsyncSession,
    user_id: uuid.UUID,
    fields: Dict[str, Any],
) -> DiaryEntry:
    now = datetime.now(timezone.utc)
    entry = DiaryEntry(
        id=uuid.uuid4(),
        user_id=user_id,
        created_at=now,
        updated_at=now,
        **fields,
    )
    session.add(entry)
    await session.commit()
    return entry


async def update_entry(
    session: AsyncSession,
    entry: DiaryEntry,
    changes: Dict[str, Any],
) -> DiaryEntry:
    for key, value in changes.items():
        setattr(entry, key, value)
    entry.updated_at = datetime.now(timezone.utc)
    await session.commit()
    return entry


async def delete_entry(session: AsyncSession, entry: DiaryEntry) -> None:
    await session.delete(entry)
    await session.commit()
