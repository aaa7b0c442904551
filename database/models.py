"""
SQLAlchemy ORM models for users and diary entries.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship

from auth.password import DEFAULT_ROUNDS, hash_password

THEMES = ("light", "dark", "cyan")
DEFAULT_THEME = "light"

MOODS = ("happy", "sad", "excited", "anxious", "calm", "angry", "content", "confused")
DEFAULT_MOOD = "content"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "theme IN ('light', 'dark', 'cyan')",
            name="ck_users_theme",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(20), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    theme = Column(String(8), nullable=False, default=DEFAULT_THEME)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    entries = relationship("DiaryEntry", back_populates="user", cascade="all, delete-orphan")

    @classmethod
    def create(
        cls,
        username: str,
        email: str,
        password: str,
        *,
        rounds: int = DEFAULT_ROUNDS,
    ) -> "User":
        """Build an unsaved user; only the bcrypt digest of ``password`` is kept."""
        return cls(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=rounds),
            theme=DEFAULT_THEME,
            created_at=_utcnow(),
        )

    def to_public(self) -> dict:
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "theme": self.theme,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class DiaryEntry(Base):
    __tablename__ = "diary_entries"
    __table_args__ = (
        Index("ix_diary_entries_user_created", "user_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    mood = Column(String(16), nullable=False, default=DEFAULT_MOOD)
    tags = Column(JSON, nullable=False, default=list)
    is_private = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow)

    user = relationship("User", back_populates="entries")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "content": self.content,
            "mood": self.mood,
            "tags": list(self.tags or []),
            "isPrivate": self.is_private,
            "userId": str(self.user_id),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
