"""
Async SQLAlchemy engine and session factory (PostgreSQL in production).

``create_app`` builds one engine per application from its ``Settings`` and
keeps it, with its session factory, on ``app.state``.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from database.models import Base


def _engine_kwargs(database_url: str) -> Dict[str, Any]:
    # SQLite has no server-side pool to size.
    if database_url.startswith("sqlite"):
        return {}
    return {"pool_size": 10, "max_overflow": 20, "pool_recycle": 3600}


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, echo=False, **_engine_kwargs(database_url))


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(bind: AsyncEngine) -> None:
    """Create any missing tables; existing ones are left untouched."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Per-request session from the app's factory; commits on success."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
