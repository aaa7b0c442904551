"""
Mood Diary API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.diary import router as diary_router
from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.music import router as music_router
from auth.routes import router as auth_router
from auth.tokens import TokenIssuer, TokenSettings
from config.settings import Settings, config, validate_config
from database.session import build_engine, build_session_factory, create_tables
from music.jamendo import JamendoClient

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "sqlalchemy.engine", "aiosqlite"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config
    validate_config(settings)
    if settings.uses_default_secret:
        logger.warning(
            "JWT_SECRET is not set; signing tokens with the built-in default secret"
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_tables_on_startup:
            logger.info("Creating database tables…")
            await create_tables(app.state.db_engine)
        logger.info("Application ready to accept requests.")
        yield
        await app.state.db_engine.dispose()
        logger.info("Application shutdown.")

    app = FastAPI(
        title="Mood Diary API",
        version="1.0.0",
        description="Personal diary with mood tags, themes and music search.",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db_engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.db_engine)
    app.state.token_issuer = TokenIssuer(TokenSettings.from_settings(settings))
    app.state.music_client = JamendoClient(
        client_id=settings.jamendo_client_id,
        base_url=settings.jamendo_base_url,
        timeout=settings.jamendo_timeout_seconds,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(diary_router, prefix="/api/diary")
    app.include_router(music_router, prefix="/api/music")

    @app.get("/api/health", tags=["health"])
    async def health() -> dict:
        return {"message": "Diary App API is running!"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
