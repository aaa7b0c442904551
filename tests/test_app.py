"""
Tests for app wiring: the per-app database engine and the access-log
middleware.
"""

import logging

import pytest
from fastapi import status
from sqlalchemy import make_url, select

from database.models import User
from conftest import register


class TestDatabaseWiring:
    @pytest.mark.asyncio
    async def test_engine_uses_passed_settings(self, app, settings):
        assert app.state.db_engine.url == make_url(settings.database_url)
        assert app.state.settings is settings

    @pytest.mark.asyncio
    async def test_registered_user_lands_in_configured_database(self, client, db_session):
        response = await register(client)
        assert response.status_code == status.HTTP_201_CREATED

        users = (await db_session.execute(select(User))).scalars().all()
        assert [str(u.id) for u in users] == [response.json()["user"]["id"]]


class TestAccessLog:
    @pytest.mark.asyncio
    async def test_generates_request_id(self, client):
        first = await client.get("/api/health")
        second = await client.get("/api/health")
        assert first.headers["X-Request-ID"]
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]
        assert "X-Process-Time" in first.headers

    @pytest.mark.asyncio
    async def test_echoes_incoming_request_id(self, client):
        response = await client.get("/api/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_replaces_oversized_request_id(self, client):
        response = await client.get("/api/health", headers={"X-Request-ID": "x" * 200})
        assert response.headers["X-Request-ID"] != "x" * 200

    @pytest.mark.asyncio
    async def test_logs_acting_user(self, client, caplog):
        user_id = (await register(client)).json()["user"]["id"]
        token = (await client.post(
            "/api/auth/login", json={"email": "amy@x.com", "password": "secret1"},
        )).json()["token"]

        caplog.set_level(logging.INFO, logger="api.middleware")
        await client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {token}", "X-Request-ID": "req-me"},
        )

        lines = [r.getMessage() for r in caplog.records if r.name == "api.middleware"]
        assert any("[req-me] GET /api/auth/me -> 200" in line and f"user={user_id}" in line for line in lines)

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger="api.middleware")
        await client.get("/api/health")
        assert not [r for r in caplog.records if r.name == "api.middleware"]
