"""
Music DB API - Availability Gate & Health Tests
=================================================

What we test:
    ✅ Every route answers 503 while the database is down
    ✅ /health is never gated and reopens the gate once the database answers
    ✅ Heartbeat and engine listeners keep the ready flag current
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from musicdb.database import ConnectionState, DatabaseNotReady, build_engine, connection_state


class TestGate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/", "/endpoints", "/songs", "/songs/genre/Pop"])
    async def test_closed_gate_returns_503(self, client, path):
        connection_state.mark_down("test")
        response = await client.get(path)
        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "Service unavailable"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_open_gate_passes_through(self, client):
        response = await client.get("/")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_reopens_gate(self, client):
        connection_state.mark_down("test")
        health = await client.get("/health")
        assert health.status_code == 200
        assert connection_state.ready
        assert (await client.get("/")).status_code == 200


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client, seeded):
        response = await client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["track_count"] == 5
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_unhealthy(self, client):
        with patch.object(connection_state, "ping", AsyncMock(return_value=False)):
            response = await client.get("/health")
        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"
        assert body["track_count"] is None


class TestConnectionState:

    @pytest.mark.asyncio
    async def test_ping_marks_ready(self, database):
        state = ConnectionState(database)
        assert not state.ready
        assert await state.ping() is True
        assert state.ready

    @pytest.mark.asyncio
    async def test_failed_ping_marks_down(self, tmp_path):
        unreachable = build_engine(f"sqlite+aiosqlite:///{tmp_path}/missing/dir/musicdb.db")
        state = ConnectionState(unreachable)
        state.mark_ready()
        assert await state.ping() is False
        assert not state.ready
        await unreachable.dispose()

    @pytest.mark.asyncio
    async def test_connect_gives_up_without_raising(self, database):
        state = ConnectionState(database)
        with patch.object(state, "_ping_with_retry", AsyncMock(side_effect=DatabaseNotReady())):
            assert await state.connect() is False

    @pytest.mark.asyncio
    async def test_watch_keeps_probing(self, database):
        state = ConnectionState(database)
        state.ping = AsyncMock(return_value=True)
        task = asyncio.create_task(state.watch(0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert state.ping.await_count >= 2
