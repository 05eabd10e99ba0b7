"""Tests for websocket connection management and run update pushes."""

import json
import uuid
import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from app.api.v1.websocket import ConnectionManager, _authenticate_ws, build_snapshot
from app.core.security import create_access_token, create_refresh_token
from app.services.status_publisher import publish_run_update, run_update_message

NOW = datetime(2024, 3, 5, tzinfo=timezone.utc)


def _run(brand_id, status="analyzing"):
    return SimpleNamespace(
        id=uuid.uuid4(), brand_id=brand_id, analyzer_type="basics", status=status,
        parsed_data=None, error_message=None, started_at=NOW, completed_at=None,
        created_at=NOW, updated_at=NOW,
    )


class TestAuthenticate:
    def test_access_token(self):
        assert _authenticate_ws(create_access_token({"sub": "u1"})) == "u1"

    def test_refresh_token_rejected(self):
        assert _authenticate_ws(create_refresh_token({"sub": "u1"})) is None


@pytest.mark.asyncio
class TestConnectionManager:
    async def test_send_to_user(self):
        mgr = ConnectionManager()
        ws = AsyncMock()
        await mgr.connect(ws, "u1")
        await mgr.send_to_user("u1", {"type": "pong"})
        ws.send_text.assert_awaited_once_with(json.dumps({"type": "pong"}))

    async def test_dead_socket_dropped(self):
        mgr = ConnectionManager()
        ws = AsyncMock()
        ws.send_text.side_effect = RuntimeError("closed")
        await mgr.connect(ws, "u1")
        await mgr.send_to_user("u1", {"type": "x"})
        assert "u1" not in mgr.active_connections

    async def test_unknown_user_is_noop(self):
        await ConnectionManager().send_to_user("nobody", {"type": "x"})


@pytest.mark.asyncio
class TestPublisher:
    async def test_message_shape(self):
        brand_id = uuid.uuid4()
        message = run_update_message(brand_id, _run(brand_id))
        assert message["type"] == "analysis_run"
        assert message["brand_id"] == str(brand_id)
        assert message["run"]["status"] == "analyzing"

    async def test_push_failure_is_swallowed(self):
        brand_id = uuid.uuid4()
        with patch("app.api.v1.websocket.manager.send_to_user", new=AsyncMock(side_effect=RuntimeError("x"))):
            await publish_run_update(uuid.uuid4(), brand_id, _run(brand_id))

    async def test_snapshot_bad_ids(self):
        assert await build_snapshot("not-a-uuid", str(uuid.uuid4())) == {"type": "error", "error": "Brand not found"}
