"""
Integration tests for the daemon lifecycle.

Runs FocusDaemon against real Unix sockets in a temporary directory.
"""

import asyncio
import json
from unittest.mock import patch

import pytest

from cc_focus.config import FocusConfig
from cc_focus.daemon import FocusDaemon
from cc_focus.models import SessionStatus


async def wait_until(predicate, timeout: float = 2.0) -> bool:
    """Poll predicate on the loop until it is true or timeout expires."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


@pytest.fixture
def config(socket_dir) -> FocusConfig:
    return FocusConfig(
        socket_path=socket_dir / "d.sock",
        lock_path=socket_dir / "d.pid",
        snapshot_path=socket_dir / "sessions.json",
        reap_interval_sec=60.0,
    )


class TestDaemonLifecycle:
    """Test start, event handling and shutdown."""

    @pytest.mark.asyncio
    async def test_events_update_store_and_snapshot(self, config):
        daemon = FocusDaemon(config)
        run_task = asyncio.create_task(daemon.run())
        try:
            assert await wait_until(lambda: daemon.server.is_serving)
            assert config.lock_path.read_text().strip().isdigit()

            _, writer = await asyncio.open_unix_connection(str(config.socket_path))
            writer.write(
                b'{"event_type":"session_start","session_id":"s1","cwd":"/w"}\n'
                b'{"event_type":"stop","session_id":"s1"}\n'
            )
            await writer.drain()
            writer.close()
            await writer.wait_closed()

            assert await wait_until(
                lambda: "s1" in daemon.store
                and daemon.store.get("s1").status == SessionStatus.NEEDS_INPUT
            )

            snapshot = json.loads(config.snapshot_path.read_text())
            assert snapshot["type"] == "session_list"
            assert snapshot["has_needs_input"] is True
            assert [s["session_id"] for s in snapshot["sessions"]] == ["s1"]
        finally:
            daemon.request_shutdown()
            code = await asyncio.wait_for(run_task, timeout=5.0)

        assert code == 0
        assert not config.socket_path.exists()
        assert not config.lock_path.exists()
        assert not config.snapshot_path.exists()

    @pytest.mark.asyncio
    async def test_stale_marker_is_replaced(self, config):
        config.lock_path.write_text("54321\n")

        daemon = FocusDaemon(config)
        with patch("psutil.pid_exists", return_value=False):
            run_task = asyncio.create_task(daemon.run())
            assert await wait_until(lambda: daemon.server.is_serving)

        daemon.request_shutdown()
        assert await asyncio.wait_for(run_task, timeout=5.0) == 0


class TestDaemonStartupFailures:
    """Test the early exits of run()."""

    @pytest.mark.asyncio
    async def test_live_instance_exits_zero_without_binding(self, config):
        config.lock_path.write_text("54321\n")

        daemon = FocusDaemon(config)
        with patch("psutil.pid_exists", return_value=True):
            code = await asyncio.wait_for(daemon.run(), timeout=5.0)

        assert code == 0
        assert not config.socket_path.exists()
        assert config.lock_path.read_text().strip() == "54321"

    @pytest.mark.asyncio
    async def test_bind_failure_exits_one(self, socket_dir, config):
        blocker = socket_dir / "file"
        blocker.write_text("")
        config = config.model_copy(update={"socket_path": blocker / "d.sock"})

        daemon = FocusDaemon(config)
        code = await asyncio.wait_for(daemon.run(), timeout=5.0)

        assert code == 1
        assert not config.lock_path.exists()
        assert not config.snapshot_path.exists()
