"""Tests for ConnectionManager fan-out: public/admin payloads, dropping dead subscribers."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from rateboard.application.broadcaster import ADMIN_RATE_CHANGED_EVENT, RATE_CHANGED_EVENT
from rateboard.infrastructure.realtime.connection_manager import ConnectionManager


def _socket():
    ws = AsyncMock()
    ws.accept = AsyncMock(return_value=None)
    ws.send_json = AsyncMock(return_value=None)
    return ws


@pytest.fixture
def manager():
    return ConnectionManager()


async def test_public_and_admin_payloads(manager):
    public_ws, admin_ws = _socket(), _socket()
    await manager.connect(public_ws)
    await manager.connect(admin_ws, admin=True)

    delivered = await manager.publish(RATE_CHANGED_EVENT, {"USD": {}}, admin_payload={"USD": {}, "EUR": {}})

    assert delivered == 3
    public_ws.send_json.assert_awaited_once_with({"event": RATE_CHANGED_EVENT, "data": {"USD": {}}})
    sent = [c.args[0] for c in admin_ws.send_json.call_args_list]
    assert {"event": RATE_CHANGED_EVENT, "data": {"USD": {}}} in sent
    assert {"event": ADMIN_RATE_CHANGED_EVENT, "data": {"USD": {}, "EUR": {}}} in sent


async def test_failed_subscriber_is_dropped(manager):
    healthy, broken = _socket(), _socket()
    broken.send_json = AsyncMock(side_effect=RuntimeError("closed"))
    await manager.connect(healthy)
    await manager.connect(broken)

    delivered = await manager.publish(RATE_CHANGED_EVENT, {})

    assert delivered == 1
    assert manager.subscriber_count == 1


async def test_publish_without_subscribers(manager):
    assert await manager.publish(RATE_CHANGED_EVENT, {}) == 0


async def test_disconnect_is_idempotent(manager):
    ws = _socket()
    await manager.connect(ws)
    manager.disconnect(ws)
    manager.disconnect(ws)
    assert manager.subscriber_count == 0


async def test_stalled_subscriber_times_out_and_is_dropped():
    manager = ConnectionManager(send_timeout=0.05)
    healthy, stalled = _socket(), _socket()

    async def never_completes(message):
        await asyncio.sleep(3600)

    stalled.send_json = AsyncMock(side_effect=never_completes)
    await manager.connect(healthy)
    await manager.connect(stalled)

    delivered = await asyncio.wait_for(manager.publish(RATE_CHANGED_EVENT, {"USD": {}}), timeout=2)

    assert delivered == 1
    assert manager.subscriber_count == 1
    healthy.send_json.assert_awaited_once_with({"event": RATE_CHANGED_EVENT, "data": {"USD": {}}})

    # Later publishes reach only the healthy subscriber.
    assert await asyncio.wait_for(manager.publish(RATE_CHANGED_EVENT, {}), timeout=2) == 1
