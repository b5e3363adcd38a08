"""WebSocket round trip: a committed update reaches public and admin subscribers."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect


@pytest.fixture
def client(app_with_overrides):
    with TestClient(app_with_overrides) as c:
        yield c


def test_public_subscriber_receives_committed_rates(client, editor_headers):
    with client.websocket_connect("/ws/rates") as ws:
        r = client.post(
            "/rates",
            json={"currencies": {"USD": {"buy_rate": 15050, "sell_rate": 15150}}},
            headers=editor_headers,
        )
        assert r.status_code == 200
        message = ws.receive_json()
    assert message["event"] == "rateChanged"
    assert message["data"]["USD"]["buy_rate"] == 15050


def test_admin_subscriber_receives_hidden_currencies(client, admin_headers):
    with client.websocket_connect("/ws/rates?role=ADMIN&actor_id=admin-1") as ws:
        r = client.patch("/rates/TRY/visibility", json={"is_visible": False}, headers=admin_headers)
        assert r.status_code == 200
        messages = [ws.receive_json(), ws.receive_json()]
    by_event = {m["event"]: m["data"] for m in messages}
    assert "TRY" not in by_event["rateChanged"]
    assert by_event["adminRateChanged"]["TRY"]["is_visible"] is False


def test_rejected_update_is_not_broadcast(client, editor_headers, connection_manager):
    with client.websocket_connect("/ws/rates") as ws:
        r = client.post(
            "/rates",
            json={"currencies": {"EUR": {"buy_rate": 16600, "sell_rate": 16500}}},
            headers=editor_headers,
        )
        assert r.status_code == 400
        client.post(
            "/rates",
            json={"currencies": {"GBP": {"buy_rate": 19050, "sell_rate": 19150}}},
            headers=editor_headers,
        )
        message = ws.receive_json()
    # First message seen is from the second, valid batch.
    assert message["data"]["GBP"]["buy_rate"] == 19050
    assert message["data"]["EUR"]["sell_rate"] == 16600


def test_unknown_role_closes_socket(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/rates?role=ROOT") as ws:
            ws.receive_json()
