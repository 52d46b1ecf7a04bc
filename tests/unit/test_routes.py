# pylint: disable=missing-module-docstring,missing-function-docstring
from typing import Any

import pytest
from fastapi.testclient import TestClient

from constants import STATUS_TEXT_OFF
from server.app import create_app

from conftest import make_config


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(make_config(auto_start_voice=False)))


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_websocket_session_handshake(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        init: dict[str, Any] = ws.receive_json()
        assert init["type"] == "SESSION_INIT"
        assert init["auto_start"] is False
        assert init["session_id"]

        ws.send_json({
            "type": "HELLO",
            "page": "login",
            "capabilities": {"speech_recognition": True, "speech_synthesis": True},
        })
        status = ws.receive_json()

        assert status["type"] == "VOICE_STATUS"
        assert status["text"] == STATUS_TEXT_OFF


def test_app_shares_one_store(client: TestClient) -> None:
    app: Any = client.app
    assert app.state.store is not None
    assert app.state.config.auto_start_voice is False
