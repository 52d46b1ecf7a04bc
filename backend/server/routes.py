"""
Route registration for the voice command API.

Responsibilities:
- Define HTTP and WebSocket endpoints
- Wire gateway to WebSocket lifecycle
- Pull dependencies from app.state
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect, FastAPI

from observability.logger import log_event
from session.gateway import SessionGateway, GatewayResult


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket) -> None: # pyright: ignore[reportUnusedFunction]
        await ws.accept()

        async def send(msg: dict[str, Any]) -> None:
            await ws.send_text(json.dumps(msg))

        gateway = SessionGateway(
            config=app.state.config,
            store=app.state.store,
            send=send,
        )

        try:
            result = await gateway.on_ws_connect()
            await _flush_gateway_result(ws, result)

            while True:
                msg = await ws.receive()

                if msg["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect()

                if msg.get("text") is not None:
                    result = await gateway.on_json_message(msg["text"])
                    await _flush_gateway_result(ws, result)

                elif msg.get("bytes") is not None:
                    log_event({
                        "level": "WARNING",
                        "event_type": "BINARY_FRAME_IGNORED",
                        "session_id": gateway.session.session_id if gateway.session else None,
                        "size": len(msg["bytes"]),
                    })

        except WebSocketDisconnect:
            await gateway.on_ws_disconnect(reason="client_disconnect")

        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "level": "ERROR",
                "event_type": "WS_FATAL_ERROR",
                "session_id": gateway.session.session_id if gateway.session else None,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            await gateway.on_ws_disconnect(reason="server_error")


async def _flush_gateway_result(
    ws: WebSocket,
    result: GatewayResult,
) -> None:
    for msg in result.outbound_json:
        await ws.send_text(json.dumps(msg))
