"""
Connection status tracking for host page connections.

The WebSocket lifecycle is tracked separately from the listening state
machine: a session may be LISTENING while the socket is briefly DOWN,
and messages produced meanwhile wait in the outbound queue.

This is pure data owned by SessionGateway, not by listening state.
"""
from enum import Enum


class ConnectionStatus(Enum):
    """
    Host page connection lifecycle.

    Independent of ListeningState: IDLE can occur with any status.
    """
    DOWN = "DOWN"            # Socket closed; session disposed or about to be
    CONNECTING = "CONNECTING"  # Socket accepted, HELLO not yet received
    UP = "UP"                # HELLO received; messages are processed
