"""
Protocol, configuration and error types shared across bciremote.

- `Connection` : the transport capability the client is built on
- `RemoteConfig` : a connection/identity/module profile
- `SystemState` : operator state labels as reported by `get system state`
- `CommsError` : raised by transports when a command cannot be exchanged

See Also
--------
bciremote.types.protocols : Connection protocol
bciremote.types.config : Remote profile dataclass
"""

from __future__ import annotations

from .config import RemoteConfig
from .protocols import Connection


class SystemState:
    """Operator state labels. Matched by substring, never cached."""

    IDLE = "Idle"
    STARTUP = "Startup"
    CONNECTED = "Connected"
    INITIALIZATION = "Initialization"
    RESTING = "Resting"
    RUNNING = "Running"
    SUSPENDED = "Suspended"


class CommsError(Exception):
    """Base exception for communication errors."""

    pass


__all__ = [
    "CommsError",
    "Connection",
    "RemoteConfig",
    "SystemState",
]
