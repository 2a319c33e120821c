"""Transport protocol required by the remote client.

The client never talks to a socket itself. It holds an object implementing
`Connection` and sends every command through `Connection.execute`. Any class
with the four methods below qualifies; it does not need to inherit from
anything.

Implementations
---------------
- `bciremote.connection.TcpConnection` : telnet-style TCP session to the operator
- `bciremote.connection.MockOperator` : in-memory operator emulation

Example
-------
    class LoggingConnection:
        def connect(self) -> bool: ...
        def disconnect(self) -> None: ...
        def is_connected(self) -> bool: ...
        def execute(self, command: str) -> tuple[str, int]: ...

    remote = BCI2000Remote(LoggingConnection())
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """Synchronous request/response session with the operator."""

    def connect(self) -> bool:
        """Open the session. Returns True on success."""
        ...

    def disconnect(self) -> None:
        """Close the session. Safe to call when not connected."""
        ...

    def is_connected(self) -> bool:
        """Whether the session is currently open."""
        ...

    def execute(self, command: str) -> tuple[str, int]:
        """Send one command line and block until its response is complete.

        Returns
        -------
        tuple[str, int]
            (raw response text, numeric status code)

        Raises
        ------
        CommsError
            If the session is closed or the transport fails.
        """
        ...
