"""
Connection implementations for the operator protocol.

- `TcpConnection` : telnet-style TCP session to a running operator
- `MockOperator` : in-memory operator emulation for tests and dry runs

See Also
--------
bciremote.types.protocols : The Connection protocol these implement
"""

from .mock import MockOperator
from .tcp import TcpConnection

__all__ = [
    "MockOperator",
    "TcpConnection",
]
