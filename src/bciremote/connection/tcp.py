"""TCP transport to the operator's telnet port.

The operator terminates every answer with a `>` prompt on its own line. A
command is complete once the received text ends with that prompt, which is
kept in the returned response.
"""

from __future__ import annotations

import socket
import time
from typing import Optional

from loguru import logger

from bciremote.protocol import parse_status_code
from bciremote.types import CommsError
from bciremote.util.defaults import (
    DEFAULT_HOST_ADDR,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    LINE_ENDING,
    PROMPT,
)

RECV_SIZE = 4096
GREETING_TIMEOUT = 0.5  # seconds to wait for the greeting prompt after connecting


class TcpConnection:
    """Blocking line-based session with the operator.

    Parameters
    ----------
    host : str, optional
        Operator address, by default DEFAULT_HOST_ADDR
    port : int, optional
        Operator telnet port, by default DEFAULT_PORT
    timeout : float, optional
        Timeout for opening the connection, by default DEFAULT_TIMEOUT
    read_timeout : float, optional
        Timeout for a single answer. None (default) blocks until the operator
        replies, which `wait for` commands rely on.
    encoding : str, optional
        Text encoding of the session, by default "utf-8"
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST_ADDR,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        read_timeout: Optional[float] = None,
        encoding: str = "utf-8",
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.read_timeout = read_timeout
        self.encoding = encoding
        self._sock: Optional[socket.socket] = None

    def __repr__(self):
        return f"TcpConnection({self.host}:{self.port})"

    def connect(self) -> bool:
        if self._sock is not None:
            self.disconnect()
        try:
            self._sock = socket.create_connection(
                (self.host, self.port), timeout=self.timeout
            )
        except OSError as e:
            logger.error(f"Could not connect to {self.host}:{self.port}: {e}")
            self._sock = None
            return False
        logger.info("Connected to operator at {}:{}", self.host, self.port)
        self._discard_greeting()
        return True

    def _discard_greeting(self) -> None:
        """Drop whatever the operator sends before its first prompt.

        The greeting may arrive in several pieces; reading stops at a prompt
        or once GREETING_TIMEOUT has elapsed since connecting.
        """
        assert self._sock is not None
        deadline = time.monotonic() + GREETING_TIMEOUT
        greeting = b""
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._sock.settimeout(remaining)
                chunk = self._sock.recv(RECV_SIZE)
                if not chunk:
                    break
                greeting += chunk
                if _ends_with_prompt(greeting.decode(self.encoding, errors="replace")):
                    break
        except socket.timeout:
            pass
        except OSError as e:
            logger.warning(f"Error reading greeting: {e}")
        finally:
            if self._sock is not None:
                self._sock.settimeout(self.read_timeout)
        if greeting:
            logger.trace("Discarded greeting {!r}", greeting)

    def disconnect(self) -> None:
        if self._sock is None:
            return
        logger.info("Closing connection to {}:{}", self.host, self.port)
        try:
            self._sock.close()
        except OSError as e:
            logger.warning(f"Error while closing socket connection: {e}")
        finally:
            self._sock = None

    def is_connected(self) -> bool:
        return self._sock is not None

    def execute(self, command: str) -> tuple[str, int]:
        if self._sock is None:
            raise CommsError("Not connected to operator")
        try:
            data = (command + LINE_ENDING).encode(self.encoding)
        except UnicodeError as e:
            raise CommsError(f"Cannot encode command {command!r}: {e}") from e
        try:
            self._sock.sendall(data)
            response = self._read_until_prompt()
        except (socket.timeout, OSError) as e:
            self.disconnect()
            raise CommsError(f"{type(e).__name__}: {e}") from e
        return response, parse_status_code(response)

    def _read_until_prompt(self) -> str:
        assert self._sock is not None
        buffer = b""
        while True:
            chunk = self._sock.recv(RECV_SIZE)
            if not chunk:
                self.disconnect()
                raise CommsError("Connection closed by operator")
            buffer += chunk
            text = buffer.decode(self.encoding, errors="replace")
            if _ends_with_prompt(text):
                return text


def _ends_with_prompt(text: str) -> bool:
    stripped = text.rstrip(" ")
    if not stripped.endswith(PROMPT):
        return False
    # the prompt must stand at the start of a line
    before = stripped[: -len(PROMPT)]
    return before == "" or before.endswith("\n")
