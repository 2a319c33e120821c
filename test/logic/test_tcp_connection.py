"""Tests for TcpConnection against a local fake operator socket."""

import socket
import threading
import time

import pytest

from bciremote import BCI2000Remote, CommsError, Connection
from bciremote.connection import TcpConnection

CLOSE = object()

class FakeOperatorServer:
    """Single-client line server answering from a reply table.

    A reply may be bytes, a list of byte chunks (sent with a short pause in
    between), or CLOSE to drop the connection. The greeting may likewise be
    bytes or a list of chunks.
    """

    def __init__(self, replies=None, greeting=b">"):
        self.replies = replies or {}
        self.greeting = greeting
        self.received = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        with conn:
            if isinstance(self.greeting, list):
                for chunk in self.greeting:
                    conn.sendall(chunk)
                    time.sleep(0.1)
            elif self.greeting:
                conn.sendall(self.greeting)
            buffer = b""
            while True:
                try:
                    data = conn.recv(4096)
                except OSError:
                    return
                if not data:
                    return
                buffer += data
                while b"\r\n" in buffer:
                    line, buffer = buffer.split(b"\r\n", 1)
                    command = line.decode()
                    self.received.append(command)
                    reply = self.replies.get(command, b">")
                    if reply is CLOSE:
                        return
                    if isinstance(reply, list):
                        for chunk in reply:
                            conn.sendall(chunk)
                            time.sleep(0.05)
                    else:
                        conn.sendall(reply)

    def close(self):
        self._sock.close()
        self._thread.join(timeout=2)

@pytest.fixture
def make_server():
    servers = []

    def factory(**kwargs):
        server = FakeOperatorServer(**kwargs)
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.close()

@pytest.fixture
def free_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port

def test_implements_connection_protocol():
    assert isinstance(TcpConnection(), Connection)

def test_execute_returns_text_and_status(make_server):
    server = make_server(
        replies={
            "get system state": b"Resting\r\n>",
            'is parameter "SubjectName"': b"true\r\n>",
            "start executable SignalGenerator --local": b"1\r\n>",
        }
    )
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    assert conn.connect()
    assert conn.is_connected()

    assert conn.execute("get system state") == ("Resting\r\n>", 0)
    assert conn.execute('is parameter "SubjectName"') == ("true\r\n>", 1)
    assert conn.execute("start executable SignalGenerator --local") == ("1\r\n>", 1)
    assert conn.execute("flush messages") == (">", 0)
    assert server.received == [
        "get system state",
        'is parameter "SubjectName"',
        "start executable SignalGenerator --local",
        "flush messages",
    ]

    conn.disconnect()
    assert not conn.is_connected()

def test_without_greeting(make_server):
    server = make_server(replies={"get system state": b"Idle\r\n>"}, greeting=b"")
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    assert conn.connect()
    assert conn.execute("get system state") == ("Idle\r\n>", 0)
    conn.disconnect()

def test_reply_split_over_chunks(make_server):
    server = make_server(
        replies={
            "get parameter X": [b"a > b", b"\r\nsecond line", b"\r\n>"],
        }
    )
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    assert conn.connect()
    response, _ = conn.execute("get parameter X")
    assert response == "a > b\r\nsecond line\r\n>"
    conn.disconnect()


def test_greeting_split_over_chunks(make_server):
    server = make_server(
        replies={"get system state": b"Resting\r\n>"},
        greeting=[b"BCI2000 Operator\r\n", b">"],
    )
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    assert conn.connect()
    assert conn.execute("get system state") == ("Resting\r\n>", 0)
    assert conn.execute("flush messages") == (">", 0)
    conn.disconnect()

def test_unencodable_command_raises_comms_error(make_server):
    server = make_server()
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    assert conn.connect()
    with pytest.raises(CommsError, match="Cannot encode"):
        conn.execute('set parameter SubjectName "\udcff"')
    assert conn.is_connected()
    assert conn.execute("flush messages") == (">", 0)
    conn.disconnect()

def test_remote_survives_unencodable_identity(make_server):
    server = make_server()
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    remote = BCI2000Remote(conn)
    assert remote.connect()
    remote.subject_id = "S\udcff"
    assert "Cannot encode" in remote.result
    assert remote.simple_command("flush messages")
    remote.close()
    assert server.received == ["flush messages", "get system state"]


def test_connect_refused(free_port):
    conn = TcpConnection("127.0.0.1", free_port, timeout=1)
    assert not conn.connect()
    assert not conn.is_connected()

def test_execute_when_disconnected():
    conn = TcpConnection()
    with pytest.raises(CommsError):
        conn.execute("get system state")

def test_peer_closing_raises(make_server):
    server = make_server(replies={"shutdown": CLOSE})
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    assert conn.connect()
    with pytest.raises(CommsError):
        conn.execute("shutdown")
    assert not conn.is_connected()

def test_remote_over_tcp(make_server):
    server = make_server(
        replies={
            "get system state": b"Running\r\n>",
            'set parameter SubjectName "S01"': b">",
            "stop system": b">",
        }
    )
    conn = TcpConnection("127.0.0.1", server.port, timeout=2, read_timeout=2)
    with BCI2000Remote(conn) as remote:
        remote.subject_id = "S01"
        assert remote.connect()
        assert remote.get_system_state() == (True, "Running\r\n>")
    assert server.received == [
        'set parameter SubjectName "S01"',
        "get system state",
        "get system state",
        "stop system",
    ]
    assert not conn.is_connected()
