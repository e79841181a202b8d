"""
Shared pytest fixtures for wsswitch tests.
"""

import json
import socket
import struct
import threading

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a window manager")


def workspace(name, output, focused=False, visible=False, num=None):
    """Build a workspace object the way sway reports it."""
    return {
        "id": 10 + (num or 0),
        "num": num if num is not None else -1,
        "name": name,
        "visible": visible,
        "focused": focused,
        "urgent": False,
        "rect": {"x": 0, "y": 0, "width": 1920, "height": 1080},
        "output": output,
        "representation": "H[foot firefox]",
        "floating_nodes": [],
        "nodes": [{"id": 99, "name": "foot", "rect": {"x": 0, "y": 0}}],
    }


@pytest.fixture
def make_workspace():
    """Factory fixture for workspace objects."""
    return workspace


@pytest.fixture
def make_reply():
    """Factory fixture encoding workspace objects as a reply body."""

    def _make(*workspaces):
        return json.dumps(list(workspaces), ensure_ascii=False).encode("utf-8")

    return _make


@pytest.fixture
def three_workspaces(make_reply):
    """Current "1" on A, "2" visible on B, "4" hidden on B."""
    return make_reply(
        workspace("1", "A", focused=True, visible=True, num=1),
        workspace("2", "B", visible=True, num=2),
        workspace("4", "B", num=4),
    )


def read_frame(sock):
    """Read one i3 IPC frame from a socket (test helper)."""
    header = b""
    while len(header) < 14:
        chunk = sock.recv(14 - len(header))
        if not chunk:
            return None, None
        header += chunk
    length, msg_type = struct.unpack("<II", header[6:])
    payload = b""
    while len(payload) < length:
        chunk = sock.recv(length - len(payload))
        if not chunk:
            return None, None
        payload += chunk
    return msg_type, payload


def write_frame(sock, msg_type, payload):
    sock.sendall(b"i3-ipc" + struct.pack("<II", len(payload), msg_type) + payload)


class FakeManager:
    """Answers IPC requests on one end of a socket pair from a thread."""

    def __init__(self, replies):
        self.client, self.server = socket.socketpair()
        self.replies = list(replies)
        self.requests = []
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        for reply in self.replies:
            msg_type, payload = read_frame(self.server)
            if msg_type is None:
                break
            self.requests.append((msg_type, payload))
            write_frame(self.server, msg_type, reply)

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc):
        self.client.close()
        self.thread.join(timeout=5)
        self.server.close()


@pytest.fixture
def fake_manager():
    """Factory fixture for a fake window manager serving canned replies."""
    return FakeManager
