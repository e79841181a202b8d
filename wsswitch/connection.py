"""
IPC Connection Module

Handles the Unix socket connection to the window manager and the framed
request/reply exchange on top of it.
"""

from __future__ import annotations
import socket
from typing import Optional

from .errors import ConnectError, TransportError
from .protocol import Frame, HEADER_LENGTH, decode_header, encode_header


class IPCConnection:
    """Manages the IPC socket connection.

    The connection is strictly sequential: one request is written and its
    reply read completely before the next request is sent. All I/O blocks
    without a timeout.
    """

    def __init__(
        self,
        socket_path: Optional[str] = None,
        sock: Optional[socket.socket] = None,
        bus=None,
    ):
        """Initialize the connection.

        Args:
            socket_path: Path of the window manager's IPC socket
            sock: An already connected socket to use instead of socket_path
            bus: Event bus instance (Pypubsub), optional
        """
        self.socket_path = socket_path
        self.socket: Optional[socket.socket] = sock
        self.bus = bus

    def connect(self) -> "IPCConnection":
        """Connect to the window manager socket."""
        if self.socket is not None:
            return self
        if not self.socket_path:
            raise ConnectError("no socket path given")

        try:
            self.socket = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        except OSError as e:
            raise ConnectError(f"socket: {e}") from e

        try:
            self.socket.connect(self.socket_path)
        except OSError as e:
            self.disconnect()
            raise ConnectError(f"failed to connect to {self.socket_path}: {e}") from e

        if self.bus:
            from . import topics

            self.bus.sendMessage(topics.IPC_CONNECTED, socket_path=self.socket_path)
        return self

    def disconnect(self):
        """Close the socket."""
        if self.socket:
            self.socket.close()
            self.socket = None

    def __enter__(self) -> "IPCConnection":
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    def _require_socket(self) -> socket.socket:
        if self.socket is None:
            raise TransportError("not connected")
        return self.socket

    def send(self, message_type: int, payload: bytes = b""):
        """Write one framed message."""
        sock = self._require_socket()
        try:
            sock.sendall(encode_header(len(payload), message_type))
            if payload:
                sock.sendall(payload)
        except OSError as e:
            raise TransportError(f"write failed: {e}") from e

        if self.bus:
            from . import topics

            self.bus.sendMessage(
                topics.IPC_REQUEST_SENT,
                message_type=int(message_type),
                length=len(payload),
            )

    def _recv_exact(self, count: int) -> bytes:
        """Read up to count bytes, stopping early only at end of stream."""
        sock = self._require_socket()
        buffer = bytearray(count)
        view = memoryview(buffer)
        received = 0
        while received < count:
            try:
                chunk = sock.recv_into(view[received:], count - received)
            except OSError as e:
                raise TransportError(f"read failed: {e}") from e
            if not chunk:
                break
            received += chunk
        return bytes(view[:received])

    def receive(self) -> Frame:
        """Read one framed message.

        Raises:
            ProtocolError: if the header is short or has the wrong magic
            TransportError: if the payload is cut short
        """
        length, message_type = decode_header(self._recv_exact(HEADER_LENGTH))
        payload = self._recv_exact(length)
        if len(payload) != length:
            raise TransportError(
                f"short read: got {len(payload)} of {length} payload bytes"
            )

        if self.bus:
            from . import topics

            self.bus.sendMessage(
                topics.IPC_REPLY_RECEIVED, message_type=message_type, length=length
            )
        return Frame(message_type, payload)

    def request(self, message_type: int, payload: bytes = b"") -> bytes:
        """Send a message and return the payload of its reply."""
        self.send(message_type, payload)
        return self.receive().payload
