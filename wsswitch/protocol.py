"""
i3 IPC wire format

Every request and reply is a frame: the 6-byte magic string, the payload
length and the message type as little-endian 32-bit integers, then the
payload itself.

Protocol documentation: https://i3wm.org/docs/ipc.html
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple
import struct

from .errors import ProtocolError, TransportError


MAGIC = b"i3-ipc"
HEADER_FORMAT = "<II"
HEADER_LENGTH = len(MAGIC) + struct.calcsize(HEADER_FORMAT)


class MessageType(IntEnum):
    """i3 IPC message types."""

    RUN_COMMAND = 0
    GET_WORKSPACES = 1
    SUBSCRIBE = 2
    GET_OUTPUTS = 3
    GET_TREE = 4
    GET_MARKS = 5
    GET_BAR_CONFIG = 6
    GET_VERSION = 7
    GET_BINDING_MODES = 8
    GET_CONFIG = 9
    SEND_TICK = 10
    SYNC = 11
    GET_BINDING_STATE = 12


def encode_header(length: int, message_type: int) -> bytes:
    """Encode a frame header for a payload of the given length."""
    return MAGIC + struct.pack(HEADER_FORMAT, length, message_type)


def decode_header(header: bytes) -> Tuple[int, int]:
    """Decode a frame header.

    Returns:
        (payload length, message type)

    Raises:
        ProtocolError: if the header is short or the magic does not match
    """
    if len(header) < HEADER_LENGTH:
        raise ProtocolError(
            f"short reply header: got {len(header)} of {HEADER_LENGTH} bytes"
        )
    magic = bytes(header[: len(MAGIC)])
    if magic != MAGIC:
        raise ProtocolError(f"invalid magic bytes: {magic!r}")
    return struct.unpack(HEADER_FORMAT, header[len(MAGIC) : HEADER_LENGTH])


@dataclass(frozen=True)
class Frame:
    """A single i3 IPC message."""

    message_type: int
    payload: bytes = b""

    @property
    def length(self) -> int:
        return len(self.payload)

    def encode(self) -> bytes:
        """Encode message to wire format."""
        return encode_header(self.length, self.message_type) + self.payload

    @classmethod
    def decode(cls, data: bytes) -> tuple["Frame", bytes]:
        """Decode one message from wire format.

        Returns:
            The frame and whatever data followed it.
        """
        length, message_type = decode_header(data[:HEADER_LENGTH])
        end = HEADER_LENGTH + length
        if len(data) < end:
            raise TransportError(
                f"short payload: need {length} bytes, have {len(data) - HEADER_LENGTH}"
            )
        return cls(message_type, bytes(data[HEADER_LENGTH:end])), data[end:]
