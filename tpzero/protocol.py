"""Wire format shared by the client and the server.

Every frame is an operation code and a payload size, both 32-bit signed
little-endian integers, followed by the payload itself. A package payload
is a sequence of length-prefixed values.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

_INT = struct.Struct("<i")
INT_SIZE = _INT.size

Value = Union[str, bytes, bytearray, memoryview]


class OpCode(IntEnum):
    """Operation carried by a frame."""

    MESSAGE = 0
    PACKAGE = 1


def _to_bytes(value: Value) -> bytes:
    """Strings travel NUL-terminated; raw bytes travel as given."""
    if isinstance(value, str):
        return value.encode() + b"\0"
    return bytes(value)


def frame(op_code: int, payload: bytes) -> bytes:
    """Build a frame from an operation code and a payload."""
    data = bytes(payload)
    return _INT.pack(int(op_code)) + _INT.pack(len(data)) + data


def encode_message(message: Value) -> bytes:
    """Build a MESSAGE frame holding a single NUL-terminated string."""
    return frame(OpCode.MESSAGE, _to_bytes(message))


@dataclass
class Packet:
    """A package of length-prefixed values waiting to be sent."""

    op_code: OpCode = OpCode.PACKAGE
    payload: bytearray = field(default_factory=bytearray)

    def add(self, value: Value) -> None:
        """Append a value, preceded by its length."""
        data = _to_bytes(value)
        self.payload += _INT.pack(len(data)) + data

    def serialize(self) -> bytes:
        """Return the whole frame ready for the wire."""
        return frame(self.op_code, self.payload)


def decode_values(payload: bytes) -> list[bytes]:
    """Split a package payload back into its values."""
    data = bytes(payload)
    values: list[bytes] = []
    offset = 0
    while offset < len(data):
        if offset + INT_SIZE > len(data):
            raise ValueError("truncated value length in package payload")
        (length,) = _INT.unpack_from(data, offset)
        offset += INT_SIZE
        if length < 0:
            raise ValueError(f"negative value length {length} in package payload")
        end = offset + length
        if end > len(data):
            raise ValueError("value runs past the end of the package payload")
        values.append(data[offset:end])
        offset = end
    return values