"""Clean binary I/O utilities for save image parsing."""

import struct
from enum import Enum
from typing import BinaryIO
from io import BytesIO


class ByteOrder(Enum):
    """Byte order enum for struct packing/unpacking."""
    BIG_ENDIAN = ">"
    LITTLE_ENDIAN = "<"


class IoBuffer:
    """Binary reader/writer with endian support."""

    def __init__(self, stream: BinaryIO, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN):
        self.stream = stream
        self.byte_order = byte_order

    @classmethod
    def from_bytes(cls, data: bytes, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN) -> 'IoBuffer':
        """Create from bytes."""
        return cls(BytesIO(data), byte_order)

    @classmethod
    def empty(cls, byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN) -> 'IoBuffer':
        """Create an empty buffer for writing."""
        return cls(BytesIO(), byte_order)

    @property
    def position(self) -> int:
        """Current position in stream."""
        return self.stream.tell()

    def read_bytes(self, count: int) -> bytes:
        """Read raw bytes."""
        return self.stream.read(count)

    def read_byte(self) -> int:
        """Read single byte (0-255)."""
        return self.stream.read(1)[0]

    def write_bytes(self, data: bytes):
        """Write raw bytes."""
        self.stream.write(data)

    def write_byte(self, value: int):
        """Write single byte."""
        self.stream.write(struct.pack('B', value))

    def write_ascii(self, text: str):
        """Write a string as raw ASCII (no terminator)."""
        self.stream.write(text.encode('ascii'))

    def getvalue(self) -> bytes:
        """Everything written so far."""
        return self.stream.getvalue()


# ============================================================================
# Word-wide image helpers
# ============================================================================

def deinterleave(data: bytes, byte_order: ByteOrder) -> bytearray:
    """
    Drop the filler half of a word-wide image.

    Big-endian images carry the data byte in the low (odd) position,
    little-endian images in the even position.
    """
    start = 1 if byte_order == ByteOrder.BIG_ENDIAN else 0
    return bytearray(data[start::2])


def interleave(data: bytes, filler: int, byte_order: ByteOrder) -> bytearray:
    """Expand a byte image to words, pairing every byte with ``filler``."""
    out = bytearray(len(data) * 2)
    if byte_order == ByteOrder.BIG_ENDIAN:
        out[0::2] = bytes([filler]) * len(data)
        out[1::2] = data
    else:
        out[0::2] = data
        out[1::2] = bytes([filler]) * len(data)
    return out


def read_uint16_be(data: bytes, offset: int) -> int:
    """Read big-endian word at offset."""
    return struct.unpack_from('>H', data, offset)[0]


def write_uint16_be(data: bytearray, offset: int, value: int):
    """Write big-endian word at offset."""
    struct.pack_into('>H', data, offset, value & 0xFFFF)
