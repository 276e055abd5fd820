"""Little-endian byte builder and cursor.

All bytes the codec writes go through ``ByteBuilder`` and all bytes it reads
go through ``ByteCursor``; both check field widths so nothing wraps silently.
"""

from __future__ import annotations

import struct

from .errors import BufferUnderflowError, FieldRangeError

U8_MAX = 0xFF
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF


def _check_range(value: int, high: int, width: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise FieldRangeError(
            f"value {value!r} is not an integer for a {width}-bit field"
        )
    if value < 0 or value > high:
        raise FieldRangeError(
            f"value {value} is out of range for a {width}-bit unsigned integer"
        )
    return value


class ByteBuilder:
    """Append-only buffer of little-endian fields."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def push_u8(self, value: int) -> None:
        self._buf.append(_check_range(value, U8_MAX, 8))

    def push_u16(self, value: int) -> None:
        self._buf.extend(struct.pack("<H", _check_range(value, U16_MAX, 16)))

    def push_u32(self, value: int) -> None:
        self._buf.extend(struct.pack("<I", _check_range(value, U32_MAX, 32)))

    def append(self, other: "ByteBuilder") -> None:
        """Splice ``other``'s contents onto the end of this buffer."""

        self._buf.extend(other._buf)

    def to_bytes(self) -> bytes:
        return bytes(self._buf)


class ByteCursor:
    """Front-consuming reader over an existing byte sequence."""

    __slots__ = ("_buf", "_pos")

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._buf = memoryview(bytes(data))
        self._pos = 0

    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int) -> None:
        if not (0 <= pos <= len(self._buf)):
            raise BufferUnderflowError(
                f"seek to {pos} outside buffer of {len(self._buf)} bytes"
            )
        self._pos = pos

    def _take(self, n: int) -> memoryview:
        end = self._pos + n
        if end > len(self._buf):
            raise BufferUnderflowError(
                f"need {n} bytes at offset {self._pos}, only {self.remaining()} remain"
            )
        chunk = self._buf[self._pos : end]
        self._pos = end
        return chunk

    def pop_u8(self) -> int:
        return self._take(1)[0]

    def pop_u16(self) -> int:
        return struct.unpack("<H", self._take(2))[0]

    def pop_u32(self) -> int:
        return struct.unpack("<I", self._take(4))[0]
