"""LEB128 variable-length integers, zigzag mapping and a byte reader."""

from __future__ import annotations

from wirecodec.errors import DecodeError

_U64_MASK = (1 << 64) - 1
_U32_MASK = (1 << 32) - 1
_MAX_VARINT_LEN = 10


class Reader:
    """A forward-only cursor over a bytes-like object."""

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        self._view = memoryview(data).cast("B")
        self._pos = 0

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._view) - self._pos

    def read_byte(self) -> int:
        """Consume and return one byte."""
        if self._pos >= len(self._view):
            raise DecodeError("buffer underflow")
        byte = self._view[self._pos]
        self._pos += 1
        return byte

    def read(self, count: int) -> bytes:
        """Consume and return the next ``count`` bytes."""
        if count < 0:
            raise ValueError("count must not be negative")
        if count > self.remaining:
            raise DecodeError("buffer underflow")
        data = bytes(self._view[self._pos : self._pos + count])
        self._pos += count
        return data

    def advance(self, count: int) -> None:
        """Skip ``count`` bytes."""
        if count < 0:
            raise ValueError("count must not be negative")
        if count > self.remaining:
            raise DecodeError("buffer underflow")
        self._pos += count

    def chunk(self) -> memoryview:
        """The unconsumed bytes, without consuming them."""
        return self._view[self._pos :]


def encode_varint(value: int, buf: bytearray) -> None:
    """Append ``value`` (an unsigned 64-bit integer) to ``buf`` as a varint."""
    if not 0 <= value <= _U64_MASK:
        raise ValueError(f"varint value out of range: {value}")
    while value >= 0x80:
        buf.append((value & 0x7F) | 0x80)
        value >>= 7
    buf.append(value)


def _decode_varint_slice(data: memoryview) -> tuple[int, int]:
    """Decode a varint at the start of ``data``; return (value, length)."""
    value = 0
    for count, byte in enumerate(data[:_MAX_VARINT_LEN]):
        value |= (byte & 0x7F) << (7 * count)
        if byte < 0x80:
            if count == _MAX_VARINT_LEN - 1 and byte >= 0x02:
                break
            return value, count + 1
    raise DecodeError("invalid varint")


def decode_varint(reader: Reader) -> int:
    """Read a varint from ``reader``."""
    data = reader.chunk()
    length = len(data)
    if length == 0:
        raise DecodeError("invalid varint")
    first = data[0]
    if first < 0x80:
        reader.advance(1)
        return first
    if length > _MAX_VARINT_LEN or data[length - 1] < 0x80:
        value, consumed = _decode_varint_slice(data)
        reader.advance(consumed)
        return value
    return decode_varint_slow(reader)


def decode_varint_slow(reader: Reader) -> int:
    """Read a varint one byte at a time, consuming bytes as it goes."""
    value = 0
    for count in range(min(_MAX_VARINT_LEN, reader.remaining)):
        byte = reader.read_byte()
        value |= (byte & 0x7F) << (7 * count)
        if byte <= 0x7F:
            if count == _MAX_VARINT_LEN - 1 and byte >= 0x02:
                raise DecodeError("invalid varint")
            return value
    raise DecodeError("invalid varint")


def encoded_len_varint(value: int) -> int:
    """Length in bytes (1 to 10) of ``value`` encoded as a varint."""
    if not 0 <= value <= _U64_MASK:
        raise ValueError(f"varint value out of range: {value}")
    return ((value | 1).bit_length() - 1) * 9 // 64 + 1 if False else (
        (((value | 1).bit_length() - 1) * 9 + 73) // 64
    )


def _check_signed(value: int, bits: int) -> None:
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"value out of range for signed {bits}-bit integer: {value}")


def zigzag_encode32(value: int) -> int:
    """Map a signed 32-bit integer to its unsigned zigzag form."""
    _check_signed(value, 32)
    return ((value << 1) ^ (value >> 31)) & _U32_MASK


def zigzag_decode32(value: int) -> int:
    """Map a zigzag value back to a signed 32-bit integer (low 32 bits used)."""
    value &= _U32_MASK
    return (value >> 1) ^ -(value & 1)


def zigzag_encode64(value: int) -> int:
    """Map a signed 64-bit integer to its unsigned zigzag form."""
    _check_signed(value, 64)
    return ((value << 1) ^ (value >> 63)) & _U64_MASK


def zigzag_decode64(value: int) -> int:
    """Map a zigzag value back to a signed 64-bit integer."""
    value &= _U64_MASK
    return (value >> 1) ^ -(value & 1)