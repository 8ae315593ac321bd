"""Field keys, wire types, recursion tracking and field skipping."""

from __future__ import annotations

import dataclasses
from enum import IntEnum
from typing import Callable, TypeVar

from wirecodec.errors import DecodeError
from wirecodec.varint import Reader, decode_varint, encode_varint, encoded_len_varint

__all__ = [
    "MIN_TAG",
    "MAX_TAG",
    "RECURSION_LIMIT",
    "WireType",
    "DecodeContext",
    "encode_key",
    "decode_key",
    "key_len",
    "check_wire_type",
    "merge_loop",
    "skip_field",
]

MIN_TAG = 1
MAX_TAG = (1 << 29) - 1

# Matches the default nesting limit of the reference implementation.
RECURSION_LIMIT = 100

_U32_MAX = (1 << 32) - 1

T = TypeVar("T")


class WireType(IntEnum):
    """The encoding of a field's value, carried in the low three key bits."""

    VARINT = 0
    SIXTY_FOUR_BIT = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    THIRTY_TWO_BIT = 5

    @classmethod
    def from_value(cls, value: int) -> WireType:
        """Return the wire type for ``value`` or raise DecodeError."""
        try:
            return cls(value)
        except ValueError:
            raise DecodeError(f"invalid wire type value: {value}") from None

    @property
    def label(self) -> str:
        """A readable name, such as ``LengthDelimited``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


@dataclasses.dataclass(frozen=True)
class DecodeContext:
    """Decoding state passed down to nested decoders.

    ``recurse_count`` is how many more levels of nesting are allowed.
    """

    recurse_count: int = RECURSION_LIMIT

    def enter_recursion(self) -> DecodeContext:
        """Return the context to use one nesting level deeper."""
        return dataclasses.replace(self, recurse_count=self.recurse_count - 1)

    def check_limit(self) -> None:
        """Raise DecodeError if no further nesting is allowed."""
        if self.recurse_count <= 0:
            raise DecodeError("recursion limit reached")


def encode_key(tag: int, wire_type: WireType, buf: bytearray) -> None:
    """Append the key for field ``tag`` with ``wire_type`` to ``buf``."""
    if not MIN_TAG <= tag <= MAX_TAG:
        raise ValueError(f"tag out of range: {tag}")
    encode_varint((tag << 3) | int(wire_type), buf)


def decode_key(reader: Reader) -> tuple[int, WireType]:
    """Read a field key; return (tag, wire type)."""
    key = decode_varint(reader)
    if key > _U32_MAX:
        raise DecodeError(f"invalid key value: {key}")
    wire_type = WireType.from_value(key & 0x07)
    tag = key >> 3
    if tag < MIN_TAG:
        raise DecodeError("invalid tag value: 0")
    return tag, wire_type


def key_len(tag: int) -> int:
    """Width in bytes (1 to 5) of an encoded key with ``tag``."""
    return encoded_len_varint((tag << 3) & _U32_MAX)


def check_wire_type(expected: WireType, actual: WireType) -> None:
    """Raise DecodeError unless ``actual`` is ``expected``."""
    if expected != actual:
        raise DecodeError(
            f"invalid wire type: {actual.label} (expected {expected.label})"
        )


def merge_loop(
    value: T,
    reader: Reader,
    ctx: DecodeContext,
    merge: Callable[[T, Reader, DecodeContext], None],
) -> None:
    """Read a length prefix, then call ``merge`` until that many bytes are used."""
    length = decode_varint(reader)
    remaining = reader.remaining
    if length > remaining:
        raise DecodeError("buffer underflow")
    limit = remaining - length
    while reader.remaining > limit:
        merge(value, reader, ctx)
    if reader.remaining != limit:
        raise DecodeError("delimited length exceeded")


def skip_field(
    wire_type: WireType, tag: int, reader: Reader, ctx: DecodeContext
) -> None:
    """Consume the value of a field that is not going to be decoded."""
    ctx.check_limit()
    if wire_type is WireType.VARINT:
        decode_varint(reader)
        length = 0
    elif wire_type is WireType.THIRTY_TWO_BIT:
        length = 4
    elif wire_type is WireType.SIXTY_FOUR_BIT:
        length = 8
    elif wire_type is WireType.LENGTH_DELIMITED:
        length = decode_varint(reader)
    elif wire_type is WireType.START_GROUP:
        while True:
            inner_tag, inner_wire_type = decode_key(reader)
            if inner_wire_type is WireType.END_GROUP:
                if inner_tag != tag:
                    raise DecodeError("unexpected end group tag")
                break
            skip_field(inner_wire_type, inner_tag, reader, ctx.enter_recursion())
        length = 0
    else:
        raise DecodeError("unexpected end group tag")

    if length > reader.remaining:
        raise DecodeError("buffer underflow")
    reader.advance(length)