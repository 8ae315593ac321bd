"""Codecs for scalar field types: varints, fixed-width numbers, strings and bytes."""

from __future__ import annotations

import struct
from typing import Any, Callable, Iterable

from wirecodec.errors import DecodeError
from wirecodec.varint import (
    Reader,
    decode_varint,
    encode_varint,
    encoded_len_varint,
    zigzag_decode32,
    zigzag_decode64,
    zigzag_encode32,
    zigzag_encode64,
)
from wirecodec.wire import (
    DecodeContext,
    WireType,
    check_wire_type,
    encode_key,
    key_len,
    merge_loop,
)

__all__ = [
    "ScalarCodec",
    "VarintCodec",
    "FixedCodec",
    "StringCodec",
    "BytesCodec",
    "BOOL",
    "INT32",
    "INT64",
    "UINT32",
    "UINT64",
    "SINT32",
    "SINT64",
    "FLOAT",
    "DOUBLE",
    "FIXED32",
    "FIXED64",
    "SFIXED32",
    "SFIXED64",
    "STRING",
    "BYTES",
]

_U32_MASK = (1 << 32) - 1
_U64_MASK = (1 << 64) - 1


class ScalarCodec:
    """Encoding and decoding of one scalar field type.

    ``merge`` returns the decoded value: for a scalar field the last value
    seen wins. ``merge_repeated`` appends to the list it is given.
    """

    name: str
    wire_type: WireType
    default: Any

    def _encode_value(self, value: Any, buf: bytearray) -> None:
        raise NotImplementedError

    def _decode_value(self, reader: Reader) -> Any:
        raise NotImplementedError

    def _value_len(self, value: Any) -> int:
        raise NotImplementedError

    def encode(self, tag: int, value: Any, buf: bytearray) -> None:
        """Append field ``tag`` holding ``value`` to ``buf``."""
        encode_key(tag, self.wire_type, buf)
        self._encode_value(value, buf)

    def merge(
        self, wire_type: WireType, value: Any, reader: Reader, ctx: DecodeContext
    ) -> Any:
        """Decode one value of this type; the previous ``value`` is replaced."""
        check_wire_type(self.wire_type, wire_type)
        return self._decode_value(reader)

    def encoded_len(self, tag: int, value: Any) -> int:
        """Encoded length of field ``tag`` holding ``value``, key included."""
        return key_len(tag) + self._value_len(value)

    def encode_repeated(self, tag: int, values: Iterable[Any], buf: bytearray) -> None:
        """Append each value as its own field ``tag``."""
        for value in values:
            self.encode(tag, value, buf)

    def merge_repeated(
        self,
        wire_type: WireType,
        values: list[Any],
        reader: Reader,
        ctx: DecodeContext,
    ) -> None:
        """Decode one element of a repeated field and append it to ``values``."""
        check_wire_type(self.wire_type, wire_type)
        values.append(self.merge(wire_type, self.default, reader, ctx))

    def encoded_len_repeated(self, tag: int, values: Iterable[Any]) -> int:
        """Encoded length of ``values`` written unpacked under ``tag``."""
        values = list(values)
        return key_len(tag) * len(values) + sum(self._value_len(v) for v in values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class _NumericCodec(ScalarCodec):
    """A numeric codec whose repeated fields may also arrive packed."""

    def merge_repeated(
        self,
        wire_type: WireType,
        values: list[Any],
        reader: Reader,
        ctx: DecodeContext,
    ) -> None:
        if wire_type is WireType.LENGTH_DELIMITED:
            merge_loop(
                values,
                reader,
                ctx,
                lambda vals, r, _ctx: vals.append(self._decode_value(r)),
            )
        else:
            super().merge_repeated(wire_type, values, reader, ctx)

    def _packed_body_len(self, values: list[Any]) -> int:
        return sum(self._value_len(v) for v in values)

    def encode_packed(self, tag: int, values: Iterable[Any], buf: bytearray) -> None:
        """Append ``values`` as one packed field ``tag``; nothing if empty."""
        values = list(values)
        if not values:
            return
        encode_key(tag, WireType.LENGTH_DELIMITED, buf)
        encode_varint(self._packed_body_len(values), buf)
        for value in values:
            self._encode_value(value, buf)

    def encoded_len_packed(self, tag: int, values: Iterable[Any]) -> int:
        """Encoded length of ``values`` as one packed field; 0 if empty."""
        values = list(values)
        if not values:
            return 0
        length = self._packed_body_len(values)
        return key_len(tag) + encoded_len_varint(length) + length


class VarintCodec(_NumericCodec):
    """A type carried as a varint, through conversions to and from uint64."""

    def __init__(
        self,
        name: str,
        to_uint64: Callable[[Any], int],
        from_uint64: Callable[[int], Any],
        default: Any,
    ) -> None:
        self.name = name
        self.wire_type = WireType.VARINT
        self.default = default
        self._to_uint64 = to_uint64
        self._from_uint64 = from_uint64

    def _encode_value(self, value: Any, buf: bytearray) -> None:
        encode_varint(self._to_uint64(value), buf)

    def _decode_value(self, reader: Reader) -> Any:
        return self._from_uint64(decode_varint(reader))

    def _value_len(self, value: Any) -> int:
        return encoded_len_varint(self._to_uint64(value))

    def encode_packed(self, tag: int, values: Iterable[Any], buf: bytearray) -> None:
        """Append ``values`` as one packed field ``tag``; nothing if empty."""
        super().encode_packed(tag, values, buf)

    def encoded_len_packed(self, tag: int, values: Iterable[Any]) -> int:
        """Encoded length of ``values`` as one packed field; 0 if empty."""
        return super().encoded_len_packed(tag, values)


class FixedCodec(_NumericCodec):
    """A little-endian fixed-width type described by a ``struct`` format."""

    def __init__(self, name: str, fmt: str, wire_type: WireType, default: Any) -> None:
        self.name = name
        self.wire_type = wire_type
        self.default = default
        self._struct = struct.Struct(fmt)
        self.width = self._struct.size

    def _encode_value(self, value: Any, buf: bytearray) -> None:
        try:
            buf += self._struct.pack(value)
        except (struct.error, OverflowError) as exc:
            raise ValueError(f"value out of range for {self.name}: {value!r}") from exc

    def _decode_value(self, reader: Reader) -> Any:
        if reader.remaining < self.width:
            raise DecodeError("buffer underflow")
        return self._struct.unpack(reader.read(self.width))[0]

    def _value_len(self, value: Any) -> int:
        return self.width

    def _packed_body_len(self, values: list[Any]) -> int:
        return self.width * len(values)

    def encoded_len_repeated(self, tag: int, values: Iterable[Any]) -> int:
        return (key_len(tag) + self.width) * len(list(values))

    def encode_packed(self, tag: int, values: Iterable[Any], buf: bytearray) -> None:
        """Append ``values`` as one packed field ``tag``; nothing if empty."""
        super().encode_packed(tag, values, buf)

    def encoded_len_packed(self, tag: int, values: Iterable[Any]) -> int:
        """Encoded length of ``values`` as one packed field; 0 if empty."""
        return super().encoded_len_packed(tag, values)


def _read_delimited(reader: Reader) -> bytes:
    length = decode_varint(reader)
    if length > reader.remaining:
        raise DecodeError("buffer underflow")
    return reader.read(length)


class BytesCodec(ScalarCodec):
    """Length-delimited raw bytes."""

    name = "bytes"
    wire_type = WireType.LENGTH_DELIMITED
    default = b""

    def _encode_value(self, value: Any, buf: bytearray) -> None:
        data = bytes(value)
        encode_varint(len(data), buf)
        buf += data

    def _decode_value(self, reader: Reader) -> bytes:
        return _read_delimited(reader)

    def _value_len(self, value: Any) -> int:
        length = memoryview(value).nbytes
        return encoded_len_varint(length) + length


class StringCodec(ScalarCodec):
    """Length-delimited UTF-8 text."""

    name = "string"
    wire_type = WireType.LENGTH_DELIMITED
    default = ""

    def _encode_value(self, value: str, buf: bytearray) -> None:
        data = value.encode("utf-8")
        encode_varint(len(data), buf)
        buf += data

    def _decode_value(self, reader: Reader) -> str:
        data = _read_delimited(reader)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise DecodeError(
                "invalid string value: data is not UTF-8 encoded"
            ) from None

    def _value_len(self, value: str) -> int:
        length = len(value.encode("utf-8"))
        return encoded_len_varint(length) + length


def _check_range(value: int, low: int, high: int, name: str) -> int:
    if not low <= value <= high:
        raise ValueError(f"value out of range for {name}: {value}")
    return value


def _as_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


BOOL = VarintCodec("bool", lambda v: 1 if v else 0, lambda v: v != 0, False)
INT32 = VarintCodec(
    "int32",
    lambda v: _check_range(v, -(1 << 31), (1 << 31) - 1, "int32") & _U64_MASK,
    lambda v: _as_signed(v, 32),
    0,
)
INT64 = VarintCodec(
    "int64",
    lambda v: _check_range(v, -(1 << 63), (1 << 63) - 1, "int64") & _U64_MASK,
    lambda v: _as_signed(v, 64),
    0,
)
UINT32 = VarintCodec(
    "uint32",
    lambda v: _check_range(v, 0, _U32_MASK, "uint32"),
    lambda v: v & _U32_MASK,
    0,
)
UINT64 = VarintCodec(
    "uint64",
    lambda v: _check_range(v, 0, _U64_MASK, "uint64"),
    lambda v: v,
    0,
)
SINT32 = VarintCodec("sint32", zigzag_encode32, zigzag_decode32, 0)
SINT64 = VarintCodec("sint64", zigzag_encode64, zigzag_decode64, 0)

FLOAT = FixedCodec("float", "<f", WireType.THIRTY_TWO_BIT, 0.0)
DOUBLE = FixedCodec("double", "<d", WireType.SIXTY_FOUR_BIT, 0.0)
FIXED32 = FixedCodec("fixed32", "<I", WireType.THIRTY_TWO_BIT, 0)
FIXED64 = FixedCodec("fixed64", "<Q", WireType.SIXTY_FOUR_BIT, 0)
SFIXED32 = FixedCodec("sfixed32", "<i", WireType.THIRTY_TWO_BIT, 0)
SFIXED64 = FixedCodec("sfixed64", "<q", WireType.SIXTY_FOUR_BIT, 0)

STRING = StringCodec()
BYTES = BytesCodec()